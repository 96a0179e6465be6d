from . import public, admin
