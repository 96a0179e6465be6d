import logging
import secrets
import string
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

import gconf
import jwt

from redeem_core import db
from redeem_core.data_model.admin import AdminClaims, AdminLoginCode, AdminUser
from redeem_core.db import db_conn
from redeem_core.service.email import EmailSender
from redeem_core.service.exceptions import EmailDeliveryFailed, InvalidCredentials, InvalidToken
from redeem_core.util.misc import utc_now

log = logging.getLogger(__name__)


class AdminStore(ABC):
    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[AdminUser]:
        ...

    @abstractmethod
    async def insert_if_absent(self, name: str, email: str) -> bool:
        ...

    @abstractmethod
    async def insert_login_code(self, email: str, code: str, expires_at: datetime) -> None:
        ...

    @abstractmethod
    async def find_valid_login_code(self, email: str, code: str, now: datetime) -> Optional[AdminLoginCode]:
        ...

    @abstractmethod
    async def delete_login_code(self, code_id: int) -> None:
        ...

    @abstractmethod
    async def delete_expired_login_codes(self, now: datetime) -> int:
        ...


class DbAdminStore(AdminStore):
    async def get_by_email(self, email: str) -> Optional[AdminUser]:
        async with db_conn() as conn:
            return await db.admin_users.get_by_email(conn, email)

    async def insert_if_absent(self, name: str, email: str) -> bool:
        async with db_conn() as conn:
            return await db.admin_users.insert_if_absent(conn, name, email)

    async def insert_login_code(self, email: str, code: str, expires_at: datetime) -> None:
        async with db_conn() as conn:
            await db.admin_login_codes.insert(conn, email, code, expires_at)

    async def find_valid_login_code(self, email: str, code: str, now: datetime) -> Optional[AdminLoginCode]:
        async with db_conn() as conn:
            return await db.admin_login_codes.find_valid(conn, email, code, now)

    async def delete_login_code(self, code_id: int) -> None:
        async with db_conn() as conn:
            await db.admin_login_codes.delete(conn, code_id)

    async def delete_expired_login_codes(self, now: datetime) -> int:
        async with db_conn() as conn:
            return await db.admin_login_codes.delete_expired(conn, now)


class AdminAuthService:
    """
    Passwordless admin login: a short numeric code is mailed to a known admin
    address and exchanged for a signed token.
    """

    def __init__(
        self,
        store: AdminStore,
        email_sender: EmailSender,
        jwt_secret: str = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.email_sender = email_sender
        self.clock = clock
        self._jwt_secret = jwt_secret or gconf.get("admin.jwt_secret", default="")
        if not self._jwt_secret:
            log.warning("no jwt secret configured, generated a random one, tokens will not survive a restart")
            self._jwt_secret = secrets.token_urlsafe(64)

    async def seed_admins(self, users: List[Dict[str, str]] = None) -> int:
        users = users if users is not None else gconf.get("admin.seed_users", default=[])
        added = 0
        for user in users:
            email = normalize_email(user["email"])
            if await self.store.insert_if_absent(user.get("name") or email, email):
                log.info(f"added admin {email}")
                added += 1
        return added

    async def request_login_code(self, email: str) -> None:
        email = normalize_email(email)
        admin = await self.store.get_by_email(email)
        if not admin:
            log.info(f"login code requested for unknown email {email}")
            return

        code = make_login_code(gconf.get("admin.login_code.length", default=6))
        expires_at = self.clock() + timedelta(minutes=gconf.get("admin.login_code.ttl_minutes", default=15))
        await self.store.insert_login_code(email, code, expires_at)
        if not await self.email_sender.send_login_code(email, code, admin.name):
            raise EmailDeliveryFailed
        log.debug(f"issued login code for {admin}")

    async def verify_login_code(self, email: str, code: str) -> str:
        email = normalize_email(email)
        login_code = await self.store.find_valid_login_code(email, code.strip(), self.clock())
        if not login_code:
            raise InvalidCredentials
        admin = await self.store.get_by_email(email)
        if not admin:
            raise InvalidCredentials

        await self.store.delete_login_code(login_code.id)
        log.info(f"{admin} logged in")
        return self.create_token(admin)

    def create_token(self, admin: AdminUser) -> str:
        now = self.clock()
        payload = {
            "sub": str(admin.id),
            "email": admin.email,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=gconf.get("admin.jwt_ttl_hours", default=24))).timestamp()),
        }
        return jwt.encode(payload, self._jwt_secret, algorithm="HS256")

    def verify_token(self, token: str = None) -> AdminClaims:
        if not token:
            raise InvalidToken("Missing token")

        bearer = "Bearer "
        if token.startswith(bearer):
            token = token[len(bearer) :]

        try:
            decoded = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=["HS256"],
                options={"require": ["sub", "email", "exp"]},
            )
        except jwt.InvalidTokenError as e:
            raise InvalidToken from e
        return AdminClaims(sub=decoded["sub"], email=decoded["email"])

    async def cleanup_expired_codes(self) -> int:
        deleted = await self.store.delete_expired_login_codes(self.clock())
        if deleted:
            log.debug(f"removed {deleted} expired login codes")
        return deleted


def normalize_email(email: str) -> str:
    return email.strip().lower()


def make_login_code(length: int = 6) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(length))
