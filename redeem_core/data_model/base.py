from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for models that are exchanged with the admin frontend,
    which expects camelCase keys. Fields can still be populated by their
    python names, e.g. from database rows.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Success(BaseModel):
    success: bool = True
