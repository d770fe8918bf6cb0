from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Partition(str, Enum):
    """Database partition (site) an operation runs against."""

    KOL = "KOL"
    AHM = "AHM"

    @classmethod
    def parse(cls, value: object, default: "Partition | None" = None) -> "Partition":
        """
        Parse a selector case-insensitively, raising ValueError if unknown.

        A blank selector resolves to `default` when one is given.
        """
        if isinstance(value, cls):
            return value
        if default is not None and not str(value or "").strip():
            return default
        key = str(value or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            raise ValueError("Invalid or missing database (must be KOL or AHM)") from None


class CamelModel(BaseModel):
    """Base for response models serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error envelope shared by every endpoint."""

    status: bool = False
    error: str
