from .errors import (
    MissingKeyError,
    RecordError,
    RecordExistsError,
    RecordNotFoundError,
    UnsupportedActionError,
)
from .handler import RecordHandler
from .update_expression import ABSENT, UpdateSpec, build_update

__all__ = [
    "ABSENT",
    "MissingKeyError",
    "RecordError",
    "RecordExistsError",
    "RecordHandler",
    "RecordNotFoundError",
    "UnsupportedActionError",
    "UpdateSpec",
    "build_update",
]
