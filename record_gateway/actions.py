from enum import Enum
from typing import Optional

from .errors import UnsupportedActionError


class Action(str, Enum):
    CREATE = "create"  # upsert
    INSERT = "insert"  # create only if the key is free
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


ACTION_ALIASES = {
    "get": Action.READ,
    "upsert": Action.CREATE,
    "create_if_absent": Action.INSERT,
}

METHOD_ACTIONS = {
    "POST": Action.CREATE,
    "GET": Action.READ,
    "PUT": Action.UPDATE,
    "DELETE": Action.DELETE,
}


def parse_action(name: str) -> Action:
    normalized = name.strip().lower()
    if normalized in ACTION_ALIASES:
        return ACTION_ALIASES[normalized]
    try:
        return Action(normalized)
    except ValueError:
        raise UnsupportedActionError(f"Unsupported action: {name}") from None


def resolve_action(explicit: Optional[str], method: str) -> Action:
    """An explicit action always wins over the HTTP method, even when invalid."""
    if explicit:
        return parse_action(explicit)

    try:
        return METHOD_ACTIONS[method.upper()]
    except KeyError:
        raise UnsupportedActionError(f"Unsupported method: {method or '<none>'}") from None
