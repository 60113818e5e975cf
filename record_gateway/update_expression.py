import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, NamedTuple, Tuple


class _Absent:
    """Marks a field as intentionally omitted. Unlike None, it is never written."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "ABSENT"

    def __bool__(self):
        return False


ABSENT = _Absent()


def strip_absent(fields: Mapping[str, Any]) -> Dict[str, Any]:
    return {name: value for name, value in fields.items() if value is not ABSENT}


class Assignment(NamedTuple):
    name_token: str
    attribute: str
    value_token: str
    value: Any


@dataclass(frozen=True)
class UpdateSpec:
    assignments: Tuple[Assignment, ...] = ()

    def __len__(self) -> int:
        return len(self.assignments)

    def __bool__(self) -> bool:
        return bool(self.assignments)

    @property
    def expression(self) -> str:
        return "SET " + ", ".join(f"{a.name_token} = {a.value_token}" for a in self.assignments)

    @property
    def attribute_names(self) -> Dict[str, str]:
        return {a.name_token: a.attribute for a in self.assignments}

    @property
    def attribute_values(self) -> Dict[str, Any]:
        return {a.value_token: a.value for a in self.assignments}

    def as_params(self) -> Dict[str, Any]:
        """Keyword arguments for a DynamoDB ``update_item`` call."""
        return {
            "UpdateExpression": self.expression,
            "ExpressionAttributeNames": self.attribute_names,
            "ExpressionAttributeValues": self.attribute_values,
        }


EMPTY_UPDATE = UpdateSpec()


def build_update(payload: Mapping[str, Any], key_fields: Iterable[str]) -> UpdateSpec:
    """Build a SET instruction for every updatable field of ``payload``.

    Key fields and fields marked ``ABSENT`` are skipped. Tokens are assigned
    in the payload's iteration order, so the same payload always produces the
    same ``#k{i}`` / ``:v{i}`` numbering.
    """
    updates = dict(payload)
    for key_field in key_fields:
        updates.pop(key_field, None)
    updates = strip_absent(updates)

    if not updates:
        return EMPTY_UPDATE

    return UpdateSpec(tuple(
        Assignment(f"#k{i}", attribute, f":v{i}", value)
        for i, (attribute, value) in enumerate(updates.items())
    ))


_SET_CLAUSE = re.compile(r"^\s*SET\s+(?P<body>.+?)\s*$", re.IGNORECASE | re.DOTALL)


def apply_set_expression(
    item: Dict[str, Any],
    expression: str,
    names: Mapping[str, str],
    values: Mapping[str, Any],
) -> Dict[str, Any]:
    match = _SET_CLAUSE.match(expression or "")
    if not match:
        raise ValueError(f"Unsupported update expression: {expression!r}")

    changes = {}
    for clause in match.group("body").split(","):
        name_token, sep, value_token = (part.strip() for part in clause.partition("="))
        if not sep or name_token not in names or value_token not in values:
            raise ValueError(f"Malformed SET clause: {clause.strip()!r}")
        changes[names[name_token]] = values[value_token]

    # all clauses validated before the record is touched
    item.update(changes)
    return item
