import json
from decimal import Decimal
from typing import Any, Dict, Optional

HEADERS = {"Content-Type": "application/json"}


def _json_default(value: Any):
    # DynamoDB hands back numbers as Decimal and string/number sets as set
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _response(status_code: int, body: Any) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(HEADERS),
        "body": json.dumps(body, default=_json_default),
    }


def success(body: Optional[Any] = None, status_code: int = 200) -> Dict[str, Any]:
    return _response(status_code, {} if body is None else body)


def failure(err: BaseException, status_code: int = 500) -> Dict[str, Any]:
    return _response(status_code, {"error": str(err) or type(err).__name__})
