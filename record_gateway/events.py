import json
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field


class RecordRequest(BaseModel):
    action: Optional[str] = None
    method: str = ""
    key: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


def _parse_body(body: Any) -> Dict[str, Any]:
    if isinstance(body, (str, bytes)):
        body = json.loads(body or "{}")
    if body is None:
        return {}
    if not isinstance(body, Mapping):
        raise TypeError(f"Request body must be a JSON object, got {type(body).__name__}")
    return dict(body)


def _method(event: Mapping[str, Any]) -> str:
    http = (event.get("requestContext") or {}).get("http") or {}
    return (http.get("method") or event.get("httpMethod") or "").upper()


def extract_key(event: Mapping[str, Any], payload: Mapping[str, Any], key_field: str) -> Optional[str]:
    candidates = (
        (event.get("pathParameters") or {}).get(key_field),
        (event.get("queryStringParameters") or {}).get(key_field),
        payload.get(key_field),
    )
    # falsy candidates ("" included) fall through to the next source;
    # keys are strings whichever source they came from
    key = next((candidate for candidate in candidates if candidate), None)
    return None if key is None else str(key)


def normalize_event(event: Optional[Mapping[str, Any]], key_field: str) -> RecordRequest:
    event = event or {}
    payload = _parse_body(event.get("body"))
    return RecordRequest(
        action=event.get("action") or None,
        method=_method(event),
        key=extract_key(event, payload, key_field),
        payload=payload,
    )
