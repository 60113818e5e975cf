import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from .actions import Action, resolve_action
from .config import DEFAULT_KEY_FIELD
from .errors import MissingKeyError, RecordError, RecordNotFoundError
from .events import RecordRequest, normalize_event
from .responses import failure, success
from .stores import RecordStore
from .update_expression import build_update, strip_absent

log = logging.getLogger(__name__)

Result = Tuple[Any, int]


class RecordHandler:
    """Turns one event into one envelope, with at most one store mutation."""

    def __init__(self, store: RecordStore, key_field: str = DEFAULT_KEY_FIELD):
        self.store = store
        self.key_field = key_field
        self._routes = {
            Action.CREATE: self.create,
            Action.INSERT: self.insert,
            Action.READ: self.read,
            Action.UPDATE: self.update,
            Action.DELETE: self.delete,
        }

    def __call__(self, event: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        try:
            request = normalize_event(event, self.key_field)
            action = resolve_action(request.action, request.method)
            log.info("Handling %s %s=%s", action.name, self.key_field, request.key)
            body, status_code = self._routes[action](request)
            return success(body, status_code)
        except RecordError as err:
            log.info("Rejected request: %s (%s)", err, err.status_code)
            return failure(err, err.status_code)
        except Exception as err:
            log.exception("Unhandled error while handling event")
            return failure(err)

    def _require_key(self, request: RecordRequest) -> Any:
        if not request.key:
            raise MissingKeyError(self.key_field)
        return request.key

    def _merged_record(self, request: RecordRequest) -> Dict[str, Any]:
        key = self._require_key(request)
        return strip_absent({**request.payload, self.key_field: key})

    def create(self, request: RecordRequest) -> Result:
        item = self._merged_record(request)
        self.store.put(item)
        return {"item": item}, 201

    def insert(self, request: RecordRequest) -> Result:
        item = self._merged_record(request)
        self.store.put_if_absent(item)
        return {"item": item}, 201

    def read(self, request: RecordRequest) -> Result:
        item = self.store.get(self._require_key(request))
        if item is None:
            raise RecordNotFoundError()
        return item, 200

    def update(self, request: RecordRequest) -> Result:
        key = self._require_key(request)
        spec = build_update(request.payload, [self.key_field])

        if not spec:
            current = self.store.get(key)
            if current is None:
                raise RecordNotFoundError()
            return {"message": "No changes", "item": current}, 200

        item = self.store.update_existing(key, spec)
        return {"message": "The item is updated", "item": item}, 200

    def delete(self, request: RecordRequest) -> Result:
        key = self._require_key(request)
        self.store.delete(key)
        return {"message": "Deleted", self.key_field: key}, 200
