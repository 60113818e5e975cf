import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from record_gateway.update_expression import apply_set_expression

log = logging.getLogger(__name__)

app = FastAPI(title="record-shard")
store: Dict[str, Dict[str, Any]] = {}


class Record(BaseModel):
    key: str
    data: Dict[str, Any]
    if_absent: bool = False


class RecordUpdate(BaseModel):
    update_expression: str
    attribute_names: Dict[str, str]
    attribute_values: Dict[str, Any]


@app.post("/records")
def create_record(record: Record):
    if record.if_absent and record.key in store:
        raise HTTPException(status_code=409, detail="Record already exists")
    store[record.key] = record.data
    return {"status": "created"}


@app.get("/records/{key:path}")
def read_record(key: str):
    if key not in store:
        raise HTTPException(status_code=404, detail="Not found")
    return store[key]


@app.patch("/records/{key:path}")
def update_record(key: str, update: RecordUpdate):
    if key not in store:
        raise HTTPException(status_code=404, detail="Not found")
    try:
        updated = apply_set_expression(
            dict(store[key]),
            update.update_expression,
            update.attribute_names,
            update.attribute_values,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    store[key] = updated
    log.debug("Updated %s (%d attributes)", key, len(update.attribute_names))
    return updated


@app.delete("/records/{key:path}")
def delete_record(key: str):
    store.pop(key, None)
    return {"status": "deleted"}


@app.get("/health")
def health():
    return {"status": "ok", "records": len(store)}
