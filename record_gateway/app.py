from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool

from .handler import RecordHandler
from .lambda_function import get_handler

app = FastAPI(title="record-gateway")


async def _to_event(request: Request, handler: RecordHandler, key: Optional[str]) -> Dict[str, Any]:
    raw = await request.body()
    return {
        "httpMethod": request.method,
        "pathParameters": {handler.key_field: key} if key else None,
        "queryStringParameters": dict(request.query_params) or None,
        "body": raw or None,
    }


def _to_response(envelope: Dict[str, Any]) -> Response:
    return Response(
        content=envelope["body"],
        status_code=envelope["statusCode"],
        headers=envelope["headers"],
    )


@app.api_route("/records", methods=["POST", "GET", "PUT", "DELETE"])
async def records(request: Request, handler: RecordHandler = Depends(get_handler)):
    event = await _to_event(request, handler, key=None)
    return _to_response(await run_in_threadpool(handler, event))


@app.api_route("/records/{key}", methods=["POST", "GET", "PUT", "DELETE"])
async def record(key: str, request: Request, handler: RecordHandler = Depends(get_handler)):
    event = await _to_event(request, handler, key=key)
    return _to_response(await run_in_threadpool(handler, event))


@app.post("/invoke")
def invoke(event: Dict[str, Any] = Body(...), handler: RecordHandler = Depends(get_handler)):
    return handler(event)


@app.get("/health")
def health():
    return {"status": "ok"}
