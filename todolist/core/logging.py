"""Structured event logging.

Every event is one JSON line on the ``todolist`` logger. Events emitted
while a web request is in flight carry that request's id, whether the
call site is a router, a service or the store guard.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from typing import Optional

from fastapi import Request

logger = logging.getLogger("todolist")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(message)s"))
logger.addHandler(handler)

current_request_id: ContextVar[Optional[str]] = ContextVar("current_request_id", default=None)

async def request_id_middleware(request: Request, call_next):
	request_id = str(uuid.uuid4())
	request.state.request_id = request_id
	token = current_request_id.set(request_id)
	try:
		response = await call_next(request)
	finally:
		current_request_id.reset(token)
	response.headers["X-Request-Id"] = request_id
	return response

def log_event(event: str, level: int = logging.INFO, **fields):
	payload = {"event": event, **fields}
	request_id = current_request_id.get()
	if request_id is not None:
		payload.setdefault("request_id", request_id)
	logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
