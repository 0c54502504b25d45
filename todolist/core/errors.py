"""Error taxonomy shared by the web and chat adapters."""

import logging
from enum import Enum

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status

from todolist.core.logging import log_event


class ConfigError(RuntimeError):
	"""Raised at startup when a required setting is missing or invalid."""


class TodoError(Exception):
	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	default_message = "Internal error"

	def __init__(self, message: str | None = None):
		self.message = message or self.default_message
		super().__init__(self.message)


class ValidationCode(str, Enum):
	EMPTY_TEXT = "empty_text"
	TEXT_TOO_LONG = "text_too_long"
	EMAIL_TAKEN = "email_taken"
	CHAT_ALREADY_LINKED = "chat_already_linked"
	ACCOUNT_ALREADY_LINKED = "account_already_linked"
	BAD_INPUT = "bad_input"


class ValidationError(TodoError):
	status_code = status.HTTP_400_BAD_REQUEST
	default_message = "Invalid input"

	def __init__(self, code: ValidationCode, message: str | None = None):
		self.code = code
		super().__init__(message)


class AuthReason(str, Enum):
	INVALID = "invalid"
	EXPIRED = "expired"
	MALFORMED = "malformed"
	USER_NOT_FOUND = "user_not_found"
	NOT_LINKED = "not_linked"
	INVALID_CREDENTIALS = "invalid_credentials"


_AUTH_MESSAGES = {
	AuthReason.INVALID: "Unauthorized",
	AuthReason.EXPIRED: "Unauthorized",
	AuthReason.MALFORMED: "Unauthorized",
	AuthReason.USER_NOT_FOUND: "Unauthorized",
	AuthReason.NOT_LINKED: "Link your account on the website first",
	AuthReason.INVALID_CREDENTIALS: "Invalid email or password",
}


class AuthError(TodoError):
	"""Any failure to establish who the caller is.

	Token failures (invalid, expired, malformed, user gone) share one public
	message; the reason is kept for logging only.
	"""

	status_code = status.HTTP_401_UNAUTHORIZED

	def __init__(self, reason: AuthReason, message: str | None = None):
		self.reason = reason
		super().__init__(message or _AUTH_MESSAGES[reason])


class NotFoundOrForbidden(TodoError):
	status_code = status.HTTP_404_NOT_FOUND
	default_message = "Item not found"


class ServiceUnavailable(TodoError):
	status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
	default_message = "Service temporarily unavailable, please try again"


def error_response(request: Request, status_code: int, message: str):
	return JSONResponse(
		status_code=status_code,
		content={
			"success": False,
			"error": message,
			"request_id": getattr(request.state, "request_id", None),
		},
	)

async def todo_error_handler(request: Request, exc: TodoError):
	return error_response(request, exc.status_code, exc.message)

async def validation_exception_handler(request: Request, exc: RequestValidationError):
	errors = exc.errors()
	message = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
	return error_response(request, status.HTTP_400_BAD_REQUEST, message)

async def unhandled_exception_handler(request: Request, exc: Exception):
	log_event(
		"unhandled_error",
		level=logging.ERROR,
		path=request.url.path,
		error_type=type(exc).__name__,
		error=str(exc),
		# Runs outside the request-id middleware, so pass the id explicitly.
		request_id=getattr(request.state, "request_id", None),
	)
	return error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, ServiceUnavailable.default_message)
