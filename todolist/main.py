from datetime import timedelta
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse

from todolist.core.config import Settings, settings as default_settings
from todolist.core.errors import (
	TodoError,
	todo_error_handler,
	unhandled_exception_handler,
	validation_exception_handler,
)
from todolist.core.logging import log_event, request_id_middleware
from todolist.core.security import TokenIssuer
from todolist.db import session as db_session
from todolist.db.base import Base
from todolist.db import models  # noqa: F401  registers tables on Base.metadata

from todolist.routers.auth import router as auth_router
from todolist.routers.items import router as items_router
from todolist.routers.telegram import router as telegram_router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = (settings or default_settings).validate()
	app = FastAPI(title=settings.APP_NAME)

	static_dir = Path(__file__).resolve().parent / "static"

	# DB init
	engine = db_session.init_engine(settings)
	Base.metadata.create_all(bind=engine)

	app.state.settings = settings
	app.state.tokens = TokenIssuer(
		settings.JWT_SECRET,
		algorithm=settings.JWT_ALG,
		lifetime=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRES_MIN),
	)

	# Middleware
	app.middleware("http")(request_id_middleware)

	# Errors render as {"success": false, "error": ...}
	app.add_exception_handler(RequestValidationError, validation_exception_handler)
	app.add_exception_handler(TodoError, todo_error_handler)
	app.add_exception_handler(Exception, unhandled_exception_handler)

	# Routers
	app.include_router(auth_router)
	app.include_router(items_router)
	app.include_router(telegram_router)

	@app.get("/")
	def ui():
		return FileResponse(static_dir / "index.html")

	@app.get("/health")
	def health():
		return {"status": "OK"}

	log_event("app_created", app=settings.APP_NAME)
	return app


def run():
	import uvicorn

	app = create_app()
	settings = app.state.settings
	uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
	run()
