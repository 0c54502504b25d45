from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from todolist.core.logging import log_event
from todolist.db.session import get_db
from todolist.dependencies import get_identity_resolver, get_settings
from todolist.schemas.telegram import TelegramCallbackRequest
from todolist.services.chat_linker import ChatAccountLinker, ChatAssertion
from todolist.services.identity import IdentityResolver

router = APIRouter(tags=["telegram"])

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

@router.get("/telegram-login", response_class=HTMLResponse)
def telegram_login_page(settings=Depends(get_settings)):
	html = (STATIC_DIR / "telegram-login.html").read_text(encoding="utf-8")
	return html.replace("{{BOT_USERNAME}}", settings.TELEGRAM_BOT_USERNAME)

@router.post("/telegram-callback")
def telegram_callback(
	payload: TelegramCallbackRequest,
	db: Session = Depends(get_db),
	resolver: IdentityResolver = Depends(get_identity_resolver),
	settings=Depends(get_settings),
):
	# Parse first so malformed widget data is reported before any lookup.
	assertion = ChatAssertion.from_widget(payload.user)
	user = resolver.resolve_from_token(payload.token)

	linker = ChatAccountLinker(db, settings.TELEGRAM_TOKEN, max_age_sec=settings.TELEGRAM_AUTH_MAX_AGE_SEC)
	linker.link(user.id, assertion)
	log_event("telegram_callback_ok", user_id=user.id)
	return {"success": True, "telegramLinked": True}
