"""Binding a Telegram account to an existing web account.

The Telegram login widget signs the fields it returns: the key is the
SHA-256 digest of the bot token and the message is every received field
except ``hash``, rendered as ``key=value``, sorted by key and joined with
newlines. See https://core.telegram.org/widgets/login#checking-authorization
"""

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todolist.core.errors import (
	AuthError,
	AuthReason,
	NotFoundOrForbidden,
	ValidationCode,
	ValidationError,
)
from todolist.core.logging import log_event
from todolist.db.models import User
from todolist.db.session import store_call

# Widget clocks and ours may disagree slightly.
CLOCK_SKEW_SEC = 60


@dataclass
class ChatAssertion:
	chat_user_id: int
	first_name: str
	auth_date: int
	signature: str
	last_name: Optional[str] = None
	username: Optional[str] = None
	fields: Dict[str, Any] = field(default_factory=dict)

	@classmethod
	def from_widget(cls, data: Dict[str, Any]) -> "ChatAssertion":
		try:
			return cls(
				chat_user_id=int(data["id"]),
				first_name=str(data.get("first_name") or ""),
				last_name=data.get("last_name") or None,
				username=data.get("username") or None,
				auth_date=int(data["auth_date"]),
				signature=str(data["hash"]),
				fields={k: v for k, v in data.items() if k != "hash" and v is not None},
			)
		except (KeyError, TypeError, ValueError):
			raise ValidationError(ValidationCode.BAD_INPUT, "Invalid Telegram data")


def data_check_string(fields: Dict[str, Any]) -> str:
	return "\n".join(f"{key}={fields[key]}" for key in sorted(fields))


def sign_fields(fields: Dict[str, Any], bot_token: str) -> str:
	secret = hashlib.sha256(bot_token.encode("utf-8")).digest()
	message = data_check_string(fields).encode("utf-8")
	return hmac.new(secret, message, hashlib.sha256).hexdigest()


class ChatAccountLinker:
	"""Verifies a widget assertion and stores the chat identity on a user.

	Args:
		db: Open session.
		bot_token: Telegram bot token; its digest keys the widget signature.
		max_age_sec: Oldest acceptable ``auth_date`` (default 24h).
	"""

	def __init__(self, db: Session, bot_token: str, max_age_sec: int = 86400, clock=time.time):
		self.db = db
		self.bot_token = bot_token
		self.max_age_sec = max_age_sec
		self._clock = clock

	def check_assertion(self, assertion: ChatAssertion) -> None:
		expected = sign_fields(assertion.fields, self.bot_token)
		if not hmac.compare_digest(expected, assertion.signature.lower()):
			raise AuthError(AuthReason.INVALID, "Telegram signature mismatch")

		now = self._clock()
		if assertion.auth_date > now + CLOCK_SKEW_SEC:
			raise AuthError(AuthReason.INVALID, "Telegram auth date is in the future")
		if now - assertion.auth_date > self.max_age_sec:
			raise AuthError(AuthReason.EXPIRED, "Telegram login is too old, please retry")

	def link(self, user_id: int, assertion: ChatAssertion) -> User:
		self.check_assertion(assertion)

		with store_call(self.db, "link_chat_identity"):
			user = self.db.query(User).filter(User.id == user_id).first()
			if user is None:
				raise NotFoundOrForbidden("User not found")

			if user.telegram_id is not None and user.telegram_id != assertion.chat_user_id:
				raise ValidationError(
					ValidationCode.ACCOUNT_ALREADY_LINKED,
					"This account is already linked to another Telegram user",
				)
			holder = (
				self.db.query(User)
				.filter(User.telegram_id == assertion.chat_user_id, User.id != user_id)
				.first()
			)
			if holder is not None:
				raise ValidationError(
					ValidationCode.CHAT_ALREADY_LINKED,
					"This Telegram account is linked to another user",
				)

			user.telegram_id = assertion.chat_user_id
			user.telegram_first_name = assertion.first_name
			user.telegram_last_name = assertion.last_name
			user.telegram_username = assertion.username
			user.telegram_auth_date = assertion.auth_date
			try:
				self.db.commit()
			except IntegrityError:
				# Another request bound this chat id between the check and the commit.
				self.db.rollback()
				raise ValidationError(
					ValidationCode.CHAT_ALREADY_LINKED,
					"This Telegram account is linked to another user",
				)
			self.db.refresh(user)

		log_event("telegram_linked", user_id=user.id, telegram_id=assertion.chat_user_id)
		return user
