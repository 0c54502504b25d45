from typing import Optional

from sqlalchemy.orm import Session

from todolist.core.errors import AuthError, AuthReason
from todolist.core.logging import log_event
from todolist.core.security import TokenIssuer
from todolist.db.models import User
from todolist.db.session import store_call


class IdentityResolver:
	"""Maps a bearer token or a chat user id to one stored user.

	The returned user's id is the ownership key for every item call;
	there is no further authorization step.
	"""

	def __init__(self, db: Session, tokens: Optional[TokenIssuer] = None):
		self.db = db
		self.tokens = tokens

	def get_user(self, user_id: int) -> User | None:
		with store_call(self.db, "get_user"):
			return self.db.query(User).filter(User.id == user_id).first()

	def resolve_from_token(self, token: str) -> User:
		if self.tokens is None:
			raise RuntimeError("IdentityResolver was built without a token issuer")
		try:
			claims = self.tokens.verify(token)
		except AuthError as exc:
			log_event("auth_rejected", reason=exc.reason.value)
			raise

		user = self.get_user(claims.user_id)
		if user is None:
			log_event("auth_rejected", reason=AuthReason.USER_NOT_FOUND.value, user_id=claims.user_id)
			raise AuthError(AuthReason.USER_NOT_FOUND)
		return user

	def resolve_from_chat_identity(self, chat_user_id: int) -> User:
		with store_call(self.db, "get_user_by_chat_id"):
			user = self.db.query(User).filter(User.telegram_id == chat_user_id).first()
		if user is None:
			raise AuthError(AuthReason.NOT_LINKED)
		return user
