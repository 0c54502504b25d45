from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todolist.core.errors import AuthError, AuthReason, ValidationCode, ValidationError
from todolist.core.logging import log_event
from todolist.core.security import hash_password, verify_password
from todolist.db.models import User
from todolist.db.session import store_call


class AuthService:
	def __init__(self, db: Session):
		self.db = db

	def get_by_email(self, email: str) -> Optional[User]:
		with store_call(self.db, "get_user_by_email"):
			return self.db.query(User).filter(User.email == email.lower()).first()

	def register(
		self,
		email: str,
		password: str,
		first_name: Optional[str] = None,
		last_name: Optional[str] = None,
	) -> User:
		email = email.lower()
		if self.get_by_email(email):
			raise ValidationError(ValidationCode.EMAIL_TAKEN, "Email already registered")

		user = User(
			email=email,
			password_hash=hash_password(password),
			first_name=first_name,
			last_name=last_name,
		)
		with store_call(self.db, "create_user"):
			self.db.add(user)
			try:
				self.db.commit()
			except IntegrityError:
				self.db.rollback()
				raise ValidationError(ValidationCode.EMAIL_TAKEN, "Email already registered")
			self.db.refresh(user)

		log_event("user_registered", user_id=user.id, email=email)
		return user

	def login(self, email: str, password: str) -> User:
		user = self.get_by_email(email)
		# verify_password spends a bcrypt round even without a stored hash.
		password_ok = verify_password(password, user.password_hash if user else None)
		if user is None or not password_ok:
			log_event("login_failed", email=email.lower())
			raise AuthError(AuthReason.INVALID_CREDENTIALS)
		log_event("user_login", user_id=user.id)
		return user
