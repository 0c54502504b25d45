from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext

from todolist.core.errors import AuthError, AuthReason

BCRYPT_ROUNDS = 10

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

# Used to spend the same bcrypt cost when no stored hash exists.
DUMMY_HASH = pwd_context.hash("dummy-password")

def _normalize_password(password: str) -> str:
	# bcrypt only considers the first 72 bytes; truncate consistently to avoid errors.
	raw = password.encode("utf-8")
	if len(raw) <= 72:
		return password
	return raw[:72].decode("utf-8", errors="ignore")

def hash_password(password: str) -> str:
	return pwd_context.hash(_normalize_password(password))

def verify_password(password: str, password_hash: Optional[str]) -> bool:
	"""Check a plaintext password against a stored digest.

	A missing or malformed digest fails closed instead of raising.
	"""
	if not isinstance(password, str):
		return False
	if not password_hash:
		pwd_context.verify(_normalize_password(password), DUMMY_HASH)
		return False
	try:
		return pwd_context.verify(_normalize_password(password), password_hash)
	except (ValueError, TypeError):
		return False


@dataclass(frozen=True)
class TokenClaims:
	user_id: int
	email: Optional[str]
	issued_at: datetime
	expires_at: datetime


class TokenIssuer:
	"""Signs and verifies stateless bearer tokens.

	Args:
		secret: Process-wide signing key, loaded once at startup.
		algorithm: JWS algorithm (default HS256).
		lifetime: Validity window measured from issuance (default one hour).
	"""

	def __init__(self, secret: str, algorithm: str = "HS256", lifetime: timedelta = timedelta(hours=1)):
		if not secret:
			raise ValueError("Token signing secret must not be empty")
		self._secret = secret
		self._algorithm = algorithm
		self.lifetime = lifetime

	def issue(self, user, issued_at: Optional[datetime] = None) -> str:
		now = issued_at or datetime.now(timezone.utc)
		payload = {
			"sub": str(user.id),
			"email": user.email,
			"iat": int(now.timestamp()),
			"exp": int((now + self.lifetime).timestamp()),
		}
		return jwt.encode(payload, self._secret, algorithm=self._algorithm)

	def verify(self, token: str) -> TokenClaims:
		if not token or not isinstance(token, str):
			raise AuthError(AuthReason.MALFORMED)
		try:
			jwt.get_unverified_header(token)
			jwt.get_unverified_claims(token)
		except JWTError:
			raise AuthError(AuthReason.MALFORMED)

		try:
			payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
		except ExpiredSignatureError:
			raise AuthError(AuthReason.EXPIRED)
		except JWTClaimsError:
			# Signature checked out but exp/iat are not integers.
			raise AuthError(AuthReason.MALFORMED)
		except JWTError:
			raise AuthError(AuthReason.INVALID)

		sub = payload.get("sub")
		if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()) or "exp" not in payload:
			raise AuthError(AuthReason.MALFORMED)

		return TokenClaims(
			user_id=int(sub),
			email=payload.get("email"),
			issued_at=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
			expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
		)
