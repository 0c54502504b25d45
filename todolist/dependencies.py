from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from todolist.core.errors import AuthError, AuthReason
from todolist.core.security import TokenIssuer
from todolist.db.models import User
from todolist.db.session import get_db
from todolist.services.identity import IdentityResolver

security = HTTPBearer(auto_error=False)

def get_settings(request: Request):
	return request.app.state.settings

def get_token_issuer(request: Request) -> TokenIssuer:
	return request.app.state.tokens

def get_identity_resolver(
	db: Session = Depends(get_db),
	tokens: TokenIssuer = Depends(get_token_issuer),
) -> IdentityResolver:
	return IdentityResolver(db, tokens)

def get_current_user(
	creds: HTTPAuthorizationCredentials | None = Depends(security),
	resolver: IdentityResolver = Depends(get_identity_resolver),
) -> User:
	if not creds or not creds.credentials:
		raise AuthError(AuthReason.MALFORMED)
	return resolver.resolve_from_token(creds.credentials)
