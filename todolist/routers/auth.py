from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from todolist.core.errors import AuthError
from todolist.core.logging import log_event
from todolist.core.security import TokenIssuer
from todolist.db.session import get_db
from todolist.dependencies import get_identity_resolver, get_token_issuer, security
from todolist.schemas.auth import LoginRequest, RegisterRequest, public_user
from todolist.services.auth_service import AuthService
from todolist.services.identity import IdentityResolver

router = APIRouter(tags=["auth"])

@router.post("/register")
def register(
	payload: RegisterRequest,
	db: Session = Depends(get_db),
	tokens: TokenIssuer = Depends(get_token_issuer),
):
	user = AuthService(db).register(
		email=payload.email,
		password=payload.password,
		first_name=payload.first_name,
		last_name=payload.last_name,
	)
	log_event("register_ok", user_id=user.id)
	return {"success": True, "token": tokens.issue(user), "user": public_user(user)}

@router.post("/login")
def login(
	payload: LoginRequest,
	db: Session = Depends(get_db),
	tokens: TokenIssuer = Depends(get_token_issuer),
):
	user = AuthService(db).login(payload.email, payload.password)
	log_event("login_ok", user_id=user.id)
	return {"success": True, "token": tokens.issue(user), "user": public_user(user)}

@router.get("/auth/check")
def auth_check(
	creds: HTTPAuthorizationCredentials | None = Depends(security),
	resolver: IdentityResolver = Depends(get_identity_resolver),
):
	if not creds:
		return JSONResponse(status_code=401, content={"authenticated": False})
	try:
		user = resolver.resolve_from_token(creds.credentials)
	except AuthError:
		return JSONResponse(status_code=401, content={"authenticated": False})
	return {"authenticated": True, "user": public_user(user)}
