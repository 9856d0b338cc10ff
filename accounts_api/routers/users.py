from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from accounts_api.core.config import get_settings
from accounts_api.core.errors import TokenInvalidError
from accounts_api.core.rate_limiter import rate_limit_ip
from accounts_api.services.account_service import AccountService, UserView

router = APIRouter(tags=["users"])
_bearer = HTTPBearer(auto_error=False)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str
    profile: dict[str, Any] = Field(default_factory=dict)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


def get_account_service(request: Request) -> AccountService:
    service = getattr(request.app.state, "account_service", None)
    if service is None:
        service = AccountService()
        request.app.state.account_service = service
    return service


def bearer_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise TokenInvalidError("Missing bearer token")
    return credentials.credentials


def current_user(
    token: str = Depends(bearer_token),
    service: AccountService = Depends(get_account_service),
) -> UserView:
    return service.authenticate(token)


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, service: AccountService = Depends(get_account_service)):
    user = service.register(body.username, body.password, body.profile)
    return user.as_dict()


@router.post("/auth/login")
def login(request: Request, body: LoginRequest, service: AccountService = Depends(get_account_service)):
    settings = get_settings()
    rate_limit_ip(
        request,
        "auth:login",
        limit=settings.login_rate_limit,
        window_seconds=settings.login_rate_window_seconds,
    )
    return service.login(body.username, body.password).as_dict()


@router.post("/auth/logout")
def logout(token: str = Depends(bearer_token), service: AccountService = Depends(get_account_service)):
    service.logout(token)
    return {"message": "logged out"}


@router.post("/auth/logout-all")
def logout_all(user: UserView = Depends(current_user), service: AccountService = Depends(get_account_service)):
    removed = service.logout_all(user.id)
    return {"message": "logged out everywhere", "revoked": removed}


@router.get("/users/me")
def me(user: UserView = Depends(current_user)):
    return user.as_dict()


@router.put("/users/me")
def edit_profile(
    fields: dict[str, Any],
    user: UserView = Depends(current_user),
    service: AccountService = Depends(get_account_service),
):
    return service.edit_profile(user.id, fields).as_dict()


@router.get("/users")
def list_users(service: AccountService = Depends(get_account_service)):
    return [user.as_dict() for user in service.get_all_users()]


@router.get("/users/{user_id}")
def get_profile(user_id: str, service: AccountService = Depends(get_account_service)):
    return service.get_profile(user_id).as_dict()


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    user: UserView = Depends(current_user),
    service: AccountService = Depends(get_account_service),
):
    if user.id != user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot delete another user")
    service.delete_user(user_id)
    return {"message": "user deleted successfully"}
