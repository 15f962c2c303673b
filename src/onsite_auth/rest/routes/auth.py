"""Auth endpoints: register, login, /me, logout."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from onsite_auth.auth.deps import AuthServiceDep, CurrentUserDep
from onsite_auth.auth.schemas import LoginRequest, RegisterRequest
from onsite_auth.rest.schemas import (
    AuthResponse,
    ErrorResponse,
    LogoutAllResponse,
    MeResponse,
    UserSchema,
)

router = APIRouter(prefix="/auth", tags=["auth"])

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=201,
    responses={**_ERRORS, 409: {"model": ErrorResponse}},
)
async def register(request: RegisterRequest, service: AuthServiceDep) -> AuthResponse:
    """Create a user account and its first session."""
    result = await service.register(request)
    return AuthResponse(user=UserSchema.from_user(result.user), token=result.token)


@router.post("/login", response_model=AuthResponse, responses=_ERRORS)
async def login(request: LoginRequest, service: AuthServiceDep) -> AuthResponse:
    """Verify credentials and open a new session."""
    result = await service.login(request)
    return AuthResponse(user=UserSchema.from_user(result.user), token=result.token)


@router.get("/me", response_model=MeResponse, responses={**_ERRORS, 404: {"model": ErrorResponse}})
async def me(current_user: CurrentUserDep, service: AuthServiceDep) -> MeResponse:
    """Return the currently authenticated user."""
    user = await service.get_me(current_user)
    return MeResponse(user=UserSchema.from_user(user))


@router.post("/logout", status_code=204, responses=_ERRORS)
async def logout(request: Request, service: AuthServiceDep) -> Response:
    """Revoke the session behind the presented bearer token."""
    await service.logout(request.headers.get("Authorization"))
    return Response(status_code=204)


@router.post("/logout-all", response_model=LogoutAllResponse, responses=_ERRORS)
async def logout_all(current_user: CurrentUserDep, service: AuthServiceDep) -> LogoutAllResponse:
    """Revoke every session belonging to the current user."""
    revoked = await service.logout_all(current_user)
    return LogoutAllResponse(revoked=revoked)
