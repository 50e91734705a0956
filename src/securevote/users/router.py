"""Authentication API router: register, login, current user."""

from fastapi import APIRouter, Depends, Request

from securevote.common.security import CurrentUser, get_current_user
from securevote.users.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)

router = APIRouter(prefix="/auth")


def _get_service():
    from securevote.deps import get_user_service
    return get_user_service()


def _get_db():
    from securevote.deps import get_db
    return get_db()


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(body: RegisterRequest, request: Request):
    svc = _get_service()
    user, token = await _get_db().run(
        svc.register,
        body.email,
        body.password,
        full_name=body.full_name,
        organization=body.organization,
        ip_address=client_ip(request),
    )
    return RegisterResponse(user_id=user.id, token=token)


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, request: Request):
    svc = _get_service()
    user, token = await _get_db().run(
        svc.authenticate, body.email, body.password, ip_address=client_ip(request),
    )
    return LoginResponse(user_id=user.id, role=user.role, token=token)


@router.get("/me", response_model=UserResponse)
async def me(current: CurrentUser = Depends(get_current_user)):
    svc = _get_service()
    user = await _get_db().run(svc.get_profile, current.user_id)
    return UserResponse(
        user_id=user.id,
        email=user.email,
        full_name=user.full_name,
        organization=user.organization,
        role=user.role,
        created_at=user.created_at,
        last_login=user.last_login,
    )
