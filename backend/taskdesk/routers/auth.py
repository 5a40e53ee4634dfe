from fastapi import APIRouter, Depends, status

from ..dependencies import get_user_port
from ..schemas.auth import RegisterResponse, TokenResponse, UserLogin, UserRegister
from ..schemas.user import UserRead
from ..use_cases.auth.login_user import login_user
from ..use_cases.auth.register_user import register_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    payload: UserRegister,
    user_port=Depends(get_user_port),
) -> RegisterResponse:
    user = await register_user(
        user_port, name=payload.name, email=payload.email, password=payload.password
    )
    return RegisterResponse(
        message="User registered successfully", user=UserRead.model_validate(user)
    )


@router.post("/login", response_model=TokenResponse, response_model_exclude_none=True)
async def login(
    payload: UserLogin,
    user_port=Depends(get_user_port),
) -> TokenResponse:
    access_token, user = await login_user(
        user_port, email=payload.email, password=payload.password
    )
    return TokenResponse(access_token=access_token, user=UserRead.model_validate(user))
