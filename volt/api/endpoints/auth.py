"""
Authentication-related API endpoints.
"""

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from volt.core.database import get_db
from volt.core.config import settings
from volt.services.auth_service import auth_service
from volt.services.email_service import EmailService, get_email_service
from volt.services.token_service import TokenService, get_token_service
from volt.schemas.auth import (
    MessageResponse,
    PasswordResetRequest,
    RecoverRequest,
    TokenResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    VerifyTokenResponse,
)
from volt.utils.exceptions import AuthError

router = APIRouter()


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="strict" if settings.COOKIE_SECURE else "lax",
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user."""
    user = await auth_service.create_user(
        username=user_data.username,
        email=user_data.email,
        password=user_data.password,
        db=db
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    user_data: UserLogin,
    response: Response,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Login user, return an access token and set the refresh cookie."""
    user = await auth_service.authenticate_user(
        email=user_data.email,
        password=user_data.password,
        db=db
    )

    if not user:
        raise AuthError("Incorrect email or password")

    _set_refresh_cookie(response, tokens.issue_refresh_token(user.id))
    logger.info(f"User {user.id} logged in")

    return TokenResponse(
        token=tokens.issue_access_token(user.id),
        username=user.username,
        email=user.email,
    )


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Issue a new access token from the refresh cookie."""
    cookie = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not cookie:
        raise AuthError("Missing refresh token", reason="malformed")

    access_token = await tokens.refresh(cookie, db)
    user = await auth_service.get_user_by_id(tokens.verify_access_token(access_token), db)
    if user is None:
        raise AuthError("Invalid token")

    return TokenResponse(token=access_token, username=user.username, email=user.email)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Revoke the refresh token and clear its cookie."""
    cookie = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if cookie:
        await tokens.revoke_refresh_token(cookie, db)

    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.COOKIE_SECURE,
    )
    return MessageResponse(message="Successfully logged out")


@router.post("/recover", response_model=MessageResponse)
async def recover(
    data: RecoverRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    mailer: EmailService = Depends(get_email_service),
):
    """Email a password recovery link."""
    await tokens.request_recovery(data.email, db, mailer)
    return MessageResponse(message="Recovery email sent")


@router.get("/verify-token", response_model=VerifyTokenResponse)
async def verify_token(
    token: str = Query(...),
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Consume a recovery token. A token verifies exactly once."""
    await tokens.verify_recovery_token(token, db)
    return VerifyTokenResponse(token=token)


@router.post("/recover/reset", response_model=MessageResponse)
async def reset_password(
    data: PasswordResetRequest,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Set a new password using a verified recovery token."""
    user = await tokens.redeem_for_reset(data.token, data.email, db)
    await auth_service.reset_password(user, data.password, db)
    return MessageResponse(message="Password updated")
