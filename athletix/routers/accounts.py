"""
Accounts Router
===============

Registration, login/logout and password recovery. Credentials live in the
auth service; the public profile lives in the ``users`` table.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from athletix.auth import AuthClient, AuthError
from athletix.config import Settings
from athletix.dependencies import get_auth_client, get_bearer_token, get_db, get_settings
from athletix.errors import BadRequest, Conflict, Unauthorized, is_unique_violation
from athletix.models import Sport, User
from athletix.schemas import (
    ForgotPasswordRequest, LoginRequest, LoginResponse, LoginUser, MessageResponse,
    RegisterRequest, SessionInfo,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Accounts"])

DUPLICATE_EMAIL = "This email is already associated with an account."


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    """
    Create an auth account and the matching public profile.

    The sport is resolved first so an unknown sport id never leaves an
    orphaned auth account behind.
    """
    sport = await db.get(Sport, payload.sport)
    if sport is None:
        raise BadRequest(f"Unknown sport id {payload.sport}")

    try:
        auth_user = await auth.sign_up(
            payload.email,
            payload.password,
            metadata={"name": payload.name, "role": payload.role.value},
            redirect_to=settings.email_confirm_url,
        )
    except AuthError as e:
        if e.is_duplicate_account:
            raise Conflict(DUPLICATE_EMAIL)
        raise

    # The service hides existing accounts behind an empty identity list
    if auth_user.identities is not None and len(auth_user.identities) == 0:
        raise Conflict(DUPLICATE_EMAIL)

    db.add(User(
        user_id=auth_user.id,
        fullname=payload.name,
        role=payload.role.value,
        gender=payload.gender,
        birthdate=payload.birth_date,
        location=payload.region,
        sport_id=sport.sport_id,
        sport_name=sport.sport_name,
        bio=payload.bio,
    ))

    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        raise Conflict(DUPLICATE_EMAIL)

    logger.info("Registered %s account %s", payload.role.value, auth_user.id)
    return MessageResponse(
        message="Registration successful. Please check your email to verify your account."
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
    auth: AuthClient = Depends(get_auth_client),
) -> LoginResponse:
    try:
        session = await auth.sign_in(payload.email, payload.password)
    except AuthError as e:
        if e.status_code in (400, 401, 422):
            raise Unauthorized("Invalid email or password")
        raise

    profile = await db.get(User, session.user.id)

    return LoginResponse(
        message="Login successful",
        session=SessionInfo(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_in=session.expires_in,
            token_type=session.token_type,
        ),
        user=LoginUser(
            id=session.user.id,
            email=session.user.email,
            name=profile.fullname if profile else None,
            role=profile.role if profile else None,
            sport=profile.sport_name if profile else None,
            verification_status=profile.verification_status if profile else None,
        ),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    auth: AuthClient = Depends(get_auth_client),
) -> MessageResponse:
    await auth.sign_out(token)
    return MessageResponse(message="Logged out successfully")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    payload: ForgotPasswordRequest,
    auth: AuthClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    if not payload.email:
        raise BadRequest("Email is required")

    await auth.reset_password_for_email(payload.email, redirect_to=settings.password_reset_url)
    return MessageResponse(message="Password reset link sent! Check your email.")
