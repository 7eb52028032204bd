# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from ..activity import record_activity
from ..config import settings
from ..security_center.storage import record_event
from .models import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from .security import (
    TOKEN_COOKIE_NAME,
    create_access_token,
    get_client_ip,
    get_current_user,
    hash_password,
    verify_password,
)
from .storage import create_user, get_user_by_email, get_user_by_referral_code

router = APIRouter(prefix="/api/auth", tags=["Auth"])

logger = logging.getLogger(__name__)


def _user_public(row: dict) -> UserPublic:
    return UserPublic(
        id=row["id"],
        email=row["email"],
        role=row.get("role") or "user",
        referral_code=row["referral_code"],
        referred_by=row.get("referred_by"),
        created_at=row["created_at"],
    )


def _set_auth_cookie(resp: Response, token: str) -> None:
    max_age = int(settings.token_ttl_days) * 24 * 60 * 60
    resp.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=max_age,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, summary="Register a new user")
def register(request: RegisterRequest, response: Response):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")

    referred_by = None
    if request.referral_code and request.referral_code.strip():
        referrer = get_user_by_referral_code(request.referral_code)
        if not referrer:
            raise HTTPException(status_code=400, detail="Unknown referral code")
        referred_by = referrer["id"]

    role = "admin" if request.email.lower().strip() in settings.admin_emails else "user"
    try:
        user = create_user(
            email=request.email,
            password_hash=hash_password(request.password),
            role=role,
            referred_by=referred_by,
        )
    except sqlite3.IntegrityError as exc:
        # Lost a race with a concurrent registration for the same email.
        raise HTTPException(status_code=400, detail="Email already registered") from exc

    logger.info("registered user %s (role=%s)", user["id"], role)
    record_activity(user["id"], "register", {"referred_by": referred_by})
    token = create_access_token(user_id=user["id"], email=user["email"], role=user["role"])
    _set_auth_cookie(response, token)
    return AuthResponse(user=_user_public(user), token=token)


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(request: LoginRequest, response: Response, http_request: Request):
    user = get_user_by_email(request.email)
    if not user or not verify_password(request.password, user["password_hash"]):
        record_event(
            event_type="failed_login",
            severity="medium",
            user_id=user["id"] if user else None,
            email=request.email.lower().strip(),
            ip_address=get_client_ip(http_request),
            user_agent=http_request.headers.get("user-agent"),
            details="Invalid email or password",
        )
        raise HTTPException(status_code=401, detail="Invalid email or password")

    record_activity(user["id"], "login", {"ip_address": get_client_ip(http_request)})
    token = create_access_token(user_id=user["id"], email=user["email"], role=user.get("role") or "user")
    _set_auth_cookie(response, token)
    return AuthResponse(user=_user_public(user), token=token)


@router.post("/logout", summary="Logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me", response_model=UserPublic, summary="Get current user")
def me(user: dict = Depends(get_current_user)):
    return _user_public(user)
