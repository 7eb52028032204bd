# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=8, max_length=128)
    referral_code: Optional[str] = Field(None, max_length=32, description="Code of the referring user")


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)


class UserPublic(BaseModel):
    id: str
    email: str
    role: str
    referral_code: str
    referred_by: Optional[str] = None
    created_at: str


class AuthResponse(BaseModel):
    user: UserPublic
    token: str
