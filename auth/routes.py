"""
Auth API routes — register, login, Google, refresh, logout, verify, me.

Route prefix: ``{config.api_prefix}/auth``
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.responses import success_response
from auth.dependencies import get_auth_service, get_bearer_token, get_current_user_id
from auth.schemas import GoogleAuthRequest, LoginRequest, RegisterRequest
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new local user."""
    result = await service.register(req.email, req.password, req.name)
    return success_response(result, "User registered successfully")


@router.post("/login")
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return success_response(result, "Login successful")


@router.post("/google")
async def google_auth(
    req: GoogleAuthRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login (or sign up) with a Google ID-token credential."""
    result = await service.login_with_google(req.credential, req.client_id)
    return success_response(result, "Google authentication successful")


@router.post("/refresh")
async def refresh(
    refresh_token: str = Depends(get_bearer_token),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Exchange the refresh token (sent as Bearer) for a new pair."""
    result = await service.refresh_token(refresh_token)
    return success_response(result, "Tokens refreshed successfully")


@router.post("/logout")
async def logout(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    await service.logout(user_id)
    return success_response(message="Logout successful")


@router.get("/verify")
async def verify(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Confirm the access token is valid and return its user."""
    user = await service.get_current_user(user_id)
    return success_response(user, "Valid token")


@router.get("/me")
async def me(
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    user = await service.get_current_user(user_id)
    return success_response(user, "User data retrieved")
