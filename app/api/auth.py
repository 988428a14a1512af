from fastapi import APIRouter, Depends

from ..schemas import (
    AuthResponse,
    AuthUser,
    MeResponse,
    MessageResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignOutRequest,
    SignUpRequest
)
from ..services.supabase_service import BrowserGateway, ServiceGateway
from .deps import (
    get_bearer_token,
    get_browser_gateway,
    get_current_user,
    get_service_gateway
)

router = APIRouter()

@router.post("/signup", response_model=AuthResponse)
async def sign_up(
    request: SignUpRequest,
    gateway: BrowserGateway = Depends(get_browser_gateway)
):
    """Register a new user with Supabase Auth"""
    return gateway.sign_up(request.email, request.password, request.full_name)

@router.post("/signin", response_model=AuthResponse)
async def sign_in(
    request: SignInRequest,
    gateway: BrowserGateway = Depends(get_browser_gateway)
):
    """Sign in with email and password"""
    return gateway.sign_in(request.email, request.password)

@router.post("/signout", response_model=MessageResponse)
async def sign_out(
    request: SignOutRequest,
    token: str = Depends(get_bearer_token),
    gateway: BrowserGateway = Depends(get_browser_gateway)
):
    gateway.sign_out(token, request.refresh_token)
    return {"success": True, "message": "Signed out"}

@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    gateway: BrowserGateway = Depends(get_browser_gateway)
):
    """Send a password reset email"""
    gateway.reset_password(request.email)
    return {"success": True, "message": "Password reset email sent"}

@router.get("/me", response_model=MeResponse)
async def get_current_user_info(
    current_user: AuthUser = Depends(get_current_user),
    gateway: ServiceGateway = Depends(get_service_gateway)
):
    """Get current user info and usage counters"""
    return {"success": True, "user": current_user, "profile": gateway.get_profile(current_user.id)}
