from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Any, Dict, Optional
from ..models.user_profile import SubscriptionTier

class AuthUser(BaseModel):
    """Identity resolved from a Supabase access token"""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}

class SignUpRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: Optional[str] = None

class SignInRequest(BaseModel):
    email: EmailStr
    password: str

class SignOutRequest(BaseModel):
    refresh_token: str

class ResetPasswordRequest(BaseModel):
    email: EmailStr

class AuthSession(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: str = "bearer"

class AuthResponse(BaseModel):
    success: bool = True
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None

class UserProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    projects_count: int
    total_generations: int
    subscription_tier: SubscriptionTier
    subscription_status: str
    created_at: datetime

    class Config:
        from_attributes = True

class MeResponse(BaseModel):
    success: bool = True
    user: AuthUser
    profile: Optional[UserProfile] = None
