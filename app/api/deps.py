from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from supabase import Client
from typing import Optional

from ..database import get_db
from ..errors import AuthError
from ..schemas.auth import AuthUser
from ..services.ai_service import CodeGenerationService
from ..services.lifecycle_service import ProjectLifecycleService
from ..services.supabase_service import (
    BrowserGateway,
    ServiceGateway,
    create_service_client,
)
from ..services.vercel_service import VercelService

bearer_scheme = HTTPBearer(auto_error=False)

def get_service_client() -> Client:
    return create_service_client()

def get_service_gateway(
    db: Session = Depends(get_db),
    client: Client = Depends(get_service_client)
) -> ServiceGateway:
    return ServiceGateway(client, db)

def get_browser_gateway() -> BrowserGateway:
    return BrowserGateway()

def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> str:
    """Extract the Supabase access token from the Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthError()
    return credentials.credentials

def get_current_user(
    token: str = Depends(get_bearer_token),
    gateway: ServiceGateway = Depends(get_service_gateway)
) -> AuthUser:
    return gateway.get_user(token)

def get_code_generation_service() -> CodeGenerationService:
    return CodeGenerationService()

def get_vercel_service() -> VercelService:
    return VercelService()

def get_lifecycle_service(
    gateway: ServiceGateway = Depends(get_service_gateway),
    generator: CodeGenerationService = Depends(get_code_generation_service),
    deployer: VercelService = Depends(get_vercel_service)
) -> ProjectLifecycleService:
    return ProjectLifecycleService(gateway, generator=generator, deployer=deployer)
