from fastapi import APIRouter, Depends

from ..schemas import (
    AuthUser,
    DeploymentLogListResponse,
    DeploymentLogResponse,
    DeploymentStatusResponse
)
from ..services.lifecycle_service import ProjectLifecycleService
from .deps import get_current_user, get_lifecycle_service

router = APIRouter()

@router.get("", response_model=DeploymentLogListResponse)
async def list_deployments(
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """List all deployment attempts of the current user"""
    return {"success": True, "deployments": lifecycle.list_deployments(current_user)}

@router.get("/{deployment_id}", response_model=DeploymentLogResponse)
async def get_deployment(
    deployment_id: str,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    return {"success": True, "deployment": lifecycle.get_deployment(current_user, deployment_id)}

@router.get("/{deployment_id}/status", response_model=DeploymentStatusResponse)
async def get_deployment_status(
    deployment_id: str,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Current deployment state as reported by Vercel"""
    status, url = await lifecycle.deployment_status(current_user, deployment_id)
    return {"success": True, "status": status, "url": url}
