from fastapi import APIRouter, Depends

from ..schemas import AuthUser, DeployRequest, DeployResponse
from ..services.lifecycle_service import ProjectLifecycleService
from .deps import get_current_user, get_lifecycle_service

router = APIRouter()

@router.post("", response_model=DeployResponse)
async def deploy_project(
    request: DeployRequest,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Deploy a generated app (mock deployment when Vercel is not configured)"""
    project, deploy_url = await lifecycle.deploy(current_user, request.project_id)
    return {"success": True, "deploy_url": deploy_url, "project": project}
