from fastapi import APIRouter, Depends

from ..schemas import AuthUser, GenerateRequest, ProjectResponse
from ..services.lifecycle_service import ProjectLifecycleService
from .deps import get_current_user, get_lifecycle_service

router = APIRouter()

@router.post("", response_model=ProjectResponse)
async def generate_app(
    request: GenerateRequest,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Generate a new app from a natural language prompt"""
    project = await lifecycle.generate(current_user, request.prompt, request.name)
    return {"success": True, "project": project}
