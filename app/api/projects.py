from fastapi import APIRouter, Depends

from ..schemas import (
    AuthUser,
    DeploymentLogListResponse,
    MessageResponse,
    ProjectListResponse,
    ProjectResponse
)
from ..services.lifecycle_service import ProjectLifecycleService
from .deps import get_current_user, get_lifecycle_service

router = APIRouter()

@router.get("", response_model=ProjectListResponse)
async def list_projects(
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """List all projects for current user, newest first"""
    return {"success": True, "projects": lifecycle.list_projects(current_user)}

@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Get a specific project"""
    return {"success": True, "project": lifecycle.get_project(current_user, project_id)}

@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: str,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Delete a project (soft delete: the row is kept with status 'deleted')"""
    lifecycle.delete_project(current_user, project_id)
    return {"success": True, "message": "Project deleted successfully"}

@router.get("/{project_id}/deployments", response_model=DeploymentLogListResponse)
async def list_project_deployments(
    project_id: str,
    current_user: AuthUser = Depends(get_current_user),
    lifecycle: ProjectLifecycleService = Depends(get_lifecycle_service)
):
    """Deployment history of a project"""
    return {"success": True, "deployments": lifecycle.list_deployments(current_user, project_id)}
