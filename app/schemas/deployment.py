from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from ..models.deployment_log import DeploymentLogStatus
from .project import Project

class DeployRequest(BaseModel):
    project_id: Optional[str] = None

class DeployResponse(BaseModel):
    success: bool = True
    deploy_url: str
    project: Project

class DeploymentLog(BaseModel):
    id: str
    project_id: str
    user_id: str
    status: DeploymentLogStatus
    deploy_url: Optional[str] = None
    error_message: Optional[str] = None
    deployment_provider: str
    provider_deployment_id: Optional[str] = None
    build_time: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class DeploymentLogResponse(BaseModel):
    success: bool = True
    deployment: DeploymentLog

class DeploymentLogListResponse(BaseModel):
    success: bool = True
    deployments: List[DeploymentLog]

class DeploymentStatusResponse(BaseModel):
    success: bool = True
    status: str
    url: Optional[str] = None
