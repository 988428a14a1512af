from pydantic import BaseModel
from datetime import datetime
from typing import Any, Dict, List, Optional
from ..models.project import ProjectStatus

class GenerateRequest(BaseModel):
    prompt: Optional[str] = None
    name: Optional[str] = None

class Project(BaseModel):
    id: str
    user_id: str
    name: str
    description: str
    code: Dict[str, Any]
    preview_url: Optional[str] = None
    deploy_url: Optional[str] = None
    status: ProjectStatus
    ai_model: str
    generation_time: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProjectResponse(BaseModel):
    success: bool = True
    project: Project

class ProjectListResponse(BaseModel):
    success: bool = True
    projects: List[Project]

class MessageResponse(BaseModel):
    success: bool = True
    message: str
