from .artifact import CodeFile, GeneratedCode
from .project import (
    GenerateRequest,
    Project,
    ProjectResponse,
    ProjectListResponse,
    MessageResponse
)
from .deployment import (
    DeployRequest,
    DeployResponse,
    DeploymentLog,
    DeploymentLogResponse,
    DeploymentLogListResponse,
    DeploymentStatusResponse
)
from .auth import (
    AuthUser,
    AuthSession,
    AuthResponse,
    SignUpRequest,
    SignInRequest,
    SignOutRequest,
    ResetPasswordRequest,
    UserProfile,
    MeResponse
)

__all__ = [
    "CodeFile",
    "GeneratedCode",
    "GenerateRequest",
    "Project",
    "ProjectResponse",
    "ProjectListResponse",
    "MessageResponse",
    "DeployRequest",
    "DeployResponse",
    "DeploymentLog",
    "DeploymentLogResponse",
    "DeploymentLogListResponse",
    "DeploymentStatusResponse",
    "AuthUser",
    "AuthSession",
    "AuthResponse",
    "SignUpRequest",
    "SignInRequest",
    "SignOutRequest",
    "ResetPasswordRequest",
    "UserProfile",
    "MeResponse"
]
