from .project import Project, ProjectStatus
from .deployment_log import DeploymentLog, DeploymentLogStatus
from .user_profile import UserProfile, SubscriptionTier

__all__ = [
    "Project",
    "ProjectStatus",
    "DeploymentLog",
    "DeploymentLogStatus",
    "UserProfile",
    "SubscriptionTier"
]
