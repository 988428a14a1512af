from sqlalchemy import Column, String, DateTime, JSON, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from ..database import Base
from ..errors import InvalidTransitionError
import uuid
import enum

class ProjectStatus(str, enum.Enum):
    GENERATING = "generating"
    READY = "ready"
    DEPLOYED = "deployed"
    FAILED = "failed"
    DELETED = "deleted"

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        return target in PROJECT_TRANSITIONS[self]

# The only legal project lifecycle moves
PROJECT_TRANSITIONS = {
    ProjectStatus.GENERATING: frozenset({ProjectStatus.READY, ProjectStatus.FAILED, ProjectStatus.DELETED}),
    ProjectStatus.READY: frozenset({ProjectStatus.DEPLOYED, ProjectStatus.DELETED}),
    ProjectStatus.DEPLOYED: frozenset({ProjectStatus.DEPLOYED, ProjectStatus.DELETED}),
    ProjectStatus.FAILED: frozenset({ProjectStatus.DELETED}),
    ProjectStatus.DELETED: frozenset(),
}

DEPLOYABLE_STATUSES = frozenset({ProjectStatus.READY, ProjectStatus.DEPLOYED})

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

class Project(Base):
    __tablename__ = "projects"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)  # Original user prompt

    # Generated artifact: {"files": [...], "dependencies": {...}, "framework": "..."}
    code = Column(JSON, nullable=False, default=lambda: {"files": []})

    preview_url = Column(String, nullable=True)
    deploy_url = Column(String, nullable=True)
    status = Column(
        SQLEnum(ProjectStatus, name="project_status", values_callable=_enum_values),
        nullable=False,
        default=ProjectStatus.GENERATING,
    )
    ai_model = Column(String, nullable=False)
    generation_time = Column(Integer, nullable=True)  # milliseconds

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    deployment_logs = relationship("DeploymentLog", back_populates="project")

    def transition_to(self, target: ProjectStatus):
        current = ProjectStatus(self.status)
        if not current.can_transition_to(target):
            raise InvalidTransitionError(
                f"Cannot move project from {current.value} to {target.value}"
            )
        self.status = target

    @property
    def is_deployable(self) -> bool:
        return self.status in DEPLOYABLE_STATUSES
