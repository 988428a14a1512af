from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
from typing import Optional
from ..database import Base
import uuid
import enum

class DeploymentLogStatus(str, enum.Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"

class DeploymentLog(Base):
    __tablename__ = "deployment_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = Column(String, ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)

    status = Column(
        SQLEnum(
            DeploymentLogStatus,
            name="deployment_log_status",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=DeploymentLogStatus.PENDING,
    )
    deploy_url = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)
    deployment_provider = Column(String, nullable=False, default="vercel")
    provider_deployment_id = Column(String, nullable=True)
    build_time = Column(Integer, nullable=True)  # milliseconds

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    project = relationship("Project", back_populates="deployment_logs")

    def finish(
        self,
        status: DeploymentLogStatus,
        deploy_url: Optional[str] = None,
        error_message: Optional[str] = None,
        build_time: Optional[int] = None,
        provider_deployment_id: Optional[str] = None,
    ):
        """Move a pending log to its terminal status. A log is finished once."""
        if self.status != DeploymentLogStatus.PENDING:
            raise ValueError(f"Deployment log {self.id} is already {self.status.value}")
        if status == DeploymentLogStatus.PENDING:
            raise ValueError("A deployment log can only finish as success or failed")

        self.status = status
        self.deploy_url = deploy_url
        self.error_message = error_message
        self.build_time = build_time
        self.provider_deployment_id = provider_deployment_id
