import logging
import time
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from ..config import settings
from ..errors import (
    AppError,
    DeploymentFailedError,
    NotFoundError,
    PersistenceError,
    ProviderError,
    ValidationError,
)
from ..models import DeploymentLog, DeploymentLogStatus, Project, ProjectStatus
from ..schemas.artifact import GeneratedCode
from ..schemas.auth import AuthUser
from .ai_service import CodeGenerationService, extract_project_name
from .supabase_service import ServiceGateway
from .vercel_service import VercelService

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _error_text(error: Exception) -> str:
    if isinstance(error, AppError):
        return error.message
    return str(error) or type(error).__name__


class ProjectLifecycleService:
    """Drives projects through generation and deployment.

    Nothing is kept between calls: each operation reads the rows it needs
    through the privileged gateway and writes its outcome back before
    returning.
    """

    def __init__(
        self,
        gateway: ServiceGateway,
        generator: Optional[CodeGenerationService] = None,
        deployer: Optional[VercelService] = None,
    ):
        self.gateway = gateway
        self.db = gateway.db
        self.generator = generator or CodeGenerationService()
        self.deployer = deployer or VercelService()

    # Reads

    def _get_owned_project(self, user: AuthUser, project_id: str, include_deleted: bool = False) -> Project:
        query = self.db.query(Project).filter(
            Project.id == project_id,
            Project.user_id == user.id
        )
        if not include_deleted:
            query = query.filter(Project.status != ProjectStatus.DELETED)

        project = query.first()
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_projects(self, user: AuthUser) -> List[Project]:
        return (
            self.db.query(Project)
            .filter(Project.user_id == user.id, Project.status != ProjectStatus.DELETED)
            .order_by(Project.created_at.desc())
            .all()
        )

    def get_project(self, user: AuthUser, project_id: str) -> Project:
        return self._get_owned_project(user, project_id)

    def list_deployments(self, user: AuthUser, project_id: Optional[str] = None) -> List[DeploymentLog]:
        query = self.db.query(DeploymentLog).filter(DeploymentLog.user_id == user.id)
        if project_id is not None:
            self._get_owned_project(user, project_id, include_deleted=True)
            query = query.filter(DeploymentLog.project_id == project_id)
        return query.order_by(DeploymentLog.created_at.desc()).all()

    def get_deployment(self, user: AuthUser, deployment_log_id: str) -> DeploymentLog:
        log = self.db.query(DeploymentLog).filter(
            DeploymentLog.id == deployment_log_id,
            DeploymentLog.user_id == user.id
        ).first()
        if not log:
            raise NotFoundError("Deployment not found")
        return log

    async def deployment_status(self, user: AuthUser, deployment_log_id: str) -> Tuple[str, Optional[str]]:
        """Live provider status for real deployments, the stored outcome otherwise"""
        log = self.get_deployment(user, deployment_log_id)

        if log.deployment_provider == "vercel" and log.provider_deployment_id and self.deployer.is_configured:
            result = await self.deployer.get_status(log.provider_deployment_id)
            return result.status, result.url

        return log.status.value, log.deploy_url

    # Writes

    def _commit(self, message: str):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Database write failed: %s", message)
            raise PersistenceError(message) from e

    def _mark_failed(self, project_id: str):
        try:
            project = self.db.get(Project, project_id)
            if project is not None and project.status == ProjectStatus.GENERATING:
                project.transition_to(ProjectStatus.FAILED)
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not mark project %s as failed", project_id)

    def _record_generation(self, user_id: str):
        # Best-effort: a lost increment does not fail the generation
        try:
            self.gateway.increment_generations(user_id)
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Failed to increment generation count for user %s", user_id, exc_info=True)

    async def generate(self, user: AuthUser, prompt: Optional[str], name: Optional[str] = None) -> Project:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")

        logger.info("Generating app for user %s", user.id)

        project = Project(
            user_id=user.id,
            name=(name or "").strip() or extract_project_name(prompt),
            description=prompt,
            status=ProjectStatus.GENERATING,
            code={"files": []},
            ai_model=settings.AI_MODEL_TAG,
        )
        self.db.add(project)
        self._commit("Failed to create project")
        self.db.refresh(project)
        project_id = project.id

        started = time.monotonic()
        try:
            generated_code = await self.generator.generate(prompt)
            project.code = generated_code.model_dump()
            project.transition_to(ProjectStatus.READY)
            project.generation_time = _elapsed_ms(started)
            self.db.commit()
            self.db.refresh(project)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Error updating project %s", project_id)
            self._mark_failed(project_id)
            raise PersistenceError("Failed to update project") from e
        except Exception as e:
            self.db.rollback()
            logger.exception("Error generating app for project %s", project_id)
            self._mark_failed(project_id)
            raise ProviderError("Failed to generate app") from e

        self._record_generation(user.id)

        logger.info("App generated successfully in %dms", project.generation_time)
        return project

    async def deploy(self, user: AuthUser, project_id: Optional[str]) -> Tuple[Project, str]:
        if not project_id:
            raise ValidationError("Project ID is required")

        project = self._get_owned_project(user, project_id, include_deleted=True)
        if not project.is_deployable:
            raise ValidationError("Project is not ready to deploy")

        use_mock = not self.deployer.is_configured
        log = DeploymentLog(
            project_id=project.id,
            user_id=user.id,
            status=DeploymentLogStatus.PENDING,
            deployment_provider="mock" if use_mock else "vercel",
        )
        self.db.add(log)
        self._commit("Failed to create deployment log")

        logger.info("Deploying project %s (%s)", project.id, log.deployment_provider)

        started = time.monotonic()
        try:
            code = GeneratedCode.model_validate(project.code)
            if use_mock:
                result = await self.deployer.mock_deploy(project.name, code)
            else:
                result = await self.deployer.deploy(project.name, code)
        except Exception as e:
            logger.exception("Error deploying project %s", project.id)
            self._finish_failed(log, _error_text(e), _elapsed_ms(started))
            raise DeploymentFailedError() from e

        build_time = _elapsed_ms(started)
        try:
            project.deploy_url = result.url
            project.transition_to(ProjectStatus.DEPLOYED)
            log.finish(
                DeploymentLogStatus.SUCCESS,
                deploy_url=result.url,
                build_time=build_time,
                provider_deployment_id=result.deployment_id,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Error saving deployment of project %s", project.id)
            self._finish_failed(log, "Failed to update project", build_time)
            raise DeploymentFailedError() from e

        self.db.refresh(project)
        logger.info("Project deployed successfully: %s", result.url)
        return project, result.url

    def _finish_failed(self, log: DeploymentLog, error_message: str, build_time: int):
        try:
            log.finish(DeploymentLogStatus.FAILED, error_message=error_message, build_time=build_time)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Could not record failure on deployment log %s", log.id)

    def delete_project(self, user: AuthUser, project_id: str):
        """Soft delete. Deleting an already deleted project is a no-op."""
        project = self._get_owned_project(user, project_id, include_deleted=True)
        if project.status == ProjectStatus.DELETED:
            return

        project.transition_to(ProjectStatus.DELETED)
        self._commit("Failed to delete project")
