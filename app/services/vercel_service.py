"""Deployment of generated apps to Vercel.

Files are uploaded inline with the deployment request and the deployment is
polled until Vercel reports it ready or failed. Without a Vercel token the
mock deployment is used instead.
"""
import asyncio
import enum
import logging
import re
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

import httpx

from ..config import settings
from ..errors import ConfigurationError, DeploymentTimeoutError, ProviderError
from ..schemas.artifact import GeneratedCode

logger = logging.getLogger(__name__)

DEFAULT_SLUG = "my-app"
REQUEST_TIMEOUT_SECONDS = 30.0
MAX_SLUG_LENGTH = 50
MOCK_DEPLOY_DELAY_SECONDS = 2.0

_INVALID_SLUG_CHARS = re.compile(r"[^a-z0-9-]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


class PollState(str, enum.Enum):
    PENDING = "pending"
    READY = "ready"
    ERROR = "error"
    TIMED_OUT = "timed_out"


READY_STATES = {"READY"}
ERROR_STATES = {"ERROR", "CANCELED"}


def resolve_poll_state(ready_state: Optional[str], elapsed: float, timeout: float) -> PollState:
    """Decide what a poll observation means for the deployment.

    A terminal provider state wins over the clock, so a deployment that turns
    ready on the last poll is still reported as ready.
    """
    state = (ready_state or "").upper()
    if state in READY_STATES:
        return PollState.READY
    if state in ERROR_STATES:
        return PollState.ERROR
    if elapsed >= timeout:
        return PollState.TIMED_OUT
    return PollState.PENDING


def sanitize_project_name(name: str) -> str:
    """Vercel project names must be lowercase alphanumerics and hyphens"""
    slug = _INVALID_SLUG_CHARS.sub("-", (name or "").lower())
    slug = _REPEATED_HYPHENS.sub("-", slug).strip("-")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("-")
    return slug or DEFAULT_SLUG


@dataclass(frozen=True)
class DeploymentResult:
    url: str
    deployment_id: str


@dataclass(frozen=True)
class DeploymentStatusResult:
    status: str
    url: Optional[str] = None


def _provider_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return "Unknown error"


class VercelService:
    def __init__(
        self,
        token: Optional[str] = None,
        team_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        poll_interval_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.token = token if token is not None else settings.VERCEL_TOKEN
        self.team_id = team_id if team_id is not None else settings.VERCEL_TEAM_ID
        self.base_url = base_url or settings.VERCEL_API_URL
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.DEPLOY_TIMEOUT_SECONDS
        self.poll_interval_seconds = (
            poll_interval_seconds if poll_interval_seconds is not None else settings.DEPLOY_POLL_INTERVAL_SECONDS
        )
        self._sleep = sleep
        self._clock = clock

    @property
    def is_configured(self) -> bool:
        return bool(self.token)

    def _require_token(self):
        if not self.token:
            raise ConfigurationError("Vercel token not configured")

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }

    @property
    def params(self) -> Dict[str, str]:
        return {"teamId": self.team_id} if self.team_id else {}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, headers=self.headers, timeout=REQUEST_TIMEOUT_SECONDS)

    async def deploy(self, project_name: str, code: GeneratedCode) -> DeploymentResult:
        """Deploy an artifact and wait until Vercel serves it"""
        self._require_token()
        logger.info("Deploying project to Vercel: %s", project_name)

        payload = {
            "name": sanitize_project_name(project_name),
            "files": [{"file": f.path, "data": f.content} for f in code.files],
            "projectSettings": {
                "framework": None,
                "buildCommand": None,
                "outputDirectory": None,
            },
            "target": "production",
        }

        async with self._client() as client:
            response = await client.post("/v13/deployments", params=self.params, json=payload)
            if response.is_error:
                message = _provider_message(response)
                logger.error("Vercel deployment error (%s): %s", response.status_code, response.text)
                raise ProviderError(f"Deployment failed: {message}")

            deployment_id = response.json().get("id")
            if not deployment_id:
                raise ProviderError("Deployment response missing id")
            logger.info("Deployment created: %s", deployment_id)

            # The deadline covers the whole poll, including a status read that hangs
            try:
                url = await asyncio.wait_for(
                    self._wait_for_deployment(client, deployment_id),
                    timeout=self.timeout_seconds,
                )
            except DeploymentTimeoutError:
                raise
            except asyncio.TimeoutError as e:
                raise self._timeout_error() from e

        return DeploymentResult(url=url, deployment_id=deployment_id)

    def _timeout_error(self) -> DeploymentTimeoutError:
        return DeploymentTimeoutError(f"Deployment timed out after {self.timeout_seconds:g} seconds")

    async def _fetch_deployment(self, client: httpx.AsyncClient, deployment_id: str) -> dict:
        response = await client.get(f"/v13/deployments/{deployment_id}", params=self.params)
        if response.is_error:
            raise ProviderError(f"Failed to check deployment status: {_provider_message(response)}")
        return response.json()

    async def _wait_for_deployment(self, client: httpx.AsyncClient, deployment_id: str) -> str:
        started = self._clock()

        while True:
            deployment = await self._fetch_deployment(client, deployment_id)
            state = resolve_poll_state(
                deployment.get("readyState"), self._clock() - started, self.timeout_seconds
            )

            if state == PollState.READY:
                if not deployment.get("url"):
                    raise ProviderError("Deployment response missing url")
                return f"https://{deployment['url']}"
            if state == PollState.ERROR:
                raise ProviderError(f"Deployment {deployment_id} failed")
            if state == PollState.TIMED_OUT:
                raise self._timeout_error()

            await self._sleep(self.poll_interval_seconds)

    async def get_status(self, deployment_id: str) -> DeploymentStatusResult:
        """Read the deployment state once"""
        self._require_token()
        async with self._client() as client:
            deployment = await self._fetch_deployment(client, deployment_id)

        ready_state = deployment.get("readyState", "UNKNOWN")
        url = f"https://{deployment['url']}" if ready_state == "READY" and deployment.get("url") else None
        return DeploymentStatusResult(status=ready_state, url=url)

    async def delete(self, deployment_id: str):
        """Remove a deployment. Deleting one that is already gone is not an error."""
        self._require_token()
        async with self._client() as client:
            response = await client.delete(f"/v13/deployments/{deployment_id}", params=self.params)

        if response.status_code == 404:
            logger.info("Deployment %s already removed", deployment_id)
            return
        if response.is_error:
            raise ProviderError(f"Failed to delete deployment: {_provider_message(response)}")

    async def mock_deploy(self, project_name: str, code: GeneratedCode) -> DeploymentResult:
        """Stand-in deployment for development when no Vercel token is configured"""
        logger.info("Using mock deployment (Vercel token not configured)")

        await self._sleep(MOCK_DEPLOY_DELAY_SECONDS)

        mock_id = f"mock-{int(time.time() * 1000)}"
        return DeploymentResult(
            url=f"https://{sanitize_project_name(project_name)}-{mock_id}.vercel.app",
            deployment_id=mock_id,
        )
