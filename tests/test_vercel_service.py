import asyncio
import json
import time

import httpx
import pytest
import respx

from app.errors import ConfigurationError, DeploymentTimeoutError, ProviderError
from app.schemas.artifact import GeneratedCode
from app.services.vercel_service import (
    MOCK_DEPLOY_DELAY_SECONDS,
    PollState,
    VercelService,
    resolve_poll_state,
    sanitize_project_name,
)

from .conftest import VALID_ARTIFACT, FakeClock

API_URL = "https://api.vercel.com"


@pytest.fixture
def code():
    return GeneratedCode.model_validate(VALID_ARTIFACT)


@pytest.fixture
def vercel(clock):
    return VercelService(token="vercel-token", team_id="", sleep=clock.sleep, clock=clock)


@pytest.mark.parametrize("name,expected", [
    ("My Cool App!!", "my-cool-app"),
    ("Todo App", "todo-app"),
    ("--Already--Hyphenated--", "already-hyphenated"),
    ("Café Menu 2024", "caf-menu-2024"),
    ("!!!", "my-app"),
    ("", "my-app"),
])
def test_sanitize_project_name(name, expected):
    assert sanitize_project_name(name) == expected


def test_sanitize_project_name_truncates():
    slug = sanitize_project_name("a" * 80)
    assert slug == "a" * 50


def test_sanitize_project_name_never_ends_with_hyphen():
    slug = sanitize_project_name("a" * 49 + " b")
    assert slug == "a" * 49


@pytest.mark.parametrize("ready_state,elapsed,expected", [
    ("READY", 0, PollState.READY),
    ("READY", 120, PollState.READY),
    ("ERROR", 3, PollState.ERROR),
    ("CANCELED", 3, PollState.ERROR),
    ("BUILDING", 10, PollState.PENDING),
    ("QUEUED", 0, PollState.PENDING),
    (None, 0, PollState.PENDING),
    ("BUILDING", 60, PollState.TIMED_OUT),
    ("INITIALIZING", 75, PollState.TIMED_OUT),
])
def test_resolve_poll_state(ready_state, elapsed, expected):
    assert resolve_poll_state(ready_state, elapsed, timeout=60) == expected


async def test_deploy_polls_until_ready(vercel, code, clock):
    async with respx.mock(base_url=API_URL) as respx_mock:
        create = respx_mock.post("/v13/deployments").mock(
            return_value=httpx.Response(200, json={"id": "dpl_123", "readyState": "QUEUED"})
        )
        status = respx_mock.get("/v13/deployments/dpl_123").mock(side_effect=[
            httpx.Response(200, json={"id": "dpl_123", "readyState": "BUILDING", "url": "my-cool-app.vercel.app"}),
            httpx.Response(200, json={"id": "dpl_123", "readyState": "BUILDING", "url": "my-cool-app.vercel.app"}),
            httpx.Response(200, json={"id": "dpl_123", "readyState": "READY", "url": "my-cool-app.vercel.app"}),
        ])

        result = await vercel.deploy("My Cool App!!", code)

    assert result.url == "https://my-cool-app.vercel.app"
    assert result.deployment_id == "dpl_123"
    assert status.call_count == 3
    assert clock.sleeps == [2, 2]

    request = create.calls.last.request
    assert request.headers["Authorization"] == "Bearer vercel-token"
    assert "teamId" not in request.url.params
    payload = json.loads(request.content)
    assert payload["name"] == "my-cool-app"
    assert payload["files"] == [{"file": "index.html", "data": VALID_ARTIFACT["files"][0]["content"]}]
    assert payload["projectSettings"] == {"framework": None, "buildCommand": None, "outputDirectory": None}


async def test_deploy_scopes_requests_to_team(code, clock):
    vercel = VercelService(token="vercel-token", team_id="team_42", sleep=clock.sleep, clock=clock)

    async with respx.mock(base_url=API_URL) as respx_mock:
        create = respx_mock.post("/v13/deployments").mock(
            return_value=httpx.Response(200, json={"id": "dpl_1"})
        )
        status = respx_mock.get("/v13/deployments/dpl_1").mock(
            return_value=httpx.Response(200, json={"readyState": "READY", "url": "x.vercel.app"})
        )

        await vercel.deploy("x", code)

    assert create.calls.last.request.url.params["teamId"] == "team_42"
    assert status.calls.last.request.url.params["teamId"] == "team_42"


async def test_deploy_rejected_by_provider(vercel, code):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(
            return_value=httpx.Response(403, json={"error": {"code": "forbidden", "message": "Not authorized"}})
        )

        with pytest.raises(ProviderError) as exc_info:
            await vercel.deploy("my app", code)

    assert exc_info.value.message == "Deployment failed: Not authorized"


async def test_deploy_error_state_raises_provider_error(vercel, code):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"id": "dpl_err"}))
        respx_mock.get("/v13/deployments/dpl_err").mock(
            return_value=httpx.Response(200, json={"readyState": "ERROR"})
        )

        with pytest.raises(ProviderError):
            await vercel.deploy("my app", code)


async def test_deploy_times_out_after_sixty_seconds(vercel, code, clock):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"id": "dpl_slow"}))
        status = respx_mock.get("/v13/deployments/dpl_slow").mock(
            return_value=httpx.Response(200, json={"readyState": "BUILDING"})
        )

        with pytest.raises(DeploymentTimeoutError) as exc_info:
            await vercel.deploy("my app", code)

    assert isinstance(exc_info.value, TimeoutError)
    assert "timed out" in exc_info.value.message
    assert clock.now == 60
    assert status.call_count == 31


async def test_deploy_deadline_covers_hanging_status_read(code, monkeypatch):
    vercel = VercelService(token="vercel-token", team_id="", timeout_seconds=0.2, poll_interval_seconds=0.05)
    reads = []

    async def hanging_fetch(client, deployment_id):
        reads.append(deployment_id)
        if len(reads) > 1:
            await asyncio.sleep(30)
        return {"readyState": "BUILDING"}

    monkeypatch.setattr(vercel, "_fetch_deployment", hanging_fetch)

    started = time.monotonic()
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"id": "dpl_hang"}))

        with pytest.raises(DeploymentTimeoutError) as exc_info:
            await vercel.deploy("my app", code)

    assert time.monotonic() - started < 5
    assert exc_info.value.message == "Deployment timed out after 0.2 seconds"
    assert reads == ["dpl_hang", "dpl_hang"]


async def test_deploy_without_id_in_response(vercel, code):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"readyState": "QUEUED"}))

        with pytest.raises(ProviderError) as exc_info:
            await vercel.deploy("my app", code)

    assert exc_info.value.message == "Deployment response missing id"


async def test_ready_deployment_without_url(vercel, code):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"id": "dpl_nourl"}))
        respx_mock.get("/v13/deployments/dpl_nourl").mock(
            return_value=httpx.Response(200, json={"readyState": "READY"})
        )

        with pytest.raises(ProviderError) as exc_info:
            await vercel.deploy("my app", code)

    assert exc_info.value.message == "Deployment response missing url"


async def test_poll_transport_errors_propagate(vercel, code, clock):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.post("/v13/deployments").mock(return_value=httpx.Response(200, json={"id": "dpl_net"}))
        status = respx_mock.get("/v13/deployments/dpl_net").mock(side_effect=httpx.ConnectError("boom"))

        with pytest.raises(httpx.ConnectError):
            await vercel.deploy("my app", code)

    assert status.call_count == 1
    assert clock.sleeps == []


async def test_deploy_requires_token(code):
    with pytest.raises(ConfigurationError):
        await VercelService(token="").deploy("my app", code)


async def test_mock_deploy_never_contacts_vercel(code):
    clock = FakeClock()
    vercel = VercelService(token="", sleep=clock.sleep, clock=clock)

    async with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
        route = respx_mock.route()
        result = await vercel.mock_deploy("My Cool App!!", code)

    assert not route.called
    assert clock.sleeps == [MOCK_DEPLOY_DELAY_SECONDS]
    assert MOCK_DEPLOY_DELAY_SECONDS == 2.0
    assert result.deployment_id.startswith("mock-")
    assert result.url == f"https://my-cool-app-{result.deployment_id}.vercel.app"


async def test_get_status_single_read(vercel):
    async with respx.mock(base_url=API_URL) as respx_mock:
        route = respx_mock.get("/v13/deployments/dpl_9").mock(side_effect=[
            httpx.Response(200, json={"readyState": "BUILDING", "url": "nine.vercel.app"}),
            httpx.Response(200, json={"readyState": "READY", "url": "nine.vercel.app"}),
        ])

        building = await vercel.get_status("dpl_9")
        ready = await vercel.get_status("dpl_9")

    assert building.status == "BUILDING"
    assert building.url is None
    assert ready.status == "READY"
    assert ready.url == "https://nine.vercel.app"
    assert route.call_count == 2


async def test_delete_is_idempotent(vercel):
    async with respx.mock(base_url=API_URL) as respx_mock:
        route = respx_mock.delete("/v13/deployments/dpl_gone").mock(side_effect=[
            httpx.Response(200, json={"state": "DELETED"}),
            httpx.Response(404, json={"error": {"code": "not_found", "message": "Deployment not found"}}),
        ])

        await vercel.delete("dpl_gone")
        await vercel.delete("dpl_gone")

    assert route.call_count == 2


async def test_delete_surfaces_other_errors(vercel):
    async with respx.mock(base_url=API_URL) as respx_mock:
        respx_mock.delete("/v13/deployments/dpl_x").mock(return_value=httpx.Response(500, text="oops"))

        with pytest.raises(ProviderError):
            await vercel.delete("dpl_x")
