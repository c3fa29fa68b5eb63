"""Integration tests for API endpoints."""
import pytest
from httpx import ASGITransport, AsyncClient

from sayso.dependencies import get_asr_service
from sayso.engine.executor import TaskExecutorAdapter
from sayso.engine.scheduler import DependencyScheduler
from sayso.main import create_app
from sayso.services.asr import ASRService
from sayso.skills.registry import SkillRegistry
from sayso.utils.exceptions import PlanningError


class StaticPlanner:
    def __init__(self, plan=None, error=None):
        self.result = plan
        self.error = error

    async def plan(self, user_text, user_id=None, contacts=()):
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def plan(make_plan):
    return make_plan(
        ("d", "create_doc", "Roadmap", []),
        ("m", "send_message", "Read {{doc_url}}", ["d"]),
        summary="create and share",
    )


@pytest.fixture
def build_app(resolver, action_executor):
    def _build(planner):
        application = create_app()
        # Lifespan does not run under ASGITransport.
        application.state.skills_registry = SkillRegistry.default()
        scheduler = DependencyScheduler(TaskExecutorAdapter(resolver))
        service = ASRService(planner, scheduler, action_executor)
        application.dependency_overrides[get_asr_service] = lambda: service
        return application

    return _build


@pytest.fixture
async def client_for(build_app):
    clients = []

    def _client(planner):
        transport = ASGITransport(app=build_app(planner))
        c = AsyncClient(transport=transport, base_url="http://test")
        clients.append(c)
        return c

    yield _client
    for c in clients:
        await c.aclose()


@pytest.mark.asyncio
async def test_health_check(client_for):
    client = client_for(StaticPlanner())
    for path in ("/api/v1/health", "/health"):
        response = await client.get(path)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "sayso-agent"


@pytest.mark.asyncio
async def test_process_success(client_for, plan, action_executor):
    client = client_for(StaticPlanner(plan))
    response = await client.post("/api/v1/asr/process", json={"text": "make a roadmap and share it"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Done"
    assert [a["type"] for a in data["actions"]] == ["feishu_doc", "feishu_message"]
    assert data["actions"][0]["url"] == "https://x/Roadmap"
    assert action_executor.executed[1].params.content.text == "Read https://x/Roadmap"


@pytest.mark.asyncio
async def test_process_failure_returns_500_with_partial_result(client_for, plan, action_executor):
    action_executor.fail_types = {"send_message"}
    client = client_for(StaticPlanner(plan))
    response = await client.post("/api/v1/asr/process", json={"text": "make a roadmap and share it"})

    assert response.status_code == 500
    data = response.json()
    assert data["task_id"]
    assert data["error"].startswith("Action send_message failed")
    assert data["result"]["success"] is False
    assert [a["type"] for a in data["result"]["actions"]] == ["feishu_doc"]


@pytest.mark.asyncio
async def test_process_planning_failure(client_for):
    client = client_for(StaticPlanner(error=PlanningError("model offline")))
    response = await client.post("/api/v1/asr/process", json={"text": "hello"})

    assert response.status_code == 500
    assert response.json()["error"] == "LLM processing failed: model offline"


@pytest.mark.asyncio
async def test_process_rejects_empty_text(client_for):
    client = client_for(StaticPlanner())
    response = await client.post("/api/v1/asr/process", json={"text": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_plan_preview(client_for, plan, action_executor):
    client = client_for(StaticPlanner(plan))
    response = await client.post("/api/v1/plan", json={"text": "make a roadmap and share it"})

    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["plan"]["tasks"]] == ["d", "m"]
    assert data["outcome"]["error"] is None
    assert [a["type"] for a in data["outcome"]["actions"]] == ["feishu_create_doc", "send_message"]
    assert action_executor.executed == []


@pytest.mark.asyncio
async def test_plan_preview_planning_error(client_for):
    client = client_for(StaticPlanner(error=PlanningError("model offline")))
    response = await client.post("/api/v1/plan", json={"text": "hello"})

    assert response.status_code == 422
    assert response.json() == {"error": "PlanningError", "detail": "model offline"}
