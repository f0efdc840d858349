import os
from typing import Any, AsyncGenerator, Dict, List

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic_ai import messages as pai
from pydantic_ai.models.function import AgentInfo, FunctionModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from toolchat_ai.agent_core.schemas import ToolSpec

# Keep the application module from touching a real database on import
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"


def weather_model(messages: List[pai.ModelMessage], info: AgentInfo) -> pai.ModelResponse:
    """Scripted model: asks for the weather tool when asked about weather, then reports the tool result."""
    last_part = messages[-1].parts[-1]
    if isinstance(last_part, pai.ToolReturnPart):
        return pai.ModelResponse(parts=[pai.TextPart(content=f"Done: {last_part.content}")])
    if isinstance(last_part, pai.UserPromptPart) and "weather" in str(last_part.content):
        return pai.ModelResponse(
            parts=[pai.ToolCallPart(tool_name="get_weather", args={"city": "Paris"}, tool_call_id="tc1")]
        )
    return pai.ModelResponse(parts=[pai.TextPart(content="Hello!")])


class FakeToolServerClient:
    """Tool server client that serves fixed tool lists; ``broken`` is unreachable."""

    def __init__(self) -> None:
        self.tools: Dict[str, List[ToolSpec]] = {
            "weather": [ToolSpec(name="forecast", description="Weather forecast"), ToolSpec(name="radar")],
        }

    async def list_tools(self, server_name: str, config: Any) -> List[ToolSpec]:
        if server_name == "broken":
            raise ConnectionError("connection refused")
        return list(self.tools.get(server_name, []))

    async def call_tool(self, server_name: str, config: Any, tool_name: str, args: Dict[str, Any]) -> str:
        return f"{server_name}:{tool_name}"


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a fresh file database per test; every session gets its own connection."""
    from sqlmodel import SQLModel

    import toolchat_ai.server.models.thread  # noqa: F401
    import toolchat_ai.server.models.tool_server  # noqa: F401
    from toolchat_ai.agent_core.repos.models import Base as AgentCoreBase

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'server.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(AgentCoreBase.metadata.create_all)
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def chat_service(session_factory):
    """Chat service over the test database with a scripted model and fake tool servers."""
    from toolchat_ai.agent_core.factory import build_chat_service
    from toolchat_ai.agent_core.model import ChatModelFactory, PydanticAIChatModel
    from toolchat_ai.agent_core.repos import SqlCheckpointStore
    from toolchat_ai.agent_core.service import AgentRuntimeConfig
    from toolchat_ai.agent_core.tools import function_tool
    from toolchat_ai.server.services.tool_servers import SqlToolServerSource

    @function_tool(name="get_weather")
    def get_weather(city: str) -> str:
        """Current weather for a city."""
        return f"Sunny in {city}"

    models = ChatModelFactory(default_model="test:default")
    models.register("test:default", PydanticAIChatModel(FunctionModel(weather_model)))

    return build_chat_service(
        AgentRuntimeConfig(default_model="test:default", system_prompt="You are a test agent."),
        checkpoints=SqlCheckpointStore(session_factory=session_factory),
        models=models,
        static_tools=[get_weather],
        server_source=SqlToolServerSource(session_factory=session_factory),
        tool_client=FakeToolServerClient(),
    )


@pytest_asyncio.fixture(name="client")
async def client_fixture(session_factory, chat_service) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with overridden dependencies."""
    from toolchat_ai.server.core.database import get_session
    from toolchat_ai.server.main import app
    from toolchat_ai.server.services.chat import get_chat_service

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    async def get_chat_service_override():
        return chat_service

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_chat_service] = get_chat_service_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()
