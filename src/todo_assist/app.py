"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

from todo_assist.ai.assistant import AssistantService
from todo_assist.ai.client import AIClient, GeminiClient
from todo_assist.ai.gateway import TodoGateway
from todo_assist.ai.orchestrator import ConversationOrchestrator
from todo_assist.ai.prompt import SystemPrompt
from todo_assist.ai.retry import RetryPolicy
from todo_assist.ai.tools.registry import ToolRegistry
from todo_assist.config import AppConfig
from todo_assist.log import get_logger
from todo_assist.storage.database import Database
from todo_assist.storage.todo_repo import TodoRepository

logger = get_logger(__name__)


class TodoAssistApp:
    """Top-level application orchestrator."""

    def __init__(self, config: AppConfig, ai_client: AIClient | None = None):
        self.config = config
        self.db = Database(config.storage.db_path)
        self.todo_repo = TodoRepository(self.db)
        self.gateway = TodoGateway(self.todo_repo, timezone=config.assistant.timezone)
        self.tool_registry = ToolRegistry()
        self.ai_client = ai_client or GeminiClient(config.gemini)
        self._assistant: AssistantService | None = None

    async def start(self) -> None:
        """Initialize and start all components."""
        # 1. Database
        await self.db.initialize()

        # 2. Tools
        self.tool_registry.discover_and_register(self.gateway)

        # 3. Assistant
        system_prompt = SystemPrompt.load(self.config.assistant.system_prompt_path)
        orchestrator = ConversationOrchestrator(
            ai_client=self.ai_client,
            tool_registry=self.tool_registry,
            system_prompt=system_prompt,
            today=self.gateway.today,
        )
        policy = RetryPolicy(
            max_retries=self.config.assistant.max_retries,
            base_delay_ms=self.config.assistant.base_delay_ms,
            max_delay_ms=self.config.assistant.max_delay_ms,
        )
        self._assistant = AssistantService(orchestrator, policy)

        logger.info(
            "todo_assist_started",
            model=self.config.gemini.model,
            tools=[t.name for t in self.tool_registry.all_tools()],
        )

    async def stop(self) -> None:
        """Gracefully shut down all components."""
        try:
            await self.ai_client.aclose()
        except Exception as e:
            logger.error("ai_client_close_error", error=str(e))
        await self.db.close()
        logger.info("todo_assist_stopped")

    @property
    def assistant(self) -> AssistantService:
        if self._assistant is None:
            raise RuntimeError("Application not started. Call start() first.")
        return self._assistant
