import time
from abc import ABC, abstractmethod
from utils.logger import get_logger
from typing import Any

class BaseAgent(ABC):
    """Base class for the radar's pipeline stages."""

    def __init__(self, name: str):
        """
        Initialize base agent.

        Args:
            name: Agent name for logging
        """
        self.name = name
        self.logger = get_logger(f"agent.{name}")
        self.logger.debug("agent_initialized", agent=name)

    @abstractmethod
    async def execute(self, *args, **kwargs) -> Any:
        """
        Run the stage.

        Must be implemented by subclasses.
        """

    async def __call__(self, *args, **kwargs) -> Any:
        """Run execute() with start/finish logging and timing."""
        started = time.perf_counter()
        self.logger.info("agent_execution_started", agent=self.name)
        try:
            result = await self.execute(*args, **kwargs)
        except Exception as e:
            self.logger.error(
                "agent_execution_failed",
                agent=self.name,
                error=str(e),
                exc_info=True
            )
            raise
        self.logger.info(
            "agent_execution_completed",
            agent=self.name,
            duration_ms=round((time.perf_counter() - started) * 1000.0, 1)
        )
        return result

    def _log_event(self, event: str, **kwargs):
        """Helper method to log agent events."""
        self.logger.info(event, agent=self.name, **kwargs)
