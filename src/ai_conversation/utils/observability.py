"""
LangSmith observability utilities for conversation runs.
"""
from typing import Any, Optional

from langsmith import Client

from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class ConversationTracer:
    """Records conversation-level metrics as LangSmith runs."""

    def __init__(self, project_name: str = "ai-conversation", client: Optional[Client] = None):
        """
        Initialize the conversation tracer.

        Args:
            project_name: LangSmith project name
            client: Existing LangSmith client; created when omitted
        """
        self.project_name = project_name
        self.client = client

        if self.client is None:
            try:
                self.client = Client()
                logger.info(f"LangSmith client initialized for project: {project_name}")
            except Exception as e:
                logger.warning(f"Failed to initialize LangSmith client: {e}")

    def _create_run(self, name: str, tags: list, **kwargs: Any) -> None:
        if not self.client:
            return

        try:
            self.client.create_run(
                name=name,
                run_type="chain",
                project_name=self.project_name,
                tags=tags,
                **kwargs,
            )
        except Exception as e:
            logger.debug(f"Failed to log {name}: {e}")

    def log_conversation_start(
        self,
        subject: str,
        first_agent: str,
        second_agent: str,
        max_rounds: int,
        **metadata: Any
    ) -> None:
        """
        Log the start of a conversation.

        Args:
            subject: Subject name
            first_agent: Agent speaking first
            second_agent: Agent speaking second
            max_rounds: Configured number of rounds
            **metadata: Additional metadata to log
        """
        self._create_run(
            "conversation_start",
            ["conversation-start"],
            inputs={"subject": subject, "max_rounds": max_rounds},
            extra={
                "metadata": {
                    "first_agent": first_agent,
                    "second_agent": second_agent,
                    **metadata,
                }
            },
        )

    def log_turn_metrics(
        self,
        agent_name: str,
        round_number: int,
        message_length: int,
        response_time_ms: float,
        **metadata: Any
    ) -> None:
        """
        Log metrics for a single turn.

        Args:
            agent_name: Name of the agent
            round_number: Round the turn belongs to
            message_length: Length of the response text
            response_time_ms: Time spent streaming the response
            **metadata: Additional metadata
        """
        self._create_run(
            f"turn_{agent_name}_{round_number}",
            ["turn-metrics", agent_name.lower()],
            inputs={"round": round_number, "message_length": message_length},
            outputs={"response_time_ms": response_time_ms},
            extra={"metadata": {"agent_name": agent_name, "round": round_number, **metadata}},
        )

    def log_conversation_end(
        self,
        total_turns: int,
        duration_seconds: float,
        status: str,
        **metadata: Any
    ) -> None:
        """
        Log conversation end summary.

        Args:
            total_turns: Turns recorded before the run ended
            duration_seconds: Total conversation duration
            status: completed, failed or cancelled
            **metadata: Additional metadata
        """
        self._create_run(
            "conversation_end",
            ["conversation-end", status],
            inputs={"total_turns": total_turns},
            outputs={"duration_seconds": duration_seconds, "status": status},
            extra={"metadata": {"total_turns": total_turns, "status": status, **metadata}},
        )
