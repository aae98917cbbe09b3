"""
Executes one agent turn: stream a prompt, build the Turn, record it.
"""
import time
from typing import Optional

from langsmith import traceable

from ..transcript.sinks import TranscriptSink
from ..utils.console import LiveOutputSink
from ..utils.logging_config import get_logger
from ..utils.observability import ConversationTracer
from .agent import Agent
from .conversation_state import Turn
from .streaming import StreamAggregator

logger = get_logger(__name__)


class TurnExecutor:
    """Sends fully formed prompts to one agent and records each reply."""

    def __init__(
        self,
        agent: Agent,
        transcript: TranscriptSink,
        live_sink: LiveOutputSink,
        tracer: Optional[ConversationTracer] = None,
    ):
        """
        Initialize the executor.

        Args:
            agent: Agent this executor speaks for
            transcript: Sink receiving each completed turn
            live_sink: Real-time output for streamed fragments
            tracer: Optional LangSmith metrics tracer
        """
        self.agent = agent
        self.transcript = transcript
        self.live_sink = live_sink
        self.tracer = tracer
        self.aggregator = StreamAggregator(live_sink)

    @traceable(name="send_turn", run_type="chain", tags=["agent", "turn"])
    def send(self, prompt: str, round_number: int, header: Optional[str] = None) -> Turn:
        """
        Send a prompt and record the full response as a Turn.

        Args:
            prompt: Fully formed prompt
            round_number: Round the response belongs to
            header: Line shown on the live sink before streaming

        Returns:
            The recorded Turn

        Raises:
            ApiCallFailed: If streaming fails; nothing is recorded
        """
        logger.info(f"Agent '{self.agent.name}' sending round {round_number} prompt ({len(prompt)} chars)")

        started = time.time()
        self.live_sink.begin_turn(header or f">>> {self.agent.name}:", self.agent.color)
        try:
            text = self.aggregator.aggregate(self.agent.binding, prompt)
        finally:
            self.live_sink.end_turn()
        elapsed_ms = (time.time() - started) * 1000

        turn = Turn(
            round=round_number,
            agent_name=self.agent.name,
            text=text,
            color=self.agent.color,
        )
        self.transcript.record(turn)

        logger.info(
            f"Agent '{self.agent.name}' completed round {round_number} "
            f"({len(text)} chars, {elapsed_ms:.0f} ms)"
        )
        if self.tracer:
            self.tracer.log_turn_metrics(self.agent.name, round_number, len(text), elapsed_ms)

        return turn
