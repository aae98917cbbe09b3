"""
Conversation engine driving a two-agent, round-based exchange with LangGraph.

Flow:
    introduce_first -> introduce_second -> open_conversation
        -> (first_responds -> second_responds)* -> END

Round 1 holds both introductions and the opening reply of the second
agent. Every later round holds one reply from each agent, first then second.
"""
import threading
import time
from typing import Optional

from langgraph.graph import StateGraph, END
from langsmith import traceable

from ..config.subjects import ReminderConfig, StartPolicy, check_initial_prompt
from ..errors import ApiCallFailed, CancellationRequested, ConfigurationInvalid
from ..transcript.sinks import TranscriptSink
from ..utils.console import LiveOutputSink, NullLiveSink
from ..utils.logging_config import get_logger
from ..utils.observability import ConversationTracer
from .agent import Agent
from .conversation_state import ConversationState, Turn
from .reminder import apply_reminder
from .turn_executor import TurnExecutor

logger = get_logger(__name__)


class ConversationEngine:
    """Alternates two agents for a fixed number of rounds, recording every turn."""

    def __init__(
        self,
        first: Agent,
        second: Agent,
        transcript: TranscriptSink,
        max_rounds: int,
        reminder: Optional[ReminderConfig] = None,
        start_policy: StartPolicy = StartPolicy.PARTNER_INTRO,
        live_sink: Optional[LiveOutputSink] = None,
        tracer: Optional[ConversationTracer] = None,
        subject: str = "",
    ):
        """
        Initialize the engine.

        Args:
            first: Agent that introduces itself and speaks first in each round
            second: Agent that answers the first agent
            transcript: Sink receiving completed turns in conversation order
            max_rounds: Number of rounds (N >= 1)
            reminder: Optional steering reminder configuration
            start_policy: Which introduction seeds the second agent's opening turn
            live_sink: Real-time output for streamed fragments
            tracer: Optional LangSmith metrics tracer
            subject: Subject name for logs and traces
        """
        if max_rounds < 1:
            raise ConfigurationInvalid("number_of_rounds", f"must be at least 1, got {max_rounds}")
        if first.name == second.name:
            raise ConfigurationInvalid("models", "agent names must be unique within a conversation")
        check_initial_prompt(f"{first.name}.initial_prompt", first.initial_prompt_template, first.name, second.name)
        check_initial_prompt(f"{second.name}.initial_prompt", second.initial_prompt_template, second.name, first.name)

        self.first = first
        self.second = second
        self.transcript = transcript
        self.max_rounds = max_rounds
        self.reminder = reminder or ReminderConfig()
        self.start_policy = start_policy
        self.live_sink = live_sink or NullLiveSink()
        self.tracer = tracer
        self.subject = subject
        self.turns_recorded = 0

        self._cancel_event = threading.Event()
        self._first_executor = TurnExecutor(first, transcript, self.live_sink, tracer)
        self._second_executor = TurnExecutor(second, transcript, self.live_sink, tracer)

        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph state machine for one conversation."""
        logger.debug(f"Building conversation graph for '{self.first.name}' and '{self.second.name}'")

        workflow = StateGraph(ConversationState)

        workflow.add_node("introduce_first", self.introduce_first)
        workflow.add_node("introduce_second", self.introduce_second)
        workflow.add_node("open_conversation", self.open_conversation)
        workflow.add_node("first_responds", self.first_responds)
        workflow.add_node("second_responds", self.second_responds)

        workflow.set_entry_point("introduce_first")
        workflow.add_edge("introduce_first", "introduce_second")
        workflow.add_edge("introduce_second", "open_conversation")
        workflow.add_conditional_edges(
            "open_conversation",
            self.should_continue,
            {"continue": "first_responds", "end": END},
        )
        workflow.add_edge("first_responds", "second_responds")
        workflow.add_conditional_edges(
            "second_responds",
            self.should_continue,
            {"continue": "first_responds", "end": END},
        )

        return workflow.compile()

    def cancel(self) -> None:
        """Request cancellation; the run stops before the next turn starts."""
        logger.warning("Conversation cancellation requested")
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def _send(self, executor: TurnExecutor, prompt: str, round_number: int, header: str) -> Turn:
        if self._cancel_event.is_set():
            raise CancellationRequested(
                f"Conversation cancelled before round {round_number} turn of '{executor.agent.name}'"
            )
        turn = executor.send(prompt, round_number, header=header)
        self.turns_recorded += 1
        return turn

    def introduce_first(self, state: ConversationState) -> dict:
        """First agent answers its own introduction prompt."""
        prompt = self.first.format_initial_prompt(self.second.name)
        turn = self._send(
            self._first_executor, prompt, 1,
            f">>> Sending introduction prompt to {self.first.name}:",
        )
        return {"first_response": turn.text, "turns_recorded": state["turns_recorded"] + 1}

    def introduce_second(self, state: ConversationState) -> dict:
        """Second agent answers its own introduction prompt."""
        prompt = self.second.format_initial_prompt(self.first.name)
        turn = self._send(
            self._second_executor, prompt, 1,
            f">>> Sending introduction prompt to {self.second.name}:",
        )
        return {"second_response": turn.text, "turns_recorded": state["turns_recorded"] + 1}

    def open_conversation(self, state: ConversationState) -> dict:
        """Second agent responds to the opening statement, seeding the alternation."""
        if self.start_policy is StartPolicy.OWN_INTRO:
            prompt = state["second_response"]
            header = f">>> {self.second.name} responding to its own introduction:"
        else:
            prompt = state["first_response"]
            header = f">>> {self.second.name} responding to {self.first.name}:"

        turn = self._send(self._second_executor, prompt, 1, header)
        return {
            "second_response": turn.text,
            "round": 2,
            "turns_recorded": state["turns_recorded"] + 1,
        }

    def first_responds(self, state: ConversationState) -> dict:
        """First agent answers the second agent's latest reply."""
        round_number = state["round"]
        self.live_sink.announce_round(round_number)

        prompt = self._with_reminder(state["second_response"], round_number)
        turn = self._send(
            self._first_executor, prompt, round_number,
            f">>> {self.first.name} responding to {self.second.name}:",
        )
        return {"first_response": turn.text, "turns_recorded": state["turns_recorded"] + 1}

    def second_responds(self, state: ConversationState) -> dict:
        """Second agent answers the first agent's reply in the same round."""
        round_number = state["round"]

        prompt = self._with_reminder(state["first_response"], round_number)
        turn = self._send(
            self._second_executor, prompt, round_number,
            f">>> {self.second.name} responding to {self.first.name}:",
        )
        return {
            "second_response": turn.text,
            "round": round_number + 1,
            "turns_recorded": state["turns_recorded"] + 1,
        }

    def _with_reminder(self, prompt: str, round_number: int) -> str:
        result = apply_reminder(prompt, self.reminder.text, round_number, self.reminder.interval)
        if result != prompt:
            logger.info(f"Injecting reminder into round {round_number} prompt")
        return result

    def should_continue(self, state: ConversationState) -> str:
        """
        Decide whether another round follows.

        Args:
            state: Current conversation state

        Returns:
            'continue' or 'end'
        """
        if state["round"] > state["max_rounds"]:
            logger.info(f"Reached {state['max_rounds']} rounds, ending conversation")
            return "end"
        return "continue"

    @traceable(name="run_conversation", run_type="chain", tags=["conversation"])
    def run(self) -> ConversationState:
        """
        Run the whole conversation.

        The transcript sink is opened before the first turn and closed when the
        run completes or fails. Turns already recorded are left in place.

        Returns:
            Final conversation state

        Raises:
            ApiCallFailed: A streaming call failed; the run is aborted
            CancellationRequested: cancel() was called during the run
        """
        logger.info(
            f"Starting conversation '{self.subject}': {self.first.name} and {self.second.name}, "
            f"{self.max_rounds} rounds"
        )
        if self.tracer:
            self.tracer.log_conversation_start(
                self.subject, self.first.name, self.second.name, self.max_rounds,
                start_policy=self.start_policy.value,
            )

        initial_state: ConversationState = {
            "round": 1,
            "max_rounds": self.max_rounds,
            "first_response": "",
            "second_response": "",
            "turns_recorded": 0,
        }

        started = time.time()
        status = "failed"
        self.turns_recorded = 0
        self.transcript.open()
        try:
            final_state = self.graph.invoke(
                initial_state,
                config={"recursion_limit": 2 * self.max_rounds + 10},
            )
            status = "completed"
            logger.info(f"Conversation completed with {self.turns_recorded} turns")
            return final_state
        except CancellationRequested:
            status = "cancelled"
            logger.warning(f"Conversation cancelled after {self.turns_recorded} turns")
            raise
        except ApiCallFailed as e:
            logger.error(f"Conversation aborted after {self.turns_recorded} turns: {e}")
            raise
        finally:
            self.transcript.close()
            if self.tracer:
                self.tracer.log_conversation_end(
                    self.turns_recorded, time.time() - started, status,
                )
