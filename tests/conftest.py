"""Shared pytest fixtures for all tests."""

from typing import Iterator, List, Optional

import pytest

from ai_conversation.agents.agent import Agent
from ai_conversation.agents.conversation_state import Turn
from ai_conversation.transcript.sinks import TranscriptSink


class ScriptedBinding:
    """Streams a predictable reply per call and records every prompt it receives."""

    def __init__(self, name: str, fail_on_call: Optional[int] = None, error: Optional[Exception] = None):
        self.name = name
        self.fail_on_call = fail_on_call
        self.error = error or RuntimeError("stream broke")
        self.prompts: List[str] = []

    def reply(self, call: int) -> str:
        return f"{self.name} reply #{call}"

    def stream_complete(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        call = len(self.prompts)
        yield f"{self.name} "
        if call == self.fail_on_call:
            raise self.error
        yield "reply "
        yield f"#{call}"


class LifecycleSink(TranscriptSink):
    """Records open/record/close events in order."""

    def __init__(self):
        self.events: List[str] = []
        self.turns: List[Turn] = []

    def open(self) -> None:
        self.events.append("open")

    def record(self, turn: Turn) -> None:
        self.events.append("record")
        self.turns.append(turn)

    def close(self) -> None:
        self.events.append("close")


class RecordingLiveSink:
    """Collects live output calls."""

    def __init__(self):
        self.fragments: List[str] = []
        self.headers: List[str] = []
        self.rounds: List[int] = []
        self.ended = 0

    def announce_round(self, round_number: int) -> None:
        self.rounds.append(round_number)

    def begin_turn(self, header: str, color: str) -> None:
        self.headers.append(header)

    def write(self, fragment: str) -> None:
        self.fragments.append(fragment)

    def end_turn(self) -> None:
        self.ended += 1


@pytest.fixture
def alice_binding():
    return ScriptedBinding("Alice")


@pytest.fixture
def bob_binding():
    return ScriptedBinding("Bob")


@pytest.fixture
def alice(alice_binding):
    return Agent("Alice", alice_binding, "Hello {1}, I am {0}.", color="green")


@pytest.fixture
def bob(bob_binding):
    return Agent("Bob", bob_binding, "Hi {1}, I am {0}.", color="blue")


@pytest.fixture
def sink():
    return LifecycleSink()


@pytest.fixture
def live_sink():
    return RecordingLiveSink()


@pytest.fixture(autouse=True)
def no_langsmith_tracing(monkeypatch):
    """Keep @traceable decorators offline."""
    monkeypatch.setenv("LANGCHAIN_TRACING_V2", "false")
    monkeypatch.setenv("LANGSMITH_TRACING", "false")
