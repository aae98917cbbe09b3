"""
State definitions for the conversation engine.
"""
import time
from dataclasses import dataclass, field
from typing import TypedDict


@dataclass(frozen=True)
class Turn:
    """One complete agent response within a round."""
    round: int
    agent_name: str
    text: str
    color: str
    timestamp: float = field(default_factory=time.time)


class ConversationState(TypedDict):
    """Rolling state for the conversation engine in LangGraph."""
    round: int
    max_rounds: int
    first_response: str
    second_response: str
    turns_recorded: int
