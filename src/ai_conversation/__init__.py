"""
AI Conversation - two models talking to each other, one round at a time.
"""
__version__ = "0.1.0"

from .agents.agent import Agent
from .agents.conversation_engine import ConversationEngine
from .agents.conversation_state import Turn
from .agents.turn_executor import TurnExecutor
from .config.subjects import ReminderConfig, StartPolicy, SubjectConfig
from .errors import ApiCallFailed, CancellationRequested, ConfigurationInvalid, ConversationError
from .transcript.sinks import TranscriptSink, MarkdownTranscriptSink

__all__ = [
    "Agent",
    "ConversationEngine",
    "Turn",
    "TurnExecutor",
    "ReminderConfig",
    "StartPolicy",
    "SubjectConfig",
    "ApiCallFailed",
    "CancellationRequested",
    "ConfigurationInvalid",
    "ConversationError",
    "TranscriptSink",
    "MarkdownTranscriptSink",
]
