"""
Transcript sinks that durably record completed turns.

The engine opens a sink before the first turn, calls `record` once per
completed turn in conversation order, and closes it after the run ends
or fails.
"""
import re
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from ..agents.conversation_state import Turn
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

MARKDOWN_HEADER = "# Conversation Log\n\n---\n\n"
MARKDOWN_FOOTER = "\n\n---\n_End of Conversation Log_"
_NEWLINES = re.compile(r"\r\n|\n|\r")


class TranscriptSink(ABC):
    """Receives each completed turn for durable recording."""

    def open(self) -> None:
        """Prepare the sink before the first turn."""

    @abstractmethod
    def record(self, turn: Turn) -> None:
        """Record one completed turn. Must return before the next turn starts."""

    def close(self) -> None:
        """Release resources after the run."""


class InMemoryTranscriptSink(TranscriptSink):
    """Keeps recorded turns in a list."""

    def __init__(self):
        self.turns: List[Turn] = []

    def record(self, turn: Turn) -> None:
        self.turns.append(turn)


class MarkdownTranscriptSink(TranscriptSink):
    """Writes the transcript to a timestamped Markdown file."""

    def __init__(self, directory: str = ".", file_name: Optional[str] = None):
        """
        Initialize the sink.

        Args:
            directory: Directory for transcript files
            file_name: Explicit file name; defaults to conversationLog-<timestamp>.md
        """
        self.directory = Path(directory)
        self.file_name = file_name
        self.path: Optional[Path] = None
        self._file: Optional[TextIO] = None

    def open(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        name = self.file_name or f"conversationLog-{datetime.now():%Y%m%d-%H%M%S}.md"
        self.path = self.directory / name
        self._file = self.path.open("w", encoding="utf-8")
        self._file.write(MARKDOWN_HEADER)
        self._file.flush()
        logger.info(f"Writing transcript to {self.path}")

    def record(self, turn: Turn) -> None:
        if self._file is None:
            raise RuntimeError("Transcript sink is not open")
        self._file.write(render_turn(turn))
        self._file.flush()

    def close(self) -> None:
        if self._file is None:
            return
        self._file.write(MARKDOWN_FOOTER)
        self._file.close()
        self._file = None
        logger.info(f"Transcript closed: {self.path}")


class CompositeTranscriptSink(TranscriptSink):
    """Fans each call out to several sinks in order."""

    def __init__(self, sinks: Sequence[TranscriptSink]):
        self.sinks = list(sinks)

    def open(self) -> None:
        for sink in self.sinks:
            sink.open()

    def record(self, turn: Turn) -> None:
        for sink in self.sinks:
            sink.record(turn)

    def close(self) -> None:
        errors = []
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.error(f"Failed to close transcript sink {type(sink).__name__}: {e}")
                errors.append(e)
        if errors:
            raise errors[0]


def render_turn(turn: Turn) -> str:
    """Render a turn as a Markdown entry with hard line breaks and colored text."""
    body = _NEWLINES.sub("  \n", turn.text)
    return (
        f"**Response from {turn.agent_name} (round {turn.round}):**\n\n"
        f"<span style=\"color:{turn.color};\">{body}</span>\n\n"
    )
