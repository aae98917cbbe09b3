"""
Live-output sinks that receive streamed fragments as they arrive.
"""
import sys
from typing import Optional, Protocol, TextIO

ANSI_COLORS = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
}
ANSI_RESET = "\033[0m"


class LiveOutputSink(Protocol):
    """Receives real-time feedback during a conversation run."""

    def announce_round(self, round_number: int) -> None:
        ...

    def begin_turn(self, header: str, color: str) -> None:
        ...

    def write(self, fragment: str) -> None:
        ...

    def end_turn(self) -> None:
        ...


class ConsoleLiveSink:
    """Writes headers and fragments to a terminal stream, colored per agent."""

    def __init__(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None):
        self.stream = stream or sys.stdout
        if use_color is None:
            use_color = hasattr(self.stream, "isatty") and self.stream.isatty()
        self.use_color = use_color
        self._colored = False

    def announce_round(self, round_number: int) -> None:
        self.stream.write(f"\n\n===== Conversation Round {round_number} =====\n")
        self.stream.flush()

    def begin_turn(self, header: str, color: str) -> None:
        self.stream.write(f"\n{header}\n")
        code = ANSI_COLORS.get(color.lower()) if self.use_color else None
        if code:
            self.stream.write(code)
            self._colored = True
        self.stream.flush()

    def write(self, fragment: str) -> None:
        self.stream.write(fragment)
        self.stream.flush()

    def end_turn(self) -> None:
        if self._colored:
            self.stream.write(ANSI_RESET)
            self._colored = False
        self.stream.write("\n")
        self.stream.flush()


class NullLiveSink:
    """Discards all live output."""

    def announce_round(self, round_number: int) -> None:
        pass

    def begin_turn(self, header: str, color: str) -> None:
        pass

    def write(self, fragment: str) -> None:
        pass

    def end_turn(self) -> None:
        pass
