"""
Aggregates streamed fragments from one API call into a complete response.
"""
from typing import List

import openai

from ..errors import ApiCallFailed
from ..utils.console import LiveOutputSink
from ..utils.logging_config import get_logger
from .bindings import StreamingBinding

logger = get_logger(__name__)


def classify_failure(error: Exception) -> str:
    """
    Map an exception raised while streaming to an ApiCallFailed reason.

    Args:
        error: Exception raised by the binding or transport

    Returns:
        One of auth, timeout, transport, status, stream
    """
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return "auth"
    # APITimeoutError subclasses APIConnectionError, so check it first
    if isinstance(error, openai.APITimeoutError):
        return "timeout"
    if isinstance(error, openai.APIConnectionError):
        return "transport"
    if isinstance(error, openai.APIStatusError):
        return "status"
    return "stream"


class StreamAggregator:
    """Issues one streaming request and returns the concatenated text."""

    def __init__(self, live_sink: LiveOutputSink):
        self.live_sink = live_sink

    def aggregate(self, binding: StreamingBinding, prompt: str) -> str:
        """
        Stream a completion, forwarding each fragment to the live sink.

        Args:
            binding: Agent's streaming API binding
            prompt: Fully formed prompt

        Returns:
            Exact concatenation of all fragments in arrival order

        Raises:
            ApiCallFailed: If the call or the stream fails; partial text is discarded
        """
        fragments: List[str] = []

        try:
            for fragment in binding.stream_complete(prompt):
                fragments.append(fragment)
                self.live_sink.write(fragment)
        except ApiCallFailed:
            raise
        except Exception as e:
            reason = classify_failure(e)
            logger.error(
                f"Streaming call failed ({reason}) after {len(fragments)} fragments: {e}"
            )
            raise ApiCallFailed(reason, str(e)) from e

        text = "".join(fragments)
        logger.debug(f"Stream complete: {len(fragments)} fragments, {len(text)} chars")
        return text
