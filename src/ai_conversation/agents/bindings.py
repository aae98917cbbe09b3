"""
API bindings that issue one streaming completion request per prompt.
"""
from typing import Iterator, Protocol

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage
from langchain_openai import ChatOpenAI

from ..config.settings import LLMConfig
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


class StreamingBinding(Protocol):
    """Anything that can stream a completion for a single prompt."""

    def stream_complete(self, prompt: str) -> Iterator[str]:
        """Return a finite, non-restartable iterator of text fragments."""
        ...


class ChatModelBinding:
    """Streams completions from a LangChain chat model."""

    def __init__(self, llm: BaseChatModel, model_name: str = ""):
        """
        Initialize the binding.

        Args:
            llm: LangChain chat model supporting `.stream()`
            model_name: Model name used in log messages
        """
        self.llm = llm
        self.model_name = model_name

    def stream_complete(self, prompt: str) -> Iterator[str]:
        """
        Stream the model's reply to `prompt`.

        Args:
            prompt: Fully formed user prompt

        Yields:
            Non-empty text fragments in arrival order
        """
        logger.debug(f"Streaming completion from '{self.model_name}' ({len(prompt)} chars prompt)")

        for chunk in self.llm.stream([HumanMessage(content=prompt)]):
            content = chunk.content
            if isinstance(content, list):
                content = "".join(
                    part.get("text", "") if isinstance(part, dict) else str(part)
                    for part in content
                )
            if content:
                yield content


def create_binding(model_name: str, llm_config: LLMConfig) -> ChatModelBinding:
    """
    Create a streaming binding for a model on the configured endpoint.

    Args:
        model_name: Model to request from the endpoint
        llm_config: Endpoint, credentials and sampling configuration

    Returns:
        ChatModelBinding backed by ChatOpenAI
    """
    logger.info(f"Creating chat client for model '{model_name}' at {llm_config.endpoint}")

    kwargs = {
        "model": model_name,
        "base_url": llm_config.endpoint,
        "api_key": llm_config.api_key,
        "temperature": llm_config.temperature,
        "timeout": llm_config.timeout_seconds,
        "max_retries": 0,
    }
    if llm_config.max_tokens:
        kwargs["max_tokens"] = llm_config.max_tokens

    return ChatModelBinding(ChatOpenAI(**kwargs), model_name=model_name)
