"""
Configuration settings for AI conversation runs.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

from ..errors import ConfigurationInvalid

load_dotenv()

DEFAULT_MODEL_ENDPOINT = "https://models.inference.ai.azure.com"


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class LLMConfig:
    """Chat completion endpoint configuration shared by both agents."""
    endpoint: str = DEFAULT_MODEL_ENDPOINT
    api_key: str = field(default_factory=lambda: os.getenv("GITHUB_TOKEN", ""))
    temperature: float = 0.8
    max_tokens: Optional[int] = None
    timeout_seconds: float = 120.0

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Create configuration from environment variables."""
        try:
            return cls(
                endpoint=os.getenv("MODEL_ENDPOINT", DEFAULT_MODEL_ENDPOINT),
                api_key=os.getenv("GITHUB_TOKEN", ""),
                temperature=float(os.getenv("LLM_TEMPERATURE", "0.8")),
                max_tokens=_optional_int(os.getenv("LLM_MAX_TOKENS")),
                timeout_seconds=float(os.getenv("LLM_TIMEOUT_SECONDS", "120")),
            )
        except ValueError as e:
            raise ConfigurationInvalid("llm", str(e)) from e

    def validate(self) -> None:
        """Ensure the configuration can be used for a live run."""
        if not self.api_key:
            raise ConfigurationInvalid(
                "GITHUB_TOKEN",
                "Make sure to add GITHUB_TOKEN to the environment or .env file.",
            )
        if self.timeout_seconds <= 0:
            raise ConfigurationInvalid("LLM_TIMEOUT_SECONDS", "must be positive")


@dataclass
class LangSmithConfig:
    """LangSmith observability configuration."""
    tracing_enabled: bool = False
    endpoint: str = "https://api.smith.langchain.com"
    api_key: str = ""
    project: str = "ai-conversation"

    @classmethod
    def from_env(cls) -> "LangSmithConfig":
        """Create configuration from environment variables."""
        tracing = os.getenv("LANGCHAIN_TRACING_V2", "false").lower() == "true"
        return cls(
            tracing_enabled=tracing,
            endpoint=os.getenv("LANGCHAIN_ENDPOINT", "https://api.smith.langchain.com"),
            api_key=os.getenv("LANGCHAIN_API_KEY", ""),
            project=os.getenv("LANGCHAIN_PROJECT", "ai-conversation"),
        )

    def setup(self) -> None:
        """Set up LangSmith tracing environment variables."""
        if self.tracing_enabled and self.api_key:
            os.environ["LANGCHAIN_TRACING_V2"] = "true"
            os.environ["LANGCHAIN_ENDPOINT"] = self.endpoint
            os.environ["LANGCHAIN_API_KEY"] = self.api_key
            os.environ["LANGCHAIN_PROJECT"] = self.project


@dataclass
class KafkaConfig:
    """Kafka configuration for publishing transcript turns."""
    enabled: bool = False
    bootstrap_servers: List[str] = field(default_factory=lambda: ["localhost:9092"])
    transcript_topic: str = "conversation-turns"

    @classmethod
    def from_env(cls) -> "KafkaConfig":
        """Create configuration from environment variables."""
        servers = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
        return cls(
            enabled=os.getenv("KAFKA_TRANSCRIPT_ENABLED", "false").lower() == "true",
            bootstrap_servers=servers.split(","),
            transcript_topic=os.getenv("KAFKA_TRANSCRIPT_TOPIC", "conversation-turns"),
        )


@dataclass
class AppConfig:
    """Application configuration."""
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/ai_conversation.log"
    config_path: str = "conversation.yaml"
    transcript_dir: Optional[str] = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/ai_conversation.log") or None,
            config_path=os.getenv("CONVERSATION_CONFIG", "conversation.yaml"),
            transcript_dir=os.getenv("TRANSCRIPT_DIR") or None,
        )
