"""
Transcript sink that publishes each turn to a Kafka topic.
"""
import json
from dataclasses import asdict
from typing import Optional

from kafka import KafkaProducer

from ..agents.conversation_state import Turn
from ..config.settings import KafkaConfig
from ..utils.logging_config import get_logger
from .sinks import TranscriptSink

logger = get_logger(__name__)


class KafkaTranscriptSink(TranscriptSink):
    """Publishes turns as JSON so other processes can follow a conversation live."""

    def __init__(self, kafka_config: KafkaConfig, producer: Optional[KafkaProducer] = None):
        """
        Initialize the sink.

        Args:
            kafka_config: Kafka configuration
            producer: Existing producer; created on open() when omitted
        """
        self.kafka_config = kafka_config
        self.producer = producer

    def open(self) -> None:
        if self.producer is not None:
            return

        logger.debug(f"Connecting transcript producer to {self.kafka_config.bootstrap_servers}")
        try:
            self.producer = KafkaProducer(
                bootstrap_servers=self.kafka_config.bootstrap_servers,
                value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            )
        except Exception as e:
            logger.error(f"Failed to setup Kafka transcript producer: {e}")
            raise

    def record(self, turn: Turn) -> None:
        payload = asdict(turn)
        payload["agent"] = payload.pop("agent_name")

        try:
            self.producer.send(self.kafka_config.transcript_topic, payload)
            self.producer.flush()
            logger.debug(
                f"Published round {turn.round} turn from '{turn.agent_name}' "
                f"to topic '{self.kafka_config.transcript_topic}'"
            )
        except Exception as e:
            logger.error(f"Failed to publish turn to Kafka: {e}", exc_info=True)

    def close(self) -> None:
        if self.producer is None:
            return
        try:
            self.producer.close()
            logger.debug("Kafka transcript producer closed")
        except Exception as e:
            logger.error(f"Error closing Kafka transcript producer: {e}")
        self.producer = None
