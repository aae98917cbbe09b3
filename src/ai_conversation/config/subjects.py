"""
Subject configuration loaded from the conversation YAML file.

A subject names the two models taking part, their introduction prompts,
the number of rounds and the optional steering reminder.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigurationInvalid
from ..utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SUBJECT = "MetaphysicsSymposium"
MIN_ROUNDS = 1
MAX_ROUNDS = 500
MODEL_KEYS = ("model_a", "model_b")


def whole_number(value: Any, field_name: str) -> int:
    """Accept integers and integral floats; reject bools, fractions and text."""
    if isinstance(value, bool):
        raise ConfigurationInvalid(field_name, f"must be a whole number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ConfigurationInvalid(field_name, f"must be a whole number, got {value!r}")


def check_initial_prompt(field_name: str, template: str, own_name: str, partner_name: str) -> None:
    """
    Format a template with its two positional slots to catch errors before any turn runs.

    Raises:
        ConfigurationInvalid: If the template is blank or cannot be formatted
    """
    if not (template or "").strip():
        raise ConfigurationInvalid(field_name, "must not be empty")
    try:
        template.format(own_name, partner_name)
    except (KeyError, IndexError, ValueError) as e:
        raise ConfigurationInvalid(
            field_name,
            f"only {{0}} (own name) and {{1}} (partner name) are allowed; "
            f"escape literal braces as {{{{ and }}}} ({type(e).__name__}: {e})",
        ) from e


class StartPolicy(Enum):
    """Which introduction response seeds the opening turn of the second agent."""
    PARTNER_INTRO = "partner_intro"
    OWN_INTRO = "own_intro"


@dataclass(frozen=True)
class ReminderConfig:
    """Steering prompt appended to outgoing prompts every `interval` rounds."""
    text: str = ""
    interval: int = 0

    @property
    def enabled(self) -> bool:
        return self.interval > 0 and bool(self.text.strip())

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ReminderConfig":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigurationInvalid("reminder", "must be a mapping with text and interval")
        interval = whole_number(data.get("interval") or 0, "reminder.interval")
        if interval < 0:
            raise ConfigurationInvalid("reminder.interval", "must be zero or positive")
        return cls(text=str(data.get("text") or ""), interval=interval)


@dataclass(frozen=True)
class ModelConfig:
    """One participant: model name, introduction template and display color."""
    name: str
    initial_prompt: str
    color: str = "green"


@dataclass
class SubjectConfig:
    """A fully resolved conversation subject."""
    name: str
    number_of_rounds: int
    models: Dict[str, ModelConfig]
    reminder: ReminderConfig = field(default_factory=ReminderConfig)
    start_policy: StartPolicy = StartPolicy.PARTNER_INTRO
    first_speaker: str = "model_a"

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "SubjectConfig":
        """
        Build a subject from its YAML mapping.

        Args:
            name: Subject name
            data: Mapping under `subjects.<name>`

        Returns:
            Validated SubjectConfig

        Raises:
            ConfigurationInvalid: If any field is missing or out of bounds
        """
        if not isinstance(data, dict):
            raise ConfigurationInvalid(f"subjects.{name}", "must be a mapping")

        rounds = whole_number(data.get("number_of_rounds", 0), "number_of_rounds")

        raw_models = data.get("models") or {}
        if not isinstance(raw_models, dict):
            raise ConfigurationInvalid("models", "must be a mapping with model_a and model_b")
        models = {}
        default_colors = {"model_a": "green", "model_b": "blue"}
        for key in MODEL_KEYS:
            raw = raw_models.get(key)
            if not raw:
                raise ConfigurationInvalid(
                    f"models.{key}", f"Subject '{name}' must define models.model_a and models.model_b."
                )
            if not isinstance(raw, dict):
                raise ConfigurationInvalid(f"models.{key}", "must be a mapping with name and initial_prompt")
            models[key] = ModelConfig(
                name=str(raw.get("name") or "").strip(),
                initial_prompt=str(raw.get("initial_prompt") or ""),
                color=str(raw.get("color") or default_colors[key]),
            )

        try:
            start_policy = StartPolicy(data.get("start_policy", StartPolicy.PARTNER_INTRO.value))
        except ValueError as e:
            raise ConfigurationInvalid("start_policy", str(e)) from e

        subject = cls(
            name=name,
            number_of_rounds=rounds,
            models=models,
            reminder=ReminderConfig.from_dict(data.get("reminder")),
            start_policy=start_policy,
            first_speaker=str(data.get("first_speaker", "model_a")),
        )
        subject.validate()
        return subject

    def validate(self) -> None:
        """Check bounds and participant definitions."""
        if not MIN_ROUNDS <= self.number_of_rounds <= MAX_ROUNDS:
            raise ConfigurationInvalid(
                "number_of_rounds",
                f"must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {self.number_of_rounds}",
            )
        if self.first_speaker not in MODEL_KEYS:
            raise ConfigurationInvalid("first_speaker", f"must be one of {', '.join(MODEL_KEYS)}")
        for key in MODEL_KEYS:
            model = self.models.get(key)
            if model is None:
                raise ConfigurationInvalid(f"models.{key}", "missing agent")
            if not model.name:
                raise ConfigurationInvalid(f"models.{key}.name", "must not be empty")
        model_a, model_b = self.models["model_a"], self.models["model_b"]
        if model_a.name == model_b.name:
            raise ConfigurationInvalid("models", "agent names must be unique within a conversation")
        check_initial_prompt("models.model_a.initial_prompt", model_a.initial_prompt, model_a.name, model_b.name)
        check_initial_prompt("models.model_b.initial_prompt", model_b.initial_prompt, model_b.name, model_a.name)

    def with_rounds(self, rounds: int) -> "SubjectConfig":
        """Return a copy with an overridden round count."""
        subject = SubjectConfig(
            name=self.name,
            number_of_rounds=rounds,
            models=dict(self.models),
            reminder=self.reminder,
            start_policy=self.start_policy,
            first_speaker=self.first_speaker,
        )
        subject.validate()
        return subject

    @property
    def ordered_models(self) -> tuple:
        """The (first, second) models in speaking order."""
        if self.first_speaker == "model_b":
            return self.models["model_b"], self.models["model_a"]
        return self.models["model_a"], self.models["model_b"]


@dataclass
class ConversationSettings:
    """Contents of the conversation YAML file."""
    subjects: Dict[str, Dict[str, Any]]
    selected_subject: Optional[str] = None
    model_endpoint: Optional[str] = None
    transcript_dir: str = "."

    @classmethod
    def from_yaml(cls, path: str) -> "ConversationSettings":
        """Load settings from a YAML file."""
        config_file = Path(path)
        logger.debug(f"Loading conversation settings from {config_file}")

        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
        except OSError as e:
            raise ConfigurationInvalid("config", f"Cannot read {config_file}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationInvalid("config", f"Malformed YAML in {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationInvalid("config", f"{config_file} must contain a mapping")

        return cls(
            subjects=data.get("subjects") or {},
            selected_subject=data.get("selected_subject"),
            model_endpoint=data.get("model_endpoint"),
            transcript_dir=str(data.get("transcript_dir") or "."),
        )

    def resolve_subject_name(self, requested: Optional[str] = None) -> str:
        """Command line argument wins, then selected_subject, then the default."""
        return requested or self.selected_subject or DEFAULT_SUBJECT

    def load_subject(self, requested: Optional[str] = None) -> SubjectConfig:
        """
        Resolve and validate the subject to run.

        Args:
            requested: Subject name given on the command line, if any

        Returns:
            Validated SubjectConfig
        """
        name = self.resolve_subject_name(requested)
        logger.info(f"Using subject: {name}")

        if name not in self.subjects:
            raise ConfigurationInvalid("subject", f"Subject '{name}' not found in configuration.")

        return SubjectConfig.from_dict(name, self.subjects[name])
