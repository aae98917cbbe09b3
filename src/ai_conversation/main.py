"""
Main entry point for AI conversations.

Two models hosted on an OpenAI-compatible endpoint introduce themselves and
then talk to each other for a configured number of rounds. Streamed replies
are shown live and every completed turn is written to a Markdown transcript.
"""
import argparse
import os
import signal
import sys
from typing import List, Optional, Tuple

from .agents.agent import Agent
from .agents.bindings import create_binding
from .agents.conversation_engine import ConversationEngine
from .catalog.model_catalog import ModelCatalogClient
from .config.settings import AppConfig, KafkaConfig, LangSmithConfig, LLMConfig
from .config.subjects import ConversationSettings, SubjectConfig
from .errors import ApiCallFailed, CancellationRequested, ConfigurationInvalid
from .transcript.kafka_sink import KafkaTranscriptSink
from .transcript.sinks import CompositeTranscriptSink, InMemoryTranscriptSink, MarkdownTranscriptSink
from .utils.console import ConsoleLiveSink, NullLiveSink
from .utils.conversation import print_conversation_summary
from .utils.logging_config import setup_logging, get_logger
from .utils.observability import ConversationTracer
from .utils.visualization import visualize_graph, print_graph_structure

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_API_FAILED = 1
EXIT_CONFIG_INVALID = 2
EXIT_CANCELLED = 130


def build_agents(subject: SubjectConfig, llm_config: LLMConfig) -> Tuple[Agent, Agent]:
    """
    Create both agents in speaking order.

    Args:
        subject: Resolved subject configuration
        llm_config: Endpoint configuration

    Returns:
        Tuple of (first, second)
    """
    agents = []
    for model in subject.ordered_models:
        agents.append(
            Agent(
                name=model.name,
                binding=create_binding(model.name, llm_config),
                initial_prompt_template=model.initial_prompt,
                color=model.color,
            )
        )
    return agents[0], agents[1]


class _OfflineBinding:
    """Binding for graph rendering, where no call is ever made."""

    def stream_complete(self, prompt: str):
        raise ApiCallFailed("transport", "offline binding cannot stream")


def run_conversation(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Run one conversation and return the process exit code."""
    llm_config = LLMConfig.from_env()
    kafka_config = KafkaConfig.from_env()
    langsmith_config = LangSmithConfig.from_env()
    langsmith_config.setup()

    settings = ConversationSettings.from_yaml(args.config or app_config.config_path)
    subject = settings.load_subject(args.subject)
    if args.rounds is not None:
        subject = subject.with_rounds(args.rounds)
    if settings.model_endpoint and not os.getenv("MODEL_ENDPOINT"):
        llm_config.endpoint = settings.model_endpoint
    llm_config.validate()

    logger.info("=" * 60)
    logger.info(f"Subject: {subject.name}")
    logger.info(f"Model endpoint: {llm_config.endpoint}")
    logger.info(f"Rounds: {subject.number_of_rounds}")
    logger.info("=" * 60)

    first, second = build_agents(subject, llm_config)

    memory = InMemoryTranscriptSink()
    sinks = [
        MarkdownTranscriptSink(app_config.transcript_dir or settings.transcript_dir),
        memory,
    ]
    if kafka_config.enabled:
        sinks.append(KafkaTranscriptSink(kafka_config))

    tracer = None
    if langsmith_config.tracing_enabled:
        tracer = ConversationTracer(project_name=langsmith_config.project)

    engine = ConversationEngine(
        first=first,
        second=second,
        transcript=CompositeTranscriptSink(sinks),
        max_rounds=subject.number_of_rounds,
        reminder=subject.reminder,
        start_policy=subject.start_policy,
        live_sink=NullLiveSink() if args.quiet else ConsoleLiveSink(),
        tracer=tracer,
        subject=subject.name,
    )

    def handle_interrupt(signum, frame):
        if engine.cancelled:
            raise KeyboardInterrupt
        print("\nStopping after the current turn (Ctrl+C again to abort)...", file=sys.stderr)
        engine.cancel()

    previous_handler = signal.signal(signal.SIGINT, handle_interrupt)
    try:
        engine.run()
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    print_conversation_summary(memory.turns)
    return EXIT_OK


def list_models(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Print the model catalog."""
    llm_config = LLMConfig.from_env()
    llm_config.validate()

    with ModelCatalogClient(llm_config.api_key) as client:
        models = client.get_models()

    for model in sorted(models, key=lambda m: m.name.lower()):
        context = str(model.context_length) if model.context_length is not None else "-"
        print(f"{model.name:<45} {model.owner:<20} {context:>8}  {model.modalities}")
    print(f"\n{len(models)} models")
    return EXIT_OK


def render_graph(args: argparse.Namespace, app_config: AppConfig) -> int:
    """Write the engine's state graph as a Mermaid diagram."""
    offline = _OfflineBinding()
    engine = ConversationEngine(
        first=Agent("first", offline, "{0} {1}"),
        second=Agent("second", offline, "{0} {1}"),
        transcript=InMemoryTranscriptSink(),
        max_rounds=1,
    )
    print_graph_structure(engine.graph)
    output = visualize_graph(engine.graph, args.output, format="mermaid")
    if output:
        print(f"Mermaid diagram saved to: {output}")
    return EXIT_OK


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ai-conversation",
        description="Run a scripted conversation between two AI models",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run a conversation")
    run_parser.add_argument("subject", nargs="?", help="Subject name from the configuration file")
    run_parser.add_argument("--rounds", type=int, help="Override the subject's number of rounds")
    run_parser.add_argument("--config", type=str, help="Path to the conversation YAML file")
    run_parser.add_argument("--quiet", action="store_true", help="Do not stream replies to the console")
    run_parser.set_defaults(handler=run_conversation)

    models_parser = subparsers.add_parser("models", help="List models in the catalog")
    models_parser.set_defaults(handler=list_models)

    graph_parser = subparsers.add_parser("graph", help="Write the conversation graph as Mermaid")
    graph_parser.add_argument("--output", type=str, default="conversation_graph.mmd")
    graph_parser.set_defaults(handler=render_graph)

    argv = list(sys.argv[1:] if argv is None else argv)
    # Bare invocation (optionally with a subject) means "run"
    if not argv or argv[0] not in ("run", "models", "graph", "-h", "--help"):
        argv = ["run", *argv]
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main function to run the command line."""
    args = parse_args(argv)
    app_config = AppConfig.from_env()

    setup_logging(
        level=app_config.log_level,
        log_file=app_config.log_file,
    )

    try:
        return args.handler(args, app_config)
    except ConfigurationInvalid as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_INVALID
    except ApiCallFailed as e:
        logger.error(f"API call failed: {e}")
        return EXIT_API_FAILED
    except CancellationRequested as e:
        logger.warning(f"Conversation cancelled: {e}")
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        return EXIT_CANCELLED


if __name__ == "__main__":
    sys.exit(main())
