"""Tests for the command line entry point."""

import textwrap
from unittest.mock import patch

import pytest

from ai_conversation import main as cli

from conftest import ScriptedBinding


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_FILE", "")
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    monkeypatch.delenv("TRANSCRIPT_DIR", raising=False)
    monkeypatch.delenv("MODEL_ENDPOINT", raising=False)
    monkeypatch.delenv("KAFKA_TRANSCRIPT_ENABLED", raising=False)
    return tmp_path


@pytest.fixture
def config_path(cli_env):
    path = cli_env / "conversation.yaml"
    path.write_text(textwrap.dedent(f"""
        selected_subject: Debate
        transcript_dir: {cli_env / "transcripts"}
        subjects:
          Debate:
            number_of_rounds: 3
            models:
              model_a: {{name: alpha, initial_prompt: "I am {{0}}, you are {{1}}"}}
              model_b: {{name: beta, initial_prompt: "I am {{0}}, you are {{1}}"}}
    """), encoding="utf-8")
    return path


def fake_binding(model_name, llm_config):
    return ScriptedBinding(model_name)


def test_run_writes_transcript(config_path, cli_env):
    with patch.object(cli, "create_binding", side_effect=fake_binding):
        code = cli.main(["run", "--config", str(config_path), "--quiet", "--rounds", "2"])

    assert code == cli.EXIT_OK
    transcripts = list((cli_env / "transcripts").glob("conversationLog-*.md"))
    assert len(transcripts) == 1
    assert transcripts[0].read_text(encoding="utf-8").count("**Response from") == 5


def test_bare_subject_argument_runs(config_path):
    with patch.object(cli, "create_binding", side_effect=fake_binding):
        code = cli.main(["Debate", "--config", str(config_path), "--quiet"])

    assert code == cli.EXIT_OK


def test_api_failure_exit_code(config_path):
    def failing_binding(model_name, llm_config):
        return ScriptedBinding(model_name, fail_on_call=2)

    with patch.object(cli, "create_binding", side_effect=failing_binding):
        code = cli.main(["run", "--config", str(config_path), "--quiet"])

    assert code == cli.EXIT_API_FAILED


def test_unknown_subject_exit_code(config_path):
    assert cli.main(["run", "Nope", "--config", str(config_path)]) == cli.EXIT_CONFIG_INVALID


def test_rounds_out_of_bounds_exit_code(config_path):
    assert cli.main(["run", "--config", str(config_path), "--rounds", "0"]) == cli.EXIT_CONFIG_INVALID


def test_missing_token_exit_code(config_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "")

    assert cli.main(["run", "--config", str(config_path)]) == cli.EXIT_CONFIG_INVALID


def test_unescaped_braces_exit_code(cli_env):
    path = cli_env / "braces.yaml"
    path.write_text(textwrap.dedent(f"""
        transcript_dir: {cli_env / "transcripts"}
        subjects:
          Json:
            number_of_rounds: 2
            models:
              model_a:
                name: alpha
                initial_prompt: 'Reply as JSON like {{"speaker": "{{0}}"}} to {{1}}.'
              model_b:
                name: beta
                initial_prompt: "I am {{0}}, you are {{1}}"
    """), encoding="utf-8")

    with patch.object(cli, "create_binding", side_effect=fake_binding):
        code = cli.main(["run", "Json", "--config", str(path), "--quiet"])

    assert code == cli.EXIT_CONFIG_INVALID
    assert not list(cli_env.glob("transcripts/*.md"))


def test_graph_command(cli_env):
    output = cli_env / "graph.mmd"

    assert cli.main(["graph", "--output", str(output)]) == cli.EXIT_OK
    assert "introduce_first" in output.read_text(encoding="utf-8")


def test_models_command(cli_env, capsys):
    from ai_conversation.catalog.model_catalog import ModelMetadata

    with patch.object(cli, "ModelCatalogClient") as client_cls:
        client_cls.return_value.__enter__.return_value.get_models.return_value = [
            ModelMetadata(name="gpt-4o", owner="OpenAI", context_length=128000),
        ]
        code = cli.main(["models"])

    assert code == cli.EXIT_OK
    assert "gpt-4o" in capsys.readouterr().out
