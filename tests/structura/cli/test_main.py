"""Tests for the structura CLI entry point and commands."""

import io
import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from rich.console import Console

from structura import __version__
from structura.cli.commands import config as config_cmd
from structura.cli.commands import docs, providers
from structura.cli.formatting.output import ConsoleOutput
from structura.cli.main import build_parser, main
from structura.filehandler import ProjectType


@pytest.fixture(autouse=True)
def _home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(docs, "is_interactive", lambda: False)
    return home


@pytest.fixture
def source_tree(tmp_path):
    root = tmp_path / "src"
    root.mkdir()
    (root / "a.go").write_text("package main\n")
    (root / "b.txt").write_text("hello\n")
    return root


def _output():
    buffer = io.StringIO()
    return ConsoleOutput(Console(file=buffer, width=200)), buffer


class Handler:
    def __init__(self, chat_body, status=200):
        self.chat_body = chat_body
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, text="error")
        return httpx.Response(200, text=self.chat_body("# Doc"))


def _http(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestParser:
    """Tests for argument parsing."""

    def test_run_arguments(self):
        args = build_parser().parse_args([
            "run", "in", "out",
            "--provider", "gemini",
            "--min-interval", "0.5",
            "--max-retries", "4",
            "--project-type", "go",
            "--no-summaries",
        ])
        assert args.command == "run"
        assert (args.input, args.output) == ("in", "out")
        assert args.provider == "gemini"
        assert args.min_interval == 0.5
        assert args.max_retries == 4
        assert args.project_type == "go"
        assert args.no_summaries

    def test_unknown_provider_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "in", "out", "--provider", "claude"])


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "structura" in capsys.readouterr().out

    def test_version(self, capsys):
        assert main(["version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_providers(self, capsys):
        assert main(["providers"]) == 0
        out = capsys.readouterr().out
        assert "deepseek" in out
        assert "gemini" in out

    def test_run_missing_input_is_error(self, tmp_path):
        assert main(["run", str(tmp_path / "missing"), str(tmp_path / "out"), "--api-key", "k"]) == 1

    def test_run_without_key_is_error(self, source_tree, tmp_path):
        assert main(["run", str(source_tree), str(tmp_path / "out")]) == 1

    def test_invalid_env_config_is_error(self, source_tree, tmp_path, monkeypatch):
        monkeypatch.setenv("STRUCTURA_MAX_RETRIES", "many")
        assert main(["run", str(source_tree), str(tmp_path / "out"), "--api-key", "k"]) == 1


class TestDocsCommand:
    """Tests for the docs (run) command."""

    @pytest.mark.asyncio
    async def test_generates_and_resumes(self, source_tree, tmp_path, chat_body):
        out = tmp_path / "docs"
        output, _ = _output()
        handler = Handler(chat_body)
        kwargs = dict(
            overrides={"api_key": "sk-test", "min_interval": 0},
            interactive=False,
            output=output,
            environ={},
            config_path=tmp_path / "none.yaml",
        )

        code = await docs.run(str(source_tree), str(out), http_client=_http(handler), **kwargs)

        assert code == 0
        assert (out / "a.go.md").read_text() == "# Doc"
        assert (out / "b.txt.md").read_text() == "# Doc"
        assert len(handler.requests) == 2
        assert handler.requests[0].headers["Authorization"] == "Bearer sk-test"

        second = Handler(chat_body)
        assert await docs.run(str(source_tree), str(out), http_client=_http(second), **kwargs) == 0
        assert second.requests == []

    @pytest.mark.asyncio
    async def test_failures_give_partial_exit_code(self, source_tree, tmp_path, chat_body):
        output, buffer = _output()
        code = await docs.run(
            str(source_tree),
            str(tmp_path / "docs"),
            overrides={"api_key": "bad", "min_interval": 0},
            interactive=False,
            output=output,
            http_client=_http(Handler(chat_body, status=401)),
            environ={},
            config_path=tmp_path / "none.yaml",
        )
        assert code == 2
        assert "Invalid API key" in buffer.getvalue()

    @pytest.mark.asyncio
    async def test_output_inside_input_is_not_documented(self, source_tree, chat_body, tmp_path):
        output, _ = _output()
        handler = Handler(chat_body)
        out = source_tree / "docs"
        code = await docs.run(
            str(source_tree),
            str(out),
            overrides={"api_key": "k", "min_interval": 0},
            interactive=False,
            output=output,
            http_client=_http(handler),
            environ={},
            config_path=tmp_path / "none.yaml",
        )
        assert code == 0
        assert len(handler.requests) == 2

        again = Handler(chat_body)
        await docs.run(
            str(source_tree),
            str(out),
            overrides={"api_key": "k", "min_interval": 0},
            interactive=False,
            output=output,
            http_client=_http(again),
            environ={},
            config_path=tmp_path / "none.yaml",
        )
        assert again.requests == []

    @pytest.mark.asyncio
    async def test_output_same_as_input_resumes(self, source_tree, chat_body, tmp_path):
        output, _ = _output()
        kwargs = dict(
            overrides={"api_key": "k", "min_interval": 0},
            interactive=False,
            output=output,
            environ={},
            config_path=tmp_path / "none.yaml",
        )
        first = Handler(chat_body)
        assert await docs.run(str(source_tree), str(source_tree), http_client=_http(first), **kwargs) == 0
        assert len(first.requests) == 2

        again = Handler(chat_body, status=500)
        assert await docs.run(str(source_tree), str(source_tree), http_client=_http(again), **kwargs) == 0
        assert again.requests == []
        assert not (source_tree / "a.go.md.md").exists()

    @pytest.mark.asyncio
    async def test_progress_hidden_on_non_terminal_console(self, source_tree, tmp_path, chat_body):
        output, _ = _output()
        with patch.object(docs, "SessionController", wraps=docs.SessionController) as controller:
            await docs.run(
                str(source_tree),
                str(tmp_path / "docs"),
                overrides={"api_key": "k", "min_interval": 0},
                interactive=False,
                output=output,
                http_client=_http(Handler(chat_body)),
                environ={},
                config_path=tmp_path / "none.yaml",
            )
        assert controller.call_args.kwargs["show_progress"] is False

    @pytest.mark.asyncio
    async def test_interactive_prompts(self, source_tree, tmp_path, chat_body):
        output, _ = _output()
        handler = Handler(chat_body)
        with patch.object(docs, "prompt_api_key", AsyncMock(return_value="typed-key")) as key_prompt, \
                patch.object(docs, "prompt_project_type", AsyncMock(return_value=ProjectType.GO)) as type_prompt:
            code = await docs.run(
                str(source_tree),
                str(tmp_path / "docs"),
                overrides={"min_interval": 0},
                interactive=True,
                output=output,
                http_client=_http(handler),
                environ={},
                config_path=tmp_path / "none.yaml",
            )

        assert code == 0
        key_prompt.assert_awaited_once()
        type_prompt.assert_awaited_once()
        assert handler.requests[0].headers["Authorization"] == "Bearer typed-key"
        prompt = json.loads(handler.requests[0].content)["messages"][0]["content"]
        assert "go project" in prompt

    @pytest.mark.asyncio
    async def test_unknown_project_type(self, source_tree, tmp_path):
        output, buffer = _output()
        code = await docs.run(
            str(source_tree),
            str(tmp_path / "docs"),
            overrides={"api_key": "k"},
            project_type="cobol",
            interactive=False,
            output=output,
            environ={},
            config_path=tmp_path / "none.yaml",
        )
        assert code == 1
        assert "Unknown project type" in buffer.getvalue()


class TestInfoCommands:
    """Tests for config and providers commands."""

    def test_config_masks_key(self, tmp_path):
        output, buffer = _output()
        code = config_cmd.run(
            {"provider": "chatgpt"},
            output=output,
            environ={"OPENAI_API_KEY": "sk-1234567890"},
            config_path=tmp_path / "none.yaml",
        )
        assert code == 0
        text = buffer.getvalue()
        assert "chatgpt" in text
        assert "sk-1...7890" in text
        assert "sk-1234567890" not in text

    def test_config_error(self, tmp_path):
        output, buffer = _output()
        assert config_cmd.run({"provider": "claude"}, output=output, environ={}, config_path=tmp_path / "none.yaml") == 1
        assert "Unknown provider" in buffer.getvalue()

    def test_providers_table(self):
        output, buffer = _output()
        assert providers.run(output=output) == 0
        text = buffer.getvalue()
        assert "gpt-4o" in text
        assert "GEMINI_API_KEY" in text
