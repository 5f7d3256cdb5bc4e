"""Tests for the command line interface."""

from unittest.mock import patch

import pytest

from codeport.cli import (
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_NOT_CONVERGED,
    EXIT_OK,
    build_parser,
    main,
    print_message,
)
from codeport.errors import ModelTransportError
from codeport.models.messages import ConversationMessage, Role, ToolInvocation
from codeport.orchestration import ConvergenceResult, ConvergenceStatus


@pytest.fixture
def dirs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CODEPORT_CONFIG", raising=False)
    monkeypatch.delenv("LANGFUSE_PUBLIC_KEY", raising=False)
    monkeypatch.delenv("LANGFUSE_SECRET_KEY", raising=False)
    source = tmp_path / "project_src"
    destination = tmp_path / "project_dst"
    source.mkdir()
    destination.mkdir()
    return str(source), str(destination)


class TestParser:
    """Tests for argument parsing."""

    def test_positional_directories(self):
        args = build_parser().parse_args(["a", "b"])

        assert str(args.source) == "a"
        assert str(args.destination) == "b"
        assert args.max_iterations is None
        assert args.report_dispatch_errors is False

    def test_requires_both_directories(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["only_one"])


class TestPrintMessage:
    """Tests for transcript echo."""

    def test_prints_role_banner(self, capsys):
        print_message(ConversationMessage.user("Translate this."))

        assert capsys.readouterr().out == "==== User ====\nTranslate this.\n\n"

    def test_skips_tool_traffic(self, capsys):
        print_message(ConversationMessage.tool_result("src_list_files", '{"files":[]}'))
        print_message(
            ConversationMessage(
                role=Role.ASSISTANT, tool_invocation=ToolInvocation("src_list_files")
            )
        )

        assert capsys.readouterr().out == ""


class TestMain:
    """Tests for main()."""

    def test_missing_source(self, dirs, tmp_path):
        _, destination = dirs
        assert main([str(tmp_path / "missing"), destination]) == EXIT_ERROR

    def test_missing_destination(self, dirs, tmp_path):
        source, _ = dirs
        assert main([source, str(tmp_path / "missing")]) == EXIT_ERROR

    def test_missing_config_file(self, dirs, tmp_path):
        assert main(["-c", str(tmp_path / "nope.yaml"), *dirs]) == EXIT_ERROR

    def test_invalid_log_level(self, dirs, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "loud")

        assert main(list(dirs)) == EXIT_ERROR

    def test_list_tools(self, dirs, capsys):
        assert main(["--list-tools", *dirs]) == EXIT_OK

        out = capsys.readouterr().out
        assert "- src_list_files: List all files in the source project directory." in out
        assert "- dst_write_file:" in out

    @pytest.mark.parametrize(
        "status,exit_code",
        [
            (ConvergenceStatus.SUCCESS, EXIT_OK),
            (ConvergenceStatus.NO_CHANGES, EXIT_OK),
            (ConvergenceStatus.MAX_ITERATIONS, EXIT_NOT_CONVERGED),
        ],
    )
    @patch("codeport.cli.TranslationSession")
    def test_exit_codes(self, mock_session_cls, dirs, status, exit_code):
        session = mock_session_cls.return_value
        session.run.return_value = ConvergenceResult(status, 3)

        assert main(list(dirs)) == exit_code
        session.close.assert_called_once()

    @patch("codeport.cli.TranslationSession")
    def test_overrides_applied(self, mock_session_cls, dirs):
        mock_session_cls.return_value.run.return_value = ConvergenceResult(
            ConvergenceStatus.SUCCESS, 1
        )

        main(
            [
                "--model",
                "local-coder",
                "--max-iterations",
                "0",
                "--report-dispatch-errors",
                *dirs,
            ]
        )

        app_config = mock_session_cls.call_args.kwargs["app_config"]
        assert app_config.model.model == "local-coder"
        assert app_config.convergence.max_iterations is None
        assert app_config.convergence.report_dispatch_errors is True

    @patch("codeport.cli.TranslationSession")
    def test_session_error(self, mock_session_cls, dirs):
        mock_session_cls.return_value.run.side_effect = ModelTransportError("refused")

        assert main(list(dirs)) == EXIT_ERROR
        mock_session_cls.return_value.close.assert_called_once()

    @patch("codeport.cli.TranslationSession")
    def test_interrupted(self, mock_session_cls, dirs):
        mock_session_cls.return_value.run.side_effect = KeyboardInterrupt

        assert main(list(dirs)) == EXIT_INTERRUPTED
