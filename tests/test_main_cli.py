"""Tests for the netvisio orchestrator CLI (__main__)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from netvisio import __main__ as cli


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda: None)


class TestMainDispatch:
    """Tests for command dispatch in __main__.main."""

    def _run(self, monkeypatch, argv):
        monkeypatch.setattr("sys.argv", ["netvisio", *argv])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        return exc_info.value.code

    def test_no_arguments_prints_usage(self, monkeypatch, capsys):
        assert self._run(monkeypatch, []) == 1
        assert "Available commands" in capsys.readouterr().out

    def test_help(self, monkeypatch, capsys):
        assert self._run(monkeypatch, ["--help"]) == 0
        out = capsys.readouterr().out
        assert "discover" in out
        assert "ai" in out

    def test_unknown_command(self, monkeypatch, capsys):
        assert self._run(monkeypatch, ["vlan"]) == 1
        assert "unknown command 'vlan'" in capsys.readouterr().err

    def test_dispatches_remaining_args(self, monkeypatch):
        module = MagicMock()
        monkeypatch.setattr("sys.argv", ["netvisio", "discover", "import", "-"])

        with patch("importlib.import_module", return_value=module) as mock_import:
            cli.main()

        mock_import.assert_called_once_with("netvisio.discovery.cli")
        module.main.assert_called_once_with(["import", "-"])
