"""Tests for the confirmation gate."""

from io import StringIO
from unittest.mock import MagicMock, mock_open, patch

import pytest

from hostcast.confirm import PROMPT, answer_stream, ask, confirm
from hostcast.errors import UserAborted
from hostcast.types import Options

HOSTS = ["web01.example.com", "web02.example.com"]


class TestAsk:
    """Tests for the y/n prompt loop."""

    def test_reprompts_then_accepts_uppercase(self, capsys):
        assert ask(StringIO("maybe\nY\n")) is True
        assert capsys.readouterr().out.count(PROMPT) == 2

    def test_decline(self):
        assert ask(StringIO("n\n")) is False

    def test_whitespace_trimmed(self):
        assert ask(StringIO("  y  \n")) is True
        assert ask(StringIO("\tN\n")) is False

    def test_many_invalid_answers(self, capsys):
        assert ask(StringIO("yes\nno\n\nq\nn\n")) is False
        assert capsys.readouterr().out.count(PROMPT) == 5

    def test_end_of_input_declines(self):
        assert ask(StringIO("")) is False
        assert ask(StringIO("maybe\n")) is False


class TestConfirm:
    """Tests for confirm()."""

    def test_preconfirmed_prints_nothing(self, capsys):
        stream = MagicMock()
        assert confirm(Options(confirmed=True), HOSTS, "uptime", stream=stream) is True
        assert capsys.readouterr().out == ""
        stream.readline.assert_not_called()

    def test_summary_printed(self, capsys):
        options = Options(forks=7, timeout=42)
        assert confirm(options, HOSTS, "df -h /", stream=StringIO("y\n")) is True

        out = capsys.readouterr().out
        lines = out.splitlines()
        assert lines[0] == "web01.example.com"
        assert lines[1] == "web02.example.com"
        assert "Command: df -h /" in out
        assert "Forks: 7" in out
        assert "Timeout: 42s" in out

    def test_maybe_then_yes(self):
        assert confirm(Options(), HOSTS, "uptime", stream=StringIO("maybe\nY\n")) is True

    def test_decline(self):
        assert confirm(Options(), HOSTS, "uptime", stream=StringIO("n\n")) is False

    def test_reads_stdin_by_default(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", StringIO("y\n"))
        assert confirm(Options(), HOSTS, "uptime") is True


class TestAnswerStream:
    """Tests for picking the answer stream."""

    def test_stdin_when_hosts_from_inventory(self, monkeypatch):
        stdin = StringIO("")
        monkeypatch.setattr("sys.stdin", stdin)
        with answer_stream(Options()) as stream:
            assert stream is stdin

    def test_tty_when_hosts_piped(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", StringIO(""))
        opener = mock_open(read_data="y\n")
        with patch("hostcast.confirm.open", opener, create=True):
            assert confirm(Options(input=True), HOSTS, "uptime") is True
        opener.assert_called_once_with("/dev/tty")

    def test_no_tty_available(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", StringIO(""))
        opener = MagicMock(side_effect=OSError("No such device or address"))
        with patch("hostcast.confirm.open", opener, create=True):
            with pytest.raises(UserAborted) as exc_info:
                with answer_stream(Options(input=True)):
                    pass
        assert "--yes" in str(exc_info.value)
