"""Tests for output formatting utilities."""

from bgdeploy.core.output import OutputFormatter, format_duration


class TestFormatDuration:
    """Tests for format_duration utility."""

    def test_seconds(self):
        assert format_duration(12.34) == "12.3s"

    def test_minutes(self):
        assert format_duration(90) == "1.5m"

    def test_long_runs_stay_in_minutes(self):
        assert format_duration(7200) == "120.0m"


class TestOutputFormatter:
    """Tests for OutputFormatter class."""

    def test_quiet_mode_suppresses_output(self, capsys):
        formatter = OutputFormatter(color=False, quiet=True)

        formatter.print_success("done")
        formatter.print_logs("foo", b"crashed")

        assert capsys.readouterr().out == ""

    def test_errors_go_to_stderr_in_quiet_mode(self, capsys):
        OutputFormatter(color=False, quiet=True).print_error("boom")

        assert "boom" in capsys.readouterr().err

    def test_print_logs_keeps_bracketed_tags(self, capsys):
        logs = b"2024-01-01T00:00:00 [APP/PROC/WEB/0] ERR crashed\n"

        OutputFormatter(color=False).print_logs("foo", logs)

        out = capsys.readouterr().out
        assert "Logs for foo" in out
        assert "[APP/PROC/WEB/0]" in out

    def test_no_color_has_no_escape_codes(self, capsys):
        OutputFormatter(color=False).print_success("done")

        assert "\x1b[" not in capsys.readouterr().out

    def test_confirm(self, monkeypatch):
        formatter = OutputFormatter(color=False)

        monkeypatch.setattr("builtins.input", lambda: "y")
        assert formatter.confirm("Roll back foo?") is True

        monkeypatch.setattr("builtins.input", lambda: "")
        assert formatter.confirm("Roll back foo?", default=True) is True
        assert formatter.confirm("Roll back foo?") is False
