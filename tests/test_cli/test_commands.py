"""Tests for CLI commands."""

from typer.testing import CliRunner

from mobility_rx.cli.commands import app

runner = CliRunner()

WARD = ["--level-of-care", "ward", "--mobility", "ambulatory", "--age", "62"]


class TestCLI:
    def test_version_command(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Mobility-Rx" in result.output

    def test_device_table(self):
        result = runner.invoke(app, ["device"])

        assert result.exit_code == 0
        assert "46.7" in result.output
        assert "28.0" in result.output

    def test_recalibrate_resistance(self):
        result = runner.invoke(app, ["recalibrate", "resistance", "9", "--target", "1050", *WARD])

        assert result.exit_code == 0
        assert "46.7" in result.output
        assert "1050" in result.output

    def test_recalibrate_json(self):
        result = runner.invoke(app, ["recalibrate", "sessions", "3", "--json", *WARD])

        assert result.exit_code == 0
        assert '"sessions_per_day": 3' in result.output

    def test_recalibrate_invalid_field(self):
        result = runner.invoke(app, ["recalibrate", "cadence", "3"])

        assert result.exit_code == 1
        assert "Invalid field" in result.output

    def test_rescale(self):
        result = runner.invoke(app, ["rescale", "1575", *WARD])

        assert result.exit_code == 0
        assert "raise_intensity" in result.output
        assert "42.9" in result.output

    def test_rescale_json(self):
        result = runner.invoke(app, ["rescale", "2100", "--json", "--level-of-care", "icu"])

        assert result.exit_code == 0
        assert '"strategy": "add_sessions"' in result.output

    def test_serve_help(self):
        result = runner.invoke(app, ["serve", "--help"])

        assert result.exit_code == 0

    def test_serve_binds_configured_address(self, monkeypatch):
        import uvicorn

        from mobility_rx.config import get_settings

        calls = {}
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.update(kwargs))
        monkeypatch.setenv("API_HOST", "127.0.0.1")
        monkeypatch.setenv("API_PORT", "9001")
        get_settings.cache_clear()
        try:
            result = runner.invoke(app, ["serve"])
        finally:
            get_settings.cache_clear()

        assert result.exit_code == 0
        assert calls["host"] == "127.0.0.1"
        assert calls["port"] == 9001

    def test_serve_options_override_settings(self, monkeypatch):
        import uvicorn

        calls = {}
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.update(kwargs))
        result = runner.invoke(app, ["serve", "--host", "localhost", "--port", "8123"])

        assert result.exit_code == 0
        assert calls["host"] == "localhost"
        assert calls["port"] == 8123

    def test_recalibrate_rejects_zero_power(self):
        result = runner.invoke(app, ["recalibrate", "sessions", "3", "--power", "0"])

        assert result.exit_code == 1
        assert "Invalid prescription" in result.output
