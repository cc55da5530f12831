"""
Tests for the CLI — flags, exit codes, and dispatch.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from devstack.main import cli


@pytest.fixture
def invoke(tmp_path: Path, monkeypatch, cli_obj):
    """Run the CLI from inside the temporary workspace."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DEVSTACK_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DEVSTACK_LOG_FILE", raising=False)

    def _invoke(*args: str):
        return CliRunner().invoke(cli, list(args), obj=cli_obj)

    return _invoke


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "--install" in result.output
        assert "--site" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


# ── Usage errors ─────────────────────────────────────────────────────


class TestUsage:
    def test_unknown_flag(self, invoke, fake):
        result = invoke("--bogus")
        assert result.exit_code == 1
        assert fake.runner.call_count == 0

    def test_start_without_site(self, invoke, fake):
        result = invoke("--start")
        assert result.exit_code == 1
        assert "--site" in result.output
        assert fake.runner.call_count == 0

    def test_unknown_site(self, invoke, fake):
        result = invoke("--stop", "--site=joomla")
        assert result.exit_code == 1
        assert fake.runner.call_count == 0

    def test_site_without_action(self, invoke):
        assert invoke("--site=all").exit_code == 1

    def test_install_with_lifecycle(self, invoke):
        assert invoke("--install", "--start", "--site=all").exit_code == 1

    def test_clean_frontend_needs_install(self, invoke):
        assert invoke("--clean-frontend").exit_code == 1

    def test_usage_checked_before_prerequisites(self, invoke, fake):
        fake.runner.set_available([])
        result = invoke("--stop")
        assert result.exit_code == 1
        assert "missing" not in result.output


# ── Prerequisites ────────────────────────────────────────────────────


class TestPrerequisites:
    def test_checks_only(self, invoke):
        result = invoke()
        assert result.exit_code == 0
        assert "All prerequisites are installed" in result.output
        assert "Run with --install" in result.output
        assert "https://wordpress-bedrock.ddev.site" in result.output

    def test_missing_tool_aborts_before_installing(self, invoke, fake, tmp_path: Path):
        fake.runner.set_available(["ddev", "node", "npm", "docker"])
        result = invoke("--install")
        assert result.exit_code == 1
        assert "❌" in result.output
        assert "composer" in result.output
        assert fake.runner.call_count == 0
        assert not (tmp_path / "wordpress").exists()

    def test_unreachable_runtime(self, invoke, fake):
        fake.runner.set_available(["ddev", "composer", "node", "npm", "docker"])
        fake.runner.set_failure(["docker", "info"], stderr="Cannot connect")
        result = invoke("--list")
        assert result.exit_code == 1
        assert "container runtime is not running" in result.output

    def test_missing_config_file(self, invoke):
        result = invoke("--config", "nope.yml")
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_json(self, invoke):
        result = invoke("--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["prerequisites"]["ok"] is True


# ── Install ──────────────────────────────────────────────────────────


class TestInstall:
    def test_install(self, invoke, tmp_path: Path):
        result = invoke("--install")
        assert result.exit_code == 0, result.output
        assert "Creating the Bedrock project..." in result.output
        assert "Setup Script Finished!" in result.output
        assert "https://drupal-site.ddev.site" in result.output
        assert "published post" in result.output
        assert (tmp_path / "wordpress" / ".env").is_file()
        assert (tmp_path / "frontend" / "dist").is_dir()

    def test_install_twice(self, invoke, fake):
        invoke("--install")
        fake.runner.reset()

        result = invoke("--install")
        assert result.exit_code == 0
        assert "WordPress is already installed. Skipping setup." in result.output
        assert fake.runner.called("composer") == []

    def test_install_failure(self, invoke, fake):
        fake.runner.set_failure(["ddev", "drush", "site:install"], stderr="SQLSTATE[HY000]")
        result = invoke("--install")
        assert result.exit_code == 1
        assert "❌ Drupal: site-install failed" in result.output
        assert "ddev drush site:install" in result.output
        assert fake.runner.called("npm") == []

    def test_unwritable_file_is_reported(self, invoke, fake, monkeypatch):
        def denied(*args, **kwargs):
            raise PermissionError(13, "Permission denied", "wordpress/.env")

        monkeypatch.setattr("devstack.core.services.installers.wordpress.set_many", denied)
        result = invoke("--install")
        assert result.exit_code == 1
        assert "❌ WordPress: env failed" in result.output
        assert "Permission denied" in result.output
        assert "Traceback" not in result.output
        assert fake.runner.called("ddev", "start") == []

    def test_install_json(self, invoke):
        result = invoke("--install", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["installed"] == ["wordpress", "drupal", "frontend"]

    def test_clean_frontend(self, invoke, fake):
        invoke("--install")
        fake.runner.reset()

        result = invoke("--install", "--clean-frontend")
        assert result.exit_code == 0
        assert "ddev delete --omit-snapshot --yes frontend-app" in fake.runner.commands()
        assert fake.runner.called("npm", "create")


# ── Lifecycle ────────────────────────────────────────────────────────


class TestLifecycle:
    def test_start_all_nothing_installed(self, invoke, fake):
        result = invoke("--start", "--site=all")
        assert result.exit_code == 0
        assert result.output.count("Skipping.") == 3
        assert fake.runner.called("ddev") == []

    def test_stop_one(self, invoke, fake, configured):
        configured("drupal")
        result = invoke("--stop", "--site=drupal")
        assert result.exit_code == 0
        assert fake.runner.called("ddev", "stop")

    def test_restart(self, invoke, fake, configured):
        configured("wordpress")
        result = invoke("--stop", "--start", "--site=wordpress")
        assert result.exit_code == 0
        ddev = [c for c in fake.runner.commands() if c.startswith("ddev")]
        assert ddev == ["ddev stop", "ddev start"]

    def test_failure_exits_nonzero(self, invoke, fake, configured):
        configured("wordpress", "frontend")
        fake.runner.set_failure(["ddev", "start"], stderr="port 80 in use")
        result = invoke("--start", "--site=all")
        assert result.exit_code == 1
        assert "Failed to start WordPress" in result.output
        assert "Failed to start Frontend" in result.output


# ── Listing ──────────────────────────────────────────────────────────


class TestList:
    def test_list(self, invoke, configured, tmp_path: Path):
        configured("wordpress")
        (tmp_path / "drupal").mkdir()
        result = invoke("--list")
        assert result.exit_code == 0
        assert "configured" in result.output
        assert "created" in result.output
        assert "not created" in result.output
        assert "https://frontend-app.ddev.site" in result.output

    def test_list_json(self, invoke, fake, configured, tmp_path: Path):
        configured("frontend")
        fake.running.add(tmp_path.resolve() / "frontend")
        fake.runner.set_output(["ddev", "list"], "frontend-app  running  ~/frontend")

        result = invoke("--list", "--json")
        assert result.exit_code == 0
        sites = {s["site"]: s for s in json.loads(result.stdout)["sites"]}
        assert sites["frontend"]["status"] == "running"
        assert sites["frontend"]["registered"] is True
        assert sites["wordpress"]["status"] == "not created"
        assert sites["wordpress"]["registered"] is False
