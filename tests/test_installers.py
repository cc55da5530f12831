"""
Tests for the site installers and the install use case.
"""

import textwrap

import pytest
import yaml

from devstack.adapters.http.salts import SecretSource
from devstack.core.errors import SecretsFetchError, StepError
from devstack.core.models.command import CommandResult
from devstack.core.models.workspace import WORDPRESS_SECRET_KEYS
from devstack.core.services.config_ops import read_env_values, secrets_are_valid
from devstack.core.services.installers import DrupalInstaller, FrontendInstaller, WordPressInstaller
from devstack.core.services.installers.wordpress import SALTS_HINT
from devstack.core.use_cases.install import run_install


class OfflineSecrets(SecretSource):
    def fetch(self) -> str:
        raise SecretsFetchError("network unreachable")


def _index(commands: list[str], prefix: str) -> int:
    for i, line in enumerate(commands):
        if line.startswith(prefix):
            return i
    raise AssertionError(f"{prefix!r} was never run:\n" + "\n".join(commands))


# ── Fresh install ────────────────────────────────────────────────────


class TestFreshInstall:
    def test_all_sites_installed(self, workspace, registry):
        report = run_install(workspace, registry)
        assert report.installed == ["wordpress", "drupal", "frontend"]
        assert report.skipped == []

    def test_wordpress_step_order(self, workspace, registry, fake):
        run_install(workspace, registry)
        cmds = fake.runner.commands()
        order = [
            _index(cmds, "composer create-project roots/bedrock wordpress"),
            _index(cmds, "ddev config --project-name=wordpress-bedrock"),
            _index(cmds, "ddev start"),
            _index(cmds, "ddev mysql -e DROP DATABASE IF EXISTS db; CREATE DATABASE db;"),
            _index(cmds, "ddev wp --path=web/wp core install"),
        ]
        assert order == sorted(order)

    def test_sites_run_in_fixed_order(self, workspace, registry, fake):
        run_install(workspace, registry)
        cmds = fake.runner.commands()
        wp = _index(cmds, "composer create-project roots/bedrock")
        drupal = _index(cmds, "composer create-project drupal/recommended-project")
        frontend = _index(cmds, "npm create")
        assert wp < drupal < frontend

    def test_wordpress_env(self, workspace, registry):
        run_install(workspace, registry)
        values = read_env_values(workspace.site_path("wordpress") / ".env")
        assert values["DB_NAME"] == "db"
        assert values["DB_USER"] == "db"
        assert values["DB_PASSWORD"] == "db"
        assert values["DB_HOST"] == "db"
        assert values["WP_HOME"] == "https://wordpress-bedrock.ddev.site"
        assert values["WP_SITEURL"] == "https://wordpress-bedrock.ddev.site/wp"
        assert secrets_are_valid(values, WORDPRESS_SECRET_KEYS)

    def test_wordpress_env_keys_appear_once(self, workspace, registry):
        run_install(workspace, registry)
        text = (workspace.site_path("wordpress") / ".env").read_text()
        for key in (*WORDPRESS_SECRET_KEYS, "DB_HOST", "WP_HOME"):
            assert sum(1 for line in text.splitlines() if line.startswith(f"{key}=")) == 1
        assert "generateme" not in text

    def test_wordpress_core_install_arguments(self, workspace, registry, fake):
        run_install(workspace, registry)
        [call] = fake.runner.called("ddev", "wp")
        assert "--url=https://wordpress-bedrock.ddev.site" in call.args
        assert "--title=My Bedrock Site" in call.args
        assert "--admin_user=admin" in call.args
        assert "--admin_password=password" in call.args
        assert "--admin_email=admin@example.com" in call.args
        assert call.cwd == workspace.site_path("wordpress")

    def test_wordpress_cors_plugin(self, workspace, registry):
        run_install(workspace, registry)
        plugin = workspace.site_path("wordpress") / "web/app/mu-plugins/ddev_cors_setup.php"
        content = plugin.read_text()
        assert "$frontend_origin = 'https://frontend-app.ddev.site';" in content
        assert "Access-Control-Allow-Credentials: true" in content
        assert "status_header( 200 );" in content

    def test_drupal_commands(self, workspace, registry, fake):
        run_install(workspace, registry)
        cmds = fake.runner.commands()
        assert "ddev composer require drush/drush --no-interaction --quiet" in cmds
        assert "ddev drush en jsonapi -y" in cmds
        assert "ddev drush cr" in cmds
        [site_install] = fake.runner.called("ddev", "drush", "site:install")
        assert "--db-url=mysql://db:db@db/db" in site_install.args
        assert "--site-name=My Drupal Site" in site_install.args
        assert _index(cmds, "ddev drush site:install") < _index(cmds, "ddev drush en jsonapi")

    def test_drupal_cors_config(self, workspace, registry):
        run_install(workspace, registry)
        services = workspace.site_path("drupal") / "web/sites/default/services.yml"
        data = yaml.safe_load(services.read_text())
        cors = data["parameters"]["cors.config"]
        assert cors["enabled"] is True
        assert cors["allowedOrigins"] == ["https://frontend-app.ddev.site"]
        assert cors["supportsCredentials"] is True
        assert "OPTIONS" in cors["allowedMethods"]
        # Unrelated parameters survive
        assert data["parameters"]["session.storage.options"] == {"gc_probability": 1}

    def test_frontend(self, workspace, registry, fake):
        run_install(workspace, registry)
        frontend = workspace.site_path("frontend")
        env = (frontend / ".env.local").read_text()
        assert "VITE_WORDPRESS_API_URL=https://wordpress-bedrock.ddev.site/wp-json" in env
        assert "VITE_DRUPAL_API_URL=https://drupal-site.ddev.site/jsonapi" in env
        assert (frontend / "dist" / "index.html").is_file()
        assert (
            "ddev config --project-name=frontend-app --project-type=php "
            "--docroot=dist --webserver-type=nginx-fpm"
        ) in fake.runner.commands()

    def test_settles_after_start(self, workspace, registry, fake):
        run_install(workspace, registry)
        assert fake.runner.sleeps == [5.0, 5.0, 5.0]

    def test_progress_events(self, workspace, registry):
        events = []
        run_install(workspace, registry, on_progress=events.append)
        started = [(e.site, e.step) for e in events if e.status == "started"]
        assert started[0] == ("wordpress", "scaffold")
        assert ("drupal", "jsonapi") in started
        assert started[-1] == ("frontend", "start")
        assert events[-1].status == "done"
        assert events[-1].message == "Frontend setup complete."


# ── Idempotence ──────────────────────────────────────────────────────


class TestReinstall:
    def test_second_run_skips_everything(self, workspace, registry, fake):
        run_install(workspace, registry)
        fake.runner.reset()

        report = run_install(workspace, registry)
        assert report.skipped == ["wordpress", "drupal", "frontend"]
        assert fake.runner.called("composer", "create-project") == []
        assert fake.runner.called("ddev", "config") == []
        assert fake.runner.called("npm") == []

    def test_second_run_leaves_files_alone(self, workspace, registry):
        run_install(workspace, registry)
        env = workspace.site_path("wordpress") / ".env"
        services = workspace.site_path("drupal") / "web/sites/default/services.yml"
        frontend_env = workspace.site_path("frontend") / ".env.local"
        before = (env.read_text(), services.read_text(), frontend_env.read_text())

        run_install(workspace, registry)
        assert (env.read_text(), services.read_text(), frontend_env.read_text()) == before

    def test_skip_message(self, workspace, registry, configured):
        configured("wordpress")
        events = []
        WordPressInstaller(workspace, registry, events.append).install()
        assert events[-1].status == "skipped"
        assert events[-1].message == "WordPress is already installed. Skipping setup."

    def test_existing_directory_is_reused(self, workspace, registry, fake):
        site = workspace.site_path("wordpress")
        site.mkdir()
        (site / ".env.example").write_text("DB_NAME='x'\n")

        result = WordPressInstaller(workspace, registry).install()
        assert result.status == "installed"
        assert fake.runner.called("composer", "create-project") == []
        assert any("already exists" in w for w in result.warnings)

    def test_existing_unique_salts_are_rotated(self, workspace, registry):
        site = workspace.site_path("wordpress")
        site.mkdir()
        lines = [f"{key}='old-{i}'" for i, key in enumerate(WORDPRESS_SECRET_KEYS)]
        (site / ".env").write_text("\n".join(lines) + "\n")

        WordPressInstaller(workspace, registry).install()
        values = read_env_values(site / ".env")
        assert secrets_are_valid(values, WORDPRESS_SECRET_KEYS)
        assert not any(values[k].startswith("old-") for k in WORDPRESS_SECRET_KEYS)
        assert sum(1 for line in (site / ".env").read_text().splitlines() if line.startswith("AUTH_KEY=")) == 1

    def test_unique_salts_survive_fetch_failure(self, workspace, registry):
        site = workspace.site_path("wordpress")
        site.mkdir()
        lines = [f"{key}='old-{i}'" for i, key in enumerate(WORDPRESS_SECRET_KEYS)]
        (site / ".env").write_text("\n".join(lines) + "\n")
        registry.secrets = OfflineSecrets()

        result = WordPressInstaller(workspace, registry).install()
        values = read_env_values(site / ".env")
        assert [values[k] for k in WORDPRESS_SECRET_KEYS] == [f"old-{i}" for i in range(8)]
        assert any("keeping the existing unique values" in w for w in result.warnings)
        assert not any(w.startswith("CRITICAL") for w in result.warnings)

    def test_duplicate_salts_are_replaced(self, workspace, registry):
        site = workspace.site_path("wordpress")
        site.mkdir()
        lines = [f"{key}='same'" for key in WORDPRESS_SECRET_KEYS]
        (site / ".env").write_text("\n".join(lines) + "\n")

        WordPressInstaller(workspace, registry).install()
        values = read_env_values(site / ".env")
        assert secrets_are_valid(values, WORDPRESS_SECRET_KEYS)
        assert "same" not in values.values()


# ── Failures ─────────────────────────────────────────────────────────


class TestInstallFailures:
    def test_core_install_failure_aborts(self, workspace, registry, fake):
        fake.runner.set_failure(["ddev", "wp"], stderr="Error: The site you have requested is not installed.")

        with pytest.raises(StepError) as exc:
            run_install(workspace, registry)

        assert exc.value.site == "WordPress"
        assert exc.value.step == "site-install"
        assert SALTS_HINT in exc.value.hints
        # Later sites never start
        assert fake.runner.called("composer", "create-project", "drupal/recommended-project") == []
        assert not (workspace.site_path("wordpress") / "web/app/mu-plugins/ddev_cors_setup.php").exists()

    def test_scaffold_failure(self, workspace, registry, fake):
        fake.runner.set_failure(["composer", "create-project"], stderr="Could not resolve host")

        with pytest.raises(StepError) as exc:
            run_install(workspace, registry)
        assert exc.value.step == "scaffold"
        assert "Could not resolve host" in str(exc.value)
        assert fake.runner.called("ddev") == []

    def test_missing_env_template(self, workspace, registry, fake):
        workspace.site_path("wordpress").mkdir()

        with pytest.raises(StepError) as exc:
            WordPressInstaller(workspace, registry).install()
        assert exc.value.step == "env"
        assert ".env.example" in str(exc.value)
        assert fake.runner.called("ddev", "start") == []

    def test_database_reset_failure_is_a_warning(self, workspace, registry, fake):
        fake.runner.set_failure(["ddev", "mysql"], stderr="database is busy")
        events = []
        result = WordPressInstaller(workspace, registry, events.append).install()
        assert result.status == "installed"
        assert any(e.step == "database" and e.status == "warning" for e in events)

    def test_salts_fetch_failure_warns_and_continues(self, workspace, registry, fake):
        registry.secrets = OfflineSecrets()
        result = WordPressInstaller(workspace, registry).install()

        assert result.status == "installed"
        assert any(w.startswith("CRITICAL") and "network unreachable" in w for w in result.warnings)
        # The .env is untouched by the failed rotation
        values = read_env_values(workspace.site_path("wordpress") / ".env")
        assert values["AUTH_KEY"] == "generateme"
        assert fake.runner.called("ddev", "wp")

    def test_failed_step_event(self, workspace, registry, fake):
        fake.runner.set_failure(["ddev", "drush", "en"], stderr="Module not found")
        events = []
        with pytest.raises(StepError):
            run_install(workspace, registry, on_progress=events.append)
        failed = [e for e in events if e.status == "failed"]
        assert [(e.site, e.step) for e in failed] == [("drupal", "jsonapi")]


# ── Drupal CORS ──────────────────────────────────────────────────────


class TestDrupalCors:
    def _site(self, workspace):
        default = workspace.site_path("drupal") / "web" / "sites" / "default"
        default.mkdir(parents=True)
        return default

    def test_existing_services_is_updated_in_place(self, workspace, registry):
        default = self._site(workspace)
        (default / "services.yml").write_text(textwrap.dedent("""\
            parameters:
              twig.config:
                debug: true
        """))

        DrupalInstaller(workspace, registry).configure_cors()
        data = yaml.safe_load((default / "services.yml").read_text())
        assert data["parameters"]["twig.config"] == {"debug": True}
        assert data["parameters"]["cors.config"]["enabled"] is True

    def test_repeated_runs_keep_a_single_entry(self, workspace, registry):
        default = self._site(workspace)
        (default / "default.services.yml").write_text("parameters: {}\n")
        installer = DrupalInstaller(workspace, registry)

        installer.configure_cors()
        first = (default / "services.yml").read_text()
        installer.configure_cors()
        assert (default / "services.yml").read_text() == first
        assert first.count("cors.config") == 1

    def test_no_services_files_warns(self, workspace, registry, fake):
        self._site(workspace)
        installer = DrupalInstaller(workspace, registry)
        installer.configure_cors()
        assert any("CORS was not configured" in w for w in installer.result.warnings)
        assert fake.runner.called("ddev", "drush", "cr") == []


# ── Frontend ─────────────────────────────────────────────────────────


class TestFrontend:
    def test_existing_app_is_not_rescaffolded(self, workspace, registry, fake):
        frontend = workspace.site_path("frontend")
        frontend.mkdir()
        (frontend / "package.json").write_text("{}")

        FrontendInstaller(workspace, registry).install()
        assert fake.runner.called("npm", "create") == []
        assert fake.runner.called("npm", "install")

    def test_api_env_block_not_duplicated(self, workspace, registry):
        frontend = workspace.site_path("frontend")
        frontend.mkdir()
        (frontend / ".env.local").write_text("VITE_WORDPRESS_API_URL=http://custom\n")

        FrontendInstaller(workspace, registry).install()
        text = (frontend / ".env.local").read_text()
        assert text.count("VITE_WORDPRESS_API_URL") == 1
        assert "http://custom" in text

    def test_build_without_output(self, workspace, registry, fake):
        fake.runner.set_response(["npm", "run", "build"], CommandResult.success([]))
        with pytest.raises(StepError) as exc:
            FrontendInstaller(workspace, registry).install()
        assert exc.value.step == "build"
        assert fake.runner.called("ddev", "config") == []

    def test_clean_removes_and_deletes_project(self, workspace, registry, fake):
        FrontendInstaller(workspace, registry).install()
        fake.runner.reset()

        assert FrontendInstaller(workspace, registry).clean() is True
        assert not workspace.site_path("frontend").exists()
        assert fake.runner.commands() == ["ddev delete --omit-snapshot --yes frontend-app"]

    def test_clean_without_directory(self, workspace, registry, fake):
        assert FrontendInstaller(workspace, registry).clean() is False
        assert fake.runner.call_count == 0

    def test_clean_frontend_reinstalls(self, workspace, registry, fake):
        run_install(workspace, registry)
        fake.runner.reset()

        report = run_install(workspace, registry, clean_frontend=True)
        assert report.skipped == ["wordpress", "drupal"]
        assert report.installed == ["frontend"]
        assert fake.runner.called("npm", "create")


# ── Filesystem errors ────────────────────────────────────────────────


def _permission_denied(*args, **kwargs):
    raise PermissionError(13, "Permission denied", "frontend/.env.local")


class TestFilesystemErrors:
    def test_step_oserror_becomes_step_error(self, workspace, registry, fake, monkeypatch):
        monkeypatch.setattr(
            "devstack.core.services.installers.frontend.append_block_if_absent", _permission_denied
        )
        events = []
        with pytest.raises(StepError) as exc:
            FrontendInstaller(workspace, registry, events.append).install()

        assert exc.value.step == "api-env"
        assert "Permission denied" in str(exc.value)
        assert "frontend/.env.local" in str(exc.value)
        assert any("permissions" in h for h in exc.value.hints)
        assert [(e.step, e.status) for e in events if e.status == "failed"] == [("api-env", "failed")]
        assert fake.runner.called("npm", "install") == []

    def test_clean_oserror_becomes_step_error(self, workspace, registry, monkeypatch):
        workspace.site_path("frontend").mkdir()
        monkeypatch.setattr("devstack.core.services.installers.frontend.shutil.rmtree", _permission_denied)

        with pytest.raises(StepError) as exc:
            FrontendInstaller(workspace, registry).clean()
        assert exc.value.site == "Frontend"
        assert exc.value.step == "clean"
        assert exc.value.hints
