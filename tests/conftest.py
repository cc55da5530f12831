"""
Shared test fixtures and configuration.

``FakeToolchain`` wires a MockRunner with side effects that imitate the
real tools closely enough for the installers: ``composer create-project``
lays down the template files, ``ddev config`` writes the marker,
``ddev start``/``stop``/``status`` track run state, and npm produces
``package.json`` and ``dist/``.
"""

from pathlib import Path

import pytest

from devstack.adapters.http.salts import StaticSecretSource
from devstack.adapters.mock import MockRunner
from devstack.adapters.registry import AdapterRegistry, default_registry
from devstack.core.models.command import CommandResult
from devstack.core.models.workspace import WORDPRESS_SECRET_KEYS, WorkspaceConfig

BEDROCK_ENV_EXAMPLE = """\
DB_NAME='database_name'
DB_USER='database_user'
DB_PASSWORD='database_password'

# Optionally, you can use a data source name (DSN)
# DB_HOST='localhost'

WP_ENV='development'
WP_HOME='http://example.com'
WP_SITEURL="${WP_HOME}/wp"

# Generate your keys here: https://roots.io/salts.html
AUTH_KEY='generateme'
SECURE_AUTH_KEY='generateme'
LOGGED_IN_KEY='generateme'
NONCE_KEY='generateme'
AUTH_SALT='generateme'
SECURE_AUTH_SALT='generateme'
LOGGED_IN_SALT='generateme'
NONCE_SALT='generateme'
"""

DRUPAL_DEFAULT_SERVICES = """\
parameters:
  session.storage.options:
    gc_probability: 1
  cors.config:
    enabled: false
    allowedHeaders: []
services: {}
"""

SALTS_RESPONSE = "\n".join(
    f"define('{key}',{' ' * (17 - len(key))}'{key.lower()}-{i}-x!y');"
    for i, key in enumerate(WORDPRESS_SECRET_KEYS)
)


class FakeToolchain:
    """MockRunner plus just enough filesystem behaviour to run installers."""

    def __init__(self):
        self.running: set[Path] = set()
        self.runner = MockRunner()
        r = self.runner
        r.set_response(["composer", "create-project"], self._create_project)
        r.set_response(["ddev", "config"], self._ddev_config)
        r.set_response(["ddev", "start"], self._ddev_start)
        r.set_response(["ddev", "stop"], self._ddev_stop)
        r.set_response(["ddev", "stop", "--unlist"], CommandResult.success([]))
        r.set_response(["ddev", "status"], self._ddev_status)
        r.set_response(["npm", "create"], self._npm_create)
        r.set_response(["npm", "run", "build"], self._npm_build)

    def _create_project(self, args, cwd):
        package, directory = args[2], args[3]
        site = cwd / directory
        site.mkdir(parents=True)
        if package == "roots/bedrock":
            (site / ".env.example").write_text(BEDROCK_ENV_EXAMPLE)
            (site / "web" / "app" / "mu-plugins").mkdir(parents=True)
        elif package == "drupal/recommended-project":
            default = site / "web" / "sites" / "default"
            default.mkdir(parents=True)
            (default / "default.services.yml").write_text(DRUPAL_DEFAULT_SERVICES)

    def _ddev_config(self, args, cwd):
        marker = cwd / ".ddev" / "config.yaml"
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.write_text("name: fake\n")

    def _ddev_start(self, args, cwd):
        self.running.add(cwd)

    def _ddev_stop(self, args, cwd):
        self.running.discard(cwd)

    def _ddev_status(self, args, cwd):
        state = "running" if cwd in self.running else "stopped"
        return CommandResult.success(args, stdout=f"Project: fake  {state}")

    def _npm_create(self, args, cwd):
        (cwd / "package.json").write_text('{"name": "frontend", "scripts": {"build": "vite build"}}')

    def _npm_build(self, args, cwd):
        (cwd / "dist").mkdir(exist_ok=True)
        (cwd / "dist" / "index.html").write_text("<div id=app></div>")


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceConfig:
    """Default configuration rooted in a temporary directory."""
    return WorkspaceConfig(root=tmp_path)


@pytest.fixture
def fake() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def registry(workspace: WorkspaceConfig, fake: FakeToolchain) -> AdapterRegistry:
    """Full adapter registry over the fake toolchain with offline salts."""
    return default_registry(workspace, runner=fake.runner, secrets=StaticSecretSource(SALTS_RESPONSE))


@pytest.fixture
def configured(workspace: WorkspaceConfig):
    """Mark sites as already configured (directory + DDEV marker)."""

    def _configure(*kinds: str) -> None:
        for kind in kinds:
            marker = workspace.site(kind).marker(workspace.root)
            marker.parent.mkdir(parents=True, exist_ok=True)
            marker.write_text("name: existing\n")

    return _configure


@pytest.fixture
def cli_obj(fake: FakeToolchain) -> dict:
    """Click context object that points the CLI at the fake toolchain."""
    return {"runner": fake.runner, "secrets": StaticSecretSource(SALTS_RESPONSE)}
