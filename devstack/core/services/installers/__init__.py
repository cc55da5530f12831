"""Sub-project installers — WordPress, Drupal, Frontend, in that order."""

from devstack.core.services.installers.base import InstallResult, SiteInstaller, Step
from devstack.core.services.installers.drupal import DrupalInstaller
from devstack.core.services.installers.frontend import FrontendInstaller
from devstack.core.services.installers.wordpress import WordPressInstaller

INSTALLERS: tuple[type[SiteInstaller], ...] = (
    WordPressInstaller,
    DrupalInstaller,
    FrontendInstaller,
)

__all__ = [
    "DrupalInstaller",
    "FrontendInstaller",
    "INSTALLERS",
    "InstallResult",
    "SiteInstaller",
    "Step",
    "WordPressInstaller",
]
