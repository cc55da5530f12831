"""Language adapters — composer, npm."""

from devstack.adapters.languages.node import NpmAdapter
from devstack.adapters.languages.php import ComposerAdapter

__all__ = ["ComposerAdapter", "NpmAdapter"]
