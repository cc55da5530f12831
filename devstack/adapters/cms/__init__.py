"""CMS adapters — WP-CLI and Drush through DDEV."""

from devstack.adapters.cms.drupal import DrushAdapter
from devstack.adapters.cms.wordpress import WpCliAdapter

__all__ = ["DrushAdapter", "WpCliAdapter"]
