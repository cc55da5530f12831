"""DevStack — bootstrap a headless WordPress + Drupal + frontend workspace."""

__version__ = "0.1.0"
