"""niv-updater: open pull requests for outdated niv pins."""

__version__ = "0.1.0"
