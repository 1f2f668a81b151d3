"""ghrel - create GitHub releases and synchronize their assets."""

__version__ = "0.3.0"
