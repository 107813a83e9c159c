"""scrob - self-hosted scrobble tracker."""

__version__ = "0.1.0"
