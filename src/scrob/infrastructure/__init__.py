"""Infrastructure: persistence, observability and lifecycle."""
