"""Dashboard module: HTTP API over simulation state."""

from crossarb.dashboard.server import create_app


__all__ = ["create_app"]
