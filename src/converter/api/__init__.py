"""HTTP API layer -- FastAPI routes over the conversion engine."""

from converter.api.app import create_app

__all__ = ["create_app"]
