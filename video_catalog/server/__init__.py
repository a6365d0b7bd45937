"""HTTP surface for the video catalog."""

from .api import create_app

__all__ = ["create_app"]
