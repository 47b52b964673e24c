"""HTTP layer for questlint."""

from questlint.api.app import create_app

__all__ = ["create_app"]
