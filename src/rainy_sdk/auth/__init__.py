"""Authentication module."""
from .credentials import API_KEY_PREFIX, Credentials

__all__ = ["API_KEY_PREFIX", "Credentials"]
