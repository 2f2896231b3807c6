from .client import APIClient

__all__ = ["APIClient"]
