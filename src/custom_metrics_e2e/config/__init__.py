"""Run configuration."""

from .settings import SUPPORTED_PROVIDERS
from .settings import E2ESettings

__all__ = ["SUPPORTED_PROVIDERS", "E2ESettings"]
