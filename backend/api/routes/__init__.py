"""API routes package."""

from . import document
from . import generate
from . import runs

__all__ = ["document", "generate", "runs"]
