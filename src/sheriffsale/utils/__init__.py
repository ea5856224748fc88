"""
Utilities Package
"""

from .logger import cycle_context, get_logger, setup_logging

__all__ = ["cycle_context", "get_logger", "setup_logging"]
