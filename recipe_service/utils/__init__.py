"""
Common utilities for the recipe service.
"""

from recipe_service.utils.logger import log_event, setup_logger

__all__ = [
    "setup_logger",
    "log_event",
]
