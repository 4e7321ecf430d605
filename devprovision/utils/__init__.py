"""
Utility modules for devprovision.
"""

from .logging import setup_root_logger

__all__ = ["setup_root_logger"]
