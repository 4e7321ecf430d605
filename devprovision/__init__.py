"""
devprovision - ensure developer infrastructure tools are installed and ready.
"""

__version__ = "0.1.0"
