"""
urlshort package initializer.
"""

from . import engine
from . import storage

__all__ = ["engine", "storage"]
