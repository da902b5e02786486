"""
Core module initialization
"""

from .config import EngineConfig
from .types import *

__all__ = ["EngineConfig"]
