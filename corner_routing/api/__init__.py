"""
Public entry points for driving a corner-aware audio proxy.
"""

from .router import CornerRouter

__all__ = ["CornerRouter"]
