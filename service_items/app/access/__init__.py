"""
Read path for the Items Service.
"""

from .coordinator import AccessCoordinator

__all__ = ["AccessCoordinator"]
