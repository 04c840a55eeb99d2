"""
Token name generation module.
"""
from .generator import NameGenerator

__all__ = ["NameGenerator"]
