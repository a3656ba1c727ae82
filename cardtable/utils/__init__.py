"""Shared helpers."""
from .ids import generate_id
from .logger import get_logger

__all__ = ["generate_id", "get_logger"]
