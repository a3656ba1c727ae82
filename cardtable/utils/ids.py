"""Identifier generation."""
import uuid


def generate_id() -> str:
    """Return a new random identifier string."""
    return str(uuid.uuid4())
