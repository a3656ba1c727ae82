"""Room and casino registries."""
from .lobby import Casino, Room

__all__ = ["Casino", "Room"]
