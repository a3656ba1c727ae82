"""Notification payloads exchanged between tables and their listeners."""
from .messages import (
    SEAT_OCCUPIED,
    SEAT_VACATED,
    TABLE_NEW_GAME,
    PHASE_CHANGED,
    Notification,
    SeatOccupiedMessage,
    SeatVacatedMessage,
    NewGameMessage,
    PhaseChangedMessage,
    parse_notification,
)

__all__ = [
    "SEAT_OCCUPIED",
    "SEAT_VACATED",
    "TABLE_NEW_GAME",
    "PHASE_CHANGED",
    "Notification",
    "SeatOccupiedMessage",
    "SeatVacatedMessage",
    "NewGameMessage",
    "PhaseChangedMessage",
    "parse_notification",
]
