"""Pydantic payload schemas for table notifications."""
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field


# Event names

SEAT_OCCUPIED = "seat.occupied"
SEAT_VACATED = "seat.vacated"
TABLE_NEW_GAME = "table.newGame"
PHASE_CHANGED = "phase.changed"


# ============= Seat notifications =============

class SeatOccupiedMessage(BaseModel):
    """A player sat down."""
    type: Literal["seat.occupied"] = SEAT_OCCUPIED
    seat_id: str
    position: int
    player_id: str


class SeatVacatedMessage(BaseModel):
    """A seat was emptied."""
    type: Literal["seat.vacated"] = SEAT_VACATED
    seat_id: str
    position: int


# ============= Table / game notifications =============

class NewGameMessage(BaseModel):
    """The launch pipeline started a new hand."""
    type: Literal["table.newGame"] = TABLE_NEW_GAME
    table_id: str
    game_id: Optional[str] = None
    occupancy_count: int
    players: list[str]  # Player ids in hand order, first seat after the dealer
    dealer_position: int = Field(ge=0)


class PhaseChangedMessage(BaseModel):
    """A game moved to its next betting round."""
    type: Literal["phase.changed"] = PHASE_CHANGED
    game_id: str
    phase: str
    community_cards: list[str]
    pot: int


Notification = Union[
    SeatOccupiedMessage,
    SeatVacatedMessage,
    NewGameMessage,
    PhaseChangedMessage,
]


def parse_notification(data: dict) -> Notification:
    """Parse a notification from a plain dict.
    
    Args:
        data: Payload dictionary including its "type".
        
    Returns:
        Parsed notification.
        
    Raises:
        ValueError: If the type is unknown.
    """
    msg_type = data.get("type")
    
    type_map = {
        SEAT_OCCUPIED: SeatOccupiedMessage,
        SEAT_VACATED: SeatVacatedMessage,
        TABLE_NEW_GAME: NewGameMessage,
        PHASE_CHANGED: PhaseChangedMessage,
    }
    
    if msg_type not in type_map:
        raise ValueError(f"Unknown notification type: {msg_type}")
    
    return type_map[msg_type](**data)
