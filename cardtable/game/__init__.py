"""Game engine module."""
from .deck import Deck, Card, Suit, Rank
from .player import Player
from .seat import Seat, SeatRole
from .notifier import Notifier
from .pipeline import Pipeline, PipelineResult, StepResult, Event
from .pot import Pot, SidePot
from .phase import Phase, PhaseName, Settlement
from .game import Game
from .table import Table
from .exceptions import (
    CardTableError,
    InvalidBlind,
    InvalidTableSize,
    InvalidSeatIndex,
    AlreadyOccupied,
    SeatNotOccupied,
    TableBusy,
    InvalidChipAmount,
    InsufficientChips,
    NotEnoughPlayers,
    InvalidPhaseAction,
    InvalidPhaseTransition,
    ShortDeal,
)

__all__ = [
    "Deck",
    "Card",
    "Suit",
    "Rank",
    "Player",
    "Seat",
    "SeatRole",
    "Notifier",
    "Pipeline",
    "PipelineResult",
    "StepResult",
    "Event",
    "Pot",
    "SidePot",
    "Phase",
    "PhaseName",
    "Settlement",
    "Game",
    "Table",
    "CardTableError",
    "InvalidBlind",
    "InvalidTableSize",
    "InvalidSeatIndex",
    "AlreadyOccupied",
    "SeatNotOccupied",
    "TableBusy",
    "InvalidChipAmount",
    "InsufficientChips",
    "NotEnoughPlayers",
    "InvalidPhaseAction",
    "InvalidPhaseTransition",
    "ShortDeal",
]
