"""Seat occupancy and role holder."""
from enum import Enum
from typing import Callable, Optional, TYPE_CHECKING

from cardtable.game.exceptions import AlreadyOccupied
from cardtable.game.notifier import Notifier
from cardtable.protocol.messages import (
    SEAT_OCCUPIED,
    SEAT_VACATED,
    SeatOccupiedMessage,
    SeatVacatedMessage,
)
from cardtable.utils.ids import generate_id

if TYPE_CHECKING:
    from cardtable.game.player import Player


class SeatRole(str, Enum):
    """Positional roles for a hand."""
    DEALER = "dealer"
    SMALLBLIND = "small_blind"
    BIGBLIND = "big_blind"


SeatGuard = Callable[["Seat", Optional["Player"]], None]


class Seat:
    """A fixed position at a table.

    The seat references its player without owning it. Roles only mean
    something while the seat is occupied and are recomputed by the table on
    every role assignment.
    """

    def __init__(
        self,
        position: int,
        seat_id: Optional[str] = None,
        guard: Optional[SeatGuard] = None,
    ):
        """Initialize a seat.

        Args:
            position: Fixed position at the table.
            seat_id: Identifier, generated if omitted.
            guard: Called as ``guard(seat, player)`` before the seat changes,
                with ``player=None`` on vacate. Raising vetoes the change.
        """
        self.id = seat_id or generate_id()
        self.position = position
        self.player: Optional["Player"] = None
        self.roles: set[SeatRole] = set()
        self.notifier = Notifier(source=f"seat:{self.id}")
        self.guard = guard

    def is_occupied(self) -> bool:
        return self.player is not None

    def occupy(self, player: "Player") -> None:
        """Seat a player and notify subscribers.

        Raises:
            AlreadyOccupied: If the seat already has a player.
        """
        if self.player is not None:
            raise AlreadyOccupied(
                f"Seat {self.position} is already occupied by {self.player.id}"
            )
        if self.guard is not None:
            self.guard(self, player)
        self.player = player
        self.notifier.emit(SEAT_OCCUPIED, SeatOccupiedMessage(
            seat_id=self.id,
            position=self.position,
            player_id=player.id,
        ))

    def vacate(self) -> Optional["Player"]:
        """Clear the player and roles, then notify subscribers.

        Returns:
            The player who left, if any.
        """
        if self.guard is not None:
            self.guard(self, None)
        player = self.player
        self.player = None
        self.roles.clear()
        self.notifier.emit(SEAT_VACATED, SeatVacatedMessage(
            seat_id=self.id,
            position=self.position,
        ))
        return player

    def add_role(self, role: SeatRole) -> None:
        self.roles.add(role)

    def get_roles(self) -> set[SeatRole]:
        return set(self.roles)

    def has_role(self, role: SeatRole) -> bool:
        return role in self.roles

    def clear_roles(self) -> None:
        self.roles.clear()

    def __repr__(self) -> str:
        player = self.player.id if self.player else None
        roles = sorted(r.value for r in self.roles)
        return f"Seat(position={self.position}, player={player}, roles={roles})"
