"""Table seating, role assignment and hand launch."""
import logging
from typing import Any, Callable, Optional, TYPE_CHECKING

from cardtable.config import config
from cardtable.game.deck import Deck
from cardtable.game.exceptions import (
    AlreadyOccupied,
    InvalidBlind,
    InvalidSeatIndex,
    InvalidTableSize,
    SeatNotOccupied,
    TableBusy,
)
from cardtable.game.game import Game
from cardtable.game.notifier import Notifier
from cardtable.game.phase import COMMUNITY_TOTAL, HOLE_CARDS, PhaseName
from cardtable.game.pipeline import Event, Pipeline, PipelineResult, StepResult
from cardtable.game.seat import Seat, SeatRole
from cardtable.protocol.messages import (
    SEAT_OCCUPIED,
    SEAT_VACATED,
    TABLE_NEW_GAME,
    NewGameMessage,
)
from cardtable.utils.ids import generate_id
from cardtable.utils.logger import get_logger

if TYPE_CHECKING:
    from cardtable.game.player import Player

module_logger = get_logger(__name__)

BIG_BLIND_MULTIPLIER = 2

SEATING_CHANGED = "table.seatingChanged"


def _validate_blind(amount: Any) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidBlind(amount)
    return amount


class Table:
    """A table with a fixed ring of seats.

    Every seat change runs the hand-launch pipeline: it stops quietly when a
    hand is already running, when too few seats are taken, when a seated
    player cannot cover the big blind or when the deck is too short for the
    hand. Otherwise it assigns roles and starts a Game.
    """

    def __init__(
        self,
        small_blind: Optional[int] = None,
        size: Optional[int] = None,
        table_id: Optional[str] = None,
        name: str = "",
        logger: Optional[logging.Logger] = None,
        deck_factory: Optional[Callable[[], Deck]] = None,
    ):
        """Initialize a table.

        Args:
            small_blind: Small blind amount. Big blind is always twice this.
            size: Number of seats, fixed for the table's lifetime.
            table_id: Identifier, generated if omitted.
            name: Display name.
            logger: Logger for pipeline aborts and hand launches.
            deck_factory: Builds the deck for each new game.

        Raises:
            InvalidBlind: If small_blind is not a positive integer.
            InvalidTableSize: If size is below 2 or above the configured maximum.
        """
        if small_blind is None:
            small_blind = config.default_small_blind
        if size is None:
            size = config.default_table_size
        if isinstance(size, bool) or not isinstance(size, int) or not 2 <= size <= config.max_table_size:
            raise InvalidTableSize(
                f"Table size must be between 2 and {config.max_table_size}, got {size!r}"
            )

        self.id = table_id or generate_id()
        self.name = name
        self.logger = logger or module_logger
        self._small_blind = _validate_blind(small_blind)
        self._seats: tuple[Seat, ...] = tuple(
            Seat(position=i, guard=self._guard_seat) for i in range(size)
        )
        self.queue: list["Player"] = []

        self.game_in_progress = False
        self.current_game: Optional[Game] = None
        self.last_launch: Optional[PipelineResult] = None

        self.notifier = Notifier(source=f"table:{self.id}")
        self.pipeline = Pipeline(source=f"table:{self.id}")
        self._deck_factory = deck_factory
        self._launching = False

        for seat in self._seats:
            seat.notifier.subscribe(SEAT_OCCUPIED, self._on_seating_changed)
            seat.notifier.subscribe(SEAT_VACATED, self._on_seating_changed)

    # Blinds

    @property
    def small_blind(self) -> int:
        return self._small_blind

    @property
    def big_blind(self) -> int:
        return self._small_blind * BIG_BLIND_MULTIPLIER

    def update_blinds(self, small_blind: int) -> int:
        """Change the small blind; the big blind follows.

        Returns:
            The new big blind.

        Raises:
            InvalidBlind: If small_blind is not a positive integer.
        """
        self._small_blind = _validate_blind(small_blind)
        self.logger.info(f"Table {self.id} blinds now {self.small_blind}/{self.big_blind}")
        return self.big_blind

    # Seats

    def set_name(self, name: str) -> str:
        self.name = name
        return self.name

    @property
    def size(self) -> int:
        return len(self._seats)

    def seat_count(self) -> int:
        return len(self._seats)

    def get_seats(self) -> list[Seat]:
        """Seats ordered by position."""
        return list(self._seats)

    @property
    def seats(self) -> list[Seat]:
        return self.get_seats()

    def get_seat(self, index: int) -> Seat:
        """Get the seat at a position.

        Raises:
            InvalidSeatIndex: If no seat has that position.
        """
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.size:
            raise InvalidSeatIndex(index, self.size)
        return self._seats[index]

    def occupied_seats(self) -> list[Seat]:
        return [seat for seat in self._seats if seat.is_occupied()]

    def occupancy_count(self) -> int:
        return len(self.occupied_seats())

    def find_seat(self, player: "Player") -> Optional[Seat]:
        """Get the seat a player sits in."""
        for seat in self._seats:
            if seat.player is player:
                return seat
        return None

    def seat_with_role(self, role: SeatRole) -> Optional[Seat]:
        for seat in self._seats:
            if seat.is_occupied() and role in seat.roles:
                return seat
        return None

    def occupy_seat(self, position: int, player: "Player") -> Seat:
        """Seat a player at a position.

        Raises:
            InvalidSeatIndex: If the position does not exist.
            AlreadyOccupied: If the seat is taken or the player already sits here.
            TableBusy: If called while the launch pipeline is running.
        """
        seat = self.get_seat(position)
        seat.occupy(player)
        return seat

    def vacate_seat(self, position: int) -> "Player":
        """Empty a seat.

        Returns:
            The player who left.

        Raises:
            SeatNotOccupied: If nobody sits there.
        """
        self._ensure_idle()
        seat = self.get_seat(position)
        if not seat.is_occupied():
            raise SeatNotOccupied(f"Seat {position} at table {self.id} is empty")
        return seat.vacate()

    # Waiting list

    def add_to_queue(self, player: "Player") -> int:
        """Put a player on the waiting list.

        Returns:
            The queue length.
        """
        self.queue.append(player)
        return len(self.queue)

    def move_to_table(self, position: int) -> bool:
        """Seat the first waiting player at a free position.

        Returns:
            True if a player was seated.
        """
        seat = self.get_seat(position)
        if seat.is_occupied() or not self.queue:
            return False
        self.occupy_seat(position, self.queue[0])
        self.queue.pop(0)
        return True

    # Roles

    def assign_roles(self) -> None:
        """Recompute dealer and blind roles from the current seating.

        Roles are cleared first. Heads-up, the lower occupied position is
        dealer and small blind and the other is big blind. With three or
        more, the first three occupied positions take dealer, small blind
        and big blind.
        """
        for seat in self._seats:
            seat.clear_roles()

        occupied = self.occupied_seats()
        if len(occupied) < 2:
            return

        if len(occupied) == 2:
            occupied[0].add_role(SeatRole.DEALER)
            occupied[0].add_role(SeatRole.SMALLBLIND)
            occupied[1].add_role(SeatRole.BIGBLIND)
            return

        occupied[0].add_role(SeatRole.DEALER)
        occupied[1].add_role(SeatRole.SMALLBLIND)
        occupied[2].add_role(SeatRole.BIGBLIND)

    # Hand launch pipeline

    def _ensure_idle(self) -> None:
        if self._launching:
            raise TableBusy(f"Table {self.id} is launching a hand; seating is locked")

    def _guard_seat(self, seat: Seat, player: Optional["Player"]) -> None:
        # Runs before any seat at this table changes
        self._ensure_idle()
        if player is not None:
            current = self.find_seat(player)
            if current is not None and current is not seat:
                raise AlreadyOccupied(
                    f"Player {player.id} is already seated at table {self.id}, "
                    f"position {current.position}"
                )

    def _on_seating_changed(self, event_name: str, payload: Any) -> None:
        self._ensure_idle()
        self._launching = True
        try:
            self.last_launch = self.pipeline.run(
                SEATING_CHANGED,
                {
                    "table_id": self.id,
                    "trigger": event_name,
                    "position": getattr(payload, "position", None),
                },
                self.launch_steps(),
                self._launch_game,
            )
        finally:
            self._launching = False

    def launch_steps(self) -> list[Callable[[Event], StepResult]]:
        """Gates and transforms run before a hand starts, in order."""
        return [
            self._check_no_game_in_progress,
            self._check_occupancy,
            self._assign_roles,
            self._check_balances,
            self._build_player_order,
            self._prepare_deck,
        ]

    def _check_no_game_in_progress(self, event: Event) -> StepResult:
        if self.game_in_progress:
            self.logger.debug(f"Table {self.id}: hand already running, not launching")
            return StepResult.ABORT
        return StepResult.CONTINUE

    def _check_occupancy(self, event: Event) -> StepResult:
        count = self.occupancy_count()
        event.data["occupancy_count"] = count
        if count < max(2, config.min_players):
            self.logger.debug(f"Table {self.id}: {count} seated, waiting for more players")
            return StepResult.ABORT
        return StepResult.CONTINUE

    def _assign_roles(self, event: Event) -> StepResult:
        self.assign_roles()
        return StepResult.CONTINUE

    def _check_balances(self, event: Event) -> StepResult:
        short = [
            seat.player for seat in self.occupied_seats()
            if seat.player.chips < self.big_blind
        ]
        if short:
            self.logger.warning(
                f"Table {self.id}: not starting hand, "
                f"{len(short)} player(s) below big blind {self.big_blind}",
                extra={
                    "table_id": self.id,
                    "player_ids": [p.id for p in short],
                    "big_blind": self.big_blind,
                },
            )
            return StepResult.ABORT
        return StepResult.CONTINUE

    def _build_player_order(self, event: Event) -> StepResult:
        dealer = self.seat_with_role(SeatRole.DEALER)
        if dealer is None:
            return StepResult.ABORT

        players = []
        for offset in range(1, self.size + 1):
            seat = self._seats[(dealer.position + offset) % self.size]
            if seat.is_occupied():
                players.append(seat.player)

        event.data["players"] = players
        event.data["dealer_position"] = players.index(dealer.player)
        return StepResult.CONTINUE

    def _prepare_deck(self, event: Event) -> StepResult:
        deck = self._deck_factory() if self._deck_factory else Deck()
        needed = HOLE_CARDS * len(event.data["players"]) + COMMUNITY_TOTAL[PhaseName.SHOWDOWN]
        if len(deck) < needed:
            self.logger.warning(
                f"Table {self.id}: not starting hand, deck has {len(deck)} cards, {needed} needed",
                extra={"table_id": self.id, "deck_size": len(deck), "needed": needed},
            )
            return StepResult.ABORT
        event.data["deck"] = deck
        return StepResult.CONTINUE

    def _launch_game(self, event: Event) -> None:
        players = event.data["players"]
        game = Game(
            small_blind=self.small_blind,
            big_blind=self.big_blind,
            players=players,
            dealer_pos=event.data["dealer_position"],
            deck=event.data["deck"],
            logger=self.logger,
        )
        self.current_game = game
        self.game_in_progress = True

        self.logger.info(f"Table {self.id} started game {game.id}")
        self.notifier.emit(TABLE_NEW_GAME, NewGameMessage(
            table_id=self.id,
            game_id=game.id,
            occupancy_count=event.data["occupancy_count"],
            players=[p.id for p in players],
            dealer_position=event.data["dealer_position"],
        ))

    def end_game(self) -> Optional[Game]:
        """Discard the running hand so a new one can launch.

        Chip stacks stay with the players; per-hand state is cleared.

        Returns:
            The finished game, if there was one.
        """
        game = self.current_game
        if game is not None:
            for player in game.players:
                player.reset_for_new_hand()
            self.logger.info(f"Table {self.id} finished game {game.id}")

        self.current_game = None
        self.game_in_progress = False
        return game

    def to_dict(self) -> dict:
        """Snapshot of the table."""
        return {
            "id": self.id,
            "name": self.name,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "size": self.size,
            "game_in_progress": self.game_in_progress,
            "game_id": self.current_game.id if self.current_game else None,
            "seats": [
                {
                    "position": seat.position,
                    "player": seat.player.to_dict() if seat.player else None,
                    "roles": sorted(role.value for role in seat.roles),
                }
                for seat in self._seats
            ],
            "queue": [p.id for p in self.queue],
        }
