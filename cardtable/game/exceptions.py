"""Errors raised by the table, seat, game and phase models."""


class CardTableError(Exception):
    """Base class for card table errors."""
    pass


class InvalidBlind(CardTableError, ValueError):
    """Blind amount is not a positive number."""

    def __init__(self, amount, name: str = "Small blind"):
        super().__init__(f"{name} must be a positive number, got {amount!r}")
        self.amount = amount
        self.name = name


class InvalidTableSize(CardTableError, ValueError):
    """Table size is outside the allowed range."""
    pass


class InvalidSeatIndex(CardTableError, IndexError):
    """Seat index does not exist at the table."""

    def __init__(self, index: int, size: int):
        super().__init__(f"Invalid seat index {index}: must be between 0 and {size - 1}")
        self.index = index
        self.size = size


class AlreadyOccupied(CardTableError):
    """Seat already has a player."""
    pass


class SeatNotOccupied(CardTableError):
    """Seat has no player."""
    pass


class TableBusy(CardTableError):
    """Seating changed while the hand-launch pipeline was running."""
    pass


class InvalidChipAmount(CardTableError, ValueError):
    """Chip amount is negative."""
    pass


class InsufficientChips(CardTableError, ValueError):
    """Player does not have enough chips for a bet."""

    def __init__(self, player_id: str, amount: int, chips: int):
        super().__init__(
            f"Player {player_id} cannot bet {amount} with only {chips} chips"
        )
        self.player_id = player_id
        self.amount = amount
        self.chips = chips


class NotEnoughPlayers(CardTableError, ValueError):
    """A game needs at least two players."""
    pass


class InvalidPhaseAction(CardTableError):
    """Operation is not allowed in the current phase."""
    pass


class InvalidPhaseTransition(CardTableError):
    """Phase cannot advance."""
    pass


class ShortDeal(CardTableError):
    """Deck holds fewer cards than requested."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"Cannot deal {requested} cards, only {available} remain"
        )
        self.requested = requested
        self.available = available


class DuplicateName(CardTableError, ValueError):
    """A registry entry with that name already exists."""
    pass


class NotFound(CardTableError, LookupError):
    """Registry entry not found."""
    pass
