"""Player model."""
from dataclasses import dataclass, field

from cardtable.game.deck import Card
from cardtable.game.exceptions import InsufficientChips, InvalidChipAmount
from cardtable.utils.ids import generate_id


@dataclass(eq=False)
class Player:
    """A player holding chips across hands.

    Seats reference players without owning them; the chip stack is the only
    state that survives from one hand to the next.
    """

    name: str = ""
    chips: int = 100
    id: str = field(default_factory=generate_id)
    hand: list[Card] = field(default_factory=list)
    is_folded: bool = False
    is_bet_matched: bool = False
    current_bet: int = 0  # Chips put in during the current betting round

    def __post_init__(self) -> None:
        if self.chips < 0:
            raise InvalidChipAmount(f"Chips cannot be negative: {self.chips}")

    def get_id(self) -> str:
        return self.id

    def get_chips(self) -> int:
        return self.chips

    def set_chips(self, chips: int) -> int:
        """Set the chip stack.

        Raises:
            InvalidChipAmount: If chips is negative.
        """
        if chips < 0:
            raise InvalidChipAmount(f"Chips cannot be negative: {chips}")
        self.chips = chips
        return self.chips

    def bet(self, amount: int) -> int:
        """Move chips from the stack into the current round.

        Args:
            amount: Amount to bet.

        Returns:
            The amount bet.

        Raises:
            InvalidChipAmount: If amount is negative.
            InsufficientChips: If amount exceeds the stack. Nothing changes.
        """
        if amount < 0:
            raise InvalidChipAmount(f"Bet cannot be negative: {amount}")
        if amount > self.chips:
            raise InsufficientChips(self.id, amount, self.chips)

        self.chips -= amount
        self.current_bet += amount
        return amount

    def refund(self, amount: int) -> None:
        """Return an uncalled part of the current round bet."""
        amount = min(amount, self.current_bet)
        self.current_bet -= amount
        self.chips += amount

    def set_is_folded(self, folded: bool) -> bool:
        self.is_folded = folded
        return self.is_folded

    def fold(self) -> None:
        """Fold the hand."""
        self.is_folded = True

    def add_to_hand(self, card: Card) -> None:
        self.hand.append(card)

    def reset_for_new_hand(self) -> None:
        """Reset player state for a new hand."""
        self.hand = []
        self.is_folded = False
        self.is_bet_matched = False
        self.current_bet = 0

    @property
    def is_all_in(self) -> bool:
        """Out of chips while still holding a live hand."""
        return self.chips == 0 and not self.is_folded and len(self.hand) > 0

    @property
    def can_act(self) -> bool:
        """Check if player can take an action."""
        return not self.is_folded and self.chips > 0

    def to_dict(self, hide_cards: bool = True) -> dict:
        """Convert to dictionary.

        Args:
            hide_cards: If True, don't include hole cards.

        Returns:
            Player state dictionary.
        """
        data = {
            "id": self.id,
            "name": self.name,
            "chips": self.chips,
            "is_folded": self.is_folded,
            "is_bet_matched": self.is_bet_matched,
            "current_bet": self.current_bet,
            "has_cards": len(self.hand) > 0,
        }

        if not hide_cards:
            data["hand"] = [str(c) for c in self.hand]

        return data
