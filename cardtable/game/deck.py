"""Card deck implementation."""
import random
from enum import Enum
from dataclasses import dataclass
from typing import Iterable, Optional


class Suit(str, Enum):
    """Card suits."""
    HEARTS = "h"
    DIAMONDS = "d"
    CLUBS = "c"
    SPADES = "s"

    def __str__(self) -> str:
        return self.value


class Rank(int, Enum):
    """Card ranks (2-14, where 14 is Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {11: "J", 12: "Q", 13: "K", 14: "A"}[self.value]


@dataclass(frozen=True)
class Card:
    """A playing card."""
    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return str(self)

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Parse card from string like 'Ah', '10s', '2c'.

        Args:
            s: Card string (rank + suit).

        Returns:
            Card instance.
        """
        suit = Suit(s[-1].lower())
        rank_str = s[:-1].upper()

        rank_map = {"A": 14, "K": 13, "Q": 12, "J": 11, "T": 10}
        if rank_str in rank_map:
            rank = Rank(rank_map[rank_str])
        else:
            rank = Rank(int(rank_str))

        return cls(rank=rank, suit=suit)


def full_deck() -> list[Card]:
    """All 52 cards in suit then rank order."""
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


class Deck:
    """A deck of cards drawn from the top.

    A deck built without explicit cards holds the standard 52 and is
    shuffled immediately. Explicit cards are kept in the given order so the
    first card is the first one drawn.
    """

    def __init__(
        self,
        cards: Optional[Iterable[Card]] = None,
        rng: Optional[random.Random] = None,
    ):
        """Initialize the deck.

        Args:
            cards: Exact card sequence, top first. Not shuffled.
            rng: Random source used by shuffle().
        """
        self._rng = rng or random.Random()
        if cards is None:
            self._cards = full_deck()
            self.shuffle()
        else:
            self._cards = list(cards)

    def shuffle(self) -> None:
        """Shuffle the deck."""
        self._rng.shuffle(self._cards)

    def draw(self) -> Optional[Card]:
        """Draw the top card.

        Returns:
            The card, or None when the deck is exhausted.
        """
        if not self._cards:
            return None
        return self._cards.pop(0)

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)
