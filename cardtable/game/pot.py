"""Pot ledger and side-pot calculation."""
from dataclasses import dataclass, field
from typing import Iterable

from cardtable.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class SidePot:
    """A pot or side pot."""
    amount: int
    eligible_players: list[str]  # ids of players who can win this pot

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "amount": self.amount,
            "eligible_players": self.eligible_players,
        }


@dataclass
class Pot:
    """Chips collected over a hand, tracked per player."""

    main_pot: int = 0
    side_pots: list[SidePot] = field(default_factory=list)
    _contributions: dict[str, int] = field(default_factory=dict)  # player id -> total contributed

    def add_bet(self, player_id: str, amount: int) -> None:
        """Add a collected bet to the pot.

        Args:
            player_id: Contributing player's id.
            amount: Collected amount.
        """
        if amount <= 0:
            return
        self._contributions[player_id] = self._contributions.get(player_id, 0) + amount
        self.main_pot += amount

    def collect(self, contributions: dict[str, int]) -> None:
        """Add a whole round's contributions."""
        for player_id, amount in contributions.items():
            self.add_bet(player_id, amount)

    def calculate_side_pots(
        self,
        all_in_players: dict[str, int],
        folded_players: Iterable[str] = (),
    ) -> list[SidePot]:
        """Split the pot into main and side pots by all-in levels.

        Folded players' chips stay in the pots they reached but they are
        never eligible to win them.

        Args:
            all_in_players: player id -> total chips put in when going all-in.
            folded_players: ids of players who folded.

        Returns:
            Pots from the main pot outward.
        """
        folded = set(folded_players)
        contenders = [pid for pid in self._contributions if pid not in folded]

        if not all_in_players:
            self.side_pots = [SidePot(
                amount=self.main_pot,
                eligible_players=contenders,
            )]
            return self.side_pots

        pots = []
        prev_level = 0
        remaining_players = set(contenders)

        for level in sorted(set(all_in_players.values())):
            pot_amount = 0
            for contrib in self._contributions.values():
                pot_amount += max(0, min(contrib, level) - prev_level)

            if pot_amount > 0:
                pots.append(SidePot(
                    amount=pot_amount,
                    eligible_players=[p for p in contenders if p in remaining_players],
                ))

            # Players all-in at this level cannot win anything above it
            for player_id, all_in_amount in all_in_players.items():
                if all_in_amount == level:
                    remaining_players.discard(player_id)

            prev_level = level

        remaining_amount = self.main_pot - sum(p.amount for p in pots)
        if remaining_amount > 0:
            pots.append(SidePot(
                amount=remaining_amount,
                eligible_players=[p for p in contenders if p in remaining_players],
            ))

        self.side_pots = pots
        logger.debug(f"Calculated {len(pots)} side pots")
        return self.side_pots

    def get_total(self) -> int:
        """Get total pot amount."""
        return self.main_pot

    def get_contribution(self, player_id: str) -> int:
        """Get a player's total contribution to the pot."""
        return self._contributions.get(player_id, 0)

    def reset(self) -> None:
        """Reset pot for new hand."""
        self.main_pot = 0
        self.side_pots = []
        self._contributions = {}

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total": self.main_pot,
            "side_pots": [sp.to_dict() for sp in self.side_pots],
            "contributions": dict(self._contributions),
        }
