"""Betting round state machine."""
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from cardtable.game.deck import Card
from cardtable.game.exceptions import (
    InvalidPhaseAction,
    InvalidPhaseTransition,
    NotEnoughPlayers,
    ShortDeal,
)
from cardtable.utils.logger import get_logger

if TYPE_CHECKING:
    from cardtable.game.deck import Deck
    from cardtable.game.player import Player

logger = get_logger(__name__)


class PhaseName(str, Enum):
    """Betting rounds in the order they are played."""
    PRE_FLOP = "pre_flop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"


NEXT_PHASE = {
    PhaseName.PRE_FLOP: PhaseName.FLOP,
    PhaseName.FLOP: PhaseName.TURN,
    PhaseName.TURN: PhaseName.RIVER,
    PhaseName.RIVER: PhaseName.SHOWDOWN,
}

# Community cards dealt on entry to a phase
COMMUNITY_TRANCHE = {
    PhaseName.FLOP: 3,
    PhaseName.TURN: 1,
    PhaseName.RIVER: 1,
}

COMMUNITY_TOTAL = {
    PhaseName.PRE_FLOP: 0,
    PhaseName.FLOP: 3,
    PhaseName.TURN: 4,
    PhaseName.RIVER: 5,
    PhaseName.SHOWDOWN: 5,
}

HOLE_CARDS = 2


@dataclass
class Settlement:
    """Outcome of resolving a round's bets."""
    settled: bool
    collected: dict[str, int] = field(default_factory=dict)  # player id -> chips collected
    refunded: dict[str, int] = field(default_factory=dict)  # player id -> uncalled chips returned
    pending: list[str] = field(default_factory=list)  # ids still short of the bet

    @property
    def total_collected(self) -> int:
        return sum(self.collected.values())


class Phase:
    """One betting round of a hand.

    The phase borrows its game's deck for as long as it is the active round.
    Once it advances, the deck reference is dropped and any further draw is
    rejected.
    """

    def __init__(
        self,
        players: list["Player"],
        deck: "Deck",
        name: PhaseName = PhaseName.PRE_FLOP,
        pot: int = 0,
        community_cards: Optional[list[Card]] = None,
        dealer_pos: int = 0,
        small_blind_pos: Optional[int] = None,
        big_blind_pos: Optional[int] = None,
        current_player_pos: Optional[int] = None,
    ):
        """Initialize a betting round.

        Args:
            players: Players of the hand, shared with the owning game.
            deck: Deck borrowed from the owning game.
            name: Which round this is.
            pot: Chips already in the pot.
            community_cards: Board cards carried from the previous round.
            dealer_pos: Dealer index into players.
            small_blind_pos: Small blind index. Derived from the dealer if omitted.
            big_blind_pos: Big blind index. Derived from the small blind if omitted.
            current_player_pos: Who acts first. Derived from the round if omitted.
        """
        if len(players) < 2:
            raise NotEnoughPlayers(f"A phase needs at least 2 players, got {len(players)}")

        count = len(players)
        self.name = PhaseName(name)
        self.players = players
        self._deck: Optional["Deck"] = deck
        self.community_cards: list[Card] = list(community_cards or [])
        self.pot = pot

        # Heads-up: the dealer posts the small blind
        self.dealer_pos = dealer_pos % count
        if small_blind_pos is None:
            small_blind_pos = self.dealer_pos if count == 2 else self.dealer_pos + 1
        self.small_blind_pos = small_blind_pos % count
        if big_blind_pos is None:
            big_blind_pos = self.small_blind_pos + 1
        self.big_blind_pos = big_blind_pos % count

        if current_player_pos is None:
            current_player_pos = self._first_to_act()
        self.current_player_pos = current_player_pos % count

        self.last_settlement: Optional[Settlement] = None
        self.collected: dict[str, int] = {}  # Everything collected this round, by player id
        self._blinds_posted = False

    # Queries

    @property
    def deck(self) -> Optional["Deck"]:
        """The borrowed deck, or None once the round has ended."""
        return self._deck

    @property
    def is_active(self) -> bool:
        return self._deck is not None

    @property
    def current_player(self) -> "Player":
        return self.players[self.current_player_pos]

    def live_players(self) -> list["Player"]:
        """Players who have not folded."""
        return [p for p in self.players if not p.is_folded]

    def _first_to_act(self) -> int:
        count = len(self.players)
        if self.name == PhaseName.PRE_FLOP:
            return (self.big_blind_pos + 1) % count
        # After the flop, the first player left of the dealer who can still bet opens
        order = [(self.dealer_pos + offset) % count for offset in range(1, count + 1)]
        for pos in order:
            if self.players[pos].can_act:
                return pos
        for pos in order:
            if not self.players[pos].is_folded:
                return pos
        return order[0]

    def _require_deck(self) -> "Deck":
        if self._deck is None:
            raise InvalidPhaseAction(f"{self.name.value} has ended and no longer holds the deck")
        return self._deck

    def _require_open_round(self) -> None:
        if not self.is_active:
            raise InvalidPhaseAction(f"{self.name.value} has ended")
        if self.name == PhaseName.SHOWDOWN:
            raise InvalidPhaseAction("No betting at showdown")

    # Dealing

    def deal(self) -> None:
        """Deal two hole cards to every player, one per pass, in player order.

        Raises:
            InvalidPhaseAction: Outside PRE_FLOP, or if cards were already dealt.
            ShortDeal: If the deck cannot cover every player.
        """
        if self.name != PhaseName.PRE_FLOP:
            raise InvalidPhaseAction(f"Hole cards are dealt pre-flop, not {self.name.value}")
        if any(p.hand for p in self.players):
            raise InvalidPhaseAction("Hole cards have already been dealt")

        deck = self._require_deck()
        needed = HOLE_CARDS * len(self.players)
        if len(deck) < needed:
            raise ShortDeal(needed, len(deck))

        for _ in range(HOLE_CARDS):
            for player in self.players:
                player.add_to_hand(deck.draw())

    def deal_community_cards(self, count: int) -> list[Card]:
        """Draw board cards on entry to FLOP (3), TURN (1) or RIVER (1).

        Args:
            count: Number of cards to draw.

        Returns:
            The cards dealt.

        Raises:
            InvalidPhaseAction: Outside FLOP/TURN/RIVER entry, or a wrong count.
            ShortDeal: If the deck holds fewer than count cards. Nothing is drawn.
        """
        if self.name not in COMMUNITY_TRANCHE:
            raise InvalidPhaseAction(
                f"Community cards are only dealt entering flop, turn or river, not {self.name.value}"
            )

        tranche = COMMUNITY_TRANCHE[self.name]
        already_dealt = COMMUNITY_TOTAL[self.name] - tranche
        if len(self.community_cards) != already_dealt:
            raise InvalidPhaseAction(f"Community cards for {self.name.value} have already been dealt")
        if count != tranche:
            raise InvalidPhaseAction(f"{self.name.value} takes {tranche} community cards, not {count}")

        deck = self._require_deck()
        if len(deck) < count:
            raise ShortDeal(count, len(deck))

        cards = [deck.draw() for _ in range(count)]
        self.community_cards.extend(cards)
        logger.debug(f"Dealt {count} community cards: {cards}")
        return cards

    # Betting

    def post_blind(self, position: int, amount: int) -> None:
        """Post a forced bet without moving the turn pointer."""
        self._require_open_round()
        if self.name != PhaseName.PRE_FLOP:
            raise InvalidPhaseAction("Blinds are posted pre-flop")
        self.players[position].bet(amount)
        self.pot += amount

    def post_blinds(self, small_blind: int, big_blind: int) -> None:
        """Post both blinds once per hand."""
        if self._blinds_posted:
            raise InvalidPhaseAction("Blinds have already been posted")
        self.post_blind(self.small_blind_pos, small_blind)
        self.post_blind(self.big_blind_pos, big_blind)
        self._blinds_posted = True

    def bet(self, amount: int) -> None:
        """Bet for the current player, then pass the turn.

        Raises:
            InsufficientChips: If amount exceeds the player's chips. The
                player, pot and turn pointer are left unchanged.
        """
        self._require_open_round()
        player = self.current_player
        if player.is_folded:
            raise InvalidPhaseAction(f"Player {player.id} has folded")

        player.bet(amount)
        self.pot += amount
        self._advance_turn()

    def fold(self) -> None:
        """Fold the current player, then pass the turn."""
        self._require_open_round()
        player = self.current_player
        player.set_is_folded(True)
        player.is_bet_matched = False
        self._advance_turn()

    def next_player(self) -> int:
        """Move the turn pointer one seat along the full player list, wrapping."""
        if self.current_player_pos == len(self.players) - 1:
            self.current_player_pos = 0
        else:
            self.current_player_pos += 1
        return self.current_player_pos

    def _advance_turn(self) -> None:
        # Pass over players who cannot act, for at most one lap
        for _ in range(len(self.players)):
            self.next_player()
            if self.current_player.can_act:
                return

    # Settlement

    def resolve_bets(self) -> Settlement:
        """Check that live players matched the bet and collect the round.

        The target is the highest contribution among players who have not
        folded. A live player below the target who still has chips is
        pending; then nothing is collected. Otherwise a bet nobody else
        could match is refunded down to the next highest contribution,
        every contribution is collected into the pot total and reset.

        Returns:
            The settlement.
        """
        live = self.live_players()
        target = max((p.current_bet for p in live), default=0)

        pending = []
        for player in live:
            player.is_bet_matched = player.current_bet == target or player.chips == 0
            if not player.is_bet_matched:
                pending.append(player.id)

        if pending:
            self.last_settlement = Settlement(settled=False, pending=pending)
            return self.last_settlement

        refunded = {}
        leaders = [p for p in live if p.current_bet == target]
        if len(leaders) == 1 and target > 0:
            leader = leaders[0]
            called = max(
                (p.current_bet for p in self.players if p is not leader),
                default=0,
            )
            overage = target - called
            if overage > 0:
                leader.refund(overage)
                self.pot -= overage
                refunded[leader.id] = overage
                logger.debug(f"Returned uncalled {overage} to {leader.id}")

        collected = {}
        for player in self.players:
            if player.current_bet > 0:
                collected[player.id] = player.current_bet
                self.collected[player.id] = self.collected.get(player.id, 0) + player.current_bet
                player.current_bet = 0

        self.last_settlement = Settlement(
            settled=True,
            collected=collected,
            refunded=refunded,
        )
        return self.last_settlement

    def advance_phase(self) -> "Phase":
        """Close this round and open the next one.

        Bets are resolved first. Entering FLOP, TURN or RIVER deals that
        round's community cards from the same deck.

        Returns:
            The next phase, now holding the deck.

        Raises:
            InvalidPhaseTransition: At SHOWDOWN, on a closed round, or while
                bets are unmatched.
            ShortDeal: If the deck cannot cover the next tranche.
        """
        if self.name == PhaseName.SHOWDOWN:
            raise InvalidPhaseTransition("Showdown is the final phase")
        if not self.is_active:
            raise InvalidPhaseTransition(f"{self.name.value} has already advanced")

        next_name = NEXT_PHASE[self.name]
        tranche = COMMUNITY_TRANCHE.get(next_name, 0)
        if len(self._deck) < tranche:
            raise ShortDeal(tranche, len(self._deck))

        settlement = self.resolve_bets()
        if not settlement.settled:
            raise InvalidPhaseTransition(
                f"Cannot leave {self.name.value} with unmatched bets from {settlement.pending}"
            )

        deck = self._deck
        self._deck = None
        next_phase = Phase(
            players=self.players,
            deck=deck,
            name=next_name,
            pot=self.pot,
            community_cards=self.community_cards,
            dealer_pos=self.dealer_pos,
            small_blind_pos=self.small_blind_pos,
            big_blind_pos=self.big_blind_pos,
        )
        if tranche:
            next_phase.deal_community_cards(tranche)
        return next_phase

    def to_dict(self) -> dict:
        """Snapshot of the round."""
        return {
            "name": self.name.value,
            "pot": self.pot,
            "community_cards": [str(c) for c in self.community_cards],
            "current_player_pos": self.current_player_pos,
            "dealer_pos": self.dealer_pos,
            "small_blind_pos": self.small_blind_pos,
            "big_blind_pos": self.big_blind_pos,
            "players": [p.to_dict() for p in self.players],
        }
