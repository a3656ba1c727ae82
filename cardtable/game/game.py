"""A single hand: deck, players and its betting rounds."""
import logging
from typing import Optional, Sequence, TYPE_CHECKING

from cardtable.game.deck import Deck
from cardtable.game.exceptions import InvalidBlind, NotEnoughPlayers
from cardtable.game.notifier import Notifier
from cardtable.game.phase import Phase, PhaseName, Settlement
from cardtable.game.pot import Pot, SidePot
from cardtable.protocol.messages import PHASE_CHANGED, PhaseChangedMessage
from cardtable.utils.ids import generate_id
from cardtable.utils.logger import get_logger

if TYPE_CHECKING:
    from cardtable.game.player import Player

module_logger = get_logger(__name__)


class Game:
    """One hand of Hold'em from the deal to showdown.

    The game owns its deck; each phase only borrows it while active. The
    player list is a snapshot taken when the hand starts, and positions are
    indices into that list.
    """

    def __init__(
        self,
        small_blind: int,
        big_blind: int,
        players: Sequence["Player"],
        game_id: Optional[str] = None,
        dealer_pos: Optional[int] = None,
        deck: Optional[Deck] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Start a hand and deal hole cards.

        Args:
            small_blind: Small blind amount.
            big_blind: Big blind amount.
            players: Players in hand order.
            game_id: Identifier, generated if omitted.
            dealer_pos: Dealer index. Defaults to the last player, since
                tables list players starting after the dealer.
            deck: Deck to play with. A fresh shuffled deck if omitted.
            logger: Logger to report to.

        Raises:
            NotEnoughPlayers: With fewer than 2 players.
            InvalidBlind: If a blind is not positive.
        """
        if len(players) < 2:
            raise NotEnoughPlayers(f"A game needs at least 2 players, got {len(players)}")
        if small_blind <= 0:
            raise InvalidBlind(small_blind, "Small blind")
        if big_blind <= 0:
            raise InvalidBlind(big_blind, "Big blind")

        self.id = game_id or generate_id()
        self.small_blind = small_blind
        self.big_blind = big_blind
        self.players: list["Player"] = list(players)
        self.logger = logger or module_logger
        self.notifier = Notifier(source=f"game:{self.id}")
        self.ledger = Pot()
        self._deck = deck if deck is not None else Deck()

        for player in self.players:
            player.reset_for_new_hand()

        if dealer_pos is None:
            dealer_pos = len(self.players) - 1

        phase = Phase(
            players=self.players,
            deck=self._deck,
            name=PhaseName.PRE_FLOP,
            pot=0,
            dealer_pos=dealer_pos,
        )
        self.phases: list[Phase] = [phase]
        self.current_phase = phase
        phase.deal()

        self.logger.info(
            f"Game {self.id} started with {len(self.players)} players",
            extra={"game_id": self.id, "player_ids": [p.id for p in self.players]},
        )

    @property
    def deck(self) -> Deck:
        return self._deck

    @property
    def pot(self) -> int:
        """Chips in the pot, including bets not yet collected."""
        return self.current_phase.pot

    @property
    def dealer_pos(self) -> int:
        return self.current_phase.dealer_pos

    @property
    def small_blind_pos(self) -> int:
        return self.current_phase.small_blind_pos

    @property
    def big_blind_pos(self) -> int:
        return self.current_phase.big_blind_pos

    @property
    def community_cards(self) -> list:
        return self.current_phase.community_cards

    @property
    def is_complete(self) -> bool:
        return self.current_phase.name == PhaseName.SHOWDOWN

    def active_players(self) -> list["Player"]:
        """Players still in the hand."""
        return self.current_phase.live_players()

    def post_blinds(self) -> None:
        """Post the small and big blind on the pre-flop round."""
        self.current_phase.post_blinds(self.small_blind, self.big_blind)
        self.logger.info(
            f"Blinds posted: {self.players[self.small_blind_pos].name}={self.small_blind}, "
            f"{self.players[self.big_blind_pos].name}={self.big_blind}"
        )

    def bet(self, amount: int) -> None:
        """Bet for the player whose turn it is."""
        self.current_phase.bet(amount)

    def fold(self) -> None:
        """Fold the player whose turn it is."""
        self.current_phase.fold()

    def resolve_bets(self) -> Settlement:
        """Resolve the active round's bets."""
        return self.current_phase.resolve_bets()

    def advance_phase(self) -> Phase:
        """Move to the next betting round.

        Returns:
            The new active phase.
        """
        previous = self.current_phase
        phase = previous.advance_phase()
        self.ledger.collect(previous.collected)

        self.phases.append(phase)
        self.current_phase = phase

        self.logger.info(
            f"Game {self.id} advanced to {phase.name.value}, pot {phase.pot}",
            extra={"game_id": self.id, "phase": phase.name.value},
        )
        self.notifier.emit(PHASE_CHANGED, PhaseChangedMessage(
            game_id=self.id,
            phase=phase.name.value,
            community_cards=[str(c) for c in phase.community_cards],
            pot=phase.pot,
        ))
        return phase

    def side_pots(self) -> list[SidePot]:
        """Split collected chips into main and side pots."""
        all_in = {
            p.id: self.ledger.get_contribution(p.id)
            for p in self.players
            if p.is_all_in
        }
        folded = [p.id for p in self.players if p.is_folded]
        return self.ledger.calculate_side_pots(all_in, folded)

    def to_dict(self) -> dict:
        """Snapshot of the hand."""
        return {
            "id": self.id,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "pot": self.pot,
            "phase": self.current_phase.to_dict(),
            "phases": [p.name.value for p in self.phases],
            "ledger": self.ledger.to_dict(),
        }
