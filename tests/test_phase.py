"""Tests for the betting round state machine."""
import pytest
from cardtable.game.deck import Deck, full_deck
from cardtable.game.exceptions import (
    InsufficientChips,
    InvalidPhaseAction,
    InvalidPhaseTransition,
    NotEnoughPlayers,
    ShortDeal,
)
from cardtable.game.phase import Phase, PhaseName
from cardtable.game.player import Player


def make_players(*chips: int) -> list[Player]:
    """Create test players p0, p1, ... with the given stacks."""
    return [Player(name=f"player_{i}", chips=c, id=f"p{i}") for i, c in enumerate(chips)]


def make_deck(count: int = 52) -> Deck:
    """Create an unshuffled deck holding the first `count` cards."""
    return Deck(cards=full_deck()[:count])


class TestPhaseSetup:
    """Test positions and the first player to act."""

    def test_needs_two_players(self):
        """Test a phase cannot run with a single player."""
        with pytest.raises(NotEnoughPlayers):
            Phase(make_players(100), make_deck())

    def test_positions_three_players(self):
        """Test blinds sit left of the dealer and pre-flop opens after the big blind."""
        phase = Phase(make_players(100, 100, 100, 100), make_deck(), dealer_pos=1)

        assert phase.small_blind_pos == 2
        assert phase.big_blind_pos == 3
        assert phase.current_player_pos == 0

    def test_positions_heads_up(self):
        """Test heads-up dealer posts the small blind and acts first pre-flop."""
        phase = Phase(make_players(100, 100), make_deck(), dealer_pos=1)

        assert phase.small_blind_pos == 1
        assert phase.big_blind_pos == 0
        assert phase.current_player_pos == 1

    def test_post_flop_opens_left_of_dealer(self):
        """Test the first live player after the dealer opens later rounds."""
        players = make_players(100, 100, 100)
        players[0].fold()

        phase = Phase(players, make_deck(), name=PhaseName.FLOP, dealer_pos=2)

        assert phase.current_player_pos == 1


class TestDeal:
    """Test dealing hole cards."""

    def test_deals_two_cards_in_passes(self):
        """Test one card per player per pass, two passes."""
        cards = full_deck()
        players = make_players(100, 100, 100)
        phase = Phase(players, Deck(cards=cards))

        phase.deal()

        assert players[0].hand == [cards[0], cards[3]]
        assert players[1].hand == [cards[1], cards[4]]
        assert players[2].hand == [cards[2], cards[5]]
        assert len(phase.deck) == 46

    def test_deal_only_pre_flop(self):
        """Test hole cards cannot be dealt after pre-flop."""
        phase = Phase(make_players(100, 100), make_deck(), name=PhaseName.FLOP)

        with pytest.raises(InvalidPhaseAction):
            phase.deal()

    def test_deal_once(self):
        """Test hole cards are dealt once."""
        phase = Phase(make_players(100, 100), make_deck())
        phase.deal()

        with pytest.raises(InvalidPhaseAction):
            phase.deal()

    def test_deal_short_deck(self):
        """Test a deck without enough cards deals nothing."""
        players = make_players(100, 100, 100)
        deck = make_deck(5)
        phase = Phase(players, deck)

        with pytest.raises(ShortDeal):
            phase.deal()

        assert len(deck) == 5
        assert all(p.hand == [] for p in players)


class TestCommunityCards:
    """Test dealing the board."""

    def test_rejected_pre_flop(self):
        """Test pre-flop cannot deal community cards."""
        deck = make_deck()
        phase = Phase(make_players(100, 100), deck)

        with pytest.raises(InvalidPhaseAction):
            phase.deal_community_cards(3)

        assert phase.community_cards == []
        assert len(deck) == 52

    def test_rejected_at_showdown(self):
        """Test showdown cannot deal community cards."""
        phase = Phase(make_players(100, 100), make_deck(), name=PhaseName.SHOWDOWN)

        with pytest.raises(InvalidPhaseAction):
            phase.deal_community_cards(1)

    def test_flop_deals_three(self):
        """Test the flop appends three cards from the deck."""
        deck = make_deck()
        phase = Phase(make_players(100, 100), deck, name=PhaseName.FLOP)

        dealt = phase.deal_community_cards(3)

        assert len(dealt) == 3
        assert phase.community_cards == dealt
        assert len(deck) == 49

    def test_flop_dealt_once(self):
        """Test the flop cannot be dealt twice."""
        phase = Phase(make_players(100, 100), make_deck(), name=PhaseName.FLOP)
        phase.deal_community_cards(3)

        with pytest.raises(InvalidPhaseAction):
            phase.deal_community_cards(3)

        assert len(phase.community_cards) == 3

    def test_wrong_tranche(self):
        """Test the turn only takes a single card."""
        board = full_deck()[:3]
        phase = Phase(
            make_players(100, 100), make_deck(), name=PhaseName.TURN, community_cards=board
        )

        with pytest.raises(InvalidPhaseAction):
            phase.deal_community_cards(2)

        phase.deal_community_cards(1)
        assert len(phase.community_cards) == 4

    def test_short_deck(self):
        """Test a short deck reports the shortfall and draws nothing."""
        deck = make_deck(2)
        phase = Phase(make_players(100, 100), deck, name=PhaseName.FLOP)

        with pytest.raises(ShortDeal) as exc_info:
            phase.deal_community_cards(3)

        assert exc_info.value.requested == 3
        assert exc_info.value.available == 2
        assert phase.community_cards == []
        assert len(deck) == 2


class TestBetting:
    """Test bets, folds and the turn pointer."""

    def test_bet(self):
        """Test a bet moves chips to the pot and passes the turn."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)

        assert phase.current_player_pos == 2
        phase.bet(10)

        assert players[2].chips == 90
        assert players[2].current_bet == 10
        assert phase.pot == 10
        assert phase.current_player_pos == 0

    def test_bet_more_than_chips(self):
        """Test an oversized bet raises and changes nothing."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)

        with pytest.raises(InsufficientChips):
            phase.bet(150)

        assert players[2].chips == 100
        assert players[2].current_bet == 0
        assert phase.pot == 0
        assert phase.current_player_pos == 2

    def test_fold(self):
        """Test folding marks the player and passes the turn."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)

        phase.fold()

        assert players[2].is_folded
        assert phase.current_player_pos == 0

    def test_turn_skips_folded_players(self):
        """Test the turn passes over folded players."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)

        phase.fold()      # p2
        phase.bet(10)     # p0
        phase.bet(10)     # p1

        assert phase.current_player_pos == 0

    def test_turn_skips_all_in_players(self):
        """Test a player with no chips left is passed over."""
        players = make_players(100, 20, 100)
        phase = Phase(players, make_deck(), dealer_pos=0)

        phase.bet(20)     # p0
        phase.bet(20)     # p1 all-in
        phase.bet(20)     # p2
        phase.bet(10)     # p0

        assert players[1].chips == 0
        assert phase.current_player_pos == 2

    def test_next_player_wraps(self):
        """Test the pointer wraps from the last index to zero."""
        phase = Phase(make_players(100, 100, 100), make_deck())
        phase.current_player_pos = 2

        assert phase.next_player() == 0

    def test_next_player_full_lap(self):
        """Test a full lap returns the pointer to its start."""
        players = make_players(100, 100, 100, 100)
        players[1].fold()
        phase = Phase(players, make_deck(), dealer_pos=0)
        start = phase.current_player_pos

        for _ in range(len(players)):
            phase.next_player()

        assert phase.current_player_pos == start

    def test_folded_player_cannot_bet(self):
        """Test a folded player at the pointer cannot bet."""
        players = make_players(100, 100)
        phase = Phase(players, make_deck(), dealer_pos=1)
        players[1].fold()

        with pytest.raises(InvalidPhaseAction):
            phase.bet(10)

    def test_no_betting_at_showdown(self):
        """Test showdown takes no bets."""
        phase = Phase(make_players(100, 100), make_deck(), name=PhaseName.SHOWDOWN)

        with pytest.raises(InvalidPhaseAction):
            phase.bet(5)

    def test_post_blinds(self):
        """Test blinds are posted without moving the turn."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=0)

        phase.post_blinds(5, 10)

        assert players[1].chips == 95
        assert players[2].chips == 90
        assert phase.pot == 15
        assert phase.current_player_pos == 0

        with pytest.raises(InvalidPhaseAction):
            phase.post_blinds(5, 10)


class TestResolveBets:
    """Test settling a round."""

    def test_unmatched_bets_pending(self):
        """Test a live player short of the bet leaves the round open."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)
        phase.bet(10)     # p2
        phase.bet(10)     # p0
        phase.bet(5)      # p1

        settlement = phase.resolve_bets()

        assert not settlement.settled
        assert settlement.pending == ["p1"]
        assert not players[1].is_bet_matched
        assert players[1].current_bet == 5
        assert phase.pot == 25

    def test_matched_bets_collected(self):
        """Test matched bets are collected and reset."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)
        for _ in range(3):
            phase.bet(10)

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.collected == {"p0": 10, "p1": 10, "p2": 10}
        assert settlement.total_collected == 30
        assert all(p.current_bet == 0 for p in players)
        assert all(p.is_bet_matched for p in players)
        assert phase.pot == 30

    def test_folded_players_ignored(self):
        """Test a folded player's smaller bet does not block settlement."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)
        phase.bet(5)      # p2
        phase.bet(10)     # p0
        phase.bet(10)     # p1
        phase.fold()      # p2

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.collected == {"p0": 10, "p1": 10, "p2": 5}
        assert not players[2].is_bet_matched

    def test_uncalled_bet_returned(self):
        """Test a bet everyone folded to goes back to the bettor."""
        players = make_players(100, 100, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)
        phase.bet(20)     # p2
        phase.fold()      # p0
        phase.fold()      # p1

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.refunded == {"p2": 20}
        assert settlement.collected == {}
        assert players[2].chips == 100
        assert phase.pot == 0

    def test_short_all_in_matches(self):
        """Test an all-in player below the bet counts as matched."""
        players = make_players(100, 30, 100)
        phase = Phase(players, make_deck(), dealer_pos=2)
        phase.bet(50)     # p2
        phase.bet(50)     # p0
        phase.bet(30)     # p1 all-in

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.refunded == {}
        assert settlement.collected == {"p0": 50, "p1": 30, "p2": 50}

    def test_overage_above_all_in_returned(self):
        """Test the part of a bet no one could call is refunded."""
        players = make_players(100, 40)
        phase = Phase(players, make_deck(), name=PhaseName.FLOP, dealer_pos=1)
        phase.bet(80)     # p0
        phase.bet(40)     # p1 all-in

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.refunded == {"p0": 40}
        assert settlement.collected == {"p0": 40, "p1": 40}
        assert players[0].chips == 60
        assert phase.pot == 80

    def test_checked_round_settles(self):
        """Test a round with no bets settles with nothing collected."""
        phase = Phase(make_players(100, 100), make_deck(), name=PhaseName.TURN)

        settlement = phase.resolve_bets()

        assert settlement.settled
        assert settlement.collected == {}


class TestAdvancePhase:
    """Test moving between rounds."""

    def test_pre_flop_to_flop(self):
        """Test the flop inherits the round's state and deals three cards."""
        players = make_players(100, 100, 100)
        deck = make_deck()
        phase = Phase(players, deck, dealer_pos=2)
        for _ in range(3):
            phase.bet(10)

        flop = phase.advance_phase()

        assert flop.name == PhaseName.FLOP
        assert flop.players is players
        assert flop.pot == 30
        assert len(flop.community_cards) == 3
        assert flop.deck is deck
        assert len(deck) == 49
        assert (flop.dealer_pos, flop.small_blind_pos, flop.big_blind_pos) == (2, 0, 1)
        assert flop.current_player_pos == 0

    def test_old_phase_releases_deck(self):
        """Test a finished round can no longer draw or bet."""
        phase = Phase(make_players(100, 100), make_deck())
        phase.advance_phase()

        assert phase.deck is None
        assert not phase.is_active
        with pytest.raises(InvalidPhaseAction):
            phase.bet(5)
        with pytest.raises(InvalidPhaseTransition):
            phase.advance_phase()

    def test_unmatched_bets_block_advance(self):
        """Test advancing with open bets raises and keeps the round."""
        players = make_players(100, 100)
        deck = make_deck()
        phase = Phase(players, deck, dealer_pos=1)
        phase.bet(10)

        with pytest.raises(InvalidPhaseTransition):
            phase.advance_phase()

        assert phase.is_active
        assert len(deck) == 52

    def test_full_progression(self):
        """Test the board grows to five cards and stops at showdown."""
        phase = Phase(make_players(100, 100), make_deck())
        seen = [phase.name]
        board_sizes = []

        while phase.name != PhaseName.SHOWDOWN:
            phase = phase.advance_phase()
            seen.append(phase.name)
            board_sizes.append(len(phase.community_cards))

        assert seen == [
            PhaseName.PRE_FLOP,
            PhaseName.FLOP,
            PhaseName.TURN,
            PhaseName.RIVER,
            PhaseName.SHOWDOWN,
        ]
        assert board_sizes == [3, 4, 5, 5]
        with pytest.raises(InvalidPhaseTransition):
            phase.advance_phase()

    def test_short_deck_blocks_advance(self):
        """Test the round stays open when the deck cannot cover the next tranche."""
        phase = Phase(make_players(100, 100), make_deck(2))

        with pytest.raises(ShortDeal):
            phase.advance_phase()

        assert phase.is_active
