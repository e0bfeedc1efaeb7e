from collections.abc import Sequence

from .enums import BETTING_STAGES, BLIND_ACTIONS, FORCED_RAISES, ActionType, HandStage
from .hand_state import (
    HandState,
    advance_street,
    apply_action,
    get_call_amount,
    get_next_player_index,
    is_street_complete,
    new_hand,
    post_blinds,
    should_end_hand_early,
)
from .logger import format_money_for_logging, get_logger
from .money import Amount, nonneg
from .player import SeatedPlayer
from .positions import get_position_for_player


class HandRecordingError(ValueError):
    """Raised when an action cannot be recorded in the current hand state."""


class HandRecorder:
    """Drives a HandState through a live hand as actions are entered.

    Keeps a snapshot history so the last recorded step can be undone.
    """

    def __init__(
        self,
        players: Sequence[SeatedPlayer],
        button_player_id: str,
        small_blind: Amount,
        big_blind: Amount,
        dealt_out: Sequence[str] = (),
        auto_advance: bool = True,
    ):
        self.state: HandState = new_hand(players, button_player_id, dealt_out)
        self.button_player_id = button_player_id
        self.small_blind = nonneg(small_blind)
        self.big_blind = nonneg(big_blind)
        self.auto_advance = auto_advance
        self.winner_id: str | None = None
        self.history: list[tuple[HandState, str | None]] = []
        self.logger = get_logger(__name__)

    def __str__(self) -> str:
        winner = self.winner_id or "None"
        return (f"HandRecorder(stage={self.state.stage.value}, pot={self.state.pot_size}, "
                f"winner={winner}, history={len(self.history)})\n    {self.state}")

    @property
    def is_complete(self) -> bool:
        return self.winner_id is not None or self.state.stage == HandStage.COMPLETE

    @property
    def current_player(self) -> SeatedPlayer | None:
        return self.state.current_player

    def start(self) -> HandState:
        """Deal in (setup -> preflop) and post the blinds."""
        if self.state.stage != HandStage.SETUP:
            raise HandRecordingError(f"Hand already started (stage {self.state.stage.value})")

        self._save()
        preflop = advance_street(self.state, self.button_player_id)
        self.state = post_blinds(preflop, self.small_blind, self.big_blind)
        self.logger.info(
            f"Hand started: {len(self.state.active_players)} players, blinds "
            f"{format_money_for_logging(self.small_blind)}/{format_money_for_logging(self.big_blind)}"
        )
        return self.state

    def record_action(self, action_type: ActionType, bet_size: Amount = 0) -> HandState:
        """
        Record an action for the player whose turn it is.

        Args:
            action_type: Action taken
            bet_size: New total street bet for Raise and straddles, amount for blinds

        Returns:
            The state after the action (and after any automatic street advance)

        Raises:
            HandRecordingError: If there is no open betting round or the bet
                size is illegal
        """
        action_type = ActionType(action_type)
        self._validate_action(action_type, bet_size)

        player = self.state.current_player
        if player.player_id not in self.state.players_in_hand:
            self.logger.warning(f"Player {player.player_id} is not in the hand, skipping to next player")
            self.state = self._with_next_player(self.state)
            return self.state

        self._save()
        position = get_position_for_player(self.state.active_players, self.button_player_id, player.player_id)
        self.state = apply_action(self.state, action_type, bet_size)
        self.logger.debug(
            f"{player.player_id} ({position}) {action_type.value} "
            f"{format_money_for_logging(bet_size) if bet_size else ''}".rstrip()
        )

        end = should_end_hand_early(self.state.active_players, self.state.players_in_hand)
        if end.should_end:
            self.winner_id = end.winner_id
            self.state = self.state.merge({"stage": HandStage.COMPLETE})
            self.logger.info(
                f"Hand over: {self.winner_id} wins {format_money_for_logging(self.state.pot_size)} uncontested"
            )
            return self.state

        if self.auto_advance and is_street_complete(self.state):
            self._advance()

        return self.state

    def can_advance(self) -> bool:
        """True when the current betting round is closed."""
        return self.state.stage in BETTING_STAGES and is_street_complete(self.state)

    def move_to_next_street(self) -> HandState:
        if self.is_complete:
            raise HandRecordingError("Hand is complete")
        if self.state.stage == HandStage.SETUP:
            raise HandRecordingError("Hand has not started")

        self._save()
        self._advance()
        return self.state

    def undo(self) -> bool:
        """Restore the snapshot taken before the last step. False if there is none."""
        if not self.history:
            return False
        self.state, self.winner_id = self.history.pop()
        self.logger.info(f"Undo: back to {self.state.stage.value}, {len(self.history)} snapshots left")
        return True

    def call_amount(self) -> Amount:
        player = self.state.current_player
        if player is None:
            return 0
        return get_call_amount(player.player_id, self.state.current_bet, self.state.street_player_bets)

    def _advance(self) -> None:
        from_stage = self.state.stage
        self.state = advance_street(self.state, self.button_player_id)
        self.logger.info(f"Street advance: {from_stage.value} → {self.state.stage.value}")

    def _save(self) -> None:
        self.history.append((self.state, self.winner_id))

    def _with_next_player(self, state: HandState) -> HandState:
        next_index = get_next_player_index(
            state.current_player_index,
            state.stage,
            state.active_players,
            state.button_player_index,
            state.players_in_hand,
        )
        return state.merge({"current_player_index": next_index})

    def _validate_action(self, action_type: ActionType, bet_size: Amount) -> None:
        """Validate that an action is legal given the current state."""
        if self.is_complete:
            raise HandRecordingError("Hand is complete")

        stage = self.state.stage
        if stage not in BETTING_STAGES:
            raise HandRecordingError(f"Cannot act during {stage.value}")

        if self.state.current_player is None:
            raise HandRecordingError("No player to act")

        if is_street_complete(self.state):
            raise HandRecordingError("Betting round is complete; move to the next street")

        if bet_size < 0:
            raise HandRecordingError(f"Negative bet size not allowed: {bet_size}")

        if action_type == ActionType.RAISE or action_type in FORCED_RAISES:
            if bet_size <= self.state.current_bet:
                raise HandRecordingError(
                    f"Raise to {bet_size} must be greater than current bet {self.state.current_bet}"
                )

        if action_type in FORCED_RAISES or action_type in BLIND_ACTIONS:
            if stage != HandStage.PREFLOP:
                raise HandRecordingError(f"{action_type.value} is only allowed preflop")

        if action_type == ActionType.CHECK:
            if self.call_amount() > 0:
                raise HandRecordingError(f"Cannot check when facing {self.call_amount()} to call")
