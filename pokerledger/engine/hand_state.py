"""
Betting-round state machine for recording a single poker hand.

Every function here is pure: it takes an explicit HandState and returns
either a derived value, a patch dict (process_action, reset_for_new_street)
or a new HandState (the reducers at the bottom of the module). Nothing is
mutated in place.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, fields, replace
from typing import Any

from .enums import BETTING_STAGES, BLIND_ACTIONS, FORCED_RAISES, ActionType, HandStage
from .money import Amount
from .outcome import Outcome
from .player import SeatedPlayer, find_player_index
from .positions import get_big_blind_player, get_small_blind_player

STAGE_PROGRESSION: dict[HandStage, HandStage] = {
    HandStage.SETUP: HandStage.PREFLOP,
    HandStage.PREFLOP: HandStage.FLOP,
    HandStage.FLOP: HandStage.TURN,
    HandStage.TURN: HandStage.RIVER,
    HandStage.RIVER: HandStage.SHOWDOWN,
    HandStage.SHOWDOWN: HandStage.COMPLETE,
    HandStage.COMPLETE: HandStage.COMPLETE,
}


@dataclass(frozen=True)
class PlayerAction:
    """One recorded action on a street."""
    player_id: str
    action_type: ActionType
    bet_size: Amount = 0
    stage: HandStage = HandStage.PREFLOP
    sequence: int = 0


@dataclass(frozen=True)
class HandEnd:
    should_end: bool
    winner_id: str | None = None


@dataclass(frozen=True)
class HandState:
    """Immutable snapshot of a hand in progress.

    `active_players` is the seat-ordered list of players dealt in and never
    changes during the hand; folds only shrink `players_in_hand`, so indices
    into `active_players` stay stable.
    """
    stage: HandStage
    active_players: tuple[SeatedPlayer, ...]
    players_in_hand: tuple[str, ...]
    button_player_index: int
    current_player_index: int = 0
    current_bet: Amount = 0
    pot_size: Amount = 0
    street_player_bets: dict[str, Amount] = field(default_factory=dict)
    total_player_bets: dict[str, Amount] = field(default_factory=dict)
    street_actions: tuple[PlayerAction, ...] = ()
    action_sequence: int = 0
    last_aggressor_index: int | None = None
    dealt_out_players: tuple[str, ...] = ()
    all_actions: tuple[PlayerAction, ...] = ()

    def __post_init__(self):
        active_ids = {p.player_id for p in self.active_players}
        stray = [pid for pid in self.players_in_hand if pid not in active_ids]
        if stray:
            raise ValueError(f"Players in hand are not seated: {stray}")

    def __str__(self) -> str:
        in_hand = ", ".join(self.players_in_hand) or "None"
        return (f"HandState(stage={self.stage.value}, pot={self.pot_size}, "
                f"current_bet={self.current_bet}, to_act={self.current_player_index}, "
                f"aggressor={self.last_aggressor_index}, in_hand=[{in_hand}])")

    @property
    def button_player_id(self) -> str | None:
        if 0 <= self.button_player_index < len(self.active_players):
            return self.active_players[self.button_player_index].player_id
        return None

    @property
    def current_player(self) -> SeatedPlayer | None:
        if 0 <= self.current_player_index < len(self.active_players):
            return self.active_players[self.current_player_index]
        return None

    def merge(self, patch: dict[str, Any]) -> "HandState":
        """Return a new state with `patch` applied. Unknown keys raise ValueError."""
        known = {f.name for f in fields(self)}
        unknown = set(patch) - known
        if unknown:
            raise ValueError(f"Unknown HandState fields: {sorted(unknown)}")
        return replace(self, **patch)


def _remaining_players(active_players: Sequence[SeatedPlayer], players_in_hand: Sequence[str]) -> list[SeatedPlayer]:
    in_hand = set(players_in_hand)
    return [p for p in active_players if p.player_id in in_hand]


def get_next_stage(current_stage: HandStage) -> HandStage:
    return STAGE_PROGRESSION.get(HandStage(current_stage), current_stage)


def get_call_amount(player_id: str, current_bet: Amount, street_player_bets: dict[str, Amount]) -> Amount:
    """Chips `player_id` still has to put in to match the current bet."""
    return max(0, current_bet - street_player_bets.get(player_id, 0))


def get_starting_player_index(
    stage: HandStage,
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
) -> int:
    """
    Index of the first player to act on a street.

    Preflop action starts under the gun, three seats left of the button
    (button + 1 = SB, + 2 = BB). Postflop it starts immediately left of
    the button. Folded players are not skipped here; callers rotate
    forward with get_next_player_index when the seat is no longer in.

    Args:
        stage: Street being started
        active_players: Players dealt in, sorted by seat
        button_player_id: ID of the button player

    Returns:
        Index into active_players, or 0 when the table is empty or the
        button is not seated
    """
    if not active_players:
        return 0

    button_index = find_player_index(active_players, button_player_id)
    if button_index == -1:
        return 0

    if stage == HandStage.PREFLOP:
        return (button_index + 3) % len(active_players)
    return (button_index + 1) % len(active_players)


def find_next_player_index(
    current_index: int,
    stage: HandStage,
    active_players: Sequence[SeatedPlayer],
    button_player_index: int,
    players_in_hand: Sequence[str],
) -> Outcome:
    """
    Rotate clockwise from `current_index` to the next player still in the hand.

    Returns:
        Outcome with the next index, or a failure carrying `current_index`
        when a full lap finds nobody eligible
    """
    n = len(active_players)
    if n == 0:
        return Outcome.failure("no active players", value=0)

    in_hand = set(players_in_hand)
    next_index = (current_index + 1) % n
    for _ in range(n):
        if active_players[next_index].player_id in in_hand:
            return Outcome.success(next_index)
        next_index = (next_index + 1) % n

    return Outcome.failure("no eligible player after a full rotation", value=current_index)


def get_next_player_index(
    current_index: int,
    stage: HandStage,
    active_players: Sequence[SeatedPlayer],
    button_player_index: int,
    players_in_hand: Sequence[str],
) -> int:
    """Next player to act, skipping folded or dealt-out seats.

    Falls back to `current_index` after a full lap with nobody eligible;
    callers should re-check should_end_hand_early in that case.
    """
    return find_next_player_index(
        current_index, stage, active_players, button_player_index, players_in_hand
    ).value


def _last_aggressive_action_index(
    stage: HandStage,
    street_actions: Sequence[PlayerAction],
    aggressor_id: str,
) -> int:
    for i in range(len(street_actions) - 1, -1, -1):
        action = street_actions[i]
        if action.player_id != aggressor_id:
            continue
        if action.action_type == ActionType.RAISE:
            return i
        preflop_forced = action.action_type == ActionType.BIG_BLIND or action.action_type in FORCED_RAISES
        if stage == HandStage.PREFLOP and preflop_forced:
            return i
    return -1


def is_betting_round_complete(
    stage: HandStage,
    active_players: Sequence[SeatedPlayer],
    players_in_hand: Sequence[str],
    street_player_bets: dict[str, Amount],
    street_actions: Sequence[PlayerAction],
    button_player_id: str,
    last_aggressor_index: int | None,
) -> bool:
    """
    Check whether the current betting round is over.

    The round closes when one player is left, or when all of:
    1. every remaining player has the same street bet,
    2. if someone raised, every other remaining player has acted since
       the aggressor's most recent raise (or big blind post or straddle
       preflop),
    3. preflop: the SB and BB seats each have a non-blind action;
       postflop: every remaining player has acted this street.

    Bet equality alone is not enough: a player who called a smaller bet
    before a raise has matching chips only if the raise was theirs.
    """
    remaining = _remaining_players(active_players, players_in_hand)
    if len(remaining) <= 1:
        return True

    active_bets = [street_player_bets.get(p.player_id, 0) for p in remaining]
    max_bet = max(active_bets)
    if any(bet != max_bet for bet in active_bets):
        return False

    if last_aggressor_index is not None:
        if not 0 <= last_aggressor_index < len(active_players):
            return False
        aggressor_id = active_players[last_aggressor_index].player_id

        raise_index = _last_aggressive_action_index(stage, street_actions, aggressor_id)
        if raise_index == -1:
            return False

        acted_since = {a.player_id for a in street_actions[raise_index + 1:]}
        for player in remaining:
            if player.player_id == aggressor_id:
                continue
            if player.player_id not in acted_since:
                return False

    if stage == HandStage.PREFLOP:
        if find_player_index(active_players, button_player_id) == -1:
            return False

        sb_id = get_small_blind_player(active_players, button_player_id).player_id
        bb_id = get_big_blind_player(active_players, button_player_id).player_id

        sb_acted = any(a.player_id == sb_id and a.action_type not in BLIND_ACTIONS for a in street_actions)
        bb_acted = any(a.player_id == bb_id and a.action_type not in BLIND_ACTIONS for a in street_actions)
        if not (sb_acted and bb_acted):
            return False
    else:
        acted = {a.player_id for a in street_actions}
        if any(p.player_id not in acted for p in remaining):
            return False

    return True


def should_end_hand_early(active_players: Sequence[SeatedPlayer], players_in_hand: Sequence[str]) -> HandEnd:
    """The hand ends immediately when exactly one player has not folded."""
    remaining = _remaining_players(active_players, players_in_hand)
    if len(remaining) == 1:
        return HandEnd(should_end=True, winner_id=remaining[0].player_id)
    return HandEnd(should_end=False)


def process_action(state: HandState, action_type: ActionType, bet_size: Amount = 0) -> dict[str, Any]:
    """
    Compute the state changes caused by the current player's action.

    Args:
        state: Hand state before the action
        action_type: Action taken by the player at current_player_index
        bet_size: For Raise and straddles the new total street bet (not a delta);
            for blinds the amount posted; ignored otherwise

    Returns:
        Patch dict of changed HandState fields. Empty when there is no
        player at current_player_index.
    """
    player = state.current_player
    if player is None:
        return {}

    action_type = ActionType(action_type)
    pid = player.player_id
    street_bet = state.street_player_bets.get(pid, 0)

    if action_type == ActionType.CALL:
        additional = get_call_amount(pid, state.current_bet, state.street_player_bets)
    elif action_type == ActionType.RAISE or action_type in FORCED_RAISES:
        additional = bet_size - street_bet
    elif action_type in BLIND_ACTIONS:
        additional = bet_size
    else:
        additional = 0

    new_street_bet = street_bet + additional
    updates: dict[str, Any] = {
        "pot_size": state.pot_size + additional,
        "street_player_bets": {**state.street_player_bets, pid: new_street_bet},
        "total_player_bets": {
            **state.total_player_bets,
            pid: state.total_player_bets.get(pid, 0) + additional,
        },
        "action_sequence": state.action_sequence + 1,
    }

    if action_type == ActionType.RAISE or action_type in FORCED_RAISES:
        updates["current_bet"] = bet_size
        updates["last_aggressor_index"] = state.current_player_index

    if action_type in BLIND_ACTIONS:
        updates["current_bet"] = max(state.current_bet, new_street_bet)

    # BB is the initial aggressor preflop
    if action_type == ActionType.BIG_BLIND and state.stage == HandStage.PREFLOP:
        updates["last_aggressor_index"] = state.current_player_index

    if action_type == ActionType.FOLD:
        updates["players_in_hand"] = tuple(p for p in state.players_in_hand if p != pid)

    return updates


def reset_for_new_street(state: HandState, button_player_id: str) -> dict[str, Any]:
    """Patch that moves the hand to the next stage with fresh street-scoped fields."""
    new_stage = get_next_stage(state.stage)
    return {
        "stage": new_stage,
        "current_player_index": get_starting_player_index(new_stage, state.active_players, button_player_id),
        "current_bet": 0,
        "street_player_bets": {p.player_id: 0 for p in state.active_players},
        "street_actions": (),
        "last_aggressor_index": None,
    }


# Reducers: whole-state transitions built on the patches above


def new_hand(
    players: Sequence[SeatedPlayer],
    button_player_id: str,
    dealt_out: Sequence[str] = (),
) -> HandState:
    """
    Build the `setup` state for a hand.

    Raises:
        ValueError: If the button player is not dealt in, or fewer than two players are
    """
    dealt_out_ids = set(dealt_out)
    active = tuple(p for p in players if p.player_id not in dealt_out_ids)
    if len(active) < 2:
        raise ValueError(f"A hand needs at least 2 players dealt in, got {len(active)}")

    button_index = find_player_index(active, button_player_id)
    if button_index == -1:
        raise ValueError(f"Button player {button_player_id} is not dealt into the hand")

    zeroes = {p.player_id: 0 for p in active}
    return HandState(
        stage=HandStage.SETUP,
        active_players=active,
        players_in_hand=tuple(p.player_id for p in active),
        button_player_index=button_index,
        current_player_index=button_index,
        street_player_bets=dict(zeroes),
        total_player_bets=dict(zeroes),
        dealt_out_players=tuple(dealt_out),
    )


def is_street_complete(state: HandState) -> bool:
    return is_betting_round_complete(
        state.stage,
        state.active_players,
        state.players_in_hand,
        state.street_player_bets,
        state.street_actions,
        state.button_player_id,
        state.last_aggressor_index,
    )


def apply_action(state: HandState, action_type: ActionType, bet_size: Amount = 0) -> HandState:
    """
    Record the current player's action and return the resulting state.

    The action goes into street_actions and all_actions, the bet patch is
    merged, and the turn passes to the next player still in the hand. The
    actor is left in place when the hand is over or the round has closed.
    """
    player = state.current_player
    if player is None:
        return state

    action_type = ActionType(action_type)
    action = PlayerAction(
        player_id=player.player_id,
        action_type=action_type,
        bet_size=bet_size,
        stage=state.stage,
        sequence=state.action_sequence,
    )

    new_state = state.merge(process_action(state, action_type, bet_size)).merge({
        "street_actions": state.street_actions + (action,),
        "all_actions": state.all_actions + (action,),
    })

    if should_end_hand_early(new_state.active_players, new_state.players_in_hand).should_end:
        return new_state
    if is_street_complete(new_state):
        return new_state

    next_index = get_next_player_index(
        new_state.current_player_index,
        new_state.stage,
        new_state.active_players,
        new_state.button_player_index,
        new_state.players_in_hand,
    )
    return new_state.merge({"current_player_index": next_index})


def advance_street(state: HandState, button_player_id: str | None = None) -> HandState:
    """
    Move to the next stage. If the starting seat has folded, action starts
    with the next player still in the hand.
    """
    button_id = button_player_id or state.button_player_id
    new_state = state.merge(reset_for_new_street(state, button_id))

    if new_state.stage not in BETTING_STAGES or not new_state.active_players:
        return new_state

    starting = new_state.current_player
    if starting is not None and starting.player_id not in new_state.players_in_hand:
        n = len(new_state.active_players)
        index = get_next_player_index(
            (new_state.current_player_index - 1 + n) % n,
            new_state.stage,
            new_state.active_players,
            new_state.button_player_index,
            new_state.players_in_hand,
        )
        new_state = new_state.merge({"current_player_index": index})

    return new_state


def blind_indices(state: HandState) -> tuple[int, int]:
    """Seat indices of the small and big blind. Heads-up the button posts the small blind."""
    button_id = state.button_player_id
    sb = get_small_blind_player(state.active_players, button_id)
    bb = get_big_blind_player(state.active_players, button_id)
    return (
        find_player_index(state.active_players, sb.player_id),
        find_player_index(state.active_players, bb.player_id),
    )


def post_blinds(state: HandState, small_blind: Amount, big_blind: Amount) -> HandState:
    """
    Post both blinds on a preflop state and hand the action to the first
    player after the big blind.

    Raises:
        ValueError: If the state is not preflop or blinds were already posted
    """
    if state.stage != HandStage.PREFLOP:
        raise ValueError(f"Blinds are posted preflop, hand is at {state.stage.value}")
    if state.street_actions:
        raise ValueError("Blinds already posted for this hand")

    sb_index, bb_index = blind_indices(state)
    state = apply_action(state.merge({"current_player_index": sb_index}), ActionType.SMALL_BLIND, small_blind)
    state = apply_action(state.merge({"current_player_index": bb_index}), ActionType.BIG_BLIND, big_blind)
    return state
