"""
Position assignment relative to the button.

Positions run clockwise from the button:
BTN -> SB -> BB -> UTG -> UTG+1 -> ... -> CO (right of the button).

Only players dealt into the hand receive a position.
"""

from collections.abc import Sequence

from .enums import HandStage
from .player import POSITIONS_BY_PLAYER_COUNT, PokerPosition, SeatedPlayer, find_player_index

# Players without a known seat sort after everyone else
UNKNOWN_SEAT = 999


def get_player_position(button_index: int, player_index: int, total_active_players: int) -> PokerPosition:
    """
    Get the position label for a player relative to the button.

    Args:
        button_index: Index of the button player in the seat-ordered list
        player_index: Index of the player in the same list
        total_active_players: Number of players dealt in

    Returns:
        Position label; unsupported table sizes fall back to BTN/SB/BB/UTG
    """
    relative = (player_index - button_index + total_active_players) % total_active_players

    position_map = POSITIONS_BY_PLAYER_COUNT.get(total_active_players)
    if position_map and relative < len(position_map):
        return position_map[relative]

    if relative == 0:
        return PokerPosition.BTN
    if relative == 1:
        return PokerPosition.SB
    if relative == 2:
        return PokerPosition.BB
    return PokerPosition.UTG


def sort_players_by_seat(
    active_players: Sequence[SeatedPlayer],
    seat_positions: dict[str, int],
) -> list[SeatedPlayer]:
    """Order players clockwise by the seat map. Stable for unknown seats."""
    return sorted(active_players, key=lambda p: seat_positions.get(p.player_id, UNKNOWN_SEAT))


def _ordered(active_players: Sequence[SeatedPlayer], seat_positions: dict[str, int] | None) -> list[SeatedPlayer]:
    if seat_positions:
        return sort_players_by_seat(active_players, seat_positions)
    return list(active_players)


def get_position_assignments(
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
    seat_positions: dict[str, int] | None = None,
) -> dict[str, PokerPosition]:
    """
    Assign a position label to every active player.

    Args:
        active_players: Players dealt in, in seat order unless `seat_positions` is given
        button_player_id: ID of the button player
        seat_positions: Optional player_id -> seat number map used to order players

    Returns:
        Dict mapping player_id to position

    Raises:
        ValueError: If the button player is not among the active players
    """
    ordered = _ordered(active_players, seat_positions)
    button_index = find_player_index(ordered, button_player_id)
    if button_index == -1:
        raise ValueError(f"Button player {button_player_id} not found in active players")

    return {
        player.player_id: get_player_position(button_index, index, len(ordered))
        for index, player in enumerate(ordered)
    }


def get_position_for_player(
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
    target_player_id: str,
    seat_positions: dict[str, int] | None = None,
) -> PokerPosition:
    """Position of a single player. Raises ValueError if either player is missing."""
    ordered = _ordered(active_players, seat_positions)
    button_index = find_player_index(ordered, button_player_id)
    player_index = find_player_index(ordered, target_player_id)
    if button_index == -1 or player_index == -1:
        raise ValueError("Player not found in active players")
    return get_player_position(button_index, player_index, len(ordered))


def get_action_order(
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
    stage: HandStage,
) -> list[str]:
    """
    Player IDs in acting order for a street.

    Preflop starts under the gun (button + 3), postflop left of the button
    (button + 1); both wrap clockwise around the table.

    Raises:
        ValueError: If the button player is not among the active players
    """
    n = len(active_players)
    button_index = find_player_index(active_players, button_player_id)
    if button_index == -1:
        raise ValueError(f"Button player {button_player_id} not found in active players")

    offset = 3 if stage == HandStage.PREFLOP else 1
    first = (button_index + offset) % n
    return [active_players[(first + i) % n].player_id for i in range(n)]


def _button_index(ordered: Sequence[SeatedPlayer], button_player_id: str) -> int:
    button_index = find_player_index(ordered, button_player_id)
    if button_index == -1:
        raise ValueError(f"Button player {button_player_id} not found in active players")
    return button_index


def get_small_blind_player(
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
    seat_positions: dict[str, int] | None = None,
) -> SeatedPlayer:
    """
    Player who posts the small blind: left of the button, or the button
    itself heads-up.

    Raises:
        ValueError: If the button player is not among the active players
    """
    ordered = _ordered(active_players, seat_positions)
    button_index = _button_index(ordered, button_player_id)
    if len(ordered) == 2:
        return ordered[button_index]
    return ordered[(button_index + 1) % len(ordered)]


def get_big_blind_player(
    active_players: Sequence[SeatedPlayer],
    button_player_id: str,
    seat_positions: dict[str, int] | None = None,
) -> SeatedPlayer:
    """
    Player who posts the big blind: two left of the button, or the
    non-button player heads-up.

    Raises:
        ValueError: If the button player is not among the active players
    """
    ordered = _ordered(active_players, seat_positions)
    button_index = _button_index(ordered, button_player_id)
    offset = 1 if len(ordered) == 2 else 2
    return ordered[(button_index + offset) % len(ordered)]
