from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class SeatedPlayer:
    """A player dealt into a hand. `seat` is the physical seat number, if known."""
    player_id: str
    name: str = ""
    seat: int | None = None

    def __str__(self) -> str:
        seat_str = f"seat {self.seat}" if self.seat is not None else "unseated"
        return f"{self.name or self.player_id}({seat_str})"


class PokerPosition(str, Enum):
    BTN = "BTN"
    SB = "SB"
    BB = "BB"
    UTG = "UTG"
    UTG1 = "UTG+1"
    UTG2 = "UTG+2"
    MP1 = "MP1"
    MP2 = "MP2"
    LJ = "LJ"
    HJ = "HJ"
    CO = "CO"

    def __str__(self):
        return self.value


# Clockwise from the button. Heads-up the button posts the small blind.
POSITIONS_BY_PLAYER_COUNT: dict[int, list[PokerPosition]] = {
    2: [PokerPosition.BTN, PokerPosition.BB],
    3: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB],
    4: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG],
    5: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.CO],
    6: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.HJ, PokerPosition.CO],
    7: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.UTG1, PokerPosition.HJ, PokerPosition.CO],
    8: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.UTG1, PokerPosition.UTG2, PokerPosition.HJ, PokerPosition.CO],
    9: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.UTG1, PokerPosition.UTG2, PokerPosition.LJ, PokerPosition.HJ, PokerPosition.CO],
    10: [PokerPosition.BTN, PokerPosition.SB, PokerPosition.BB, PokerPosition.UTG, PokerPosition.UTG1, PokerPosition.UTG2, PokerPosition.MP1, PokerPosition.MP2, PokerPosition.HJ, PokerPosition.CO],
}


def find_player_index(players: list[SeatedPlayer] | tuple[SeatedPlayer, ...], player_id: str) -> int:
    """Index of `player_id` in `players`, or -1 when absent."""
    return next((i for i, p in enumerate(players) if p.player_id == player_id), -1)
