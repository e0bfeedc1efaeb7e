from enum import Enum


class HandStage(str, Enum):
    SETUP = "setup"
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"
    SHOWDOWN = "showdown"
    COMPLETE = "complete"


class ActionType(str, Enum):
    SMALL_BLIND = "Small Blind"
    BIG_BLIND = "Big Blind"
    STRADDLE = "Straddle"
    RE_STRADDLE = "Re-Straddle"
    CHECK = "Check"
    CALL = "Call"
    RAISE = "Raise"
    FOLD = "Fold"


class PaymentPreference(str, Enum):
    CASH = "cash"
    DIGITAL = "digital"

    @classmethod
    def parse(cls, value: "str | PaymentPreference | None") -> "PaymentPreference":
        """Missing preferences default to digital; "upi" is an alias for digital."""
        if value is None or value == "":
            return cls.DIGITAL
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "upi":
            return cls.DIGITAL
        try:
            return cls(normalized)
        except ValueError as e:
            raise ValueError(f"Unknown payment preference: {value}") from e


BLIND_ACTIONS = frozenset({ActionType.SMALL_BLIND, ActionType.BIG_BLIND})
# Preflop raises made in the dark; they reopen action like a Raise
FORCED_RAISES = frozenset({ActionType.STRADDLE, ActionType.RE_STRADDLE})
BETTING_STAGES = (HandStage.PREFLOP, HandStage.FLOP, HandStage.TURN, HandStage.RIVER)
