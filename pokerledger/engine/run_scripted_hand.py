from typing import Any

from .enums import BETTING_STAGES, HandStage
from .hand_recorder import HandRecorder
from .logger import get_logger
from .player import SeatedPlayer
from .script_loader import STREETS

logger = get_logger(__name__)


def build_recorder(script: dict[str, Any]) -> HandRecorder:
    """Create a recorder for a normalized script (see script_loader.load_script)."""
    config = script["config"]
    players = [SeatedPlayer(player_id=p["id"], name=p["name"], seat=p["seat"]) for p in script["players"]]
    return HandRecorder(
        players=players,
        button_player_id=script["button"],
        small_blind=config.small_blind,
        big_blind=config.big_blind,
        dealt_out=script["dealt_out"],
    )


def run_script(script: dict[str, Any]) -> HandRecorder:
    """
    Replay a scripted hand.

    Blinds are posted automatically; the script lists the remaining
    actions per street in acting order. Streets advance when their betting
    round closes.

    Raises:
        ValueError: If an action is listed for a street the hand is not on,
            or an action names a player other than the one to act
    """
    recorder = build_recorder(script)
    recorder.start()

    for street in STREETS:
        for i, action in enumerate(script["actions"][street]):
            if recorder.is_complete:
                raise ValueError(f"{street}[{i}]: hand already ended")

            stage = recorder.state.stage
            if stage.value != street:
                raise ValueError(f"{street}[{i}]: hand is on {stage.value}")

            expected = action.get("player")
            actor = recorder.current_player.player_id
            if expected is not None and expected != actor:
                raise ValueError(f"{street}[{i}]: expected {expected} to act, but it is {actor}'s turn")

            recorder.record_action(action["type"], action["amount"])

    final_stage = recorder.state.stage
    if not recorder.is_complete and final_stage in BETTING_STAGES:
        logger.info(f"Script ended with betting still open on {final_stage.value}")
    elif final_stage == HandStage.SHOWDOWN:
        logger.info(f"Showdown between {', '.join(recorder.state.players_in_hand)}")

    return recorder
