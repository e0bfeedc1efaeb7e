import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .enums import ActionType, PaymentPreference
from .money import DEFAULT_CURRENCY_SYMBOL, Amount, to_amount

STREETS = ("preflop", "flop", "turn", "river")


@dataclass(frozen=True)
class GameConfig:
    """Table settings shared by hand scripts and ledger files."""
    small_blind: Amount = 0
    big_blind: Amount = 0
    buy_in_amount: Amount = 0
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "GameConfig":
        return cls(
            small_blind=to_amount(raw.get("small_blind", 0)),
            big_blind=to_amount(raw.get("big_blind", 0)),
            buy_in_amount=to_amount(raw.get("buy_in_amount", 0)),
            currency_symbol=raw.get("currency_symbol", DEFAULT_CURRENCY_SYMBOL),
        )


def _read_json(path: str | Path) -> dict[str, Any]:
    with open(Path(path)) as f:
        raw = json.load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a JSON object")
    return raw


def load_script(path: str | Path) -> dict[str, Any]:
    """
    Load, validate and normalize a hand script file.

    Args:
        path: Path to JSON script file

    Returns:
        Normalized script dict
    """
    raw = _read_json(path)
    validate_script_structure(raw)
    return _normalize_script(raw)


def _normalize_script(script: dict) -> dict:
    """
    Normalize a hand script: action types become ActionType, amounts are
    parsed, and every street has an action list.
    """
    def norm_action(action: dict) -> dict:
        out = {
            "type": ActionType(action["type"]),
            "amount": to_amount(action.get("amount", 0)),
        }
        if "player" in action:
            out["player"] = str(action["player"])
        return out

    out = dict(script)
    out["config"] = GameConfig.from_dict(script)
    out["players"] = [
        {"id": str(p["id"]), "name": p.get("name", str(p["id"])), "seat": p.get("seat")}
        for p in script["players"]
    ]
    out["button"] = str(script["button"])
    out["dealt_out"] = [str(pid) for pid in script.get("dealt_out", [])]

    actions = script.get("actions", {})
    out["actions"] = {street: [norm_action(a) for a in actions.get(street, [])] for street in STREETS}
    return out


def validate_script_structure(script: dict) -> bool:
    """
    Validate that a hand script has the required fields.

    Returns:
        True if valid, raises ValueError if invalid
    """
    required_fields = ["small_blind", "big_blind", "players", "button"]

    for field in required_fields:
        if field not in script:
            raise ValueError(f"Script missing required field: {field}")

    players = script["players"]
    if not isinstance(players, list) or len(players) < 2:
        raise ValueError("players must be a list of at least 2 players")

    ids = []
    for i, p in enumerate(players):
        if not isinstance(p, dict) or "id" not in p:
            raise ValueError(f"players[{i}] must be an object with an id")
        ids.append(str(p["id"]))
    if len(set(ids)) != len(ids):
        raise ValueError("Duplicate player ID found in players")

    if str(script["button"]) not in ids:
        raise ValueError(f"button {script['button']} is not one of the players")

    actions = script.get("actions", {})
    if not isinstance(actions, dict):
        raise ValueError("actions must be an object keyed by street")
    for street, street_actions in actions.items():
        if street not in STREETS:
            raise ValueError(f"Unknown street in actions: {street}")
        for i, action in enumerate(street_actions):
            if "type" not in action:
                raise ValueError(f"actions.{street}[{i}] missing type")
            try:
                ActionType(action["type"])
            except ValueError as e:
                raise ValueError(f"actions.{street}[{i}] has unknown type {action['type']}") from e

    return True


def load_ledger(path: str | Path) -> dict[str, Any]:
    """
    Load a game ledger file.

    Returns:
        Dict with `config` (GameConfig), `players` (name, buy_ins,
        final_stack, payment_preference) and `manual_transfers`
        (from, to, amount)
    """
    raw = _read_json(path)
    validate_ledger_structure(raw)

    return {
        "config": GameConfig.from_dict(raw),
        "players": [
            {
                "name": p["name"],
                "buy_ins": int(p.get("buy_ins", 0)),
                "final_stack": to_amount(p.get("final_stack", 0)),
                "payment_preference": PaymentPreference.parse(p.get("payment_preference")),
            }
            for p in raw["players"]
        ],
        "manual_transfers": [
            {"from": t["from"], "to": t["to"], "amount": to_amount(t["amount"])}
            for t in raw.get("manual_transfers", [])
        ],
    }


def validate_ledger_structure(ledger: dict) -> bool:
    for field in ("buy_in_amount", "players"):
        if field not in ledger:
            raise ValueError(f"Ledger missing required field: {field}")

    names = []
    for i, p in enumerate(ledger["players"]):
        if "name" not in p:
            raise ValueError(f"players[{i}] missing name")
        names.append(p["name"])
    if len(set(names)) != len(names):
        raise ValueError("Duplicate player name found in ledger")

    for i, t in enumerate(ledger.get("manual_transfers", [])):
        for key in ("from", "to", "amount"):
            if key not in t:
                raise ValueError(f"manual_transfers[{i}] missing {key}")
        if to_amount(t["amount"]) <= 0:
            raise ValueError(f"manual_transfers[{i}] amount must be positive")

    return True
