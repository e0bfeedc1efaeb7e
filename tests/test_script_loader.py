import json

import pytest

from pokerledger.engine.enums import ActionType, PaymentPreference
from pokerledger.engine.script_loader import (
    GameConfig,
    load_ledger,
    load_script,
    validate_ledger_structure,
    validate_script_structure,
)


def minimal_script(**overrides):
    script = {
        "small_blind": 50,
        "big_blind": 100,
        "players": [{"id": "p0"}, {"id": "p1"}],
        "button": "p0",
    }
    script.update(overrides)
    return script


def write_json(tmp_path, data, name="data.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data))
    return path


class TestLoadScript:

    def test_normalizes_actions_and_players(self, data_dir):
        script = load_script(data_dir / "scripts" / "three_way_to_showdown.json")

        assert script["config"] == GameConfig(small_blind=50, big_blind=100)
        assert script["players"][0] == {"id": "p0", "name": "Asha", "seat": 1}
        assert script["button"] == "p0"
        assert script["dealt_out"] == []
        assert script["actions"]["preflop"][0] == {"type": ActionType.RAISE, "amount": 300, "player": "p0"}
        assert script["actions"]["preflop"][1] == {"type": ActionType.CALL, "amount": 0, "player": "p1"}

    def test_missing_streets_get_empty_lists(self, tmp_path):
        path = write_json(tmp_path, minimal_script(actions={"preflop": [{"type": "Fold"}]}))
        script = load_script(path)
        assert script["actions"]["flop"] == []
        assert script["actions"]["river"] == []
        assert script["actions"]["preflop"] == [{"type": ActionType.FOLD, "amount": 0}]

    def test_string_amounts_and_default_names(self, data_dir):
        script = load_script(data_dir / "scripts" / "straddle_with_sitout.json")
        assert script["config"].small_blind == 10
        assert script["config"].big_blind == 20
        assert script["dealt_out"] == ["p4"]

        bare = load_script(data_dir / "scripts" / "wrong_player.json")
        assert bare["players"][1] == {"id": "p1", "name": "p1", "seat": None}

    def test_top_level_must_be_object(self, tmp_path):
        path = write_json(tmp_path, [1, 2, 3])
        with pytest.raises(ValueError, match="JSON object"):
            load_script(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_script(tmp_path / "nope.json")


class TestValidateScriptStructure:

    def test_valid(self):
        assert validate_script_structure(minimal_script()) is True

    @pytest.mark.parametrize("field", ["small_blind", "big_blind", "players", "button"])
    def test_missing_required_field(self, field):
        script = minimal_script()
        del script[field]
        with pytest.raises(ValueError, match=f"Script missing required field: {field}"):
            validate_script_structure(script)

    def test_needs_two_players(self):
        with pytest.raises(ValueError, match="at least 2"):
            validate_script_structure(minimal_script(players=[{"id": "p0"}]))

    def test_player_needs_id(self):
        with pytest.raises(ValueError, match=r"players\[1\]"):
            validate_script_structure(minimal_script(players=[{"id": "p0"}, {"name": "x"}]))

    def test_duplicate_ids(self):
        with pytest.raises(ValueError, match="Duplicate player ID"):
            validate_script_structure(minimal_script(players=[{"id": "p0"}, {"id": "p0"}]))

    def test_button_must_be_seated(self):
        with pytest.raises(ValueError, match="button"):
            validate_script_structure(minimal_script(button="p9"))

    def test_unknown_street(self):
        with pytest.raises(ValueError, match="Unknown street"):
            validate_script_structure(minimal_script(actions={"showdown": []}))

    def test_unknown_action_type(self):
        with pytest.raises(ValueError, match="unknown type"):
            validate_script_structure(minimal_script(actions={"flop": [{"type": "Bet"}]}))

    def test_re_straddle_is_a_known_type(self, tmp_path):
        path = write_json(tmp_path, minimal_script(actions={"preflop": [{"type": "Re-Straddle", "amount": 400}]}))
        assert load_script(path)["actions"]["preflop"] == [{"type": ActionType.RE_STRADDLE, "amount": 400}]

    def test_action_without_type(self):
        with pytest.raises(ValueError, match=r"actions.turn\[0\] missing type"):
            validate_script_structure(minimal_script(actions={"turn": [{"amount": 10}]}))


class TestLoadLedger:

    def test_load(self, data_dir):
        ledger = load_ledger(data_dir / "ledgers" / "friday_game.json")

        assert ledger["config"].buy_in_amount == 500
        assert ledger["config"].currency_symbol == "Rs."
        assert ledger["players"][0] == {
            "name": "Asha",
            "buy_ins": 2,
            "final_stack": 500,
            "payment_preference": PaymentPreference.CASH,
        }
        # "upi" is an alias for digital
        assert ledger["players"][1]["payment_preference"] == PaymentPreference.DIGITAL
        assert ledger["manual_transfers"] == []

    def test_missing_preference_defaults_to_digital(self, data_dir):
        ledger = load_ledger(data_dir / "ledgers" / "with_transfer.json")
        assert ledger["players"][1]["payment_preference"] == PaymentPreference.DIGITAL
        assert ledger["manual_transfers"] == [{"from": "Asha", "to": "Bilal", "amount": 100}]

    def test_unknown_preference(self, tmp_path):
        path = write_json(tmp_path, {
            "buy_in_amount": 100,
            "players": [{"name": "A", "payment_preference": "cheque"}],
        })
        with pytest.raises(ValueError, match="Unknown payment preference"):
            load_ledger(path)


class TestValidateLedgerStructure:

    @pytest.mark.parametrize("field", ["buy_in_amount", "players"])
    def test_missing_required_field(self, field):
        ledger = {"buy_in_amount": 100, "players": []}
        del ledger[field]
        with pytest.raises(ValueError, match=f"Ledger missing required field: {field}"):
            validate_ledger_structure(ledger)

    def test_duplicate_names(self):
        with pytest.raises(ValueError, match="Duplicate player name"):
            validate_ledger_structure({"buy_in_amount": 100, "players": [{"name": "A"}, {"name": "A"}]})

    def test_transfer_amount_must_be_positive(self):
        ledger = {
            "buy_in_amount": 100,
            "players": [{"name": "A"}, {"name": "B"}],
            "manual_transfers": [{"from": "A", "to": "B", "amount": 0}],
        }
        with pytest.raises(ValueError, match="must be positive"):
            validate_ledger_structure(ledger)

    def test_transfer_needs_all_keys(self):
        ledger = {
            "buy_in_amount": 100,
            "players": [{"name": "A"}, {"name": "B"}],
            "manual_transfers": [{"from": "A", "amount": 50}],
        }
        with pytest.raises(ValueError, match=r"manual_transfers\[0\] missing to"):
            validate_ledger_structure(ledger)
