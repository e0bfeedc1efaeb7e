import pytest

from pokerledger.cli import main, parse_args


class TestParseArgs:

    def test_settle_defaults(self):
        args = parse_args(["settle", "game.json"])
        assert args.command == "settle"
        assert args.ledger == "game.json"
        assert args.standard is False
        assert args.log_level == "WARNING"
        assert args.log_file is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestSettleCommand:

    def test_optimized(self, data_dir, capsys):
        code = main(["settle", str(data_dir / "ledgers" / "friday_game.json")])
        out = capsys.readouterr().out.splitlines()

        assert code == 0
        assert out == [
            "Asha pays Chitra Rs. 200 [cash]",
            "Asha pays Bilal Rs. 300 [cash]",
            "2 transactions (2 cash, 0 digital), total Rs. 500",
        ]

    def test_standard(self, data_dir, capsys):
        code = main(["settle", "--standard", str(data_dir / "ledgers" / "friday_game.json")])
        out = capsys.readouterr().out.splitlines()

        assert code == 0
        assert out == [
            "Asha pays Bilal Rs. 300",
            "Asha pays Chitra Rs. 200",
            "2 transactions (0 cash, 2 digital), total Rs. 500",
        ]

    def test_manual_transfer(self, data_dir, capsys):
        main(["settle", str(data_dir / "ledgers" / "with_transfer.json")])
        out = capsys.readouterr().out
        assert "Asha pays Chitra Rs. 200 [cash]" in out
        assert "Asha pays Bilal Rs. 200 [cash]" in out

    def test_unbalanced_ledger(self, data_dir, capsys):
        code = main(["settle", str(data_dir / "ledgers" / "unbalanced.json")])
        captured = capsys.readouterr()

        assert code == 1
        assert "Action required" in captured.err
        assert "Asha pays Bilal Rs. 300 [cash]" in captured.out

    def test_missing_file(self, tmp_path, capsys):
        code = main(["settle", str(tmp_path / "missing.json")])
        assert code == 2
        assert "error:" in capsys.readouterr().err

    def test_log_file(self, data_dir, tmp_path):
        log_file = tmp_path / "cli.log"
        main([
            "--log-level", "INFO",
            "--log-file", str(log_file),
            "replay", str(data_dir / "scripts" / "fold_to_big_blind.json"),
        ])
        assert "Hand started" in log_file.read_text()


class TestReplayCommand:

    def test_fold_to_big_blind(self, data_dir, capsys):
        code = main(["replay", str(data_dir / "scripts" / "fold_to_big_blind.json")])
        out = capsys.readouterr().out

        assert code == 0
        assert "Stage: complete" in out
        assert "Pot: Rs. 150" in out
        assert "Winner: p2" in out
        assert "Chitra" in out

    def test_script_error(self, data_dir, capsys):
        code = main(["replay", str(data_dir / "scripts" / "wrong_player.json")])
        assert code == 2
        assert "expected p1 to act" in capsys.readouterr().err
