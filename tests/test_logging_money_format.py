import logging
import math

import pytest

from pokerledger.engine.logger import format_money_for_logging, get_logger
from pokerledger.engine.logging_utils import setup_logger
from pokerledger.engine.money import fmt_money, is_settled, nonneg, round_half_up, to_amount


class TestLoggingMoneyFormat:
    """Test money formatting for logging."""

    def test_format_money_for_logging(self):
        assert format_money_for_logging(1250) == "Rs. 1,250"
        assert format_money_for_logging(0) == "Rs. 0"
        assert format_money_for_logging(-300) == "-Rs. 300"
        assert format_money_for_logging(1000000) == "Rs. 1,000,000"

    def test_custom_symbol(self):
        assert format_money_for_logging(75, "$") == "$ 75"
        assert fmt_money(75, "INR") == "INR 75"

    def test_logging_format_consistency(self):
        for amount in [0, 1, 25, 100, 125, 1000, 1234, -9999]:
            assert format_money_for_logging(amount) == fmt_money(amount)

    def test_fractions_round_half_up(self):
        assert fmt_money(2.5) == "Rs. 3"
        assert fmt_money(-2.5) == "-Rs. 3"
        assert fmt_money(2.4) == "Rs. 2"

    @pytest.mark.parametrize("bad", [True, "100", None])
    def test_type_validation(self, bad):
        with pytest.raises(ValueError):
            fmt_money(bad)


class TestAmountParsing:

    @pytest.mark.parametrize("raw,expected", [
        ("1,250", 1250),
        (" 40 ", 40),
        ("12.5", 12.5),
        (300.0, 300),
        (7, 7),
    ])
    def test_to_amount(self, raw, expected):
        result = to_amount(raw)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize("raw", ["abc", "", True, None, math.inf, "nan"])
    def test_to_amount_rejects(self, raw):
        with pytest.raises(ValueError):
            to_amount(raw)

    @pytest.mark.parametrize("amount,expected", [
        (2.5, 3),
        (3.5, 4),
        (2.49, 2),
        (-2.5, -3),
        (0, 0),
    ])
    def test_round_half_up(self, amount, expected):
        assert round_half_up(amount) == expected

    def test_is_settled(self):
        assert is_settled(0)
        assert is_settled(0.01)
        assert is_settled(-0.005)
        assert not is_settled(0.02)

    def test_nonneg(self):
        assert nonneg(0) == 0
        with pytest.raises(ValueError, match="Negative amount"):
            nonneg(-1)


class TestLoggers:

    def test_get_logger_does_not_duplicate_handlers(self):
        first = get_logger("pokerledger.test.dupes")
        second = get_logger("pokerledger.test.dupes")
        assert first is second
        assert len(second.handlers) == 1

    def test_setup_logger_writes_file(self, tmp_path):
        log_file = tmp_path / "logs" / "game.log"
        logger = setup_logger("pokerledger.test.file", log_file=str(log_file), console_handler=False)
        logger.info("settled %s", "Asha")

        assert log_file.exists()
        assert "settled Asha" in log_file.read_text()
        assert len(logger.handlers) == 1

    def test_setup_logger_replaces_handlers(self, tmp_path):
        log_file = str(tmp_path / "a.log")
        setup_logger("pokerledger.test.twice", log_file=log_file)
        logger = setup_logger("pokerledger.test.twice", log_file=log_file, level=logging.WARNING)
        assert len(logger.handlers) == 2
        assert logger.level == logging.WARNING
