"""
Per-game ledger: buy-ins, final stacks and net results.

Builds the PlayerBalance list the settlement engine consumes and carries
the totals the dashboard shows, including the check that winnings and
losses cancel out.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from pokerledger.engine.enums import PaymentPreference
from pokerledger.engine.logger import format_money_for_logging, get_logger
from pokerledger.engine.money import Amount, is_settled, nonneg, round_half_up

from .settlements import PlayerBalance

logger = get_logger(__name__)


@dataclass(frozen=True)
class LedgerEntry:
    name: str
    buy_ins: int
    final_stack: Amount = 0
    payment_preference: PaymentPreference = PaymentPreference.DIGITAL

    def __post_init__(self):
        nonneg(self.buy_ins)
        nonneg(self.final_stack)

    def net_amount(self, buy_in_amount: Amount) -> Amount:
        """Final stack minus everything bought in."""
        return self.final_stack - self.buy_ins * buy_in_amount


@dataclass(frozen=True)
class LedgerSummary:
    total_buy_ins: Amount
    total_final_stacks: Amount
    total_winnings: Amount
    total_losses: Amount

    @property
    def discrepancy(self) -> Amount:
        return self.total_winnings + self.total_losses

    @property
    def is_balanced(self) -> bool:
        return is_settled(self.discrepancy)


class GameLedger:
    """Buy-in and final stack records for a single game."""

    def __init__(self, buy_in_amount: Amount, entries: Sequence[LedgerEntry] = ()):
        self.buy_in_amount = nonneg(buy_in_amount)
        self.entries: dict[str, LedgerEntry] = {}
        for entry in entries:
            self.add_entry(entry)

    def __str__(self) -> str:
        rows = ", ".join(
            f"{e.name}: {e.buy_ins}x, stack={format_money_for_logging(e.final_stack)}"
            for e in self.entries.values()
        )
        return f"GameLedger(buy_in={format_money_for_logging(self.buy_in_amount)}, [{rows}])"

    def add_entry(self, entry: LedgerEntry) -> None:
        if entry.name in self.entries:
            raise ValueError(f"Duplicate player in ledger: {entry.name}")
        self.entries[entry.name] = entry

    def add_buy_ins(self, name: str, count: int = 1) -> LedgerEntry:
        entry = self._get(name)
        updated = LedgerEntry(entry.name, entry.buy_ins + count, entry.final_stack, entry.payment_preference)
        self.entries[name] = updated
        return updated

    def set_final_stack(self, name: str, final_stack: Amount) -> LedgerEntry:
        entry = self._get(name)
        updated = LedgerEntry(entry.name, entry.buy_ins, final_stack, entry.payment_preference)
        self.entries[name] = updated
        return updated

    def net_amounts(self) -> dict[str, Amount]:
        return {name: e.net_amount(self.buy_in_amount) for name, e in self.entries.items()}

    def balances(self) -> list[PlayerBalance]:
        """PlayerBalance per entry, in insertion order."""
        return [
            PlayerBalance(name=e.name, amount=e.net_amount(self.buy_in_amount), payment_preference=e.payment_preference)
            for e in self.entries.values()
        ]

    def summary(self) -> LedgerSummary:
        nets = self.net_amounts().values()
        summary = LedgerSummary(
            total_buy_ins=sum(e.buy_ins * self.buy_in_amount for e in self.entries.values()),
            total_final_stacks=sum(e.final_stack for e in self.entries.values()),
            total_winnings=sum(max(0, round_half_up(n)) for n in nets),
            total_losses=sum(min(0, round_half_up(n)) for n in nets),
        )
        if not summary.is_balanced:
            logger.warning(
                f"Ledger does not add up: winnings {format_money_for_logging(summary.total_winnings)}, "
                f"losses {format_money_for_logging(summary.total_losses)}"
            )
        return summary

    def _get(self, name: str) -> LedgerEntry:
        try:
            return self.entries[name]
        except KeyError as e:
            raise ValueError(f"Player {name} not in ledger") from e
