"""
Settlement calculation for the end of a game.

Turns per-player net results into a list of directed payments. The
optimized variant settles cash players among themselves first, then
digital players among themselves, and only then crosses payment methods
for whatever is left over.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from pokerledger.engine.enums import PaymentPreference
from pokerledger.engine.logger import format_money_for_logging, get_logger
from pokerledger.engine.money import SETTLEMENT_TOLERANCE, Amount, round_half_up
from pokerledger.engine.outcome import Outcome

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlayerBalance:
    """Net result for one player. Positive is owed money, negative owes money."""
    name: str
    amount: Amount
    payment_preference: PaymentPreference | None = PaymentPreference.DIGITAL

    @property
    def preference(self) -> PaymentPreference:
        return PaymentPreference.parse(self.payment_preference)


@dataclass(frozen=True)
class Settlement:
    """A payment from `from_player` to `to_player`. Also used for manual transfers."""
    from_player: str
    to_player: str
    amount: Amount

    def __str__(self) -> str:
        return f"{self.from_player} -> {self.to_player}: {format_money_for_logging(self.amount)}"


ManualTransfer = Settlement


@dataclass(frozen=True)
class EnhancedSettlement(Settlement):
    involves_cash_player: bool = False
    is_manual: bool = False


@dataclass(frozen=True)
class SettlementStats:
    total_transactions: int
    cash_transactions: int
    digital_transactions: int
    total_amount: Amount


@dataclass
class _Outstanding:
    """Mutable working entry for the greedy match."""
    name: str
    amount: Amount
    preference: PaymentPreference


def apply_manual_transfers(
    balances: Sequence[PlayerBalance],
    manual_transfers: Iterable[Settlement] = (),
) -> Outcome:
    """
    Pre-net manual payments out of the balances.

    A transfer "from pays to": the payer's debt shrinks (amount goes up) and
    the receiver's credit shrinks (amount goes down). Names that are not in
    `balances` are skipped.

    Returns:
        Outcome whose value is the adjusted balances (same order as the
        input). It is a failure, still carrying the adjusted balances, when
        any transfer named an unknown player.
    """
    adjusted: dict[str, PlayerBalance] = {b.name: b for b in balances}
    unknown: list[str] = []

    for transfer in manual_transfers:
        payer = adjusted.get(transfer.from_player)
        receiver = adjusted.get(transfer.to_player)

        if payer is not None:
            adjusted[payer.name] = replace(payer, amount=payer.amount + transfer.amount)
        else:
            unknown.append(transfer.from_player)

        if receiver is not None:
            adjusted[receiver.name] = replace(receiver, amount=receiver.amount - transfer.amount)
        else:
            unknown.append(transfer.to_player)

    result = list(adjusted.values())
    if unknown:
        names = ", ".join(sorted(set(unknown)))
        logger.warning(f"Manual transfers reference unknown players: {names}")
        return Outcome.failure(f"unknown players: {names}", value=result)
    return Outcome.success(result)


def ledger_imbalance(balances: Iterable[PlayerBalance]) -> Amount:
    """Sum of all balances. Zero for a ledger where winnings equal losses."""
    return sum(b.amount for b in balances)


def settle_group(
    winners: list[_Outstanding],
    losers: list[_Outstanding],
    settlements: list[EnhancedSettlement],
    involves_cash: bool,
) -> None:
    """
    Greedily match the largest creditor with the largest debtor.

    Entries are decremented in place by the exact matched amount, so a
    later call sees what this one left over. Emitted amounts are rounded
    to whole units.
    """
    winners.sort(key=lambda w: w.amount, reverse=True)
    losers.sort(key=lambda l: l.amount, reverse=True)

    winner_index = 0
    loser_index = 0

    while winner_index < len(winners) and loser_index < len(losers):
        winner = winners[winner_index]
        loser = losers[loser_index]

        if winner.amount <= 0:
            winner_index += 1
            continue
        if loser.amount <= 0:
            loser_index += 1
            continue

        settlement_amount = min(winner.amount, loser.amount)

        if settlement_amount > SETTLEMENT_TOLERANCE:
            settlements.append(EnhancedSettlement(
                from_player=loser.name,
                to_player=winner.name,
                amount=round_half_up(settlement_amount),
                involves_cash_player=involves_cash,
            ))

        winner.amount -= settlement_amount
        loser.amount -= settlement_amount

        if winner.amount <= SETTLEMENT_TOLERANCE:
            winner_index += 1
        if loser.amount <= SETTLEMENT_TOLERANCE:
            loser_index += 1


def _split(balances: Iterable[PlayerBalance]) -> tuple[list[_Outstanding], list[_Outstanding]]:
    winners = [_Outstanding(b.name, b.amount, b.preference) for b in balances if b.amount > 0]
    losers = [_Outstanding(b.name, abs(b.amount), b.preference) for b in balances if b.amount < 0]
    return winners, losers


def calculate_optimized_settlements(
    balances: Sequence[PlayerBalance],
    manual_transfers: Iterable[Settlement] = (),
) -> list[EnhancedSettlement]:
    """
    Compute settlements, keeping payments within a payment method where possible.

    Phase 1 settles cash winners against cash losers, phase 2 digital
    against digital, and phase 3 matches whatever remains across both
    pools (tagged as involving a cash player).

    Never raises on an unbalanced ledger; the imbalance is logged as a
    warning and the caller decides how to surface it.

    Args:
        balances: One entry per player
        manual_transfers: Payments already made, netted out first

    Returns:
        List of settlements in emission order
    """
    adjusted = apply_manual_transfers(balances, manual_transfers).value

    imbalance = ledger_imbalance(adjusted)
    if abs(imbalance) > SETTLEMENT_TOLERANCE:
        logger.warning(f"Balances do not sum to zero (off by {format_money_for_logging(imbalance)})")

    winners, losers = _split(adjusted)
    settlements: list[EnhancedSettlement] = []

    cash_winners = [w for w in winners if w.preference == PaymentPreference.CASH]
    cash_losers = [l for l in losers if l.preference == PaymentPreference.CASH]
    settle_group(cash_winners, cash_losers, settlements, True)

    digital_winners = [w for w in winners if w.preference == PaymentPreference.DIGITAL]
    digital_losers = [l for l in losers if l.preference == PaymentPreference.DIGITAL]
    settle_group(digital_winners, digital_losers, settlements, False)

    remaining_winners = [w for w in cash_winners + digital_winners if w.amount > SETTLEMENT_TOLERANCE]
    remaining_losers = [l for l in cash_losers + digital_losers if l.amount > SETTLEMENT_TOLERANCE]
    settle_group(remaining_winners, remaining_losers, settlements, True)

    logger.debug(f"Computed {len(settlements)} settlements for {len(balances)} players")
    return settlements


def calculate_standard_settlements(
    balances: Sequence[PlayerBalance],
    manual_transfers: Iterable[Settlement] = (),
) -> list[Settlement]:
    """Single-pass greedy settlement that ignores payment preferences."""
    adjusted = apply_manual_transfers(balances, manual_transfers).value
    winners, losers = _split(adjusted)

    matched: list[EnhancedSettlement] = []
    settle_group(winners, losers, matched, False)

    return [Settlement(s.from_player, s.to_player, s.amount) for s in matched]


def get_settlement_stats(settlements: Sequence[EnhancedSettlement]) -> SettlementStats:
    total = len(settlements)
    cash = sum(1 for s in settlements if getattr(s, "involves_cash_player", False))
    return SettlementStats(
        total_transactions=total,
        cash_transactions=cash,
        digital_transactions=total - cash,
        total_amount=sum(s.amount for s in settlements),
    )
