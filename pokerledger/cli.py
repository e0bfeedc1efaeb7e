"""Command line interface for settling games and replaying scripted hands."""

import argparse
import logging
import sys

from pokerledger.engine.logging_utils import setup_logger
from pokerledger.engine.money import fmt_money
from pokerledger.engine.positions import get_position_assignments
from pokerledger.engine.run_scripted_hand import run_script
from pokerledger.engine.script_loader import load_ledger, load_script
from pokerledger.finance.ledger import GameLedger, LedgerEntry
from pokerledger.finance.settlements import (
    Settlement,
    calculate_optimized_settlements,
    calculate_standard_settlements,
    get_settlement_stats,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pokerledger", description="Home poker game ledger tools")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Python logging level (e.g. INFO, WARNING).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write logs to this file",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    settle = sub.add_parser("settle", help="Compute settlements for a ledger JSON file")
    settle.add_argument("ledger", help="Path to ledger JSON")
    settle.add_argument(
        "--standard",
        action="store_true",
        help="Ignore payment preferences (single greedy pass)",
    )

    replay = sub.add_parser("replay", help="Replay a scripted hand JSON file")
    replay.add_argument("script", help="Path to hand script JSON")

    return parser.parse_args(argv)


def run_settle(path: str, standard: bool = False) -> int:
    data = load_ledger(path)
    config = data["config"]
    ledger = GameLedger(
        config.buy_in_amount,
        [LedgerEntry(**p) for p in data["players"]],
    )
    transfers = [Settlement(t["from"], t["to"], t["amount"]) for t in data["manual_transfers"]]

    summary = ledger.summary()
    if not summary.is_balanced:
        print(
            f"Action required: winnings {fmt_money(summary.total_winnings, config.currency_symbol)} "
            f"and losses {fmt_money(summary.total_losses, config.currency_symbol)} do not add up to zero",
            file=sys.stderr,
        )

    if standard:
        settlements = calculate_standard_settlements(ledger.balances(), transfers)
    else:
        settlements = calculate_optimized_settlements(ledger.balances(), transfers)

    for s in settlements:
        tag = " [cash]" if getattr(s, "involves_cash_player", False) else ""
        print(f"{s.from_player} pays {s.to_player} {fmt_money(s.amount, config.currency_symbol)}{tag}")

    stats = get_settlement_stats(settlements)
    print(
        f"{stats.total_transactions} transactions "
        f"({stats.cash_transactions} cash, {stats.digital_transactions} digital), "
        f"total {fmt_money(stats.total_amount, config.currency_symbol)}"
    )
    return 0 if summary.is_balanced else 1


def run_replay(path: str) -> int:
    script = load_script(path)
    recorder = run_script(script)
    state = recorder.state
    positions = get_position_assignments(state.active_players, recorder.button_player_id)

    print(f"Stage: {state.stage.value}")
    print(f"Pot: {fmt_money(state.pot_size, script['config'].currency_symbol)}")
    for player in state.active_players:
        status = "in" if player.player_id in state.players_in_hand else "folded"
        contributed = state.total_player_bets.get(player.player_id, 0)
        print(f"  {positions[player.player_id]:<6} {player.name:<12} {contributed:>8} {status}")
    if recorder.winner_id:
        print(f"Winner: {recorder.winner_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    level = getattr(logging, str(args.log_level).upper(), logging.WARNING)
    if args.log_file:
        setup_logger("pokerledger", log_file=args.log_file, level=level, console_handler=False)
    logging.getLogger("pokerledger").setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.startswith("pokerledger."):
            logging.getLogger(name).setLevel(level)

    try:
        if args.command == "settle":
            return run_settle(args.ledger, standard=args.standard)
        return run_replay(args.script)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
