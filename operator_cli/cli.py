"""Operator CLI for a launchpad world persisted as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from fees.distributor import FeeAuthorizationError, FeeWithdrawalError
from fees.models import FeeConfig, FeeConfigError
from graduation.coordinator import GraduationError
from integrations.ledger import LedgerError
from integrations.venue_sim import VenueError
from launchpad.app import Launchpad
from launchpad.config import ConfigError, LaunchpadConfig
from launchpad.persistence import FileWorldStore
from pricing.curve import WAD, CurveInputError
from trading.guard import ReentrancyError
from trading.machine import (
    AdmissionDeniedError,
    TradingError,
    TradingPausedError,
    UnauthorizedError,
)

BUCKETS = ("platform", "community", "graduation", "buyback")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="launchpad")
    parser.add_argument("--log-level", default="WARNING")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init")
    _add_world_arg(init_parser)
    init_parser.add_argument("--config")
    init_parser.set_defaults(func=_init_world)

    register_parser = subparsers.add_parser("register")
    _add_asset_args(register_parser)
    register_parser.add_argument("--creator")
    register_parser.add_argument("--target", help="Graduation target in ETH.")
    register_parser.add_argument("--fee-config", help="CREATOR/COMMUNITY/BUYBACK percentages.")
    register_parser.add_argument("--dex-fee-config", help="CREATOR/COMMUNITY/BUYBACK percentages.")
    register_parser.set_defaults(func=_register)

    initialize_parser = subparsers.add_parser("initialize")
    _add_asset_args(initialize_parser)
    initialize_parser.set_defaults(func=_initialize)

    buy_parser = subparsers.add_parser("buy")
    _add_asset_args(buy_parser)
    buy_parser.add_argument("--buyer", required=True)
    buy_parser.add_argument("--eth", required=True)
    buy_parser.add_argument("--min-tokens", default="0")
    buy_parser.set_defaults(func=_buy)

    sell_parser = subparsers.add_parser("sell")
    _add_asset_args(sell_parser)
    sell_parser.add_argument("--seller", required=True)
    sell_parser.add_argument("--tokens", required=True)
    sell_parser.add_argument("--min-eth", default="0")
    sell_parser.set_defaults(func=_sell)

    sells_parser = subparsers.add_parser("enable-sells")
    _add_asset_args(sells_parser)
    sells_parser.add_argument("--caller", required=True)
    sells_parser.add_argument("--disable", action="store_true")
    sells_parser.set_defaults(func=_enable_sells)

    close_parser = subparsers.add_parser("close")
    _add_asset_args(close_parser)
    close_parser.add_argument("--caller", required=True)
    close_parser.set_defaults(func=_close)

    graduate_parser = subparsers.add_parser("graduate")
    _add_asset_args(graduate_parser)
    graduate_parser.set_defaults(func=_graduate)

    collect_parser = subparsers.add_parser("collect-fees")
    _add_asset_args(collect_parser)
    collect_parser.set_defaults(func=_collect_fees)

    claim_parser = subparsers.add_parser("claim")
    _add_world_arg(claim_parser)
    claim_parser.add_argument("--creator", required=True)
    claim_parser.set_defaults(func=_claim)

    withdraw_parser = subparsers.add_parser("withdraw")
    _add_world_arg(withdraw_parser)
    withdraw_parser.add_argument("--bucket", choices=BUCKETS, required=True)
    withdraw_parser.add_argument("--recipient", required=True)
    withdraw_parser.add_argument("--caller", required=True)
    withdraw_parser.add_argument("--asset", help="Asset id, required for the buyback bucket.")
    withdraw_parser.set_defaults(func=_withdraw)

    quote_parser = subparsers.add_parser("quote")
    _add_asset_args(quote_parser)
    side = quote_parser.add_mutually_exclusive_group(required=True)
    side.add_argument("--eth", help="Quote a buy for this much ETH.")
    side.add_argument("--tokens", help="Quote a sell of this many tokens.")
    quote_parser.add_argument("--buyer")
    quote_parser.set_defaults(func=_quote)

    stats_parser = subparsers.add_parser("stats")
    _add_asset_args(stats_parser)
    stats_parser.set_defaults(func=_stats)

    ledger_parser = subparsers.add_parser("ledger")
    _add_world_arg(ledger_parser)
    ledger_parser.add_argument("--notices", action="store_true")
    ledger_parser.set_defaults(func=_ledger)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except (
        ValueError,
        ConfigError,
        CurveInputError,
        FeeConfigError,
        FeeWithdrawalError,
        LedgerError,
        TradingError,
        PermissionError,
        FeeAuthorizationError,
        UnauthorizedError,
        GraduationError,
        ReentrancyError,
        TradingPausedError,
        AdmissionDeniedError,
        VenueError,
        FileExistsError,
        FileNotFoundError,
    ) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


def _init_world(args: argparse.Namespace) -> int:
    config = LaunchpadConfig.from_file(args.config) if args.config else None
    launchpad = FileWorldStore(Path(args.world)).create(config)
    print(json.dumps({"world": args.world, "config": launchpad.config.to_dict()}, indent=2))
    return 0


def _register(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    state = launchpad.register(
        args.asset,
        args.creator,
        target=_parse_units(args.target, "target") if args.target else None,
        fee_config=_parse_fee_config(args.fee_config),
        dex_fee_config=_parse_fee_config(args.dex_fee_config),
    )
    store.save(launchpad)
    print(json.dumps(state.to_dict(), indent=2))
    return 0


def _initialize(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    state = launchpad.initialize(args.asset)
    store.save(launchpad)
    print(json.dumps(state.to_dict(), indent=2))
    return 0


def _buy(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    receipt = launchpad.buy(
        args.asset,
        args.buyer,
        _parse_units(args.eth, "eth"),
        _parse_units(args.min_tokens, "min-tokens"),
    )
    store.save(launchpad)
    print(json.dumps(receipt.to_dict(), indent=2))
    return 0


def _sell(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    receipt = launchpad.sell(
        args.asset,
        args.seller,
        _parse_units(args.tokens, "tokens"),
        _parse_units(args.min_eth, "min-eth"),
    )
    store.save(launchpad)
    print(json.dumps(receipt.to_dict(), indent=2))
    return 0


def _enable_sells(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    state = launchpad.set_sells_enabled(args.asset, not args.disable, args.caller)
    store.save(launchpad)
    print(json.dumps({"asset_id": state.asset_id, "sells_enabled": state.sells_enabled}))
    return 0


def _close(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    state = launchpad.close(args.asset, args.caller)
    store.save(launchpad)
    print(json.dumps({"asset_id": state.asset_id, "phase": state.phase.value}))
    return 0


def _graduate(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    report = launchpad.graduate(args.asset)
    store.save(launchpad)
    print(json.dumps(report.to_dict(), indent=2))
    return 0


def _collect_fees(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    report = launchpad.collect_fees(args.asset)
    store.save(launchpad)
    print(json.dumps(report.to_dict(), indent=2))
    return 0


def _claim(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    amount = launchpad.claim_creator_rewards(args.creator)
    store.save(launchpad)
    print(json.dumps({"creator": args.creator, "claimed": str(amount)}))
    return 0


def _withdraw(args: argparse.Namespace) -> int:
    store, launchpad = _open_world(args)
    if args.bucket == "buyback":
        if not args.asset:
            raise ValueError("--asset is required when withdrawing buyback fees.")
        amount = launchpad.withdraw_buyback(args.asset, args.recipient, args.caller)
    else:
        amount = launchpad.withdraw_fees(args.bucket, args.recipient, args.caller)
    store.save(launchpad)
    print(json.dumps({"bucket": args.bucket, "recipient": args.recipient, "amount": str(amount)}))
    return 0


def _quote(args: argparse.Namespace) -> int:
    _, launchpad = _open_world(args)
    if args.eth is not None:
        quote = launchpad.quote_buy(args.asset, _parse_units(args.eth, "eth"), args.buyer)
    else:
        quote = launchpad.quote_sell(args.asset, _parse_units(args.tokens, "tokens"))
    print(json.dumps(quote.to_dict(), indent=2))
    return 0


def _stats(args: argparse.Namespace) -> int:
    _, launchpad = _open_world(args)
    print(json.dumps(launchpad.stats(args.asset).to_dict(), indent=2))
    return 0


def _ledger(args: argparse.Namespace) -> int:
    _, launchpad = _open_world(args)
    output = {"fee_ledger": launchpad.fee_ledger().to_dict()}
    if args.notices:
        output["notices"] = [notice.to_dict() for notice in launchpad.notices()]
    print(json.dumps(output, indent=2))
    return 0


def _add_world_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--world", required=True, help="Path to the world JSON file.")


def _add_asset_args(parser: argparse.ArgumentParser) -> None:
    _add_world_arg(parser)
    parser.add_argument("--asset", required=True)


def _open_world(args: argparse.Namespace):
    store = FileWorldStore(Path(args.world))
    return store, store.load()


def _parse_units(value: str, label: str) -> int:
    """Convert a decimal amount of whole units into 18-decimal base units."""

    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid {label} amount: {value}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid {label} amount: {value}")
    scaled = amount * WAD
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{label} has more than 18 decimal places: {value}")
    return int(scaled)


def _parse_fee_config(value: Optional[str]) -> Optional[FeeConfig]:
    if not value:
        return None
    parts = value.split("/")
    if len(parts) != 3:
        raise ValueError("Fee config must be formatted as CREATOR/COMMUNITY/BUYBACK.")
    creator, community, buyback = (int(part) for part in parts)
    config = FeeConfig(creator=creator, community=community, buyback=buyback)
    config.validate()
    return config


if __name__ == "__main__":
    raise SystemExit(main())
