"""
DLMM Bin Ladder Calculator

Офлайн калькулятор для DLMM пар:
- bin-id     цена -> bin id (exact / up / down)
- price      bin id -> цена
- fee        комиссия в bps -> (base_factor, power_factor)
- seed-plan  распределение seed liquidity по bins

Сеть не используется: только расчёты.
"""

import argparse
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from config import EngineSettings
from dlmm.errors import DlmmMathError
from dlmm.math.bins import (
    Rounding,
    get_id_from_price,
    get_precise_id_from_price,
    get_q64x64_price_from_id,
    get_ui_price_from_id,
)
from dlmm.math.distribution import print_distribution
from dlmm.math.fees import (
    compute_base_factor_from_fee_bps,
    fee_bps_from_base_factor,
    fee_rate_to_fee_pct,
    get_base_fee_rate,
)
from dlmm.math.prices import price_per_token_to_per_lamport
from dlmm.seeding import SeedLiquidityConfig, build_seed_liquidity_plan

logger = logging.getLogger(__name__)


def _add_decimals_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--base-decimals", type=int, required=True, help="Decimals base токена")
    parser.add_argument("--quote-decimals", type=int, required=True, help="Decimals quote токена")


def build_parser(settings: EngineSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="DLMM bin ladder calculator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    bin_id = subparsers.add_parser("bin-id", help="UI price -> bin id")
    bin_id.add_argument("--bin-step", type=int, required=True)
    bin_id.add_argument("--price", type=str, required=True, help="UI цена (quote за 1 base)")
    bin_id.add_argument("--rounding", choices=["exact", "up", "down"], default="up")
    _add_decimals_args(bin_id)

    price = subparsers.add_parser("price", help="bin id -> UI price")
    price.add_argument("--bin-step", type=int, required=True)
    price.add_argument("--bin-id", type=int, required=True)
    _add_decimals_args(price)

    fee = subparsers.add_parser("fee", help="fee bps -> base factor")
    fee.add_argument("--bin-step", type=int, required=True)
    fee.add_argument("--fee-bps", type=int, required=True)

    seed = subparsers.add_parser("seed-plan", help="seed liquidity distribution")
    seed.add_argument("--bin-step", type=int, required=True)
    seed.add_argument("--amount", type=int, required=True, help="Сумма в целых base токенах")
    seed.add_argument("--min-price", type=str, required=True)
    seed.add_argument("--max-price", type=str, required=True)
    seed.add_argument("--curvature", type=str, default=str(settings.default_curvature))
    seed.add_argument("--show-bins", action="store_true", help="Вывести таблицу bins в лог")
    _add_decimals_args(seed)

    return parser


def cmd_bin_id(args: argparse.Namespace) -> int:
    price_per_lamport = price_per_token_to_per_lamport(args.price, args.base_decimals, args.quote_decimals)

    if args.rounding == "exact":
        result = get_precise_id_from_price(args.bin_step, price_per_lamport)
        if result is None:
            print(f"Price {args.price} is not an exact bin price for bin_step {args.bin_step}")
            return 1
    else:
        rounding = Rounding.UP if args.rounding == "up" else Rounding.DOWN
        result = get_id_from_price(args.bin_step, price_per_lamport, rounding)

    print(f"Bin id: {result}")
    return 0


def cmd_price(args: argparse.Namespace) -> int:
    ui_price = get_ui_price_from_id(args.bin_step, args.bin_id, args.base_decimals, args.quote_decimals)
    q64x64 = get_q64x64_price_from_id(args.bin_step, args.bin_id)
    print(f"UI price: {ui_price:.12g}")
    print(f"Q64x64 price: {q64x64}")
    return 0


def cmd_fee(args: argparse.Namespace) -> int:
    base_factor, power_factor = compute_base_factor_from_fee_bps(args.bin_step, args.fee_bps)
    fee_bps = fee_bps_from_base_factor(args.bin_step, base_factor, power_factor)
    fee_rate = get_base_fee_rate(args.bin_step, base_factor, power_factor)

    print(f"Base factor: {base_factor}")
    print(f"Base fee power factor: {power_factor}")
    print(f"Base fee: {fee_bps.normalize():f} bps ({fee_rate_to_fee_pct(fee_rate).normalize():f}%)")
    print(f"Base fee rate: {fee_rate}")
    return 0


def cmd_seed_plan(args: argparse.Namespace) -> int:
    config = SeedLiquidityConfig(
        bin_step=args.bin_step,
        amount=args.amount,
        min_price=args.min_price,
        max_price=args.max_price,
        base_token_decimal=args.base_decimals,
        quote_token_decimal=args.quote_decimals,
        curvature=args.curvature,
    )
    plan = build_seed_liquidity_plan(config)

    print(f"Bins: {plan.min_bin_id}..{plan.max_bin_id - 1} ({len(plan.bin_amounts)} bins)")
    print(f"Actual price range: {plan.actual_min_price:.10g} - {plan.actual_max_price:.10g}")
    print(f"Positions: {plan.position_count}")
    for i, (lower, upper) in enumerate(plan.positions):
        print(f"  #{i + 1}: bins {lower}..{upper}")
    print(f"Fund amount: {plan.fund_amount}")
    print(f"Compression loss: {plan.compression_loss} -> bin {plan.loss_top_up_bin_id}")
    print(f"Total deposit: {plan.total_deposit()}")

    if args.show_bins:
        print_distribution(plan.bin_amounts, base_token_decimal=args.base_decimals)
    return 0


COMMANDS = {
    "bin-id": cmd_bin_id,
    "price": cmd_price,
    "fee": cmd_fee,
    "seed-plan": cmd_seed_plan,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Главная функция."""
    load_dotenv()
    try:
        settings = EngineSettings.from_env()
        logging.basicConfig(
            level=settings.log_level,
            format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        )
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        return 1

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    try:
        return COMMANDS[args.command](args)
    except DlmmMathError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
