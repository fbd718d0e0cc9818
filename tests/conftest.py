"""
Shared fixtures for all tests.
"""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from dlmm.math.bins import get_ui_price_from_id


@dataclass
class CurveRequest:
    """Набор входов для generate_amount_for_bins с согласованными ценами."""
    bin_step: int
    min_bin_id: int
    max_bin_id: int
    base_token_decimal: int
    quote_token_decimal: int
    amount: int

    @property
    def min_price(self) -> Decimal:
        return get_ui_price_from_id(
            self.bin_step, self.min_bin_id, self.base_token_decimal, self.quote_token_decimal
        )

    @property
    def max_price(self) -> Decimal:
        return get_ui_price_from_id(
            self.bin_step, self.max_bin_id, self.base_token_decimal, self.quote_token_decimal
        )

    def kwargs(self, curvature) -> dict:
        return dict(
            bin_step=self.bin_step,
            min_bin_id=self.min_bin_id,
            max_bin_id=self.max_bin_id,
            min_price=self.min_price,
            max_price=self.max_price,
            base_token_decimal=self.base_token_decimal,
            quote_token_decimal=self.quote_token_decimal,
            amount=self.amount,
            curvature=curvature,
        )


@pytest.fixture
def sol_usdc_request():
    """
    SOL-like base (9 decimals) / USDC quote (6 decimals), bin_step 25.

    Bins 1200..1363 покрывают UI цены ~20000-30000.
    """
    return CurveRequest(
        bin_step=25,
        min_bin_id=1200,
        max_bin_id=1363,
        base_token_decimal=9,
        quote_token_decimal=6,
        amount=1_000_000_000,
    )


@pytest.fixture
def negative_bins_request():
    """Диапазон с отрицательными bin id (цена за lamport < 1)."""
    return CurveRequest(
        bin_step=10,
        min_bin_id=-500,
        max_bin_id=-380,
        base_token_decimal=6,
        quote_token_decimal=6,
        amount=123_456_789_000,
    )

