from decimal import Decimal

import pytest

from pricing import amm

E18 = 10**18


def test_one_hub_in_deep_pool_quotes_about_498():
    out = amm.quote_output(1 * E18, 1000 * E18, 500_000 * E18)
    assert abs(Decimal(out) / E18 - Decimal("498.00349")) < Decimal("0.00001")


def test_output_is_monotonic_and_sub_linear():
    reserve_in, reserve_out = 1000 * E18, 500_000 * E18
    small = amm.quote_output(1 * E18, reserve_in, reserve_out)
    large = amm.quote_output(10 * E18, reserve_in, reserve_out)
    assert large > small
    assert large < small * 10


def test_output_never_reaches_reserve():
    out = amm.quote_output(10**40, 1000 * E18, 500 * E18)
    assert out < 500 * E18


@pytest.mark.parametrize(
    "amount_in, reserve_in, reserve_out",
    [(0, 100, 100), (-1, 100, 100), (10, 0, 100), (10, 100, 0)],
)
def test_degenerate_inputs_quote_zero(amount_in, reserve_in, reserve_out):
    assert amm.quote_output(amount_in, reserve_in, reserve_out) == 0


def test_zero_fee_is_plain_constant_product():
    assert amm.quote_output(100, 1000, 1000, fee_bps=0) == 100 * 1000 // 1100


def test_invalid_fee_rejected():
    with pytest.raises(ValueError, match="fee_bps"):
        amm.quote_output(1, 1, 1, fee_bps=10000)
    with pytest.raises(TypeError):
        amm.quote_output(1, 1, 1, fee_bps=0.3)


def test_quote_input_covers_requested_output():
    reserve_in, reserve_out = 5000 * E18, 2000 * E18
    wanted = 37 * E18
    needed = amm.quote_input(wanted, reserve_in, reserve_out)
    assert amm.quote_output(needed, reserve_in, reserve_out) >= wanted


def test_quote_input_unreachable_output():
    assert amm.quote_input(2000, 5000, 2000) == 0


def test_price_impact_is_depth_consumed():
    assert amm.price_impact(10, 990) == Decimal(1)
    assert amm.price_impact(0, 990) == 0


def test_two_hop_impacts_compound():
    assert amm.compound_impacts([Decimal(1), Decimal(1)]) == Decimal("1.99")


def test_compounded_impact_is_capped():
    assert amm.compound_impacts([Decimal(40), Decimal(40)]) == Decimal(15)
    assert amm.compound_impacts([Decimal(40)], cap=Decimal(50)) == Decimal(40)


def test_minimum_received_applies_slippage():
    assert amm.minimum_received(100 * E18, Decimal("0.5")) == 995 * E18 // 10
    assert amm.minimum_received(3, Decimal("0.5")) == 2
    assert amm.minimum_received(0, Decimal("0.5")) == 0


def test_exchange_rate_accounts_for_decimals():
    assert amm.exchange_rate(2 * E18, 3 * E18) == Decimal("1.5")
    assert amm.exchange_rate(10**6, 2 * E18, decimals_in=6) == Decimal(2)
    assert amm.exchange_rate(0, 5) == 0


def test_spot_price():
    assert amm.spot_price(1000, 500_000) == Decimal(500)
    assert amm.spot_price(0, 5) == 0


def test_single_impact_is_kept_exact():
    impact = amm.price_impact(E18, 1000 * E18)
    assert amm.compound_impacts([impact]) == impact
    assert amm.compound_impacts(iter([impact])) == impact
