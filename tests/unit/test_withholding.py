"""Unit tests for weekly income tax, NI and pension.

Expected values are worked by hand from the 2024/25 table:
weekly personal allowance 12570 / 52 = 241.7307..., basic band width
37700 / 52 = 725, higher band width 87440 / 52 = 1681.5384...
"""

from decimal import Decimal

import pytest

from ukpay.sdk.taxes import (
    calc_income_tax,
    calc_ni,
    calc_ni_bands,
    calc_pension,
    calc_tax_bands,
    calc_theoretical_income_tax,
    calc_theoretical_ni,
    load_tax_rules,
    round_currency,
)


class TestRoundCurrency:

    def test_half_up(self):
        assert round_currency(Decimal("5.005")) == Decimal("5.01")
        assert round_currency(Decimal("4.665")) == Decimal("4.67")

    def test_float_input_has_no_binary_noise(self):
        """2.675 as a float is 2.67499999...; via str() it rounds up."""
        assert round_currency(2.675) == Decimal("2.68")


class TestIncomeTax:

    def test_basic_rate_scenario(self):
        """£500 on 1257L: (500 - 241.73) x 20% = 51.65"""
        assert calc_income_tax(500, "1257L") == Decimal("51.65")

    def test_below_allowance_is_zero(self):
        assert calc_income_tax(200, "1257L") == Decimal("0.00")
        assert calc_income_tax(Decimal("241.73"), "1257L") == Decimal("0.00")

    def test_zero_pay(self):
        assert calc_income_tax(0, "1257L") == Decimal("0.00")

    def test_higher_rate(self):
        """£1500: 725 x 20% + (1258.27 - 725) x 40% = 358.31"""
        assert calc_income_tax(1500, "1257L") == Decimal("358.31")

    def test_additional_rate(self):
        """£3000: 145 + 1681.54 x 40% + 351.73 x 45% = 975.89"""
        assert calc_income_tax(3000, "1257L") == Decimal("975.89")

    def test_band_continuity_at_basic_width(self):
        """Taxable income exactly one basic band-width is taxed 725 x 20%."""
        rules = load_tax_rules()
        bands = calc_tax_bands(Decimal("725"), rules)

        assert bands["basic"] == Decimal("145")
        assert bands["higher"] == 0
        assert bands["additional"] == 0

        gross = Decimal("12570") / 52 + 725
        assert calc_income_tax(gross, "1257L") == Decimal("145.00")

    def test_k_code_has_no_extra_effect(self):
        """K475 taxes like 475L: allowance 4750, no added amount."""
        assert calc_income_tax(500, "K475") == calc_income_tax(500, "475L")
        assert calc_income_tax(500, "K475") == Decimal("81.73")

    def test_emergency_tax_is_flat_basic_rate(self):
        """W1: allowance 10, all taxable pay at 20% even in the higher band."""
        assert calc_income_tax(1500, "W1") == Decimal("299.96")
        assert calc_theoretical_income_tax(1500, "W1") == Decimal("454.92")

    def test_theoretical_matches_for_normal_codes(self):
        for gross in (100, 500, 1500, 3000):
            assert calc_theoretical_income_tax(gross, "1257L") == calc_income_tax(gross, "1257L")

    def test_non_negative_and_monotonic(self):
        previous = Decimal("0")
        for pounds in range(0, 4000, 7):
            tax = calc_income_tax(pounds, "1257L")
            assert tax >= 0
            assert tax >= previous
            previous = tax


class TestNationalInsurance:

    def test_below_threshold(self):
        assert calc_ni(200, "weekly") == Decimal("0.00")

    def test_main_rate(self):
        """£500: (500 - 242) x 12% = 30.96"""
        assert calc_ni(500, "weekly") == Decimal("30.96")

    def test_at_upper_threshold(self):
        assert calc_ni(967, "weekly") == Decimal("87.00")

    def test_split_bands(self):
        """£1200: (967 - 242) x 12% + (1200 - 967) x 2% = 87.00 + 4.66"""
        bands = calc_ni_bands(1200, "weekly")

        assert bands["standard"] == Decimal("87.00")
        assert bands["reduced"] == Decimal("4.66")
        assert calc_ni(1200, "weekly") == Decimal("91.66")

    def test_monthly_thresholds(self):
        """£2000 monthly: (2000 - 1048) x 12% = 114.24"""
        assert calc_ni(2000, "monthly") == Decimal("114.24")

    def test_unknown_frequency_uses_weekly(self):
        assert calc_ni(500, "daily") == calc_ni(500, "weekly")

    def test_theoretical_is_identical(self):
        for gross in (100, 500, 1200):
            assert calc_theoretical_ni(gross) == calc_ni(gross)

    def test_non_negative(self):
        for pounds in range(0, 2000, 13):
            assert calc_ni(pounds) >= 0


class TestPension:

    def test_percentage_of_gross(self):
        assert calc_pension(500, "3.9") == Decimal("19.50")

    def test_rounds_half_up(self):
        assert calc_pension(Decimal("100.10"), 5) == Decimal("5.01")

    @pytest.mark.parametrize("percent", [0, None, -2, "0"])
    def test_zero_or_negative_percent(self, percent):
        assert calc_pension(500, percent) == Decimal("0.00")
