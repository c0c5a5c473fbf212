"""Tests for price, discount-text, brand and URL normalization helpers."""

from decimal import Decimal

from dealnorm.utils import (
    BrandNormalizer,
    PriceNormalizer,
    normalize_url,
    parse_discount_text,
)


class TestPriceNormalizer:
    """Tests for PriceNormalizer."""

    def test_clean_price_string(self):
        assert PriceNormalizer.clean_price_string("$12.99") == Decimal("12.99")
        assert PriceNormalizer.clean_price_string("$1,234.56") == Decimal("1234.56")
        assert PriceNormalizer.clean_price_string("€ 45") == Decimal("45")
        assert PriceNormalizer.clean_price_string("") is None
        assert PriceNormalizer.clean_price_string("call for price") is None

    def test_extract_prices_skips_percentages_and_ratings(self):
        text = "Was $1,299.00 now $999.99, rated 4.5 stars, 30% off"
        assert PriceNormalizer.extract_prices_from_text(text) == [
            Decimal("1299.00"),
            Decimal("999.99"),
        ]

    def test_extract_prices_keeps_duplicates_in_order(self):
        prices = PriceNormalizer.extract_prices_from_text("$45.99 $89.99 $89.99")
        assert prices == [Decimal("45.99"), Decimal("89.99"), Decimal("89.99")]

    def test_extract_prices_symbol_requirement(self):
        text = "Size 10 for $45.00"
        assert PriceNormalizer.extract_prices_from_text(text) == [Decimal("10"), Decimal("45.00")]
        assert PriceNormalizer.extract_prices_from_text(text, require_symbol=True) == [
            Decimal("45.00")
        ]

    def test_extract_prices_ignores_partial_numbers(self):
        assert PriceNormalizer.extract_prices_from_text("ref 1299.5 and 12,34") == []
        assert PriceNormalizer.extract_prices_from_text("") == []

    def test_extract_prices_skips_long_digit_runs(self):
        text = "Order 123456789012345678901234567 barcode 0123456789 $84.00 $999,999,999"
        assert PriceNormalizer.extract_prices_from_text(text) == [
            Decimal("84.00"),
            Decimal("999999999"),
        ]

    def test_round_money_is_half_up(self):
        assert PriceNormalizer.round_money(Decimal("2.675")) == Decimal("2.68")
        assert PriceNormalizer.round_money(Decimal("2.665")) == Decimal("2.67")
        assert PriceNormalizer.round_money(Decimal("39.98666")) == Decimal("39.99")

    def test_discount_percent_rounds_half_up(self):
        assert PriceNormalizer.discount_percent(Decimal("200"), Decimal("101")) == 50
        assert PriceNormalizer.discount_percent(Decimal("120"), Decimal("84")) == 30


class TestDiscountText:
    def test_formats(self):
        assert parse_discount_text("Save 40% today") == 40
        assert parse_discount_text("30% OFF everything") == 30
        assert parse_discount_text("Now -25%") == 25

    def test_no_discount(self):
        assert parse_discount_text("No deal here") is None
        assert parse_discount_text("150% off") is None
        assert parse_discount_text(None) is None


class TestBrandNormalizer:
    def test_canonicalize_known_brand(self):
        assert BrandNormalizer.canonicalize("  the north   face ") == "The North Face"
        assert BrandNormalizer.canonicalize("NIKE") == "Nike"

    def test_canonicalize_unknown_brand_is_trimmed(self):
        assert BrandNormalizer.canonicalize(" Acme  Co ") == "Acme Co"

    def test_match_prefix_prefers_longest(self):
        assert BrandNormalizer.match_prefix("Polo Ralph Lauren Oxford Shirt") == "Polo Ralph Lauren"
        assert BrandNormalizer.match_prefix("new balance 574 Core") == "New Balance"

    def test_match_prefix_requires_word_boundary(self):
        assert BrandNormalizer.match_prefix("Vansion Hoodie") is None
        assert BrandNormalizer.match_prefix("Vans Old Skool") == "Vans"

    def test_custom_lexicon(self):
        assert BrandNormalizer.match_prefix("Acme Runner", ["Acme"]) == "Acme"
        assert BrandNormalizer.match_prefix("Nike Air", ["Acme"]) is None


class TestNormalizeUrl:
    def test_tracking_parameters_removed(self):
        url_with_tracking = "https://example.com/product?id=123&utm_source=google&utm_medium=cpc"
        clean_url = normalize_url(url_with_tracking)
        assert "utm_source" not in clean_url
        assert "utm_medium" not in clean_url
        assert "id=123" in clean_url

    def test_fbclid_and_fragment_removed(self):
        clean_url = normalize_url("https://example.com/product?id=123&fbclid=abc123#reviews")
        assert clean_url == "https://example.com/product?id=123"

    def test_empty(self):
        assert normalize_url("") == ""

    def test_any_utm_parameter_removed_order_and_repeats_kept(self):
        url = "https://shop.example.com/p/1?size=9&UTM_ID=42&color=red&size=10&msclkid=x"
        assert normalize_url(url) == "https://shop.example.com/p/1?size=9&color=red&size=10"
