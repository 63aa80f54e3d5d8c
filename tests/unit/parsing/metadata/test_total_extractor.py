"""
Unit-тесты для KeywordAmountExtractor.

ЦКП: Итог, промежуточная сумма и налог по ключевым словам.
"""

from decimal import Decimal

import pytest

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line
from kassenbon.parsing.s3_metadata.stage import MetadataStage
from kassenbon.parsing.s3_metadata.total_extractor import KeywordAmountExtractor


def create_lines(texts):
    return [Line(text=text, index=i) for i, text in enumerate(texts)]


@pytest.fixture
def extractor():
    return KeywordAmountExtractor(PatternTable.load("de_AT"))


class TestTotal:
    """Итоговая сумма."""

    def test_keyword_with_currency(self, extractor):
        result = extractor.extract_total(create_lines(["Brot 2,99 A", "SUMME EUR                11,61"]))
        assert result.amount == Decimal("11.61")
        assert result.method == "keyword"
        assert result.line_index == 1

    def test_zwischensumme_is_not_total(self, extractor):
        """Ключевое слово только с начала слова: ZWISCHENSUMME не совпадает с SUMME."""
        lines = create_lines(["Zwischensumme:            23,79", "GESAMT EUR:               22,59"])
        assert extractor.extract_total(lines).amount == Decimal("22.59")

    def test_keyword_as_word_prefix(self, extractor):
        result = extractor.extract_total(create_lines(["GESAMTSUMME 5,00"]))
        assert result.amount == Decimal("5.00")

    def test_last_keyword_line_wins(self, extractor):
        """Поиск снизу вверх: берётся последняя строка с итогом."""
        lines = create_lines(["Summe 10,00", "Pfand 2,00", "TOTAL 12,00"])
        assert extractor.extract_total(lines).amount == Decimal("12.00")

    def test_negative_after_keyword_skipped(self, extractor):
        result = extractor.extract_total(create_lines(["SUMME -1,20 3,00"]))
        assert result.amount == Decimal("3.00")

    def test_fallback_to_last_amount(self, extractor):
        lines = create_lines(["Brot 2,99 A", "Gegeben 20,00 Rückgeld 8,39", "Danke"])
        result = extractor.extract_total(lines)
        assert result.amount == Decimal("8.39")
        assert result.method == "fallback"
        assert result.line_index == 1

    def test_unreadable_total_reported(self, extractor):
        """"???" после ключевого слова - invalid_raw, итог из fallback."""
        lines = create_lines(["Brot 2,99 A", "Total might be:           ???", "Cash payment:            10,00"])
        result = extractor.extract_total(lines)
        assert result.invalid_raw == "???"
        assert result.amount == Decimal("10.00")
        assert result.method == "fallback"

    def test_dot_decimal_total(self, extractor):
        lines = create_lines(["Brot 1.99", "SUMME 6.67", "Danke"])
        result = extractor.extract_total(lines)
        assert result.amount == Decimal("6.67")
        assert result.method == "keyword"

    def test_fallback_skips_trailing_minus_discount(self, extractor):
        """"0,50-" - скидка, а не итог."""
        lines = create_lines(["Brot 2,00", "Milch 1,00", "Rabatt 0,50-"])
        result = extractor.extract_total(lines)
        assert result.amount == Decimal("1.00")
        assert result.line_index == 1

    def test_no_amounts(self, extractor):
        result = extractor.extract_total(create_lines(["Hallo", "Danke"]))
        assert result.amount is None
        assert result.method is None


class TestSubtotalAndTax:
    """Промежуточная сумма и налог: сумма сразу после ключевого слова."""

    def test_subtotal(self, extractor):
        lines = create_lines(["Zwischensumme:            23,79", "GESAMT EUR: 22,59"])
        assert extractor.extract_subtotal(lines).amount == Decimal("23.79")

    def test_english_subtotal(self, extractor):
        lines = create_lines(["Subtotal:                 18,99"])
        assert extractor.extract_subtotal(lines).amount == Decimal("18.99")

    def test_tax_with_rate(self, extractor):
        lines = create_lines(["USt 10%: 0,28  USt 20%: 3,76"])
        assert extractor.extract_tax(lines).amount == Decimal("0.28")

    def test_table_header_has_no_values(self, extractor):
        """Шапка таблицы MwSt без сумм рядом с ключевыми словами."""
        lines = create_lines(["MwSt 20%    Netto    Steuer   Brutto", "A           9,68      1,93     11,61"])
        assert extractor.extract_subtotal(lines).amount is None
        assert extractor.extract_tax(lines).amount is None

    def test_last_tax_line_wins(self, extractor):
        lines = create_lines([
            "MwSt. 10%: Netto  1,44  Steuer 0,14",
            "MwSt. 20%: Netto 12,87  Steuer 2,58",
        ])
        assert extractor.extract_subtotal(lines).amount == Decimal("12.87")
        assert extractor.extract_tax(lines).amount == Decimal("2.58")

    def test_no_keywords_configured(self):
        table = PatternTable.load("de_AT").with_overrides(tax_keywords=[])
        lines = create_lines(["MwSt 20%: 1,93"])
        assert KeywordAmountExtractor(table).extract_tax(lines).amount is None


class TestMetadataStage:
    """Stage 3 целиком."""

    def test_all_fields(self):
        stage = MetadataStage(PatternTable.load("de_AT"))
        result = stage.process(create_lines([
            "SPAR Markt",
            "25.09.2025  15:45  Kasse 2",
            "Zwischensumme:            23,79",
            "GESAMT EUR:               22,59",
            "USt 10%: 0,28  USt 20%: 3,76",
        ]))
        assert result.receipt_date == "25.09.2025"
        assert result.receipt_time == "15:45"
        assert result.total_amount == Decimal("22.59")
        assert result.subtotal == Decimal("23.79")
        assert result.tax_amount == Decimal("0.28")
        assert result.to_dict()["total_amount"] == "22.59"
