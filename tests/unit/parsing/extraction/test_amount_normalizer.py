"""
Unit-тесты для AmountNormalizer.

ЦКП: Немецкий формат сумм -> точный Decimal, мусор -> None (без исключений).
"""

from decimal import Decimal

import pytest

from kassenbon.parsing.extraction.amount_normalizer import AmountNormalizer, find_amounts, normalize_amount


@pytest.fixture
def normalizer():
    return AmountNormalizer()


class TestNormalize:
    """Нормализация одиночной суммы."""

    @pytest.mark.parametrize("raw, expected", [
        ("12,99", Decimal("12.99")),
        ("0,99", Decimal("0.99")),
        (",99", Decimal("0.99")),
        ("1.234,56", Decimal("1234.56")),
        ("12.345.678,90", Decimal("12345678.90")),
        ("€ 3,50", Decimal("3.50")),
        ("3,50 €", Decimal("3.50")),
        ("EUR 11,61", Decimal("11.61")),
        ("11,61EUR", Decimal("11.61")),
        ("42", Decimal("42")),
    ])
    def test_german_format(self, normalizer, raw, expected):
        """Разделитель тысяч убирается ДО замены десятичной запятой."""
        assert normalizer.normalize(raw) == expected

    def test_dot_decimal_from_ocr(self, normalizer):
        """OCR прочитал запятую как точку: "12.99" -> 12.99."""
        assert normalizer.normalize("12.99") == Decimal("12.99")

    def test_thousands_dot_without_decimals(self, normalizer):
        """"1.234" - это тысяча двести тридцать четыре, не 1.234."""
        assert normalizer.normalize("1.234") == Decimal("1234")

    @pytest.mark.parametrize("raw, expected", [
        ("-1,20", Decimal("-1.20")),
        ("1,20-", Decimal("-1.20")),
    ])
    def test_negative_amounts_accepted(self, normalizer, raw, expected):
        """Отрицательные суммы разбираются; допустимость решает вызывающий код."""
        assert normalizer.normalize(raw) == expected

    @pytest.mark.parametrize("raw", [
        None, "", "   ", "???", "EUR", "abc", "1,2,3", "12.34.56", "1.23,4.5", "12,99 A",
    ])
    def test_garbage_returns_none(self, normalizer, raw):
        """Нераспознаваемый ввод -> None, исключений нет."""
        assert normalizer.normalize(raw) is None

    def test_round_trip_exact(self, normalizer):
        """Строки вида D{1,3}(.DDD)*,DD дают точное десятичное значение."""
        for raw, expected in [
            ("7,05", "7.05"),
            ("999,99", "999.99"),
            ("1.000,00", "1000.00"),
            ("100.000,01", "100000.01"),
            ("1.000.000,10", "1000000.10"),
        ]:
            assert normalizer.normalize(raw) == Decimal(expected)

    def test_module_helper(self):
        assert normalize_amount("2,45") == Decimal("2.45")


class TestFindAmounts:
    """Поиск сумм в строке чека."""

    def test_finds_all_in_order(self, normalizer):
        matches = normalizer.find_all("A           9,68      1,93     11,61")
        assert [m.value for m in matches] == [Decimal("9.68"), Decimal("1.93"), Decimal("11.61")]
        assert matches[0].start < matches[1].start < matches[2].start

    def test_weight_is_not_an_amount(self, normalizer):
        """"0,856" (вес) не должен давать сумму "0,85"."""
        matches = normalizer.find_all("Bananen kg         0,856  2,45 A")
        assert [m.raw for m in matches] == ["2,45"]

    def test_percent_is_not_an_amount(self, normalizer):
        assert normalizer.find_all("H-Milch 3,5% 1L") == []

    def test_negative_amount_keeps_sign(self):
        matches = find_amounts("Rabatt Kundenkarte:       -1,20")
        assert len(matches) == 1
        assert matches[0].value == Decimal("-1.20")

    def test_trailing_minus_keeps_sign(self, normalizer):
        """Кассовый формат скидки "0,50-" - отрицательная сумма."""
        matches = normalizer.find_all("Rabatt 0,50-")
        assert [(m.raw, m.value) for m in matches] == [("0,50-", Decimal("-0.50"))]

    def test_dot_decimal_found(self, normalizer):
        matches = normalizer.find_all("SUMME 6.67")
        assert [m.value for m in matches] == [Decimal("6.67")]

    @pytest.mark.parametrize("text", [
        "Datum: 25.09.2025",
        "25.09.25 16:20",
        "Apfel kg 1.234",
        "Tel: 01/515 15-0",
    ])
    def test_dots_without_cents_ignored(self, normalizer, text):
        assert normalizer.find_all(text) == []

    def test_find_last(self, normalizer):
        assert normalizer.find_last("Gegeben 20,00 Rückgeld 8,39").value == Decimal("8.39")
        assert normalizer.find_last("keine Beträge") is None
