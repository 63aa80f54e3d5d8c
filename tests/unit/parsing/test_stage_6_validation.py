"""
Unit-тесты для Stage 6: Validation.

ЦКП: Матрица проблем разбора и формула уверенности.
"""

from decimal import Decimal

import pytest

from contracts.issues import (
    InvalidCurrencyFormat, MissingRequiredField, NoItemsFound, UnknownStore, ValidationFailed,
)
from contracts.receipt_dto import LineItem
from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s6_validation.confidence import ConfidenceScorer
from kassenbon.parsing.s6_validation.stage import ValidationStage


def make_items(*prices: str) -> list:
    return [
        LineItem(
            raw_text=f"Artikel {i} {price}",
            name=f"Artikel {i}",
            unit_price=Decimal(price),
            total_price=Decimal(price),
            confidence=1.0,
            source_line=i,
        )
        for i, price in enumerate(prices)
    ]


@pytest.fixture
def stage():
    return ValidationStage(PatternTable.load("de_AT"))


class TestIssues:
    """Какие проблемы и в каком порядке."""

    def test_clean_receipt(self, stage):
        items = make_items("1.49", "2.99", "2.45")
        result = stage.process("BILLA", "25.09.2025", Decimal("6.93"), items, 0.9)

        assert result.issues == []
        assert result.passed
        assert result.items_sum == Decimal("6.93")
        assert result.difference == Decimal("0.00")

    def test_empty_receipt(self, stage):
        result = stage.process(None, None, None, [], 0.0)

        assert [type(issue) for issue in result.issues] == [
            MissingRequiredField, MissingRequiredField, MissingRequiredField, NoItemsFound,
        ]
        assert [issue.field_name for issue in result.issues[:3]] == [
            "store_name", "receipt_date", "total_amount",
        ]
        assert result.issues[2].is_critical
        assert result.confidence == 0.1

    def test_missing_total_not_critical_with_items(self, stage):
        result = stage.process("BILLA", "25.09.2025", None, make_items("2.99"), 0.9)

        assert len(result.issues) == 1
        assert result.issues[0] == MissingRequiredField(field_name="total_amount", is_critical=False)
        assert result.difference is None

    def test_invalid_currency_after_missing_fields(self, stage):
        result = stage.process(
            "MERKUR", None, Decimal("10.00"), make_items("2.99", "1.49"), 0.55, invalid_total_raw="???",
        )
        assert [issue.code for issue in result.issues] == [
            "MISSING_REQUIRED_FIELD", "INVALID_CURRENCY_FORMAT", "VALIDATION_FAILED",
        ]
        assert result.issues[1] == InvalidCurrencyFormat(raw="???")

    def test_sum_mismatch(self, stage):
        result = stage.process("SPAR", "25.09.2025", Decimal("15.00"), make_items("4.00", "6.00"), 0.9)

        assert result.issues == [ValidationFailed(detail="itemSum")]
        assert not result.passed
        assert result.difference == Decimal("5.00")

    def test_discount_within_tolerance(self, stage):
        """Скидка 1,20 на 23,79 укладывается в 20%."""
        result = stage.process("SPAR", "25.09.2025", Decimal("22.59"), make_items("23.79"), 0.9)
        assert result.passed

    def test_tolerance_from_table(self):
        strict = ValidationStage(PatternTable.load("de_AT").with_overrides(sum_mismatch_tolerance=0.05))
        result = strict.process("SPAR", "25.09.2025", Decimal("10.60"), make_items("10.00"), 0.9)
        assert not result.passed
        assert result.tolerance == 0.05

    def test_unknown_store_last(self, stage):
        result = stage.process("Café Central", "25.09.2025", Decimal("15.00"), make_items("4.00"), 0.9)
        assert result.issues == [ValidationFailed(detail="itemSum"), UnknownStore(store_name="Café Central")]

    def test_known_store_variants(self, stage):
        result = stage.process("MEDIA MARKT", "25.09.2025", Decimal("4.00"), make_items("4.00"), 0.9)
        assert result.issues == []

    def test_deterministic(self, stage):
        args = ("Café Central", None, Decimal("15.00"), make_items("4.00"), 0.7)
        assert stage.process(*args).issues == stage.process(*args).issues


class TestConfidence:
    """Формула уверенности."""

    @pytest.fixture
    def scorer(self):
        return ConfidenceScorer()

    def test_bonuses(self, scorer):
        assert scorer.score(0.55, [], 5) == pytest.approx(0.70)
        assert scorer.score(0.55, [], 2) == pytest.approx(0.65)
        assert scorer.score(0.55, [], 0) == pytest.approx(0.55)

    def test_penalties(self, scorer):
        issues = [InvalidCurrencyFormat(raw="???"), ValidationFailed(detail="itemSum")]
        assert scorer.score(0.55, issues, 2) == pytest.approx(0.45)

    def test_critical_penalty(self, scorer):
        assert scorer.score(0.8, [NoItemsFound()], 0) == pytest.approx(0.55)

    @pytest.mark.parametrize("ocr, issues, items, expected", [
        (1.0, [], 10, 1.0),
        (0.0, [NoItemsFound()], 0, 0.1),
        (0.2, [NoItemsFound(), MissingRequiredField(field_name="store_name")], 0, 0.1),
    ])
    def test_clamped(self, scorer, ocr, issues, items, expected):
        assert scorer.score(ocr, issues, items) == expected

    def test_monotonic_in_issues(self, scorer):
        """Каждая новая проблема не повышает уверенность."""
        issues = [
            MissingRequiredField(field_name="receipt_date"),
            InvalidCurrencyFormat(raw="1,2,3"),
            UnknownStore(store_name="Eckladen"),
            NoItemsFound(),
        ]
        scores = [scorer.score(0.9, issues[:n], 3) for n in range(len(issues) + 1)]
        assert scores == sorted(scores, reverse=True)

    def test_stable_for_float_inputs(self, scorer):
        assert scorer.score(0.7, [], 3) == 0.85
