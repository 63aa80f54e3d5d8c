import pytest

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line
from kassenbon.parsing.s3_metadata.date_extractor import DateExtractor


def create_lines(texts):
    return [Line(text=text, index=i) for i, text in enumerate(texts)]


@pytest.fixture
def extractor():
    return DateExtractor(PatternTable.load("de_AT"))


def test_extract_dot_format(extractor):
    result = extractor.extract_date(create_lines(["REWE Markt GmbH", "Datum: 24.12.2024", "Summe: 10,50"]))
    assert result.date == "24.12.2024"
    assert result.line_index == 1
    assert result.date_format == "DD.MM.YYYY"


def test_extract_iso_format(extractor):
    result = extractor.extract_date(create_lines(["BIPA", "2024-12-24"]))
    assert result.date == "24.12.2024"
    assert result.date_format == "YYYY-MM-DD"


def test_two_digit_year_is_2000s(extractor):
    assert extractor.extract_date(create_lines(["Datum 24.12.24"])).date == "24.12.2024"


def test_single_digit_day_month_padded(extractor):
    assert extractor.extract_date(create_lines(["1.2.2025 9:05"])).date == "01.02.2025"


def test_impossible_date_skipped(extractor):
    # 31.02. не существует, берём следующую валидную дату
    result = extractor.extract_date(create_lines(["31.02.2025", "Bon vom 28.02.2025"]))
    assert result.date == "28.02.2025"
    assert result.line_index == 1


def test_first_date_from_top_wins(extractor):
    result = extractor.extract_date(create_lines(["25.09.2025 14:30", "Gültig bis 31.12.2025"]))
    assert result.date == "25.09.2025"


def test_no_date_found(extractor):
    result = extractor.extract_date(create_lines(["Just some text", "No numbers here"]))
    assert result.date is None
    assert result.line_index == -1


@pytest.mark.parametrize("text, expected", [
    ("Datum: 25.09.2025 14:30", "14:30"),
    ("25.09.2025  9:05  Kasse 2", "09:05"),
    ("Zeit 12:34:56", "12:34:56"),
    ("Date: 25.09.2025 Time: 17:30", "17:30"),
])
def test_extract_time(extractor, text, expected):
    assert extractor.extract_time(create_lines([text])).time == expected


@pytest.mark.parametrize("text", ["25:00", "Tel 01:234:56", "keine Uhrzeit"])
def test_no_time(extractor, text):
    assert extractor.extract_time(create_lines([text])).time is None
