"""
Unit-тесты для Stage 2: Store Detection.

ЦКП: Проверка детекции магазинов по таблице паттернов локали.
"""

import pytest

from kassenbon.parsing.locales.pattern_table import PatternTable
from kassenbon.parsing.s1_preprocess.stage import Line
from kassenbon.parsing.s2_store.stage import StoreStage, format_store_name


def create_lines(texts: list) -> list:
    """Создаёт очищенные строки из списка текстов."""
    return [Line(text=text, index=i) for i, text in enumerate(texts)]


@pytest.fixture
def stage():
    return StoreStage(PatternTable.load("de_AT"))


class TestKnownRetailers:
    """Известные сети (целое слово)."""

    @pytest.mark.parametrize("header, expected", [
        (["BILLA PLUS", "1234 Wien"], "BILLA PLUS"),
        (["SPAR Markt", "5020 Salzburg"], "SPAR"),
        (["INTERSPAR Hypermarkt"], "INTERSPAR"),
        (["HOFER KG", "Filiale 1234"], "HOFER"),
        (["MERKUR Markt"], "MERKUR"),
        (["REWE Markt GmbH"], "REWE"),
        (["dm-drogerie markt"], "DM"),
    ])
    def test_detect_known_retailer(self, stage, header, expected):
        result = stage.process(create_lines(header))
        assert result.store_name == expected
        assert result.method == "known_retailer"

    def test_retailer_below_header_line(self, stage):
        """Магазин может стоять не в первой строке."""
        result = stage.process(create_lines(["Willkommen", "Ihr Einkauf bei", "LIDL"]))
        assert result.store_name == "LIDL"
        assert result.matched_in_line == 2

    def test_only_first_lines_scanned(self, stage):
        lines = create_lines(["1", "2", "3", "4", "5", "BILLA"])
        assert stage.process(lines).store_name is None

    def test_word_inside_other_word_not_matched(self, stage):
        """SPAR внутри слова (Sparpreis) - не магазин SPAR."""
        result = stage.process(create_lines(["Sparpreis Aktion"]))
        assert result.store_name != "SPAR"


class TestFuzzyAndPatterns:
    """OCR-опечатки и варианты написания."""

    def test_fuzzy_one_typo(self, stage):
        result = stage.process(create_lines(["BlLLA", "1234 Wien"]))
        assert result.store_name == "BILLA"
        assert result.method == "fuzzy"

    def test_short_names_not_fuzzy(self, stage):
        """Для названий короче 5 букв fuzzy отключён (SPAR vs SPAS)."""
        result = stage.process(create_lines(["SPAS"]))
        assert result.method != "fuzzy"

    def test_split_ocr_word(self, stage):
        result = stage.process(create_lines(["L I D L", "Musterstraße 1"]))
        assert result.store_name == "LIDL"
        assert result.method == "store_pattern"

    def test_glued_suffix(self, stage):
        result = stage.process(create_lines(["ALDISÜD"]))
        assert result.store_name == "ALDI"

    def test_media_markt_spacing(self, stage):
        result = stage.process(create_lines(["MEDIA MARKT Wien"]))
        assert result.store_name == "MEDIAMARKT"


class TestGenericFallback:
    """Generic-паттерн для неизвестных магазинов."""

    def test_generic_business_name(self, stage):
        result = stage.process(create_lines(["Café central", "Herrengasse 14"]))
        assert result.store_name == "Café Central"
        assert result.method == "generic"

    def test_skip_lines_not_taken_as_store(self, stage):
        result = stage.process(create_lines(["Datum: 25.09.2025", "Bäckerei Huber"]))
        assert result.store_name == "Bäckerei Huber"

    def test_nothing_found(self, stage):
        result = stage.process(create_lines(["12345", "*** ***"]))
        assert result.store_name is None
        assert result.matched_in_line == -1

    def test_empty(self, stage):
        assert stage.process([]).store_name is None


class TestFormatStoreName:

    @pytest.mark.parametrize("raw, expected", [
        ("MERKUR   markt", "MERKUR Markt"),
        ("bäckerei HUBER", "Bäckerei HUBER"),
        ("a", "A"),
    ])
    def test_format(self, raw, expected):
        assert format_store_name(raw) == expected
