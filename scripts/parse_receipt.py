#!/usr/bin/env python3
"""
Точка входа: разбор текста чека из файла.

Использование:
    # Текстовый файл: одна строка OCR на строку файла
    python scripts/parse_receipt.py receipt.txt

    # JSON: {"lines": [{"text": ..., "confidence": ..., "bounding_box": {...}}], "confidence": 0.9}
    python scripts/parse_receipt.py receipt.json --locale de_DE

    # Несколько чеков параллельно, результат в файл
    python scripts/parse_receipt.py a.txt b.json --workers 4 --output parsed.json
"""

import sys
import argparse
import json
from pathlib import Path
from typing import List

from loguru import logger

# Добавляем корень проекта в путь
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.settings import LOG_LEVEL
from contracts.ocr_input_dto import OcrResult
from kassenbon.parsing import ParsingPipeline, PatternTable
from kassenbon.parsing.domain.exceptions import ParsingError


def load_receipt(path: Path, ocr_confidence: float = None) -> OcrResult:
    """
    Загружает чек из .json (формат OcrResult.from_dict) или текстового файла.
    """
    text = path.read_text(encoding="utf-8")

    if path.suffix.lower() == ".json":
        data = json.loads(text)
        if isinstance(data, list):
            data = {"lines": data}
        result = OcrResult.from_dict(data)
    else:
        result = OcrResult.from_text(text)

    if ocr_confidence is not None:
        result = OcrResult(lines=result.lines, confidence=ocr_confidence, language=result.language)

    logger.debug(f"[parse_receipt] {path.name}: {len(result.lines)} строк")
    return result


def main(argv: List[str] = None) -> int:
    """Главная функция: разбор одного или нескольких чеков."""
    parser = argparse.ArgumentParser(description="Kassenbon - разбор текста кассовых чеков")
    parser.add_argument("paths", nargs="+", help="Файлы чеков (.txt или .json)")
    parser.add_argument("--locale", default=None, help="Код локали (de_AT, de_DE)")
    parser.add_argument("--ocr-confidence", type=float, default=None, help="Уверенность OCR-движка (0.0 - 1.0)")
    parser.add_argument("--no-bbox", action="store_true", help="Не сопоставлять позиции с bounding box")
    parser.add_argument("--workers", type=int, default=None, help="Число потоков для нескольких чеков")
    parser.add_argument("--output", default=None, help="Файл для JSON-результата (по умолчанию stdout)")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Уровень логов (DEBUG, INFO, WARNING)")
    args = parser.parse_args(argv)

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=args.log_level.upper(),
    )

    try:
        receipts = [load_receipt(Path(p), args.ocr_confidence) for p in args.paths]
        pipeline = ParsingPipeline(PatternTable.load(args.locale), associate_boxes=not args.no_bbox)
        results = pipeline.process_batch(receipts, max_workers=args.workers)
    except (OSError, ValueError, TypeError, ParsingError) as e:
        logger.error(f"[parse_receipt] {e}")
        return 1

    payload = [receipt.model_dump(mode="json") for receipt in results]
    output = json.dumps(payload[0] if len(payload) == 1 else payload, ensure_ascii=False, indent=2)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        logger.info(f"[parse_receipt] Сохранено: {args.output}")
    else:
        print(output)

    for path, receipt in zip(args.paths, results):
        logger.info(
            f"[parse_receipt] {Path(path).name}: {receipt.store_name}, итог {receipt.total_amount}, "
            f"{len(receipt.items)} товаров, confidence={receipt.confidence}, "
            f"проблемы: {[issue.code for issue in receipt.issues]}"
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
