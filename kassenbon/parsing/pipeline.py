"""
Parsing Pipeline - Оркестратор 6 этапов.

Координирует выполнение всех этапов в строгом порядке:
1. Preprocess -> 2. Store -> 3. Metadata -> 4. Items -> 5. BBox -> 6. Validation

Возвращает ParsedReceipt (контракт Parsing -> вызывающая сторона).

Пайплайн без состояния: таблица паттернов только читается, каждый этап -
чистая функция своих входов. Поэтому один экземпляр можно использовать
из нескольких потоков без блокировок.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from loguru import logger

from config.settings import BATCH_MAX_WORKERS
from contracts.ocr_input_dto import OcrResult, RawLines
from contracts.receipt_dto import ParsedReceipt

from .domain.interfaces import IParsingPipeline
from .locales.pattern_table import PatternTable
from .s1_preprocess import LinePreprocessStage, PreprocessResult
from .s2_store import StoreResult, StoreStage
from .s3_metadata import MetadataResult, MetadataStage
from .s4_items import ItemsResult, ItemsStage
from .s5_bbox import BoundingBoxResult, BoundingBoxStage
from .s6_validation import ValidationResult, ValidationStage


@dataclass
class PipelineResult:
    """
    Полный результат пайплайна со всеми промежуточными данными.

    Используется для отладки и анализа.
    """
    # Финальный результат
    receipt: ParsedReceipt

    # Промежуточные результаты этапов
    preprocess: Optional[PreprocessResult] = None
    store: Optional[StoreResult] = None
    metadata: Optional[MetadataResult] = None
    items: Optional[ItemsResult] = None
    bbox: Optional[BoundingBoxResult] = None
    validation: Optional[ValidationResult] = None

    # Метрики
    processing_time_ms: float = 0.0
    stages_completed: int = 0

    def to_dict(self) -> dict:
        return {
            "receipt": self.receipt.model_dump(mode="json") if self.receipt else None,
            "preprocess": self.preprocess.to_dict() if self.preprocess else None,
            "store": self.store.to_dict() if self.store else None,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "items": self.items.to_dict() if self.items else None,
            "bbox": self.bbox.to_dict() if self.bbox else None,
            "validation": self.validation.to_dict() if self.validation else None,
            "processing_time_ms": self.processing_time_ms,
            "stages_completed": self.stages_completed,
        }


class ParsingPipeline(IParsingPipeline):
    """
    Пайплайн разбора чека.

    Координирует 6 этапов в строгом порядке:
    1. Preprocess - очистка строк, уверенность OCR
    2. Store - название магазина
    3. Metadata - дата, время, итог, subtotal, налог
    4. Items - товарные позиции
    5. BBox - bounding box позиций (только если у строк есть координаты)
    6. Validation - проблемы разбора и confidence

    ЦКП: ParsedReceipt.
    """

    def __init__(self, table: Optional[PatternTable] = None, associate_boxes: bool = True):
        """
        Args:
            table: Таблица паттернов; по умолчанию - дефолтная локаль
            associate_boxes: Сопоставлять позиции с bounding box строк
        """
        self.table = table or PatternTable.load()
        self.associate_boxes = associate_boxes

        self.preprocess_stage = LinePreprocessStage()
        self.store_stage = StoreStage(self.table)
        self.metadata_stage = MetadataStage(self.table)
        self.items_stage = ItemsStage(self.table)
        self.bbox_stage = BoundingBoxStage(self.table.bbox_max_distance)
        self.validation_stage = ValidationStage(self.table)

        logger.debug(f"[ParsingPipeline] Инициализирован для {self.table.locale_code} (6 этапов)")

    def process(
        self,
        lines: Union[RawLines, OcrResult],
        ocr_confidence: Optional[float] = None,
    ) -> PipelineResult:
        """
        Обрабатывает строки OCR через все этапы.

        Args:
            lines: Строки OCR или OcrResult целиком
            ocr_confidence: Уверенность движка (перекрывает OcrResult.confidence)

        Returns:
            PipelineResult: ParsedReceipt и промежуточные данные
        """
        start_time = time.perf_counter()
        stages_completed = 0

        if isinstance(lines, OcrResult):
            if ocr_confidence is None:
                ocr_confidence = lines.confidence
            lines = lines.lines

        # Stage 1: Preprocess
        logger.trace("[ParsingPipeline] Stage 1/6: Preprocess")
        preprocess = self.preprocess_stage.process(lines, ocr_confidence)
        stages_completed += 1

        # Stage 2: Store
        logger.trace("[ParsingPipeline] Stage 2/6: Store")
        store = self.store_stage.process(preprocess.lines)
        stages_completed += 1

        # Stage 3: Metadata
        logger.trace("[ParsingPipeline] Stage 3/6: Metadata")
        metadata = self.metadata_stage.process(preprocess.lines)
        stages_completed += 1

        # Stage 4: Items
        logger.trace("[ParsingPipeline] Stage 4/6: Items")
        items = self.items_stage.process(preprocess.lines)
        stages_completed += 1

        # Stage 5: BBox
        bbox = None
        final_items = items.items
        if self.associate_boxes and preprocess.has_bounding_boxes:
            logger.trace("[ParsingPipeline] Stage 5/6: BBox")
            bbox = self.bbox_stage.process(items.items, preprocess.lines)
            final_items = bbox.items
            stages_completed += 1

        # Stage 6: Validation
        logger.trace("[ParsingPipeline] Stage 6/6: Validation")
        validation = self.validation_stage.process(
            store_name=store.store_name,
            receipt_date=metadata.receipt_date,
            total_amount=metadata.total_amount,
            items=final_items,
            ocr_confidence=preprocess.ocr_confidence,
            invalid_total_raw=metadata.invalid_total_raw,
        )
        stages_completed += 1

        receipt = ParsedReceipt(
            store_name=store.store_name,
            receipt_date=metadata.receipt_date,
            receipt_time=metadata.receipt_time,
            total_amount=metadata.total_amount,
            subtotal=metadata.subtotal,
            tax_amount=metadata.tax_amount,
            items=final_items,
            confidence=validation.confidence,
            issues=validation.issues,
            raw_text=preprocess.raw_text,
        )

        processing_time_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"[ParsingPipeline] Завершено за {processing_time_ms:.1f}ms: "
            f"магазин={receipt.store_name}, итог={receipt.total_amount}, "
            f"{len(receipt.items)} товаров, confidence={receipt.confidence}"
        )

        return PipelineResult(
            receipt=receipt,
            preprocess=preprocess,
            store=store,
            metadata=metadata,
            items=items,
            bbox=bbox,
            validation=validation,
            processing_time_ms=processing_time_ms,
            stages_completed=stages_completed,
        )

    def parse(
        self,
        lines: Union[RawLines, OcrResult],
        ocr_confidence: Optional[float] = None,
    ) -> ParsedReceipt:
        """Разбирает чек и возвращает только ParsedReceipt."""
        return self.process(lines, ocr_confidence).receipt

    def process_batch(
        self,
        receipts: Iterable[Union[RawLines, OcrResult]],
        max_workers: Optional[int] = None,
    ) -> List[ParsedReceipt]:
        """
        Разбирает несколько чеков в пуле потоков.

        Args:
            receipts: OcrResult или списки строк, по одному на чек
            max_workers: Число потоков (по умолчанию BATCH_MAX_WORKERS)

        Returns:
            Чеки в том же порядке, что и на входе
        """
        receipts = list(receipts)
        workers = max_workers or BATCH_MAX_WORKERS
        logger.info(f"[ParsingPipeline] Batch: {len(receipts)} чеков, {workers} потоков")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(self.parse, receipts))
