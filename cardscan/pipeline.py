"""
Business Card Scan Pipeline
OCR lines -> contact record, with result dicts ready for the API layer.

The parser itself never fails; this layer additionally shields callers from
OCR errors (missing file, engine failure) by reporting them in the result.
"""

import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .lexicon import get_profile
from .ocr import OCRExtractor
from .parser import DEFAULT_LINE_CONFIDENCE, ContactParser, RecognizedLine

logger = logging.getLogger(__name__)


class CardScanPipeline:
    """Complete pipeline for turning business card OCR into contacts."""

    def __init__(
        self,
        ocr: Optional[OCRExtractor] = None,
        parser: Optional[ContactParser] = None,
        locale: str = "ko",
        ocr_languages: Optional[List[str]] = None,
        ocr_gpu: bool = False,
        ocr_min_confidence: float = 0.0,
        default_confidence: float = DEFAULT_LINE_CONFIDENCE
    ):
        self.locale = locale
        self.default_confidence = default_confidence
        self.parser = parser or ContactParser(profile=get_profile(locale))
        # The EasyOCR reader itself is only built on first image
        self.ocr = ocr or OCRExtractor(
            languages=ocr_languages or ["ko", "en"],
            gpu=ocr_gpu,
            min_confidence=ocr_min_confidence
        )
        logger.info(f"CardScanPipeline initialized (locale={locale})")

    # ======================================================
    # LINES / TEXT
    # ======================================================

    def _result(self, contact, lines_count: int, start_time: float, **extra) -> Dict:
        result = {
            "success": True,
            "contact_data": contact.to_dict(),
            "lines_count": lines_count,
            "processing_time_ms": int((time.time() - start_time) * 1000),
            "processed_at": datetime.now(timezone.utc).isoformat()
        }
        result.update(extra)
        return result

    def process_lines(
        self,
        lines: Iterable[RecognizedLine],
        image_reference: Optional[str] = None
    ) -> Dict:
        """
        Parse already recognized lines.

        Args:
            lines: OCR lines
            image_reference: Opaque handle to the source image
        """
        start_time = time.time()
        lines = list(lines)
        contact = self.parser.parse_lines(lines, image_reference=image_reference)
        logger.info(f"Parsed {len(lines)} lines (valid contact: {contact.is_valid()})")
        return self._result(contact, len(lines), start_time)

    def process_text(self, text: str) -> Dict:
        """Parse newline-separated text (skip OCR)."""
        lines = [
            RecognizedLine(text=l, confidence=self.default_confidence)
            for l in text.split("\n")
        ]
        return self.process_lines(lines)

    # ======================================================
    # SINGLE IMAGE
    # ======================================================

    def process_image(self, image_path: Path) -> Dict:
        """
        Recognize and parse a business card image.

        Args:
            image_path: Path to the image
        """
        start_time = time.time()
        image_path = Path(image_path)

        try:
            lines = self.ocr.extract_lines(image_path)
        except Exception as e:
            logger.exception(f"OCR failed for {image_path}")
            return {
                "success": False,
                "error": str(e),
                "image": str(image_path)
            }

        contact = self.parser.parse_lines(lines, image_reference=str(image_path))
        logger.info(f"Processed {image_path.name}: {len(lines)} lines, valid={contact.is_valid()}")

        return self._result(
            contact,
            len(lines),
            start_time,
            ocr_lines=[
                {"text": l.text, "confidence": round(l.confidence, 4), "bbox": l.bounding_box}
                for l in lines
            ],
            ocr_stats=self.ocr.get_confidence_stats(lines),
            image=str(image_path)
        )

    # ======================================================
    # BATCH
    # ======================================================

    def process_batch(self, image_paths: List[Path]) -> Dict:
        """Process multiple business card images."""
        results = []
        success_count = 0

        for path in image_paths:
            result = self.process_image(path)
            results.append(result)

            if result.get("success"):
                success_count += 1

        return {
            "success": True,
            "total": len(image_paths),
            "successful": success_count,
            "failed": len(image_paths) - success_count,
            "results": results
        }

    # ======================================================
    # STATUS
    # ======================================================

    def get_status(self) -> Dict:
        """Get pipeline status information."""
        return {
            "ocr_engine": "easyocr",
            "ocr_languages": self.ocr.languages,
            "locale": self.locale,
            "phases": [name for name, _ in self.parser.phases]
        }
