"""
EasyOCR adapter producing RecognizedLine records.

The OCR engine is an external collaborator of the parser: this module only
turns EasyOCR's (bbox, text, confidence) tuples into RecognizedLine objects.
Importing EasyOCR pulls in torch, so it is imported only when a reader is
actually built.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from .parser import RecognizedLine

logger = logging.getLogger(__name__)


class OCRExtractor:
    """Runs EasyOCR over a card image and returns recognized lines."""

    def __init__(
        self,
        languages: Sequence[str] = ("ko", "en"),
        gpu: bool = False,
        model_dir: Optional[str] = None,
        min_confidence: float = 0.0,
        reader: Any = None
    ):
        """
        Initialize OCR extractor.

        Args:
            languages: EasyOCR language codes
            gpu: Use GPU for OCR
            model_dir: Directory for EasyOCR model storage (EasyOCR default if None)
            min_confidence: Drop results below this confidence
            reader: Pre-built reader exposing ``readtext`` (skips EasyOCR setup)
        """
        self.languages = list(languages)
        self.gpu = gpu
        self.model_dir = model_dir
        self.min_confidence = min_confidence
        self._reader = reader

    @property
    def reader(self):
        if self._reader is None:
            self._reader = self._build_reader()
        return self._reader

    def _build_reader(self):
        import easyocr

        logger.info(f"Initializing EasyOCR with languages: {self.languages}")
        try:
            reader = easyocr.Reader(
                lang_list=self.languages,
                gpu=self.gpu,
                model_storage_directory=self.model_dir,
                verbose=False
            )
        except Exception as e:
            logger.error(f"Failed to initialize EasyOCR: {e}")
            raise
        logger.info("EasyOCR initialized successfully")
        return reader

    @staticmethod
    def _bbox_to_list(bbox: Any) -> List[List[int]]:
        return [[int(x), int(y)] for x, y in bbox]

    def to_lines(self, results: Sequence[Any]) -> List[RecognizedLine]:
        """
        Convert raw EasyOCR results to RecognizedLine records.

        Results are ordered top to bottom so that equal-confidence lines keep
        reading order once the parser sorts by confidence.
        """
        ordered = sorted(results, key=lambda r: r[0][0][1])

        lines = []
        for bbox, text, confidence in ordered:
            text = (text or "").strip()
            confidence = min(max(float(confidence), 0.0), 1.0)
            if not text or confidence < self.min_confidence:
                continue
            lines.append(RecognizedLine(
                text=text,
                confidence=confidence,
                bounding_box=self._bbox_to_list(bbox)
            ))
        return lines

    def extract_lines(self, image_path: Path) -> List[RecognizedLine]:
        """
        Recognize text lines in a card image.

        Args:
            image_path: Path to image

        Returns:
            Recognized lines in reading order

        Raises:
            FileNotFoundError: If the image does not exist
        """
        image_path = Path(image_path)
        if not image_path.exists():
            raise FileNotFoundError(f"Image not found: {image_path}")

        logger.info(f"Extracting text from {image_path}")
        results = self.reader.readtext(str(image_path), detail=1, paragraph=False)
        lines = self.to_lines(results)
        logger.info(f"Extracted {len(lines)} lines from {image_path.name}")
        return lines

    @staticmethod
    def get_confidence_stats(lines: Sequence[RecognizedLine]) -> Dict[str, float]:
        if not lines:
            return {"count": 0, "mean_confidence": 0.0, "min_confidence": 0.0}
        confidences = [l.confidence for l in lines]
        return {
            "count": len(lines),
            "mean_confidence": sum(confidences) / len(confidences),
            "min_confidence": min(confidences),
        }
