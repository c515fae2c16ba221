"""
cardscan - rule-based contact extraction from business card OCR lines.
"""

from .lexicon import KOREAN_PROFILE, LocaleProfile, get_profile
from .normalizer import correct_ocr_errors
from .matchers import EmailMatcher, NameMatcher, PhoneMatcher, normalize_phone_number
from .scoring import LineClassifier, ScoringWeights
from .complex_line import ComplexLineAnalyzer
from .parser import Contact, ContactParser, RecognizedLine
from .ocr import OCRExtractor
from .pipeline import CardScanPipeline

__all__ = [
    "KOREAN_PROFILE",
    "LocaleProfile",
    "get_profile",
    "correct_ocr_errors",
    "EmailMatcher",
    "NameMatcher",
    "PhoneMatcher",
    "normalize_phone_number",
    "LineClassifier",
    "ScoringWeights",
    "ComplexLineAnalyzer",
    "Contact",
    "ContactParser",
    "RecognizedLine",
    "OCRExtractor",
    "CardScanPipeline",
]
