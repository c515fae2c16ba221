import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from .complex_line import ComplexLineAnalyzer
from .lexicon import KOREAN_PROFILE, LocaleProfile
from .matchers import EmailMatcher, NameMatcher, PhoneMatcher
from .normalizer import correct_ocr_errors
from .scoring import DEFAULT_WEIGHTS, LineClassifier, ScoringWeights

logger = logging.getLogger(__name__)

# OCR engines do not always report a confidence; treat it as a coin flip
DEFAULT_LINE_CONFIDENCE = 0.5


# =========================
# DATA MODEL
# =========================

@dataclass(frozen=True)
class RecognizedLine:
    """One OCR line: text, recognition confidence and pass-through geometry."""

    text: str
    confidence: float = DEFAULT_LINE_CONFIDENCE
    bounding_box: Any = None

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise ValueError(f"Line text must be a string, got {type(self.text).__name__}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Line confidence must be within [0, 1], got {self.confidence}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecognizedLine":
        """Build a line from a JSON-style dict ({"text", "confidence", "bbox"})."""
        confidence = data.get("confidence")
        if confidence is None:
            confidence = DEFAULT_LINE_CONFIDENCE
        try:
            confidence = float(confidence)
        except (TypeError, ValueError):
            raise ValueError(f"Line confidence must be a number, got {confidence!r}") from None
        return cls(
            text=data.get("text", ""),
            confidence=confidence,
            bounding_box=data.get("bbox", data.get("bounding_box")),
        )


@dataclass
class Contact:
    name: str = ""
    phone_number: str = ""
    company: str = ""
    position: str = ""
    email: str = ""
    address: str = ""
    image_reference: Optional[str] = None

    def is_valid(self) -> bool:
        """A contact can be saved only with both a name and a phone number."""
        return bool(self.name) and bool(self.phone_number)

    def display_name(self) -> str:
        display = self.name
        if self.position:
            display = f"{display} {self.position}".strip()
        if self.company:
            display = f"{display} ({self.company})".strip()
        return display

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone_number": self.phone_number,
            "company": self.company,
            "position": self.position,
            "email": self.email,
            "address": self.address,
            "image_reference": self.image_reference,
            "display_name": self.display_name(),
            "is_valid": self.is_valid(),
        }


@dataclass
class ParseState:
    """Working state threaded through the extraction phases."""

    lines: List[RecognizedLine]
    contact: Contact = field(default_factory=Contact)
    claimed: Set[str] = field(default_factory=set)

    def remaining(self) -> List[RecognizedLine]:
        """Unclaimed lines, in confidence order."""
        return [line for line in self.lines if line.text not in self.claimed]

    def claim(self, text: str) -> None:
        self.claimed.add(text)


Phase = Callable[[ParseState], ParseState]


# =========================
# PARSER
# =========================

class ContactParser:
    """
    Greedy, phase-ordered contact extraction over OCR lines.

    Phases run strictly in order and never revisit a decision: phone, email,
    title+name line, company, address, then name and title fallbacks. A line
    claimed by one phase is invisible to every later phase.
    """

    def __init__(
        self,
        profile: LocaleProfile = KOREAN_PROFILE,
        weights: ScoringWeights = DEFAULT_WEIGHTS
    ):
        self.profile = profile
        self.weights = weights
        self.phone_matcher = PhoneMatcher(profile)
        self.email_matcher = EmailMatcher(profile)
        self.name_matcher = NameMatcher(profile)
        self.classifier = LineClassifier(profile, weights)
        self.analyzer = ComplexLineAnalyzer(profile, weights, self.name_matcher)

        self.phases: List[Tuple[str, Phase]] = [
            ("phone", self._extract_phone),
            ("email", self._extract_email),
            ("title_and_name", self._extract_title_and_name),
            ("company", self._extract_company),
            ("address", self._extract_address),
            ("fallback_name", self._extract_fallback_name),
            ("fallback_position", self._extract_fallback_position),
        ]

    # =========================
    # PIPELINE API
    # =========================

    def parse_lines(
        self,
        lines: Iterable[RecognizedLine],
        image_reference: Optional[str] = None
    ) -> Contact:
        """
        Extract a contact from recognized OCR lines.

        Never raises for missing or ambiguous data: fields that cannot be
        found stay empty. An unexpected error inside a phase is logged and the
        fields filled so far are returned.

        Args:
            lines: OCR lines in any order
            image_reference: Opaque handle to the source image

        Returns:
            Contact record
        """
        state = ParseState(lines=self.prepare_lines(lines))
        state.contact.image_reference = image_reference

        logger.debug(f"Parsing {len(state.lines)} lines")
        for index, line in enumerate(state.lines):
            logger.debug(f"Line {index} (conf: {line.confidence:.2f}): {line.text}")

        for phase_name, phase in self.phases:
            try:
                state = phase(state)
            except Exception:
                logger.exception(f"Phase '{phase_name}' failed; returning partial contact")
                break

        logger.debug(f"Final contact: {state.contact}")
        return state.contact

    def parse_text(self, text: str, confidence: float = DEFAULT_LINE_CONFIDENCE) -> Contact:
        """Parse newline-separated text, giving every line the same confidence."""
        lines = [RecognizedLine(text=l, confidence=confidence) for l in text.split("\n")]
        return self.parse_lines(lines)

    def parse_batch(self, batches: Iterable[Iterable[RecognizedLine]]) -> List[Contact]:
        return [self.parse_lines(lines) for lines in batches]

    def classify(self, line: str) -> Tuple[str, int]:
        return self.classifier.classify(line)

    def prepare_lines(self, lines: Iterable[RecognizedLine]) -> List[RecognizedLine]:
        """Correct OCR errors, drop blank lines and sort by confidence (stable)."""
        prepared = []
        for line in lines:
            text = correct_ocr_errors(line.text)
            if text:
                prepared.append(RecognizedLine(text, line.confidence, line.bounding_box))
        return sorted(prepared, key=lambda l: l.confidence, reverse=True)

    # =========================
    # PHASES
    # =========================

    def _extract_phone(self, state: ParseState) -> ParseState:
        candidates: List[str] = []
        for line in state.lines:
            phones = self.phone_matcher.extract_phones(line.text)
            if phones:
                logger.debug(f"Found phones in '{line.text}': {phones}")
                candidates.extend(phones)
                state.claim(line.text)

        preferred = self.profile.preferred_phone_prefix
        state.contact.phone_number = next(
            (p for p in candidates if p.startswith(preferred)),
            candidates[0] if candidates else ""
        )
        logger.debug(f"Selected phone: '{state.contact.phone_number}'")
        return state

    def _extract_email(self, state: ParseState) -> ParseState:
        for line in state.remaining():
            email = self.email_matcher.extract_email(line.text)
            if email:
                logger.debug(f"Found email: '{email}'")
                if not state.contact.email:
                    state.contact.email = email
                state.claim(line.text)
        return state

    def _extract_title_and_name(self, state: ParseState) -> ParseState:
        title_line = next(
            (l for l in state.remaining() if self.profile.has_position_keyword(l.text)),
            None
        )
        if title_line is None:
            return state

        logger.debug(f"Found position line: '{title_line.text}'")
        state.contact.position = self.analyzer.extract_position(title_line.text) or ""
        state.contact.name = self.analyzer.extract_name(title_line.text) or ""
        state.claim(title_line.text)
        return state

    def _extract_company(self, state: ParseState) -> ParseState:
        candidates = [l for l in state.remaining() if self.profile.has_company_keyword(l.text)]
        if not candidates:
            return state

        best = max(
            candidates,
            key=lambda l: self.weights.company_rank(self.classify(l.text)[1], l.confidence)
        )
        state.contact.company = best.text
        state.claim(best.text)
        logger.debug(f"Selected company: '{best.text}'")
        return state

    def _extract_address(self, state: ParseState) -> ParseState:
        candidates = [
            l for l in state.remaining()
            if self.profile.address_hits(l.text) > 0
            and len(l.text) > self.weights.address_min_length
        ]
        if not candidates:
            return state

        best = max(
            candidates,
            key=lambda l: self.weights.address_rank(
                self.profile.address_hits(l.text), len(l.text), l.confidence
            )
        )
        state.contact.address = best.text
        state.claim(best.text)
        logger.debug(f"Selected address: '{best.text}'")
        return state

    def _extract_fallback_name(self, state: ParseState) -> ParseState:
        if state.contact.name:
            return state

        best_name, best_line, best_rank = None, None, None
        for line in state.remaining():
            name = self.name_matcher.whole_line_name(line.text)
            if not name:
                continue
            rank = self.weights.fallback_name_rank(
                self.profile.starts_with_surname(name), line.confidence
            )
            if best_rank is None or rank > best_rank:
                best_name, best_line, best_rank = name, line, rank

        if best_name:
            state.contact.name = best_name
            state.claim(best_line.text)
            logger.debug(f"Selected name: '{best_name}'")
        return state

    def _extract_fallback_position(self, state: ParseState) -> ParseState:
        if state.contact.position:
            return state

        for line in state.remaining():
            position = self.analyzer.extract_position(line.text)
            if position:
                state.contact.position = position
                logger.debug(f"Selected position: '{position}'")
                break
        return state
