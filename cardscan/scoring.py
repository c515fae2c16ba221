"""
Confidence scoring for line classification and candidate ranking.

All numeric weights live in ScoringWeights so they can be recalibrated
without touching the extraction control flow. The values express relative
trust between signals; they are not probabilities.
"""

from dataclasses import dataclass
from typing import Tuple

from .lexicon import KOREAN_PROFILE, LocaleProfile

NAME = "name"
COMPANY = "company"
ADDRESS = "address"
POSITION = "position"
UNKNOWN = "unknown"

# Enumeration order doubles as the tie-break order
CATEGORIES = (NAME, COMPANY, ADDRESS, POSITION)


@dataclass(frozen=True)
class ScoringWeights:
    """Tunable weights used by the classifier and the extraction phases."""

    native_name: int = 40
    latin_name: int = 35
    company: int = 35
    company_with_description: int = 10
    address_hit: int = 15
    long_address_bonus: int = 10
    long_address_length: int = 15
    position: int = 30

    # Address phase
    address_min_length: int = 8
    address_rank_hit: int = 10
    address_rank_confidence: int = 10

    # Fallback name phase
    fallback_surname_bonus: int = 20
    fallback_confidence: int = 10

    # Complex-line name candidates
    title_anchored: int = 100
    part_with_title: int = 80
    part_without_title: int = 60
    residue: int = 40

    def company_rank(self, score: int, confidence: float) -> float:
        return score * confidence

    def address_rank(self, hits: int, length: int, confidence: float) -> float:
        return (hits * self.address_rank_hit + length
                + confidence * self.address_rank_confidence)

    def fallback_name_rank(self, has_surname: bool, confidence: float) -> float:
        bonus = self.fallback_surname_bonus if has_surname else 0
        return bonus + confidence * self.fallback_confidence


DEFAULT_WEIGHTS = ScoringWeights()


class LineClassifier:
    """Scores a line against each field category and picks the best one."""

    def __init__(
        self,
        profile: LocaleProfile = KOREAN_PROFILE,
        weights: ScoringWeights = DEFAULT_WEIGHTS
    ):
        self.profile = profile
        self.weights = weights

    def name_score(self, line: str) -> int:
        if (self.profile.native_name_pattern.match(line)
                and self.profile.starts_with_surname(line)):
            return self.weights.native_name
        if self.profile.latin_name_pattern.match(line):
            return self.weights.latin_name
        return 0

    def company_score(self, line: str) -> int:
        if not self.profile.has_company_keyword(line):
            return 0
        # Listing/certification boilerplate lowers, but does not rule out, a company line
        if self.profile.has_description_keyword(line):
            return self.weights.company_with_description
        return self.weights.company

    def address_score(self, line: str) -> int:
        score = self.profile.address_hits(line) * self.weights.address_hit
        if len(line) > self.weights.long_address_length:
            score += self.weights.long_address_bonus
        return score

    def position_score(self, line: str) -> int:
        return self.weights.position if self.profile.has_position_keyword(line) else 0

    def classify(self, line: str) -> Tuple[str, int]:
        """
        Classify a line into a field category.

        Args:
            line: Corrected OCR line

        Returns:
            (category, score); ("unknown", 0) when nothing scores
        """
        scores = (
            (NAME, self.name_score(line)),
            (COMPANY, self.company_score(line)),
            (ADDRESS, self.address_score(line)),
            (POSITION, self.position_score(line)),
        )

        best_category, best_score = UNKNOWN, 0
        for category, score in scores:
            if score > best_score:
                best_category, best_score = category, score
        return best_category, best_score
