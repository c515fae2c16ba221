"""
Name and title co-extraction from lines such as "영업팀 / 과장 김철수".

Cards often print department, title and name on one line. A plain regex
cannot tell which token is the name, so candidates are collected around the
title keywords and ranked by how strongly they are anchored.
"""

import logging
import re
from typing import List, NamedTuple, Optional

from .lexicon import KOREAN_PROFILE, LocaleProfile
from .matchers import NameMatcher
from .scoring import DEFAULT_WEIGHTS, ScoringWeights

logger = logging.getLogger(__name__)

PART_SEPARATORS = re.compile(r"[/|｜]")
RESIDUE_PUNCTUATION = re.compile(r"[/|｜:,.·()\[\]\-]")
_WHITESPACE = re.compile(r"\s+")

# Step ranks, lower wins on equal weight
TITLE_ANCHORED, WHOLE_PART, RESIDUE = 0, 1, 2


class NameCandidate(NamedTuple):
    name: str
    weight: int
    step: int
    order: int


class ComplexLineAnalyzer:
    """Splits a title-bearing line and picks the most plausible name."""

    def __init__(
        self,
        profile: LocaleProfile = KOREAN_PROFILE,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        name_matcher: Optional[NameMatcher] = None
    ):
        self.profile = profile
        self.weights = weights
        self.name_matcher = name_matcher or NameMatcher(profile)
        # Longest first so "대표이사" is removed before "이사"
        self._removable = sorted(
            set(profile.department_keywords) | set(profile.position_keywords),
            key=len,
            reverse=True
        )

    def split_parts(self, line: str) -> List[str]:
        return [p.strip() for p in PART_SEPARATORS.split(line) if p.strip()]

    def residue(self, line: str) -> str:
        """Strip every department/title keyword and separator from a line."""
        text = line
        for keyword in self._removable:
            text = text.replace(keyword, " ")
        text = RESIDUE_PUNCTUATION.sub(" ", text)
        return _WHITESPACE.sub(" ", text).strip()

    def collect_candidates(self, line: str) -> List[NameCandidate]:
        """Gather every name candidate in the line with its weight."""
        find = self.name_matcher.find_native_name
        candidates: List[NameCandidate] = []

        def add(name: Optional[str], weight: int, step: int):
            if name:
                candidates.append(NameCandidate(name, weight, step, len(candidates)))

        parts = self.split_parts(line)

        for part in parts:
            for keyword in self.profile.position_keywords:
                index = part.find(keyword)
                if index < 0:
                    continue
                after = part[index + len(keyword):]
                before = part[:index]
                add(find(after), self.weights.title_anchored, TITLE_ANCHORED)
                add(find(before), self.weights.title_anchored, TITLE_ANCHORED)

        for part in parts:
            if self.profile.has_department_keyword(part):
                continue
            if self.profile.has_position_keyword(part):
                weight = self.weights.part_with_title
            else:
                weight = self.weights.part_without_title
            add(find(part), weight, WHOLE_PART)

        add(find(self.residue(line)), self.weights.residue, RESIDUE)
        return candidates

    def extract_name(self, line: str) -> Optional[str]:
        """
        Extract a person's name from a line mixing department, title and name.

        Args:
            line: Corrected OCR line

        Returns:
            Best name candidate, or None
        """
        candidates = self.collect_candidates(line)
        if not candidates:
            return None

        best = max(candidates, key=lambda c: (c.weight, -c.step, -c.order))
        logger.debug(f"Complex line '{line}': {len(candidates)} name candidates, chose '{best.name}'")
        return best.name

    def extract_position(self, line: str) -> Optional[str]:
        """
        Extract the job title contained in a line.

        The longest contained title keyword wins, so "대표이사" is preferred
        over "이사" and "대표"; equal lengths keep lexicon order.
        """
        found = [k for k in self.profile.position_keywords if k in line]
        if not found:
            return None
        return max(found, key=len)
