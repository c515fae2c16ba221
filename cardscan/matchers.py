"""
Pattern and lexicon driven field matchers.

Each matcher works on a single (already corrected) line and returns the
extracted value or None. Matchers hold no state besides the shared, immutable
LocaleProfile, so one instance can serve any number of parses.
"""

import logging
import re
from typing import List, Optional

from .lexicon import KOREAN_PROFILE, LocaleProfile

logger = logging.getLogger(__name__)

MIN_PHONE_DIGITS = 9

_NON_PHONE_CHARS = re.compile(r"[^0-9+]")
_WHITESPACE = re.compile(r"\s+")


def _group(digits: str, *sizes: int) -> str:
    parts = []
    start = 0
    for size in sizes:
        parts.append(digits[start:start + size])
        start += size
    parts.append(digits[start:])
    return "-".join(parts)


def normalize_phone_number(phone: str, profile: LocaleProfile = KOREAN_PROFILE) -> str:
    """
    Normalize a matched phone number to the domestic hyphenated form.

    Steps:
        1. keep only digits and '+'
        2. '+<country code>' becomes a single trunk '0'
        3. a bare country code on an over-long number is treated the same way
        4. numbers of 9+ digits without a trunk '0' get one prepended
        5. hyphens are inserted by prefix and length

    Numbers carrying a foreign '+' country code are returned as '+<digits>'.

    Args:
        phone: Raw matched text, e.g. "+82-10-1234-5678"

    Returns:
        Normalized number, e.g. "010-1234-5678"
    """
    normalized = _NON_PHONE_CHARS.sub("", phone)
    cc = profile.country_code

    if normalized.startswith("+" + cc):
        rest = normalized[len(cc) + 1:]
    elif normalized.startswith(cc) and len(normalized) > 10:
        rest = normalized[len(cc):]
    else:
        rest = None

    if rest is not None:
        # "+82 (0)10 ..." carries the trunk zero already
        if rest.startswith("0"):
            rest = rest[1:]
        normalized = "0" + rest.replace("+", "")
    elif normalized.startswith("+"):
        return "+" + normalized.replace("+", "")

    normalized = normalized.replace("+", "")
    if not normalized.startswith("0") and len(normalized) >= MIN_PHONE_DIGITS:
        normalized = "0" + normalized

    length = len(normalized)
    if normalized.startswith(profile.mobile_prefix):
        if length == 11:
            return _group(normalized, 3, 4)
        if length == 10:
            return _group(normalized, 3, 3)
    if normalized.startswith(profile.capital_prefix):
        if length == 10:
            return _group(normalized, 2, 4)
        if length == 9:
            return _group(normalized, 2, 3)
    if normalized.startswith("0"):
        if length == 11:
            return _group(normalized, 3, 4)
        if length == 10:
            return _group(normalized, 3, 3)
    return normalized


def count_digits(text: str) -> int:
    return sum(1 for ch in text if ch.isdigit())


class PhoneMatcher:
    """Extracts phone numbers from a line, stripping a leading label."""

    def __init__(self, profile: LocaleProfile = KOREAN_PROFILE):
        self.profile = profile

    def strip_label(self, line: str) -> str:
        """Remove a leading phone label such as 'Tel.', 'M:' or '휴대폰'."""
        return self.profile.phone_label_pattern.sub("", line, count=1)

    def _find(self, text: str) -> List[str]:
        for pattern in (self.profile.international_phone_pattern,
                        self.profile.general_phone_pattern):
            found = [m.group(0) for m in pattern.finditer(text)]
            if found:
                return found
        return []

    def extract_phones(self, line: str) -> List[str]:
        """
        Extract every phone number in a line.

        The label-stripped line is tried first; if nothing matches, the
        original line is tried, since label stripping can eat digits that
        sit right against the label.

        Args:
            line: Corrected OCR line

        Returns:
            Normalized numbers in order of appearance, without duplicates
        """
        stripped = self.strip_label(line)
        raw_matches = self._find(stripped)
        if not raw_matches and stripped != line:
            raw_matches = self._find(line)

        phones = []
        for raw in raw_matches:
            normalized = normalize_phone_number(raw, self.profile)
            if count_digits(normalized) < MIN_PHONE_DIGITS:
                logger.debug(f"Rejected short phone candidate: '{raw}' -> '{normalized}'")
                continue
            if normalized not in phones:
                phones.append(normalized)
        return phones

    def extract_phone(self, line: str) -> Optional[str]:
        phones = self.extract_phones(line)
        return phones[0] if phones else None


class EmailMatcher:
    """Extracts an email address; lines that are only a website yield nothing."""

    def __init__(self, profile: LocaleProfile = KOREAN_PROFILE):
        self.profile = profile

    def strip_label(self, line: str) -> str:
        return self.profile.email_label_pattern.sub("", line, count=1)

    def _is_url(self, candidate: str) -> bool:
        return bool(self.profile.url_pattern.fullmatch(candidate))

    def extract_email(self, line: str) -> Optional[str]:
        """
        Extract the first valid email address from a line.

        Args:
            line: Corrected OCR line

        Returns:
            Email address or None
        """
        stripped = self.strip_label(line).strip()
        if self._is_url(stripped):
            logger.debug(f"Rejected website line as email: '{stripped}'")
            return None

        for text in (stripped, line):
            match = self.profile.email_pattern.search(text)
            if match:
                return match.group(0)
        return None


class NameMatcher:
    """Recognizes personal names in native script and Latin shapes."""

    def __init__(self, profile: LocaleProfile = KOREAN_PROFILE):
        self.profile = profile

    def _is_title(self, text: str) -> bool:
        return text in self.profile.position_keywords

    def _overlaps_department(self, text: str) -> bool:
        return any(text in dept or dept in text
                   for dept in self.profile.department_keywords)

    def _accept(self, candidate: str) -> bool:
        return (bool(self.profile.native_name_pattern.match(candidate))
                and not self._is_title(candidate)
                and not self._overlaps_department(candidate)
                and self.profile.starts_with_surname(candidate))

    def find_native_name(self, text: str) -> Optional[str]:
        """
        Find a native-script personal name in arbitrary text.

        Tried in order, first success wins:
            1. single characters split by spaces ("홍 길 동" -> "홍길동")
            2. a contiguous 2-4 character run
            3. the whole trimmed input

        Every candidate must start with a known surname and must be neither
        a title nor overlap a department term.
        """
        if not text:
            return None

        for match in self.profile.spaced_name_pattern.finditer(text):
            joined = _WHITESPACE.sub("", match.group(0))
            if self._accept(joined):
                return joined

        for match in self.profile.native_run_pattern.finditer(text):
            if self._accept(match.group(0)):
                return match.group(0)

        whole = _WHITESPACE.sub(" ", text).strip()
        if self._accept(whole):
            return whole
        return None

    def is_latin_name(self, text: str) -> bool:
        return bool(self.profile.latin_name_pattern.match(text))

    def whole_line_name(self, line: str) -> Optional[str]:
        """
        Return the line itself when the whole line is shaped like a name.

        Unlike find_native_name() no surname is required; callers rank the
        result with a surname bonus instead.
        """
        text = line.strip()
        if self.profile.spaced_name_pattern.fullmatch(text):
            text = _WHITESPACE.sub("", text)

        if self.profile.native_name_pattern.match(text):
            if self._is_title(text) or self.profile.has_department_keyword(text):
                return None
            return text
        if self.is_latin_name(text):
            return text
        return None
