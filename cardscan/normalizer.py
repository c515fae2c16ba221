"""
OCR error correction for single recognized lines.

Business card OCR regularly confuses ',' with '.' inside email addresses and
'O'/'l' with '0'/'1' inside phone numbers. A single wrong character breaks the
downstream regex matchers, so every line passes through correct_ocr_errors()
before any field extraction.
"""

import re

EMAIL_CONTEXT = re.compile(r"@|mail", re.IGNORECASE)
DIGIT_RUN = re.compile(r"[0-9]{2,}")

_AT_SPACING = re.compile(r"\s*@\s*")
# Only dots followed by a letter, so decimals like "3 . 5" are left alone
_DOT_SPACING = re.compile(r"\s*\.\s*(?=[A-Za-z])")

_O_NEAR_DIGIT = re.compile(r"(?<=[0-9])[Oo]|[Oo](?=[0-9])")
_L_NEAR_DIGIT = re.compile(r"(?<=[0-9])[lI]|[lI](?=[0-9])")

_WHITESPACE = re.compile(r"\s+")


def is_email_context(text: str) -> bool:
    """Check whether a line should be treated as an email line."""
    return bool(EMAIL_CONTEXT.search(text))


def _fix_email(text: str) -> str:
    text = text.replace(",", ".")
    text = _AT_SPACING.sub("@", text)
    return _DOT_SPACING.sub(".", text)


def _fix_digits(text: str) -> str:
    # Repeat until stable: "OO12" needs two passes to become "0012"
    while True:
        fixed = _O_NEAR_DIGIT.sub("0", text)
        fixed = _L_NEAR_DIGIT.sub("1", fixed)
        if fixed == text:
            return fixed
        text = fixed


def correct_ocr_errors(text: str) -> str:
    """
    Correct common OCR character confusions in one line.

    Email lines get ',' -> '.' and stray spaces around '@' and '.' removed.
    Lines holding a run of two or more digits (and not treated as email) get
    O/o -> 0 and l/I -> 1 wherever the letter touches a digit. Whitespace is
    collapsed last.

    The function is idempotent: correct_ocr_errors(correct_ocr_errors(x))
    equals correct_ocr_errors(x).

    Args:
        text: Raw OCR line

    Returns:
        Corrected line (may be empty)
    """
    if not text:
        return ""

    corrected = text
    if is_email_context(corrected):
        corrected = _fix_email(corrected)
    elif DIGIT_RUN.search(corrected):
        corrected = _fix_digits(corrected)

    return _WHITESPACE.sub(" ", corrected).strip()
