"""
Locale lexicons for business card parsing.

A LocaleProfile bundles every keyword list and compiled pattern the matchers
need for one script/locale. Profiles are built once at import time and are
never mutated, so a single instance can be shared by concurrent parsers.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Pattern, Tuple


@dataclass(frozen=True)
class LocaleProfile:
    """Keyword sets and script-specific shapes for one locale.

    Attributes:
        name: Profile identifier used by get_profile()
        native_chars: Regex character class body for the native script
        country_code: International dialing code without '+'
        mobile_prefix: Leading digits of mobile numbers (trunk 0 included)
        preferred_phone_prefix: Prefix of the phone number preferred when a
            card lists several
        capital_prefix: Two-digit area code of the capital city
        company_keywords: Company suffixes/markers
        position_keywords: Job titles in lookup priority order
        address_keywords: Address fragments
        department_keywords: Department/organisational unit terms
        company_description_keywords: Listing/certification boilerplate
        surnames: Common family names (single native characters)
        phone_labels: Labels that may prefix a phone number
        email_labels: Labels that may prefix an email address
    """

    name: str
    native_chars: str
    country_code: str
    mobile_prefix: str
    preferred_phone_prefix: str
    capital_prefix: str
    company_keywords: Tuple[str, ...]
    position_keywords: Tuple[str, ...]
    address_keywords: Tuple[str, ...]
    department_keywords: Tuple[str, ...]
    company_description_keywords: Tuple[str, ...]
    surnames: Tuple[str, ...]
    phone_labels: Tuple[str, ...]
    email_labels: Tuple[str, ...]

    native_name_pattern: Pattern = field(init=False, repr=False, compare=False)
    native_run_pattern: Pattern = field(init=False, repr=False, compare=False)
    spaced_name_pattern: Pattern = field(init=False, repr=False, compare=False)
    latin_name_pattern: Pattern = field(init=False, repr=False, compare=False)
    international_phone_pattern: Pattern = field(init=False, repr=False, compare=False)
    general_phone_pattern: Pattern = field(init=False, repr=False, compare=False)
    phone_label_pattern: Pattern = field(init=False, repr=False, compare=False)
    email_pattern: Pattern = field(init=False, repr=False, compare=False)
    url_pattern: Pattern = field(init=False, repr=False, compare=False)
    email_label_pattern: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        c = self.native_chars
        cc = re.escape(self.country_code)
        patterns = {
            # Whole-string 2-4 character native name, e.g. "김철수"
            "native_name_pattern": re.compile(rf"^[{c}]{{2,4}}$"),
            "native_run_pattern": re.compile(rf"[{c}]+"),
            # Single characters separated by spaces, e.g. "홍 길 동"
            "spaced_name_pattern": re.compile(
                rf"(?<![{c}])[{c}](?:\s+[{c}])+(?![{c}])"
            ),
            "latin_name_pattern": re.compile(r"^[A-Z][a-z]+(?:\s[A-Z][a-z]+)*$"),
            "international_phone_pattern": re.compile(
                rf"(?<![0-9])\+?{cc}[-.\s]?\(?0?(?:1[016789]|[2-6][0-9]?|70)\)?"
                r"[-.\s]?[0-9]{3,4}[-.\s]?[0-9]{4}(?![0-9])"
            ),
            "general_phone_pattern": re.compile(
                r"(?<![0-9])\(?0?[0-9]{1,2}\)?[-.\s]?[0-9]{3,4}[-.\s]?[0-9]{4}(?![0-9])"
            ),
            "phone_label_pattern": self._label_pattern(self.phone_labels, r"[A-Za-z]"),
            "email_pattern": re.compile(
                r"[a-zA-Z0-9][a-zA-Z0-9._%+-]*@[a-zA-Z0-9][a-zA-Z0-9.-]*\.[a-zA-Z]{2,}"
            ),
            "url_pattern": re.compile(
                r"(?:https?://)?(?:www\.)?[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}(?:/\S*)?"
            ),
            # "E." in "e.lee@x.com" is the local part, not a label
            "email_label_pattern": self._label_pattern(
                self.email_labels, r"[A-Za-z0-9_%+@]|[.\-][A-Za-z0-9._%+-]*@"
            ),
        }
        for attr, pattern in patterns.items():
            object.__setattr__(self, attr, pattern)

    @staticmethod
    def _label_pattern(labels: Tuple[str, ...], not_followed_by: str) -> Pattern:
        # Longest labels first so "Mobile" wins over "M"
        alternatives = "|".join(
            re.escape(label) for label in sorted(labels, key=len, reverse=True)
        )
        return re.compile(
            rf"^\s*(?:{alternatives})(?!{not_followed_by})\s*[.:\-)]?\s*",
            re.IGNORECASE,
        )

    def has_company_keyword(self, line: str) -> bool:
        return any(k in line for k in self.company_keywords)

    def has_position_keyword(self, line: str) -> bool:
        return any(k in line for k in self.position_keywords)

    def has_department_keyword(self, line: str) -> bool:
        return any(k in line for k in self.department_keywords)

    def has_description_keyword(self, line: str) -> bool:
        return any(k in line for k in self.company_description_keywords)

    def address_hits(self, line: str) -> int:
        """Number of distinct address keywords contained in the line."""
        return sum(1 for k in self.address_keywords if k in line)

    def starts_with_surname(self, text: str) -> bool:
        return any(text.startswith(s) for s in self.surnames)


KOREAN_PROFILE = LocaleProfile(
    name="ko",
    native_chars="가-힣",
    country_code="82",
    mobile_prefix="01",
    preferred_phone_prefix="010",
    capital_prefix="02",
    company_keywords=(
        "주식회사", "(주)", "㈜", "유한회사", "법인", "그룹", "상사", "기업",
        "전자", "산업", "건설", "물산", "화학", "제약", "증권", "은행", "보험",
        "연구소", "센터", "재단",
        "Co.", "Ltd.", "Inc.", "Corporation", "Corp.", "Company", "Group",
    ),
    position_keywords=(
        "회장", "부회장", "사장", "부사장", "대표이사", "전무이사", "상무이사",
        "이사", "감사", "대표", "전무", "상무", "본부장", "센터장", "실장",
        "지사장", "공장장", "팀장", "부장", "차장", "과장", "대리", "주임",
        "사원", "선임연구원", "책임연구원", "수석연구원", "연구원", "파트장",
        "그룹장", "컨설턴트", "디자이너", "개발자", "엔지니어", "아키텍트",
        "매니저",
        "CEO", "CTO", "CFO", "COO", "CMO", "CIO", "CSO", "CPO", "VP",
        "President", "Director", "Manager", "Leader", "Developer",
        "Designer", "Engineer", "Consultant", "Chief",
    ),
    address_keywords=(
        "시", "도", "구", "군", "동", "읍", "면", "로", "길", "가", "번지",
        "층", "호", "빌딩", "타워",
        "Street", "St.", "Ave", "Avenue", "Road", "Rd.", "Floor", "Fl.",
        "Building", "Bldg", "Suite",
    ),
    department_keywords=(
        "경영", "기획", "전략", "인사", "총무", "재무", "회계", "법무", "홍보",
        "IR", "개발", "연구", "디자인", "기술", "생산", "품질", "QA", "QC",
        "영업", "마케팅", "사업", "고객", "서비스", "해외", "국내", "본부",
        "사업부", "센터", "실", "팀", "파트", "그룹", "솔루션", "컨설팅",
        "R&D", "HR", "GA", "부문", "Division",
    ),
    company_description_keywords=(
        "코스닥상장법인", "유가증권상장법인", "벤처기업", "이노비즈",
        "메인비즈", "상장", "인증",
    ),
    surnames=(
        "김", "이", "박", "최", "정", "강", "조", "윤", "장", "임", "한", "오",
        "서", "신", "권", "황", "안", "송", "류", "전", "홍", "고", "문", "양",
        "손", "배", "백", "허", "유", "남", "심", "노", "하", "곽", "성", "차",
        "도", "구", "우", "주", "라", "민", "진", "지", "엄", "채", "원", "천",
        "방", "공", "현", "함", "변", "염", "여", "추", "소", "석", "선", "설",
        "마", "길", "연", "위", "표", "명", "기", "반", "왕", "금", "옥", "육",
        "인", "맹", "제", "모", "탁", "국", "어", "은", "편", "용", "예", "경",
        "봉",
    ),
    phone_labels=(
        "Tel", "Phone", "Mobile", "Mob", "Cell", "Fax", "HP", "H.P", "Direct",
        "Office", "전화", "휴대폰", "핸드폰", "휴대전화", "팩스", "직통",
        "대표전화", "연락처", "T", "M", "P", "F", "H",
    ),
    email_labels=(
        "E-mail", "Email", "E.mail", "E mail", "Mail", "이메일", "메일",
        "전자우편", "E",
    ),
)


_PROFILES: Dict[str, LocaleProfile] = {
    KOREAN_PROFILE.name: KOREAN_PROFILE,
}


def get_profile(name: str = "ko") -> LocaleProfile:
    """Look up a registered locale profile.

    Raises:
        KeyError: If no profile is registered under ``name``
    """
    try:
        return _PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown locale profile: {name}") from None
