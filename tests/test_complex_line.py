"""
Tests for ComplexLineAnalyzer.

Tests name and title extraction from lines mixing department, title and name.
"""

import pytest
from cardscan.complex_line import RESIDUE, TITLE_ANCHORED, WHOLE_PART, ComplexLineAnalyzer


class TestComplexLineAnalyzer:
    """Test cases for ComplexLineAnalyzer."""

    @pytest.fixture
    def analyzer(self):
        """Create analyzer instance."""
        return ComplexLineAnalyzer()

    def test_split_parts(self, analyzer):
        """Test splitting on slash and pipe separators."""
        assert analyzer.split_parts("영업본부 / 부장 | 이영희") == ["영업본부", "부장", "이영희"]
        assert analyzer.split_parts("대표이사 김철수") == ["대표이사 김철수"]

    def test_residue(self, analyzer):
        """Test keywords and separators are stripped."""
        assert analyzer.residue("영업본부 / 부장 / 이영희") == "이영희"
        assert analyzer.residue("마케팅팀 팀장") == ""

    def test_extract_name(self, analyzer):
        """Test names are picked out of mixed lines."""
        test_cases = [
            ("대표이사 김철수", "김철수"),
            ("생산관리팀 / 주임 홍 길 동", "홍길동"),
            ("영업본부 / 부장 / 이영희", "이영희"),
            ("박민수 과장", "박민수"),
            ("마케팅팀 팀장", None),
            ("Director", None),
        ]

        for line, expected in test_cases:
            assert analyzer.extract_name(line) == expected, f"Failed for: {line}"

    def test_extract_position(self, analyzer):
        """Test the longest contained title wins."""
        test_cases = [
            ("대표이사 김철수", "대표이사"),
            ("생산관리팀 / 주임 홍 길 동", "주임"),
            ("영업본부 / 부장 / 이영희", "부장"),
            ("Senior Engineer", "Engineer"),
            ("김철수", None),
        ]

        for line, expected in test_cases:
            assert analyzer.extract_position(line) == expected, f"Failed for: {line}"

    def test_title_anchored_candidates_rank_first(self, analyzer):
        """Test a name next to a title outranks whole-part matches."""
        candidates = analyzer.collect_candidates("과장 김철수 / 이영희")
        best = max(candidates, key=lambda c: (c.weight, -c.step, -c.order))

        assert best.name == "김철수"
        assert best.step == TITLE_ANCHORED
        assert any(c.name == "이영희" and c.step == WHOLE_PART for c in candidates)
        assert any(c.step == RESIDUE for c in candidates)
