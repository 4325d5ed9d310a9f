"""
test_placeholders.py - [TOKEN] 렌더러 테스트

검증:
- 토큰 테이블이 모든 placeholder를 포함하면 결과에 placeholder가 남지 않음
- 누락 토큰 → UnresolvedTokenError (토큰 이름 + 위치)
- placeholder 없는 템플릿 → 원본 그대로
- 결정론: 같은 입력 → 같은 출력
- 문법에 맞지 않는 대괄호([not_a_token])는 리터럴
"""

import random
import string

import pytest

from src.core.placeholders import (
    find_placeholders,
    has_placeholders,
    missing_tokens,
    placeholder_names,
    position_of,
    render,
)
from src.domain.constants import PLACEHOLDER_PATTERN
from src.domain.errors import (
    ErrorCodes,
    MalformedPlaceholderError,
    ScaffoldError,
    UnresolvedTokenError,
)

# =============================================================================
# render 정상 케이스
# =============================================================================

class TestRender:
    """render 함수 테스트."""

    def test_header_example(self, sample_template: str, sample_tokens: dict):
        """헤더 예시 렌더."""
        result = render(sample_template, sample_tokens)

        assert result == "Plugin Name: Acme\nVersion: 1.0.0"

    def test_no_placeholders_left(self, sample_template: str, sample_tokens: dict):
        """모든 토큰 제공 → placeholder 없음."""
        result = render(sample_template, sample_tokens)

        assert PLACEHOLDER_PATTERN.search(result) is None

    def test_repeated_token_same_value(self):
        """같은 토큰 반복 → 모두 같은 값."""
        template = "define( '[PREFIX]_VERSION', '[VERSION]' ); // [VERSION]"

        result = render(template, {"PREFIX": "ACME", "VERSION": "2.0"})

        assert result == "define( 'ACME_VERSION', '2.0' ); // 2.0"

    def test_template_without_placeholders_unchanged(self):
        """placeholder 없는 템플릿 → 그대로 (토큰 테이블 무관)."""
        template = "<?php\n// nothing to replace\n$a = $b[0];\n"

        assert render(template, {}) == template
        assert render(template, {"UNUSED": "x"}) == template

    def test_extra_tokens_ignored(self, sample_template: str, sample_tokens: dict):
        """템플릿에 없는 토큰은 무시."""
        tokens = {**sample_tokens, "AUTHOR_NAME": "someone"}

        assert render(sample_template, tokens) == "Plugin Name: Acme\nVersion: 1.0.0"

    def test_lowercase_bracket_left_verbatim(self):
        """[not_a_token] → 문법 불일치, 리터럴 유지."""
        template = "keep [not_a_token] but replace [NAME]"

        result = render(template, {"NAME": "x"})

        assert result == "keep [not_a_token] but replace x"

    def test_non_matching_brackets_literal(self):
        """공백/숫자 시작/빈 대괄호 → 리터럴."""
        template = "[A B] [1ABC] [] [$key] [ NAME ]"

        assert render(template, {}) == template

    def test_underscore_and_digits_allowed(self):
        """밑줄 시작, 숫자 포함 토큰."""
        template = "[_PRIVATE] [V2_NAME]"

        assert render(template, {"_PRIVATE": "a", "V2_NAME": "b"}) == "a b"

    def test_values_not_rescanned(self):
        """치환 값 안의 placeholder는 다시 치환하지 않음."""
        result = render("[A]", {"A": "[B]", "B": "nope"})

        assert result == "[B]"

    def test_nested_brackets_inserted_verbatim(self):
        """[[A]] + A="B" → "[B]" (값은 그대로 삽입, 재스캔 없음)."""
        assert render("[[A]]", {"A": "B"}) == "[B]"

    def test_adjacent_placeholders(self):
        """붙어 있는 placeholder."""
        assert render("[A][B]", {"A": "1", "B": "2"}) == "12"

    def test_empty_value(self):
        """빈 문자열 값 허용."""
        assert render("x[A]y", {"A": ""}) == "xy"

    def test_preserves_line_endings(self):
        """CRLF, 유니코드 등 나머지 텍스트는 그대로."""
        template = "이름: [NAME]\r\n끝 — ✓\r\n"

        assert render(template, {"NAME": "테스트"}) == "이름: 테스트\r\n끝 — ✓\r\n"

    def test_deterministic(self, sample_template: str, sample_tokens: dict):
        """같은 입력 → 같은 출력."""
        first = render(sample_template, sample_tokens)
        second = render(sample_template, dict(reversed(list(sample_tokens.items()))))

        assert first == second


# =============================================================================
# render 실패 케이스
# =============================================================================

class TestRenderUnresolved:
    """미해결 토큰 테스트."""

    def test_missing_version(self, sample_template: str):
        """VERSION 누락 → UnresolvedTokenError("VERSION")."""
        with pytest.raises(UnresolvedTokenError) as exc_info:
            render(sample_template, {"PROJECT_NAME": "Acme"})

        err = exc_info.value
        assert err.token == "VERSION"
        assert err.code == ErrorCodes.UNRESOLVED_TOKEN
        assert "VERSION" in str(err)

    def test_reports_position(self, sample_template: str):
        """위치: 2번째 줄, 10번째 열 (1-based)."""
        with pytest.raises(UnresolvedTokenError) as exc_info:
            render(sample_template, {"PROJECT_NAME": "Acme"})

        assert exc_info.value.line == 2
        assert exc_info.value.column == 10

    def test_first_unresolved_in_document_order(self):
        """여러 개 누락 → 첫 번째 기준, missing에 전체 (중복 없음)."""
        template = "[A] [B] [C] [B]"

        with pytest.raises(UnresolvedTokenError) as exc_info:
            render(template, {"A": "1"})

        err = exc_info.value
        assert err.token == "B"
        assert err.line == 1
        assert err.column == 5
        assert err.missing == ["B", "C"]

    def test_is_scaffold_error(self):
        """ScaffoldError 계열 + to_dict."""
        with pytest.raises(ScaffoldError) as exc_info:
            render("[X]", {})

        data = exc_info.value.to_dict()
        assert data["code"] == "UNRESOLVED_TOKEN"
        assert data["token"] == "X"
        assert data["missing"] == ["X"]

    def test_malformed_token_key(self):
        """토큰 키가 문법 불일치 → MalformedPlaceholderError."""
        with pytest.raises(MalformedPlaceholderError) as exc_info:
            render("[NAME]", {"NAME": "x", "bad key": "y"})

        assert exc_info.value.name == "bad key"
        assert exc_info.value.code == ErrorCodes.MALFORMED_PLACEHOLDER


# =============================================================================
# 탐색 함수 테스트
# =============================================================================

class TestFindPlaceholders:
    """find_placeholders / placeholder_names 테스트."""

    def test_positions(self):
        """줄/열 1-based."""
        template = "a [ONE]\nbb\n  [TWO] [ONE]"

        found = find_placeholders(template)

        assert [(p.name, p.line, p.column) for p in found] == [
            ("ONE", 1, 3),
            ("TWO", 3, 3),
            ("ONE", 3, 9),
        ]

    def test_offsets_match_markers(self):
        """offset 위치에 [NAME] 마커가 있음."""
        template = "x\n[A]\n\n[B]"

        for p in find_placeholders(template):
            assert template[p.offset:p.offset + len(p.marker)] == p.marker

    def test_names_unique_in_order(self):
        """중복 제거 + 문서 순서."""
        assert placeholder_names("[B] [A] [B] [C]") == ["B", "A", "C"]

    def test_has_placeholders(self):
        assert has_placeholders("x [A] y")
        assert not has_placeholders("x [a] y")

    def test_missing_tokens(self):
        assert missing_tokens("[A] [B] [C]", {"B": "1"}) == ["A", "C"]
        assert missing_tokens("[A]", {"A": "1"}) == []


class TestPositionOf:
    """position_of 테스트."""

    def test_first_char(self):
        assert position_of("abc", 0) == (1, 1)

    def test_after_newline(self):
        assert position_of("ab\ncd", 3) == (2, 1)
        assert position_of("ab\ncd", 4) == (2, 2)


# =============================================================================
# 무작위 입력 성질 테스트 (고정 seed → 재현 가능)
# =============================================================================

# 문법에 맞지 않는 대괄호 조각 (대괄호는 항상 조각 안에서 닫힘 → 이어 붙여도 마커가 생기지 않음)
_LITERAL_CHUNKS = ["<?php", "\n", "\r\n", " ", "$a[0]", "[a_b]", "[1X]", "[]", "[ X ]", "한글", "define(", "'"]
_NAME_CHARS = string.ascii_uppercase + string.digits + "_"


def _random_name(rng: random.Random) -> str:
    first = rng.choice(string.ascii_uppercase + "_")
    return first + "".join(rng.choice(_NAME_CHARS) for _ in range(rng.randint(0, 8)))


def _random_value(rng: random.Random) -> str:
    """마커가 없는 값 (대괄호 제외)."""
    alphabet = string.ascii_letters + string.digits + " -_.'/\n가"
    return "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))


def _random_template(rng: random.Random, names: list[str]) -> str:
    parts = []
    for _ in range(rng.randint(0, 30)):
        if names and rng.random() < 0.4:
            parts.append(f"[{rng.choice(names)}]")
        else:
            parts.append(rng.choice(_LITERAL_CHUNKS))
    return "".join(parts)


def _is_marker_free(text: str) -> bool:
    return PLACEHOLDER_PATTERN.search(text) is None


class TestRenderProperties:
    """render 성질: 여러 seed의 무작위 템플릿/토큰으로 검증."""

    @pytest.mark.parametrize("seed", range(40))
    def test_superset_tokens_leave_no_placeholder(self, seed: int):
        """토큰 테이블 ⊇ 사용 토큰, 값에 마커 없음 → 결과에 placeholder 없음."""
        rng = random.Random(seed)
        names = [_random_name(rng) for _ in range(rng.randint(1, 6))]
        template = _random_template(rng, names)
        tokens = {name: _random_value(rng) for name in names}
        tokens[_random_name(rng) + "_EXTRA"] = _random_value(rng)

        result = render(template, tokens)

        assert _is_marker_free(result)

    @pytest.mark.parametrize("seed", range(40))
    def test_missing_token_is_reported(self, seed: int):
        """사용된 토큰 하나를 빼면 → UnresolvedTokenError, 빠진 이름 포함."""
        rng = random.Random(seed)
        names = list(dict.fromkeys(_random_name(rng) for _ in range(rng.randint(1, 6))))
        template = _random_template(rng, names) + f"[{names[0]}]"
        tokens = {name: _random_value(rng) for name in names}
        dropped = rng.choice(placeholder_names(template))
        del tokens[dropped]

        with pytest.raises(UnresolvedTokenError) as exc_info:
            render(template, tokens)

        err = exc_info.value
        assert dropped in err.missing
        assert err.token == err.missing[0]
        first = next(p for p in find_placeholders(template) if p.name == err.token)
        assert (err.line, err.column) == (first.line, first.column)

    @pytest.mark.parametrize("seed", range(40))
    def test_marker_free_template_unchanged(self, seed: int):
        """placeholder 없는 템플릿 → 어떤 유효 토큰 테이블이든 원본 그대로."""
        rng = random.Random(seed)
        template = _random_template(rng, [])
        tokens = {_random_name(rng): _random_value(rng) for _ in range(rng.randint(0, 5))}

        assert not has_placeholders(template)
        assert render(template, tokens) == template
