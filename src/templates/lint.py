"""
템플릿 검사: placeholder 사용 현황 + 의심스러운 대괄호 텍스트.

규칙:
- 문법에 맞지 않는 대괄호([not_a_token], [Plugin Name] 등)는 리터럴이며 에러가 아님
  → 오타일 수 있으므로 경고로만 보고
- manifest에 선언된 토큰과 본문 사용 토큰 불일치 → 경고
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from src.core.placeholders import find_placeholders, position_of
from src.domain.constants import BRACKET_CANDIDATE_PATTERN, TOKEN_NAME_PATTERN

# =============================================================================
# Types
# =============================================================================


@dataclass
class SuspiciousBracket:
    """placeholder처럼 보이지만 문법에 맞지 않는 대괄호 텍스트."""

    text: str  # "[not_a_token]"
    line: int
    column: int
    suggestion: str | None = None  # 대문자 변환 시 유효하면 제안


@dataclass
class LintReport:
    """템플릿 검사 결과."""

    placeholders: list[str] = field(default_factory=list)
    occurrences: dict[str, int] = field(default_factory=dict)
    suspicious: list[SuspiciousBracket] = field(default_factory=list)
    undeclared: list[str] = field(default_factory=list)  # 본문에만 있음
    unused: list[str] = field(default_factory=list)  # manifest에만 있음

    @property
    def clean(self) -> bool:
        return not (self.suspicious or self.undeclared or self.unused)

    def warnings(self) -> list[str]:
        """사람이 읽을 경고 메시지 목록."""
        messages = []
        for s in self.suspicious:
            msg = f"{s.text} at line {s.line}, column {s.column} is not a placeholder"
            if s.suggestion:
                msg += f" (did you mean [{s.suggestion}]?)"
            messages.append(msg)
        if self.undeclared:
            messages.append(f"Placeholders not declared in manifest: {self.undeclared}")
        if self.unused:
            messages.append(f"Manifest tokens not used in template: {self.unused}")
        return messages

    def to_dict(self) -> dict[str, Any]:
        return {
            "placeholders": self.placeholders,
            "occurrences": self.occurrences,
            "suspicious": [
                {
                    "text": s.text,
                    "line": s.line,
                    "column": s.column,
                    "suggestion": s.suggestion,
                }
                for s in self.suspicious
            ],
            "undeclared": self.undeclared,
            "unused": self.unused,
            "clean": self.clean,
        }


# =============================================================================
# Detection
# =============================================================================


def detect_suspicious_brackets(text: str) -> list[SuspiciousBracket]:
    """
    placeholder 문법에 맞지 않는 대괄호 식별자 감지.

    PHP 배열 인덱스([0], [$key])는 식별자 모양이 아니므로 대상이 아님.

    Args:
        text: 템플릿 텍스트

    Returns:
        SuspiciousBracket 목록 (문서 순서)
    """
    results = []

    for match in BRACKET_CANDIDATE_PATTERN.finditer(text):
        inner = match.group(1)
        if TOKEN_NAME_PATTERN.match(inner):
            continue

        candidate = inner.strip().upper().replace(" ", "_")
        suggestion = candidate if TOKEN_NAME_PATTERN.match(candidate) else None

        line, column = position_of(text, match.start())
        results.append(
            SuspiciousBracket(
                text=match.group(0),
                line=line,
                column=column,
                suggestion=suggestion,
            )
        )

    return results


def lint_template(
    text: str,
    declared_tokens: Iterable[str] | None = None,
) -> LintReport:
    """
    템플릿 검사.

    Args:
        text: 템플릿 텍스트
        declared_tokens: manifest에 선언된 토큰 (None이면 선언 비교 생략)

    Returns:
        LintReport
    """
    occurrences: dict[str, int] = {}
    for p in find_placeholders(text):
        occurrences[p.name] = occurrences.get(p.name, 0) + 1

    report = LintReport(
        placeholders=list(occurrences),
        occurrences=occurrences,
        suspicious=detect_suspicious_brackets(text),
    )

    if declared_tokens is not None:
        declared = list(dict.fromkeys(declared_tokens))
        report.undeclared = [name for name in occurrences if name not in declared]
        report.unused = [name for name in declared if name not in occurrences]

    return report
