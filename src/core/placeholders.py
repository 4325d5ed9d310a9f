"""
Placeholder 렌더러: [TOKEN] 치환.

규칙:
- 문법: \\[[A-Z_][A-Z0-9_]*\\] 만 placeholder로 인정 (그 외 대괄호는 리터럴)
- 왼쪽 → 오른쪽 한 번만 스캔, 치환된 값은 다시 스캔하지 않음
- 미해결 토큰 → UnresolvedTokenError (리터럴 [TOKEN] 출력 금지)
- 순수 함수: I/O 없음, 같은 입력 → 같은 출력
"""

from collections.abc import Mapping

from src.domain.constants import PLACEHOLDER_PATTERN, TOKEN_NAME_PATTERN
from src.domain.errors import MalformedPlaceholderError, UnresolvedTokenError
from src.domain.schemas import Placeholder


def position_of(text: str, offset: int) -> tuple[int, int]:
    """
    offset → (line, column), 둘 다 1-based.

    Args:
        text: 원본 텍스트
        offset: 0-based 문자 위치

    Returns:
        (line, column)
    """
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def find_placeholders(template: str) -> list[Placeholder]:
    """
    템플릿의 모든 placeholder (문서 순서, 중복 포함).

    Args:
        template: 템플릿 텍스트

    Returns:
        Placeholder 목록
    """
    placeholders = []
    line = 1
    line_start = 0
    scanned = 0

    for match in PLACEHOLDER_PATTERN.finditer(template):
        offset = match.start()
        # 줄 번호는 증분 계산 (큰 템플릿에서 매번 처음부터 세지 않음)
        newlines = template.count("\n", scanned, offset)
        if newlines:
            line += newlines
            line_start = template.rfind("\n", scanned, offset) + 1
        scanned = offset

        placeholders.append(
            Placeholder(
                name=match.group(1),
                offset=offset,
                line=line,
                column=offset - line_start + 1,
            )
        )

    return placeholders


def placeholder_names(template: str) -> list[str]:
    """placeholder 이름 목록 (중복 제거, 문서 순서)."""
    return list(dict.fromkeys(p.name for p in find_placeholders(template)))


def has_placeholders(template: str) -> bool:
    """placeholder가 있는지 확인."""
    return bool(PLACEHOLDER_PATTERN.search(template))


def missing_tokens(template: str, tokens: Mapping[str, str]) -> list[str]:
    """토큰 테이블에 없는 placeholder 이름 (중복 제거, 문서 순서)."""
    return [name for name in placeholder_names(template) if name not in tokens]


def validate_tokens(tokens: Mapping[str, str]) -> None:
    """
    토큰 테이블 키가 placeholder 문법을 따르는지 확인.

    Raises:
        MalformedPlaceholderError: 소문자, 공백 등이 섞인 키
    """
    for name in tokens:
        if not isinstance(name, str) or not TOKEN_NAME_PATTERN.match(name):
            raise MalformedPlaceholderError(str(name))


def render(template: str, tokens: Mapping[str, str]) -> str:
    """
    템플릿의 placeholder를 토큰 값으로 치환.

    Args:
        template: 템플릿 텍스트
        tokens: {토큰 이름: 치환 값}

    토큰 값은 그대로 삽입되고 다시 스캔하지 않는다. 값 자체에 "[B]"가 있거나
    "[[A]]"에 A="B"를 넣는 경우처럼 결과에 placeholder 모양 문자열이 남을 수
    있으므로, 결과를 다시 검사하려면 호출 측에서 값에 마커가 없는지 확인해야 함.

    Returns:
        렌더된 텍스트 (placeholder 외 부분은 원본과 동일)

    Raises:
        MalformedPlaceholderError: 토큰 키가 문법에 맞지 않음
        UnresolvedTokenError: 토큰 테이블에 없는 placeholder
    """
    validate_tokens(tokens)

    placeholders = find_placeholders(template)
    unresolved = [p for p in placeholders if p.name not in tokens]
    if unresolved:
        first = unresolved[0]
        raise UnresolvedTokenError(
            first.name,
            line=first.line,
            column=first.column,
            missing=list(dict.fromkeys(p.name for p in unresolved)),
        )

    parts = []
    cursor = 0
    for p in placeholders:
        parts.append(template[cursor:p.offset])
        parts.append(str(tokens[p.name]))
        cursor = p.offset + len(p.marker)
    parts.append(template[cursor:])

    return "".join(parts)
