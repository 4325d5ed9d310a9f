"""
해시 계산: tokens_hash, output_hash

규칙:
- tokens_hash: 토큰 테이블 동일성 (정렬된 키로 직렬화)
- output_hash: 렌더 결과 동일성 (UTF-8 바이트)
- SHA-256

같은 템플릿 + 같은 tokens_hash → 같은 output_hash (재현 가능한 스캐폴딩)
"""

import hashlib
import json
from collections.abc import Mapping


def compute_tokens_hash(tokens: Mapping[str, str]) -> str:
    """
    토큰 테이블 해시.

    Args:
        tokens: {토큰 이름: 값}

    Returns:
        SHA-256 해시 문자열
    """
    serialized = json.dumps(
        dict(tokens),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
    )
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()


def compute_text_hash(text: str) -> str:
    """텍스트 해시 (템플릿 원문, 렌더 결과 등)."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
