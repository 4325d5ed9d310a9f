"""
Core layer: 렌더링/출력 핵심 모듈.

이 모듈만 건드리면 생성 결과가 바뀜 → 가장 보수적으로 관리

역할:
- placeholder 치환 (순수 함수), 원자적 쓰기, 락, 해시, run log
"""

from .hashing import compute_text_hash, compute_tokens_hash
from .ids import generate_run_id
from .logging import create_run_log, emit_warning, save_run_log
from .output import atomic_write_json, atomic_write_text, output_lock
from .placeholders import (
    find_placeholders,
    missing_tokens,
    placeholder_names,
    render,
)

__all__ = [
    # placeholders
    "render",
    "find_placeholders",
    "placeholder_names",
    "missing_tokens",
    # output
    "atomic_write_text",
    "atomic_write_json",
    "output_lock",
    # ids
    "generate_run_id",
    # hashing
    "compute_tokens_hash",
    "compute_text_hash",
    # logging
    "create_run_log",
    "emit_warning",
    "save_run_log",
]
