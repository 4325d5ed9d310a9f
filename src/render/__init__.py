"""
Render layer: 템플릿 + 토큰 → 최종 파일.

역할:
- 텍스트 템플릿 렌더/저장 (text.py)
- 플러그인 진입 파일 생성 + run log (plugin.py)
"""

from .plugin import GenerationResult, PluginGenerator, generate_plugin
from .text import TextRenderer, render_file

__all__ = [
    "render_file",
    "TextRenderer",
    "PluginGenerator",
    "GenerationResult",
    "generate_plugin",
]
