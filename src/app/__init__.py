"""
App layer: HTTP API 서버 (FastAPI).

역할:
- 템플릿 조회, 토큰 테이블 렌더, 플러그인 파일 미리보기
- ⚠️ 렌더/출력 로직 없음 (core, render에 위임)
"""
