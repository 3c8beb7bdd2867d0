"""
전시 제목 → 네이버 블로그 검색어 변환.

예:
  "한국 근현대미술 : 붓으로 빚은 한국의 서정" → "붓으로 빚은 한국의 서정"
  "Finnegans Wake 다니엘 보이드" → "Finnegans Wake" "다니엘 보이드"
"""
from __future__ import annotations

import re
from typing import List


_BRACKETS_RE = re.compile(r"[《》〈〉<>≪≫〔〕【】『』「」()]")
_SPACES_RE = re.compile(r"\s+")
_SUFFIX_RE = re.compile(r"\s+(개인전|단체전|특별전|기획전|상설전|소장품전|회고전|초대전|귀국전)$")

# 순서 중요: " : " 가 ": " 보다 먼저
SEPARATORS: List[str] = [" : ", ": ", ", ", " - "]

# 이 길이 이하로 줄어드는 분할은 하지 않음
MIN_CANDIDATE_LEN = 4

_LATIN_RE = re.compile(r"[a-zA-Z]{2,}")
_KOREAN_RE = re.compile(r"[가-힣]{2,}")
_SCRIPT_BOUNDARY_RE = re.compile(r"(?<=[a-zA-Z])\s+(?=[가-힣])|(?<=[가-힣])\s+(?=[a-zA-Z])")


def _split_once(cleaned: str) -> str:
    for sep in SEPARATORS:
        idx = cleaned.find(sep)
        if idx <= 0:
            continue

        before = cleaned[:idx].strip()
        after = cleaned[idx + len(sep):].strip()
        candidate = after if len(after) >= len(before) else before
        if len(candidate) <= MIN_CANDIDATE_LEN:
            continue
        return candidate

    return cleaned


def extract_search_title(title: str) -> str:
    """제목에서 검색에 쓸 핵심 부분만 남긴다."""
    cleaned = _BRACKETS_RE.sub(" ", title or "")
    cleaned = _SPACES_RE.sub(" ", cleaned).strip()
    cleaned = _SUFFIX_RE.sub("", cleaned).strip()

    while True:
        candidate = _split_once(cleaned)
        if candidate == cleaned:
            return cleaned
        cleaned = candidate


def short_place(place: str) -> str:
    parts = (place or "").split()
    return parts[0] if parts else ""


def build_query(search_title: str, place: str) -> str:
    """
    search_title: extract_search_title() 결과
    place: 짧은 장소명 (빈 문자열이면 생략)

    한글/영문이 섞인 제목은 언어별로 나눠서 각각 따옴표 처리.
    """
    has_latin = bool(_LATIN_RE.search(search_title))
    has_korean = bool(_KOREAN_RE.search(search_title))

    if has_latin and has_korean:
        parts = [p.strip() for p in _SCRIPT_BOUNDARY_RE.split(search_title)]
        title_part = " ".join(f'"{p}"' for p in parts if len(p) > 1)
    else:
        title_part = f'"{search_title}"'

    return f"{title_part} {place}" if place else title_part
