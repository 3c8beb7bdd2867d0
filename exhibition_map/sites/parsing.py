from __future__ import annotations

import re
from datetime import datetime
from typing import Optional, Tuple

from bs4 import BeautifulSoup


class ExtractionError(Exception):
    """사이트 마크업에서 필수 필드를 찾지 못함."""

    def __init__(self, site: str, field: str, detail: str = "") -> None:
        self.site = site
        self.field = field
        self.detail = detail
        msg = f"[{site}] '{field}' 추출 실패"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


def normalize_text(s: Optional[str]) -> str:
    return s.strip() if s else ""


def clean_text(s: Optional[str]) -> str:
    """태그 제거 + HTML 엔티티 복원 (&amp; &#39; 등)."""
    if not s:
        return ""
    return normalize_text(BeautifulSoup(s, "html.parser").get_text())


def parse_single_date(part: str) -> Optional[datetime]:
    """
    지원:
    - YYYY-MM-DD
    - YYYY.MM.DD / YYYY. MM. DD
    """
    if not part:
        return None

    s = re.sub(r"\s*[.\-]\s*", ".", part.strip()).rstrip(".")

    m = re.match(r"^(\d{4})\.(\d{1,2})\.(\d{1,2})$", s)
    if not m:
        return None

    y, mth, d = map(int, m.groups())
    try:
        return datetime(y, mth, d)
    except ValueError:
        return None


def to_iso_date(part: str) -> str:
    dt = parse_single_date(part)
    return dt.strftime("%Y-%m-%d") if dt else ""


def parse_date_range(text: str) -> Tuple[str, str]:
    """
    '2026.02.13 - 2026.03.28' / '2025-12-20 ~ 2026-03-29'
    -> ('YYYY-MM-DD', 'YYYY-MM-DD')
    못 찾으면 ('', '')
    """
    if not text:
        return "", ""

    pattern = (
        r"(\d{4}[-.]\s*\d{1,2}[-.]\s*\d{1,2})\s*[-~–]\s*"
        r"(\d{4}[-.]\s*\d{1,2}[-.]\s*\d{1,2})"
    )
    m = re.search(pattern, text)
    if not m:
        return "", ""

    return to_iso_date(m.group(1)), to_iso_date(m.group(2))


def absolute_url(base: str, src: str) -> str:
    src = normalize_text(src)
    if not src:
        return ""
    if src.startswith("http"):
        return src
    if src.startswith("//"):
        return "https:" + src
    return base.rstrip("/") + "/" + src.lstrip("/")
