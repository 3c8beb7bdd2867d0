from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from bs4 import BeautifulSoup
from playwright.async_api import APIRequestContext, async_playwright

from exhibition_map.blog_count import refresh_from_env
from exhibition_map.config import get_app_config, load_env
from exhibition_map.sites.batch import gather_bounded, grow_until_stable
from exhibition_map.sites.parsing import ExtractionError, clean_text, parse_date_range
from exhibition_map.store import Exhibition, report_filter, save_exhibitions


# ==============================
# 설정
# ==============================

@dataclass(frozen=True)
class Settings:
    site: str = "openGallery"
    list_url: str = "https://www.opengallery.co.kr/exhibition/?status=ongoing&p={page}"
    detail_url: str = "https://www.opengallery.co.kr/exhibition/{id}/"
    max_pages: int = 10
    concurrency: int = 5
    timeout_ms: int = 15_000
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/115.0.0.0 Safari/537.36"
    )


SETTINGS = Settings()

FetchHtml = Callable[[str], Awaitable[str]]


# ==============================
# 파싱 (HTML → 타입)
# ==============================

_ID_RE = re.compile(r'href="/exhibition/(\d+)/"')
_LAT_RE = re.compile(r"djContext\.locationLatitude\s*=\s*([0-9.]+)")
_LNG_RE = re.compile(r"djContext\.locationLongitude\s*=\s*([0-9.]+)")
_PLACE_RE = re.compile(r"djContext\.locationName\s*=\s*'([^']*)'")
_TITLE_SUFFIX_RE = re.compile(r" 전시 정보 :: 오픈갤러리$")


def parse_list(html: str) -> List[str]:
    """리스트 페이지에서 전시 id (등장 순서 유지, 중복 제거)."""
    return list(dict.fromkeys(_ID_RE.findall(html or "")))


def _meta(soup: BeautifulSoup, prop: str) -> str:
    tag = soup.find("meta", attrs={"property": prop})
    if not tag:
        return ""
    return tag.get("content") or ""


def _float_or_zero(m: Optional[re.Match]) -> float:
    if not m:
        return 0.0
    try:
        return float(m.group(1))
    except ValueError:
        return 0.0


def parse_detail(html: str, exhibition_id: str) -> Exhibition:
    soup = BeautifulSoup(html or "", "html.parser")

    og_title = _meta(soup, "og:title")
    title = _TITLE_SUFFIX_RE.sub("", og_title).strip("'")
    title = clean_text(title)
    if not title:
        raise ExtractionError(SETTINGS.site, "title", f"id={exhibition_id}")

    m = _PLACE_RE.search(html)
    place = clean_text(m.group(1)) if m else ""

    # og:description 예: "[서울] 장소 | 2025-12-20 ~ 2026-03-29"
    start_date, end_date = parse_date_range(_meta(soup, "og:description"))

    return {
        "id": exhibition_id,
        "title": title,
        "place": place,
        # 오픈갤러리는 도로명 주소를 따로 노출하지 않음 → 장소명으로 대체
        "address": place,
        "lat": _float_or_zero(_LAT_RE.search(html)),
        "lng": _float_or_zero(_LNG_RE.search(html)),
        "startDate": start_date,
        "endDate": end_date,
        "thumbnail": _meta(soup, "og:image").strip(),
        "blogCount": None,
    }


# ==============================
# 크롤러
# ==============================

async def discover_ids(fetch_html: FetchHtml, settings: Settings = SETTINGS) -> List[str]:
    """p=1,2,... 를 넘기면서 새 id 가 더 안 나오면 멈춘다."""
    ids: List[str] = []

    async def _next_page(i: int) -> int:
        page = i + 1
        try:
            html = await fetch_html(settings.list_url.format(page=page))
        except Exception as e:
            # 마지막 페이지 다음은 404 일 수 있음 → 지금까지 모은 id 로 멈춤
            print(f"[리스트] p={page} 실패: {e}")
            return len(ids)

        for exhibition_id in parse_list(html):
            if exhibition_id not in ids:
                ids.append(exhibition_id)
        print(f"[리스트] p={page}: 누적 {len(ids)}개")
        return len(ids)

    await grow_until_stable(_next_page, settings.max_pages)
    return ids


async def fetch_details(
    ids: List[str],
    fetch_html: FetchHtml,
    settings: Settings = SETTINGS,
) -> List[Exhibition]:
    async def _detail(exhibition_id: str) -> Exhibition:
        html = await fetch_html(settings.detail_url.format(id=exhibition_id))
        return parse_detail(html, exhibition_id)

    return await gather_bounded(
        ids,
        _detail,
        limit=settings.concurrency,
        label=lambda x: f"id={x}",
    )


def _make_fetcher(request: APIRequestContext, settings: Settings) -> FetchHtml:
    async def fetch_html(url: str) -> str:
        res = await request.get(url, timeout=settings.timeout_ms)
        if not res.ok:
            raise RuntimeError(f"HTTP {res.status}: {url}")
        return await res.text()

    return fetch_html


async def crawl(settings: Settings = SETTINGS) -> List[Exhibition]:
    async with async_playwright() as p:
        request = await p.request.new_context(user_agent=settings.user_agent)
        try:
            fetch_html = _make_fetcher(request, settings)

            ids = await discover_ids(fetch_html, settings)
            print(f"[리스트] 최종 전시 수: {len(ids)}")

            return await fetch_details(ids, fetch_html, settings)
        finally:
            await request.dispose()


def run(
    save_json: bool = True,
    out_path: Optional[Path] = None,
    with_blog_count: bool = False,
) -> List[Exhibition]:
    """
    ✅ runner.py가 이 함수를 호출하도록 맞추는 '엔트리 함수'
    """
    data = report_filter(asyncio.run(crawl()))

    if with_blog_count:
        refresh_from_env(data)

    if save_json:
        save_exhibitions(out_path or get_app_config().data_path, data)

    return data


def main() -> None:
    load_env()
    run(save_json=True)


if __name__ == "__main__":
    main()
