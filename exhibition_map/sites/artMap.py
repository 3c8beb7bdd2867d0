from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, TypedDict

from bs4 import BeautifulSoup
from playwright.async_api import Browser, Page, async_playwright

from exhibition_map.blog_count import refresh_from_env
from exhibition_map.config import get_app_config, load_env
from exhibition_map.sites.batch import gather_bounded, grow_until_stable
from exhibition_map.sites.parsing import (
    ExtractionError,
    absolute_url,
    normalize_text,
    to_iso_date,
)
from exhibition_map.store import Exhibition, report_filter, save_exhibitions


# ==============================
# 설정
# ==============================

@dataclass(frozen=True)
class Settings:
    site: str = "artMap"
    base_url: str = "https://art-map.co.kr"
    list_url: str = "https://art-map.co.kr/exhibition/new_list.php?type=ing"
    detail_url: str = "https://art-map.co.kr/exhibition/view.php?idx={idx}"
    gallery_url: str = "https://art-map.co.kr/gallery/view.php?idx={idx}"
    max_scrolls: int = 50
    scroll_wait_ms: int = 1500
    concurrency: int = 3
    timeout_ms: int = 15_000


SETTINGS = Settings()

FetchHtml = Callable[[str], Awaitable[str]]

LINK_SELECTOR = 'a[href*="view.php?idx="]'


# ==============================
# 타입
# ==============================

class ListItem(TypedDict):
    idx: str
    thumbnail: str


class Detail(TypedDict):
    title: str
    place: str
    gallery_idx: Optional[str]
    start_date: str
    end_date: str


class GalleryGps(TypedDict):
    lat: float
    lng: float
    address: str


UNKNOWN_GPS: GalleryGps = {"lat": 0.0, "lng": 0.0, "address": ""}


# ==============================
# 파싱 (HTML → 타입)
# ==============================

_IDX_RE = re.compile(r"idx=(\d+)")
_TITLE_DATES_RE = re.compile(r"\s*\([\d.\s-]+\)\s*$")
_TD_DATES_RE = re.compile(r"(\d{4}\.\d{2}\.\d{2})\s*-\s*(\d{4}\.\d{2}\.\d{2})")
_INIT_MAP_RE = re.compile(r'initMap\("([^"]+)","([^"]+)","([^"]*?)","([^"]*?)"')
_REGION_SUFFIX_RE = re.compile(r"/[^/]*$")


def _idx_of(href: str) -> str:
    m = _IDX_RE.search(href or "")
    return m.group(1) if m else ""


def parse_list(html: str) -> List[ListItem]:
    """
    무한스크롤 다 내린 뒤의 리스트 HTML → (idx, 썸네일) 목록.
    같은 idx 링크가 여러 번 나오면 처음 것 유지 (썸네일은 비어 있지 않은 것 우선).
    """
    soup = BeautifulSoup(html or "", "html.parser")
    items: Dict[str, ListItem] = {}

    for a in soup.select(LINK_SELECTOR):
        href = a.get("href") or ""
        if "gallery/" in href:
            continue
        idx = _idx_of(href)
        if not idx:
            continue

        img = a.find("img")
        thumbnail = normalize_text(img.get("src")) if img else ""

        if idx not in items:
            items[idx] = {"idx": idx, "thumbnail": thumbnail}
        elif not items[idx]["thumbnail"] and thumbnail:
            items[idx]["thumbnail"] = thumbnail

    return list(items.values())


def parse_detail(html: str, idx: str) -> Detail:
    """
    상세 페이지:
    - 제목: <title> "전시명 (2026.02.13 - 2026.03.28)"
    - 갤러리 링크: gallery/view.php?idx=...
    - 기간: td 안의 "YYYY.MM.DD - YYYY.MM.DD"
    """
    soup = BeautifulSoup(html or "", "html.parser")

    page_title = soup.title.get_text() if soup.title else ""
    title = _TITLE_DATES_RE.sub("", page_title).strip()
    if not title:
        raise ExtractionError(SETTINGS.site, "title", f"idx={idx}")

    gallery_idx: Optional[str] = None
    place = ""
    link = soup.select_one('a[href*="gallery/view.php?idx="]')
    if link:
        gallery_idx = _idx_of(link.get("href") or "") or None
        place = normalize_text(link.get_text())

    start_date, end_date = "", ""
    for td in soup.find_all("td"):
        m = _TD_DATES_RE.search(td.get_text())
        if m:
            start_date, end_date = to_iso_date(m.group(1)), to_iso_date(m.group(2))
            break

    return {
        "title": title,
        "place": place,
        "gallery_idx": gallery_idx,
        "start_date": start_date,
        "end_date": end_date,
    }


def parse_gallery_gps(html: str) -> GalleryGps:
    """갤러리 페이지의 initMap("lat","lng","이름","주소", ...) 호출에서 좌표/주소."""
    m = _INIT_MAP_RE.search(html or "")
    if not m:
        raise ExtractionError(SETTINGS.site, "gps", "initMap 호출 없음")

    try:
        lat, lng = float(m.group(1)), float(m.group(2))
    except ValueError:
        raise ExtractionError(SETTINGS.site, "gps", f"좌표 형식 오류: {m.group(1)}, {m.group(2)}")

    return {"lat": lat, "lng": lng, "address": m.group(4).strip()}


def clean_place(place: str) -> str:
    # "갤러리명/서울" → "갤러리명"
    return _REGION_SUFFIX_RE.sub("", place).strip()


def build_record(item: ListItem, detail: Detail, gps: GalleryGps) -> Exhibition:
    place = clean_place(detail["place"])
    return {
        "id": item["idx"],
        "title": detail["title"],
        "place": place,
        "address": gps["address"] or place,
        "lat": gps["lat"],
        "lng": gps["lng"],
        "startDate": detail["start_date"],
        "endDate": detail["end_date"],
        "thumbnail": absolute_url(SETTINGS.base_url, item["thumbnail"]),
        "blogCount": None,
    }


# ==============================
# 크롤러
# ==============================

@dataclass
class CrawlContext:
    """
    크롤 1회 동안만 유지되는 상태.
    gps_cache: 갤러리 idx → 좌표 (같은 갤러리는 한 번만 조회)
    """

    settings: Settings = SETTINGS
    gps_cache: Dict[str, GalleryGps] = field(default_factory=dict)
    _locks: Dict[str, asyncio.Lock] = field(default_factory=dict)

    async def gallery_gps(self, gallery_idx: str, fetch_html: FetchHtml) -> GalleryGps:
        lock = self._locks.setdefault(gallery_idx, asyncio.Lock())
        async with lock:
            cached = self.gps_cache.get(gallery_idx)
            if cached is not None:
                return cached

            html = await fetch_html(self.settings.gallery_url.format(idx=gallery_idx))
            gps = parse_gallery_gps(html)
            self.gps_cache[gallery_idx] = gps
            return gps


async def discover_list(page: Page, settings: Settings = SETTINGS) -> List[ListItem]:
    await page.goto(settings.list_url, wait_until="networkidle")

    async def _scroll(i: int) -> int:
        await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
        await page.wait_for_timeout(settings.scroll_wait_ms)
        count = await page.locator(LINK_SELECTOR).count()
        print(f"[리스트] 스크롤 {i + 1}: {count}개")
        return count

    await grow_until_stable(_scroll, settings.max_scrolls)
    return parse_list(await page.content())


async def fetch_details(
    items: List[ListItem],
    fetch_html: FetchHtml,
    ctx: CrawlContext,
) -> List[Exhibition]:
    settings = ctx.settings

    async def _detail(item: ListItem) -> Exhibition:
        html = await fetch_html(settings.detail_url.format(idx=item["idx"]))
        detail = parse_detail(html, item["idx"])

        gps = UNKNOWN_GPS
        if detail["gallery_idx"]:
            gps = await ctx.gallery_gps(detail["gallery_idx"], fetch_html)

        return build_record(item, detail, gps)

    return await gather_bounded(
        items,
        _detail,
        limit=settings.concurrency,
        label=lambda it: f"idx={it['idx']}",
    )


def _make_fetcher(browser: Browser, settings: Settings) -> FetchHtml:
    async def fetch_html(url: str) -> str:
        page = await browser.new_page()
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=settings.timeout_ms)
            return await page.content()
        finally:
            await page.close()

    return fetch_html


async def crawl(settings: Settings = SETTINGS) -> List[Exhibition]:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True)
        try:
            page = await browser.new_page()
            print(f"[접속] {settings.list_url}")
            items = await discover_list(page, settings)
            await page.close()
            print(f"[리스트] 진행 중 전시 {len(items)}개")

            ctx = CrawlContext(settings=settings)
            return await fetch_details(items, _make_fetcher(browser, settings), ctx)
        finally:
            await browser.close()


def run(
    save_json: bool = True,
    out_path: Optional[Path] = None,
    with_blog_count: bool = True,
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
