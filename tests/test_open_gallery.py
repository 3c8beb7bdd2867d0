import asyncio

import pytest

from exhibition_map.sites import openGallery
from exhibition_map.sites.parsing import ExtractionError


LIST_P1 = """
<ul>
  <li><a href="/exhibition/101/">A</a><a href="/exhibition/101/">A again</a></li>
  <li><a href="/exhibition/102/">B</a></li>
</ul>
"""

LIST_P2 = '<a href="/exhibition/103/">C</a><a href="/exhibition/102/">B</a>'

DETAIL = """
<html><head>
<meta property="og:title" content="'빛 &amp; 그림자' 전시 정보 :: 오픈갤러리">
<meta property="og:description" content="[서울] 갤러리 소소 | 2025-12-20 ~ 2026-03-29">
<meta property="og:image" content="https://img.opengallery.co.kr/ex/101.jpg">
</head><body>
<script>
  djContext.locationLatitude = 37.5512;
  djContext.locationLongitude = 126.9882;
  djContext.locationName = '갤러리 소소';
</script>
</body></html>
"""


def test_parse_list_dedupes_in_order():
    assert openGallery.parse_list(LIST_P1) == ["101", "102"]


def test_parse_detail():
    ex = openGallery.parse_detail(DETAIL, "101")

    assert ex == {
        "id": "101",
        "title": "빛 & 그림자",
        "place": "갤러리 소소",
        "address": "갤러리 소소",
        "lat": 37.5512,
        "lng": 126.9882,
        "startDate": "2025-12-20",
        "endDate": "2026-03-29",
        "thumbnail": "https://img.opengallery.co.kr/ex/101.jpg",
        "blogCount": None,
    }


def test_parse_detail_without_gps_uses_zero():
    html = '<meta property="og:title" content="무제 전시 정보 :: 오픈갤러리">'
    ex = openGallery.parse_detail(html, "7")

    assert ex["title"] == "무제"
    assert (ex["lat"], ex["lng"]) == (0.0, 0.0)
    assert (ex["startDate"], ex["endDate"]) == ("", "")


def test_parse_detail_without_title_raises():
    with pytest.raises(ExtractionError) as exc:
        openGallery.parse_detail("<html></html>", "9")
    assert exc.value.field == "title"


def test_discover_ids_stops_when_no_new_ids():
    pages = {1: LIST_P1, 2: LIST_P2, 3: LIST_P2}
    requested = []

    async def fetch_html(url):
        page = int(url.rsplit("p=", 1)[1])
        requested.append(page)
        return pages.get(page, "")

    ids = asyncio.run(openGallery.discover_ids(fetch_html))

    assert ids == ["101", "102", "103"]
    assert requested == [1, 2, 3]


def test_fetch_details_drops_failed_items():
    async def fetch_html(url):
        if "/102/" in url:
            raise RuntimeError("HTTP 500")
        if "/103/" in url:
            return "<html>markup changed</html>"
        return DETAIL

    rows = asyncio.run(openGallery.fetch_details(["101", "102", "103"], fetch_html))

    assert [r["id"] for r in rows] == ["101"]


def test_discover_ids_keeps_ids_when_later_page_fails():
    async def fetch_html(url):
        if url.endswith("p=1"):
            return LIST_P1
        raise RuntimeError(f"HTTP 404: {url}")

    assert asyncio.run(openGallery.discover_ids(fetch_html)) == ["101", "102"]


def test_discover_ids_first_page_failure_is_empty():
    async def fetch_html(url):
        raise RuntimeError("connection reset")

    assert asyncio.run(openGallery.discover_ids(fetch_html)) == []
