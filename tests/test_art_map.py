import asyncio

import pytest

from exhibition_map.sites import artMap
from exhibition_map.sites.parsing import ExtractionError


LIST_HTML = """
<div class="list">
  <a href="view.php?idx=11"><img src="/upload/11.jpg"></a>
  <a href="view.php?idx=11">빛의 조각</a>
  <a href="view.php?idx=12">썸네일 없음</a>
  <a href="view.php?idx=12"><img src="https://cdn.art-map.co.kr/12.jpg"></a>
  <a href="/gallery/view.php?idx=77">갤러리 현대</a>
  <a href="view.php?idx=13"><img src="/upload/13.jpg"></a>
</div>
"""


def detail_html(title="빛의 조각", gallery_idx="77", place="갤러리 현대/서울"):
    return f"""
    <html><head><title>{title} (2026.02.13 - 2026.03.28)</title></head>
    <body>
      <a href="/gallery/view.php?idx={gallery_idx}">{place}</a>
      <table>
        <tr><td>기간</td><td>2026.02.13 - 2026.03.28</td></tr>
        <tr><td>장소</td><td>{place}</td></tr>
      </table>
    </body></html>
    """


GALLERY_HTML = """
<script>
  initMap("37.5796","126.9770","갤러리 현대","서울 종로구 삼청로 14 ", 16);
</script>
"""


def test_parse_list_dedupes_and_keeps_thumbnail():
    items = artMap.parse_list(LIST_HTML)

    assert items == [
        {"idx": "11", "thumbnail": "/upload/11.jpg"},
        {"idx": "12", "thumbnail": "https://cdn.art-map.co.kr/12.jpg"},
        {"idx": "13", "thumbnail": "/upload/13.jpg"},
    ]


def test_parse_detail():
    detail = artMap.parse_detail(detail_html(), "11")

    assert detail == {
        "title": "빛의 조각",
        "place": "갤러리 현대/서울",
        "gallery_idx": "77",
        "start_date": "2026-02-13",
        "end_date": "2026-03-28",
    }


def test_parse_detail_without_gallery_link():
    html = "<html><head><title>무제</title></head><body></body></html>"
    detail = artMap.parse_detail(html, "5")

    assert detail["gallery_idx"] is None
    assert detail["place"] == ""
    assert (detail["start_date"], detail["end_date"]) == ("", "")


def test_parse_detail_without_title_raises():
    with pytest.raises(ExtractionError):
        artMap.parse_detail("<html><body></body></html>", "5")


def test_parse_gallery_gps():
    assert artMap.parse_gallery_gps(GALLERY_HTML) == {
        "lat": 37.5796,
        "lng": 126.977,
        "address": "서울 종로구 삼청로 14",
    }


def test_parse_gallery_gps_without_init_map_raises():
    with pytest.raises(ExtractionError) as exc:
        artMap.parse_gallery_gps("<html></html>")
    assert exc.value.field == "gps"

    with pytest.raises(ExtractionError):
        artMap.parse_gallery_gps('initMap("lat","lng","갤러리","주소")')


def test_fetch_details_drops_item_when_venue_markup_changed():
    pages = {
        "https://art-map.co.kr/exhibition/view.php?idx=11": detail_html("빛의 조각", gallery_idx="77"),
        "https://art-map.co.kr/exhibition/view.php?idx=12": detail_html("물방울", gallery_idx="88"),
        "https://art-map.co.kr/gallery/view.php?idx=77": "<html>지도 없음</html>",
        "https://art-map.co.kr/gallery/view.php?idx=88": GALLERY_HTML,
    }

    async def fetch_html(url):
        return pages[url]

    items = [{"idx": "11", "thumbnail": ""}, {"idx": "12", "thumbnail": ""}]
    rows = asyncio.run(artMap.fetch_details(items, fetch_html, artMap.CrawlContext()))

    assert [r["id"] for r in rows] == ["12"]


def test_clean_place_strips_region_suffix():
    assert artMap.clean_place("갤러리 현대/서울") == "갤러리 현대"
    assert artMap.clean_place("아라리오갤러리") == "아라리오갤러리"


def test_build_record_falls_back_to_place_for_address():
    item = {"idx": "11", "thumbnail": "/upload/11.jpg"}
    detail = artMap.parse_detail(detail_html(), "11")
    gps = {"lat": 37.5, "lng": 127.0, "address": ""}

    ex = artMap.build_record(item, detail, gps)

    assert ex["address"] == "갤러리 현대"
    assert ex["place"] == "갤러리 현대"
    assert ex["thumbnail"] == "https://art-map.co.kr/upload/11.jpg"
    assert ex["blogCount"] is None


def test_gallery_gps_is_fetched_once_per_venue():
    calls = []

    async def fetch_html(url):
        calls.append(url)
        await asyncio.sleep(0.01)
        return GALLERY_HTML

    async def scenario():
        ctx = artMap.CrawlContext()
        return await asyncio.gather(*(ctx.gallery_gps("77", fetch_html) for _ in range(5)))

    results = asyncio.run(scenario())

    assert calls == ["https://art-map.co.kr/gallery/view.php?idx=77"]
    assert all(r["lat"] == 37.5796 for r in results)


def test_gallery_gps_failure_is_not_cached():
    attempts = []

    async def fetch_html(url):
        attempts.append(url)
        if len(attempts) == 1:
            raise RuntimeError("timeout")
        return GALLERY_HTML

    async def scenario():
        ctx = artMap.CrawlContext()
        with pytest.raises(RuntimeError):
            await ctx.gallery_gps("77", fetch_html)
        return await ctx.gallery_gps("77", fetch_html)

    assert asyncio.run(scenario())["lng"] == 126.977
    assert len(attempts) == 2


def test_fetch_details_end_to_end():
    pages = {
        "https://art-map.co.kr/exhibition/view.php?idx=11": detail_html("빛의 조각"),
        "https://art-map.co.kr/exhibition/view.php?idx=12": detail_html("물방울"),
        "https://art-map.co.kr/gallery/view.php?idx=77": GALLERY_HTML,
    }
    requested = []

    async def fetch_html(url):
        requested.append(url)
        if url not in pages:
            raise RuntimeError(f"HTTP 404: {url}")
        return pages[url]

    items = [
        {"idx": "11", "thumbnail": "/upload/11.jpg"},
        {"idx": "12", "thumbnail": ""},
        {"idx": "13", "thumbnail": ""},
    ]
    ctx = artMap.CrawlContext()

    rows = asyncio.run(artMap.fetch_details(items, fetch_html, ctx))

    assert [r["id"] for r in rows] == ["11", "12"]
    assert rows[1]["title"] == "물방울"
    assert rows[1]["lat"] == 37.5796
    assert rows[1]["address"] == "서울 종로구 삼청로 14"
    assert rows[1]["thumbnail"] == ""
    assert requested.count("https://art-map.co.kr/gallery/view.php?idx=77") == 1
    assert set(ctx.gps_cache) == {"77"}
