"""Flask server: 진행 중 전시 목록 + 블로그 수 조회."""
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo

from flask import Flask, jsonify, request

from exhibition_map.blog_count import BlogCountFetcher
from exhibition_map.config import get_app_config, get_naver_config, load_env
from exhibition_map.popularity import legend, popularity_level
from exhibition_map.store import is_ongoing, load_exhibitions


CATEGORY = "전시"
_TZ = ZoneInfo("Asia/Seoul")


def _today() -> date:
    return datetime.now(_TZ).date()


def create_app(
    data_path: Optional[Path] = None,
    fetcher: Optional[BlogCountFetcher] = None,
) -> Flask:
    app = Flask(__name__)
    app.json.ensure_ascii = False

    if data_path is None:
        data_path = get_app_config().data_path
    if fetcher is None:
        fetcher = BlogCountFetcher(get_naver_config())

    @app.route("/api/exhibitions", methods=["GET"])
    def exhibitions():
        """종료일이 오늘 이후(또는 미정)인 전시만. 파일은 요청마다 읽는다."""
        today = _today()
        rows = [
            {
                **ex,
                "category": CATEGORY,
                "popularity": popularity_level(ex.get("blogCount")),
            }
            for ex in load_exhibitions(data_path)
            if is_ongoing(ex, today)
        ]
        return jsonify(rows)

    @app.route("/api/blog-count", methods=["GET"])
    def blog_count():
        title = request.args.get("title", "").strip()
        place = request.args.get("place", "").strip()

        if not title:
            return jsonify({"error": "title is required"}), 400

        return jsonify({"total": fetcher.fetch(title, place)})

    @app.route("/api/popularity-levels", methods=["GET"])
    def popularity_levels():
        return jsonify(legend())

    return app


def main() -> None:
    load_env()
    cfg = get_app_config()
    app = create_app(cfg.data_path)
    print(f"[SERVER] {cfg.data_path} 제공 중")
    print(f"[SERVER] Open http://{cfg.host}:{cfg.port}/api/exhibitions")
    app.run(host=cfg.host, port=cfg.port)


if __name__ == "__main__":
    main()
