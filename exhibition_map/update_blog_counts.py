"""
다시 크롤링하지 않고 저장된 전시 JSON 의 blogCount 만 갱신.
"""
from __future__ import annotations

import sys

from exhibition_map.blog_count import BlogCountFetcher, update_blog_counts
from exhibition_map.config import get_app_config, get_naver_config, load_env
from exhibition_map.popularity import summarize
from exhibition_map.store import load_exhibitions, save_exhibitions


def main() -> None:
    load_env()
    cfg = get_app_config()

    naver = get_naver_config()
    if naver is None:
        # 키 없이 돌리면 저장된 수치가 전부 null 로 덮어써짐
        sys.exit("NAVER_CLIENT_ID / NAVER_CLIENT_SECRET not set")

    exhibitions = load_exhibitions(cfg.data_path)
    print(f"[BLOG] {cfg.data_path}: {len(exhibitions)}개 갱신 시작")

    update_blog_counts(exhibitions, BlogCountFetcher(naver))
    save_exhibitions(cfg.data_path, exhibitions)

    print(f"\n[BLOG] 완료. popularity = {summarize([ex.get('blogCount') for ex in exhibitions])}")


if __name__ == "__main__":
    main()
