from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from exhibition_map.blog_count import refresh_from_env
from exhibition_map.config import get_app_config, load_env
from exhibition_map.popularity import summarize
from exhibition_map.sites import artMap, openGallery
from exhibition_map.store import Exhibition, save_exhibitions


class Runner(Protocol):
    def __call__(
        self,
        save_json: bool = True,
        out_path: Optional[Path] = None,
        with_blog_count: bool = False,
    ) -> List[Exhibition]: ...


REGISTRY: Dict[str, Runner] = {
    "artMap": artMap.run,
    "openGallery": openGallery.run,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--only",
        nargs="*",
        help="특정 크롤러만 실행. 예: --only artMap",
    )
    parser.add_argument("--no-json", action="store_true", help="JSON 저장 끄기")
    parser.add_argument("--skip-blog-count", action="store_true", help="블로그 수 갱신 생략")
    return parser.parse_args(argv)


def dedupe_targets(targets: List[str]) -> List[str]:
    # 중복 제거(입력 순서 유지)
    seen = set()
    return [x for x in targets if not (x in seen or seen.add(x))]


def merge_rows(rows: List[Exhibition]) -> List[Exhibition]:
    """id 중복이면 먼저 나온 것 유지."""
    merged: Dict[str, Exhibition] = {}
    for ex in rows:
        key = str(ex.get("id"))
        if key in merged:
            print(f"[SKIP] id 중복: {key} ({ex.get('title')})")
            continue
        merged[key] = ex
    return list(merged.values())


def main(argv: Optional[List[str]] = None) -> None:
    load_env()
    cfg = get_app_config()

    args = parse_args(argv)
    targets = dedupe_targets(args.only if args.only else list(REGISTRY.keys()))

    rows: List[Exhibition] = []
    failed: List[str] = []

    for name in targets:
        if name not in REGISTRY:
            print(f"[SKIP] 등록되지 않은 크롤러: {name}")
            continue

        print(f"\n========== RUN: {name} ==========")

        try:
            data = REGISTRY[name](save_json=False, with_blog_count=False)
        except Exception as e:
            print(f"[ERROR] crawler failed: {name} -> {e}")
            failed.append(name)
            continue

        print(f"[INFO] {name}: fetched {len(data)} rows")
        rows.extend(data)

    rows = merge_rows(rows)

    if rows and not args.skip_blog_count:
        refresh_from_env(rows)

    saved = 0
    if not args.no_json:
        if rows:
            saved = save_exhibitions(cfg.data_path, rows)
        else:
            print("[JSON] 수집된 전시 없음 → 기존 파일 유지")

    print("\n========== SUMMARY ==========")
    print(f"targets: {len(targets)}")
    print(f"total fetched rows = {len(rows)}")
    print(f"total saved rows = {saved}")
    print(f"popularity = {summarize([ex.get('blogCount') for ex in rows])}")
    if failed:
        print(f"failed: {', '.join(failed)}")


if __name__ == "__main__":
    main()
