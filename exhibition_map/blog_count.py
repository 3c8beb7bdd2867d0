from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests

from exhibition_map.config import NaverConfig, get_naver_config
from exhibition_map.search_title import build_query, extract_search_title, short_place
from exhibition_map.store import Exhibition


BLOG_SEARCH_URL = "https://openapi.naver.com/v1/search/blog.json"


@dataclass
class BlogCountFetcher:
    """
    네이버 블로그 검색 API로 전시 언급 수(total)를 조회.

    config가 None이면 기능 비활성 → 항상 None 반환 (네트워크 호출 없음).
    session / sleep 은 테스트에서 바꿔 끼울 수 있게 밖에서 받는다.
    """

    config: Optional[NaverConfig]
    session: requests.Session = field(default_factory=requests.Session)
    sleep: Callable[[float], None] = time.sleep
    timeout: float = 10.0
    backoff_sec: float = 1.0

    @property
    def enabled(self) -> bool:
        return self.config is not None

    def query_for(self, title: str, place: str) -> str:
        return build_query(extract_search_title(title), short_place(place))

    def fetch(self, title: str, place: str, retries: int = 3) -> Optional[int]:
        if self.config is None:
            return None

        params = {"query": self.query_for(title, place), "display": "1"}
        headers = {
            "X-Naver-Client-Id": self.config.client_id,
            "X-Naver-Client-Secret": self.config.client_secret,
        }

        for attempt in range(retries):
            try:
                res = self.session.get(
                    BLOG_SEARCH_URL,
                    params=params,
                    headers=headers,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                print(f"[BLOG] 요청 실패: {title} -> {e}")
                return None

            if res.status_code == 429:
                wait = self.backoff_sec * (attempt + 1)
                print(f"[BLOG] 429 rate limit, {wait:.1f}s 대기... ({title})")
                self.sleep(wait)
                continue

            if not res.ok:
                print(f"[BLOG] API 에러 {res.status_code}: {title}")
                return None

            try:
                data = res.json()
            except ValueError:
                print(f"[BLOG] JSON 파싱 실패: {title}")
                return None

            total = data.get("total") if isinstance(data, dict) else None
            if total is None:
                return 0
            try:
                return int(total)
            except (TypeError, ValueError):
                print(f"[BLOG] total 파싱 실패: {title} -> {total!r}")
                return None

        print(f"[BLOG] {retries}회 재시도 후 실패: {title}")
        return None


def update_blog_counts(
    exhibitions: List[Exhibition],
    fetcher: BlogCountFetcher,
    delay: float = 0.1,
) -> List[Exhibition]:
    """
    429 피하려고 순차 + 짧은 대기.
    exhibitions 의 blogCount 를 그 자리에서 갱신한다.
    """
    total = len(exhibitions)
    print(f"\n[BLOG] 블로그 수 갱신: {total}개")

    for i, ex in enumerate(exhibitions):
        ex["blogCount"] = fetcher.fetch(ex.get("title", ""), ex.get("place", ""))

        if (i + 1) % 10 == 0 or i == total - 1:
            print(f"[BLOG] {i + 1}/{total}")

        if delay:
            fetcher.sleep(delay)

    return exhibitions


def refresh_from_env(exhibitions: List[Exhibition], delay: float = 0.1) -> List[Exhibition]:
    """환경변수 키로 fetcher 를 만들어 갱신. 키가 없으면 건드리지 않는다."""
    fetcher = BlogCountFetcher(get_naver_config())
    if not fetcher.enabled:
        print("[BLOG] NAVER_CLIENT_ID / NAVER_CLIENT_SECRET 없음 → 블로그 수 갱신 생략")
        return exhibitions
    return update_blog_counts(exhibitions, fetcher, delay=delay)
