from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
import requests

from exhibition_map.blog_count import BlogCountFetcher
from exhibition_map.config import NaverConfig


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self._payload = payload

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    """session.get() 이 미리 넣어둔 응답(또는 예외)을 순서대로 돌려준다."""

    def __init__(self, responses: List[Any]) -> None:
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, sec: float) -> None:
        self.calls.append(sec)


@pytest.fixture
def naver_config() -> NaverConfig:
    return NaverConfig(client_id="test-id", client_secret="test-secret")


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def make_fetcher(naver_config, sleeps):
    def _make(responses: List[Any], config: Optional[NaverConfig] = naver_config) -> BlogCountFetcher:
        return BlogCountFetcher(config=config, session=FakeSession(responses), sleep=sleeps)

    return _make


@pytest.fixture
def transport_error() -> Exception:
    return requests.ConnectionError("connection reset")


def make_exhibition(**overrides: Any) -> Dict[str, Any]:
    ex = {
        "id": "1",
        "title": "빛의 조각",
        "place": "갤러리현대 본관",
        "address": "서울 종로구 삼청로 14",
        "lat": 37.5796,
        "lng": 126.977,
        "startDate": "2026-02-13",
        "endDate": "2999-12-31",
        "thumbnail": "",
        "blogCount": None,
    }
    ex.update(overrides)
    return ex


@pytest.fixture
def exhibition():
    return make_exhibition
