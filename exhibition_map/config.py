from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class NaverConfig:
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class AppConfig:
    data_path: Path
    host: str
    port: int


def load_env() -> None:
    """Load .env into environment variables."""
    load_dotenv()


def get_naver_config() -> Optional[NaverConfig]:
    """
    NAVER_CLIENT_ID / NAVER_CLIENT_SECRET 둘 다 있어야 블로그 검색 사용 가능.
    하나라도 없으면 None (블로그 수 기능 비활성).
    """
    client_id = os.getenv("NAVER_CLIENT_ID", "").strip()
    client_secret = os.getenv("NAVER_CLIENT_SECRET", "").strip()
    if not client_id or not client_secret:
        return None
    return NaverConfig(client_id=client_id, client_secret=client_secret)


def get_app_config() -> AppConfig:
    """Read data path / server config from environment variables."""
    raw_path = os.getenv("EXHIBITIONS_JSON", "data/exhibitions.json")
    data_path = Path(raw_path)
    if not data_path.is_absolute():
        data_path = PROJECT_ROOT / data_path

    return AppConfig(
        data_path=data_path,
        host=os.getenv("SERVER_HOST", "127.0.0.1"),
        port=int(os.getenv("SERVER_PORT", "8000")),
    )
