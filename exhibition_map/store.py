from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional, TypedDict


class Exhibition(TypedDict):
    id: str
    title: str
    place: str
    address: str
    lat: float
    lng: float
    startDate: str
    endDate: str
    thumbnail: str
    blogCount: Optional[int]


def to_date_or_none(s: str | None) -> Optional[date]:
    if not s:
        return None
    try:
        return datetime.strptime(s.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def has_coords(ex: Exhibition) -> bool:
    # 0은 "위치 모름" 표시값
    return bool(ex.get("lat")) and bool(ex.get("lng"))


def with_coords(exhibitions: Iterable[Exhibition]) -> List[Exhibition]:
    return [ex for ex in exhibitions if has_coords(ex)]


def without_coords(exhibitions: Iterable[Exhibition]) -> List[Exhibition]:
    return [ex for ex in exhibitions if not has_coords(ex)]


def is_ongoing(ex: Exhibition, today: date) -> bool:
    """
    endDate가 비어 있으면 종료일 미정 → 진행 중으로 본다.
    파싱 불가한 endDate도 걸러내지 않는다.
    """
    end_dt = to_date_or_none(ex.get("endDate"))
    if end_dt is None:
        return True
    return end_dt >= today


def report_filter(exhibitions: List[Exhibition]) -> List[Exhibition]:
    """좌표 있는 것만 남기고, 빠진 항목은 출력."""
    kept = with_coords(exhibitions)
    dropped = without_coords(exhibitions)

    print(f"\n[결과] GPS 있음 {len(kept)}개, GPS 없음 {len(dropped)}개")
    if dropped:
        print("[결과] GPS 없는 전시:")
        for ex in dropped:
            print(f"  - {ex.get('title')} @ {ex.get('place')}")

    return kept


def load_exhibitions(path: Path) -> List[Exhibition]:
    if not path.exists():
        return []
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"전시 JSON이 배열이 아님: {path}")
    return data


def save_exhibitions(path: Path, exhibitions: Iterable[Exhibition]) -> int:
    """
    path: 출력 JSON 파일 (매번 전체 덮어쓰기)
    exhibitions: 크롤러가 만든 dict 리스트
    return: 실제로 저장된 개수 (좌표 없는 항목은 제외)
    """
    rows = with_coords(exhibitions)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(rows, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    print(f"[JSON] 저장 완료: {path} ({len(rows)}개)")
    return len(rows)
