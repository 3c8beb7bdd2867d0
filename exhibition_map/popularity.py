from __future__ import annotations

from typing import Dict, List, Literal, Optional, TypedDict


PopularityLevel = Literal["hot", "warm", "mild", "cold"]


class LegendEntry(TypedDict):
    level: str
    color: str
    label: str
    min_count: int


# (레벨, 최소 블로그 수) 높은 순
THRESHOLDS: List[tuple] = [
    ("hot", 100),
    ("warm", 30),
    ("mild", 10),
    ("cold", 0),
]

COLORS: Dict[str, str] = {
    "hot": "#ef4444",
    "warm": "#f97316",
    "mild": "#eab308",
    "cold": "#9ca3af",
}

LABELS: Dict[str, str] = {
    "hot": "인기 높음 (100+)",
    "warm": "보통 (30-99)",
    "mild": "관심 적음 (10-29)",
    "cold": "거의 없음 (0-9)",
}


def popularity_level(blog_count: Optional[int]) -> PopularityLevel:
    # None(미집계/API 불가)은 cold로 표시
    if blog_count is None:
        return "cold"
    for level, min_count in THRESHOLDS:
        if blog_count >= min_count:
            return level
    return "cold"


def legend() -> List[LegendEntry]:
    return [
        {
            "level": level,
            "color": COLORS[level],
            "label": LABELS[level],
            "min_count": min_count,
        }
        for level, min_count in THRESHOLDS
    ]


def summarize(blog_counts: List[Optional[int]]) -> Dict[str, int]:
    summary = {level: 0 for level, _ in THRESHOLDS}
    for count in blog_counts:
        summary[popularity_level(count)] += 1
    return summary
