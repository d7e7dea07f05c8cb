"""이슈 분류 카탈로그 — 카테고리/하위 카테고리/장소/지점 설정 테이블.

Issue catalog — Category, sub-category, place and branch configuration table.
Loaded from JSON (app/data/catalog.json, or settings.CATALOG_PATH) so that
validation and filtering code stays generic over the data.
"""

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from app.config import settings

_DEFAULT_CATALOG: Path = Path(__file__).resolve().parent.parent / "data" / "catalog.json"


@dataclass(frozen=True)
class Catalog:
    """카테고리 구조와 장소/지점 목록.

    Attributes:
        structure: 카테고리 → 하위 카테고리 목록 (Category → ordered sub-categories)
        places: 장소 목록 (Outlet, Accommodation)
        branches: 지점 목록 (Branch locations)
    """

    structure: dict[str, list[str]] = field(default_factory=dict)
    places: list[str] = field(default_factory=list)
    branches: list[str] = field(default_factory=list)

    @property
    def categories(self) -> list[str]:
        return list(self.structure.keys())

    def subcategories(self, category: str | None) -> list[str]:
        """카테고리의 하위 카테고리 목록. 알 수 없는 카테고리는 빈 목록."""
        if not category:
            return []
        return list(self.structure.get(category, []))

    def is_valid_subcategory(self, category: str | None, sub_category: str | None) -> bool:
        return bool(sub_category) and sub_category in self.subcategories(category)

    def as_dict(self) -> dict:
        return {
            "categories": self.structure,
            "places": self.places,
            "branches": self.branches,
        }


def parse_catalog(raw: dict) -> Catalog:
    """JSON 딕셔너리를 Catalog로 변환합니다."""
    return Catalog(
        structure={str(k): [str(s) for s in v] for k, v in raw.get("categories", {}).items()},
        places=[str(p) for p in raw.get("places", [])],
        branches=[str(b) for b in raw.get("branches", [])],
    )


@lru_cache(maxsize=1)
def load_catalog() -> Catalog:
    """설정된 경로에서 카탈로그를 한 번 읽어 캐시합니다.

    Read the catalog once from the configured path and cache it.
    """
    path: Path = Path(settings.CATALOG_PATH) if settings.CATALOG_PATH else _DEFAULT_CATALOG
    with path.open(encoding="utf-8") as fh:
        return parse_catalog(json.load(fh))
