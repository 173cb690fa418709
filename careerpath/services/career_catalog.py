import json
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Optional

from pydantic import TypeAdapter

from careerpath.errors import NotFoundError
from careerpath.models import CareerCategory

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "careers.json"

_categories_adapter = TypeAdapter(List[CareerCategory])


class CareerCatalog:
    def __init__(self, categories: List[CareerCategory]):
        slugs = [c.slug for c in categories]
        duplicates = sorted({s for s in slugs if slugs.count(s) > 1})
        if duplicates:
            raise ValueError(f"Duplicate career slugs: {', '.join(duplicates)}")
        self._categories = {c.slug: c for c in categories}

    @classmethod
    def from_data(cls, data: Any) -> "CareerCatalog":
        """Validate a raw table (list of category dicts) into a catalog."""
        return cls(_categories_adapter.validate_python(data))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "CareerCatalog":
        with open(path or DEFAULT_CATALOG_PATH, encoding="utf-8") as f:
            return cls.from_data(json.load(f))

    def all(self) -> List[CareerCategory]:
        return list(self._categories.values())

    def get(self, slug: str) -> CareerCategory:
        try:
            return self._categories[slug]
        except KeyError:
            raise NotFoundError("Career category not found")


@lru_cache()
def get_career_catalog() -> CareerCatalog:
    return CareerCatalog.load()
