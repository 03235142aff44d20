"""Closed catalog of visa categories."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Iterator

from rapidfuzz import fuzz, process

from ..config import ConfigManager
from ..schemas import VisaCategory
from ..schemas.visa import normalize_visa_code
from .errors import UnknownVisaCodeError


class VisaCatalog:
    """Ordered, read-only collection of visa categories."""

    def __init__(self, categories: Iterable[VisaCategory]):
        self._categories: dict[str, VisaCategory] = {}
        for category in categories:
            if category.code in self._categories:
                raise ValueError(f"Duplicate visa code in catalog: {category.code!r}")
            self._categories[category.code] = category

    def __contains__(self, visa_code: object) -> bool:
        if not isinstance(visa_code, str):
            return False
        return normalize_visa_code(visa_code) in self._categories

    def __iter__(self) -> Iterator[VisaCategory]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def codes(self) -> tuple[str, ...]:
        return tuple(self._categories)

    def get(self, visa_code: str) -> VisaCategory:
        code = normalize_visa_code(visa_code)
        try:
            return self._categories[code]
        except KeyError:
            raise UnknownVisaCodeError(code, suggestion=self.suggest(code)) from None

    def codes_in_class(self, tag: str) -> tuple[str, ...]:
        return tuple(
            category.code for category in self._categories.values() if tag in category.classes
        )

    def suggest(self, visa_code: str, *, score_cutoff: float = 60.0) -> str | None:
        """Return the closest known code for a mistyped one."""
        if not visa_code or not self._categories:
            return None
        match = process.extractOne(
            normalize_visa_code(visa_code),
            list(self._categories),
            scorer=fuzz.ratio,
            score_cutoff=score_cutoff,
        )
        return match[0] if match else None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "VisaCatalog":
        entries = data.get("visas")
        if not isinstance(entries, list):
            raise ValueError("Catalog must define a 'visas' list")
        return cls(VisaCategory.model_validate(entry) for entry in entries)


def load_catalog(path: str | Path | None = None) -> VisaCatalog:
    """Load the packaged catalog, or a YAML catalog at ``path``."""
    if path is None:
        manager = ConfigManager()
        name = "catalog"
    else:
        target = Path(path)
        manager = ConfigManager(target.parent)
        name = target.stem
    return VisaCatalog.from_mapping(manager.load(name))
