from __future__ import annotations

from dataclasses import dataclass, field
import json
import pandas as pd
from typing import Any, Dict, NamedTuple, Tuple

from progress_exhaust.config.settings import Settings


class HierarchyError(ValueError):
    """Raised when a course hierarchy document cannot be decoded into a node tree."""


@dataclass
class Context:
    settings: Settings
    data: Dict[str, pd.DataFrame]
    results: Dict[str, pd.DataFrame] = field(default_factory=dict)

    def add_result(self, name: str, df: pd.DataFrame) -> None:
        self.results[name] = df

    def get(self, name: str) -> pd.DataFrame:
        return self.results[name]


@dataclass(frozen=True)
class CollectionBatch:
    batch_id: str
    collection_id: str


def _as_leaf_count(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class HierarchyNode:
    identifier: str
    mime_type: str
    visibility: str
    content_type: str
    leaf_nodes_count: int
    children: Tuple["HierarchyNode", ...] = ()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "HierarchyNode":
        # Wrong-typed fields degrade to empty values; only the root shape is validated.
        children = raw.get("children")
        if not isinstance(children, list):
            children = []
        return cls(
            identifier=_as_text(raw.get("identifier")),
            mime_type=_as_text(raw.get("mimeType")),
            visibility=_as_text(raw.get("visibility")),
            content_type=_as_text(raw.get("contentType")),
            leaf_nodes_count=_as_leaf_count(raw.get("leafNodesCount")),
            children=tuple(cls.from_dict(child) for child in children if isinstance(child, dict)),
        )

    @classmethod
    def from_json(cls, document: Any) -> "HierarchyNode":
        if isinstance(document, (str, bytes)):
            try:
                document = json.loads(document)
            except ValueError as exc:
                raise HierarchyError(f"hierarchy is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise HierarchyError(f"hierarchy root must be an object, got {type(document).__name__}")
        return cls.from_dict(document)


class ModuleLeafCount(NamedTuple):
    module_id: str
    leaf_count: str


@dataclass(frozen=True)
class FlattenedCourse:
    course_id: str
    course_leaf_count: str = "0"
    modules: Tuple[ModuleLeafCount, ...] = ()
