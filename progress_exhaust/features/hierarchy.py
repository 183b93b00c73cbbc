from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from progress_exhaust.config.constants import (
    COLLECTION_MIME_TYPE,
    COURSE_CONTENT_TYPE,
    DEFAULT_VISIBILITY,
    MAX_HIERARCHY_DEPTH,
)
from progress_exhaust.models.schema import FlattenedCourse, HierarchyError, HierarchyNode, ModuleLeafCount

logger = logging.getLogger(__name__)


def is_course_collection(node: HierarchyNode) -> bool:
    return (
        node.mime_type.lower() == COLLECTION_MIME_TYPE.lower()
        and node.visibility.lower() == DEFAULT_VISIBILITY.lower()
        and node.content_type.lower() == COURSE_CONTENT_TYPE.lower()
    )


def _reduce_node(node: HierarchyNode, level: int, acc: FlattenedCourse, depth_level: int) -> FlattenedCourse:
    if not is_course_collection(node):
        return acc

    if level == 0:
        reduced = FlattenedCourse(acc.course_id, str(node.leaf_nodes_count), ())
    else:
        module = ModuleLeafCount(node.identifier, str(node.leaf_nodes_count))
        reduced = FlattenedCourse(acc.course_id, acc.course_leaf_count, acc.modules + (module,))

    return _reduce_level(node.children, level + 1, reduced, depth_level)


def _reduce_level(nodes: Sequence[HierarchyNode], level: int, acc: FlattenedCourse, depth_level: int) -> FlattenedCourse:
    if level >= depth_level or not nodes:
        return acc

    results = [_reduce_node(node, level, acc, depth_level) for node in nodes]

    # Every sibling starts from the same accumulator, so only the entries past its
    # prefix are new.
    seen = len(acc.modules)
    modules = acc.modules + tuple(module for result in results for module in result.modules[seen:])
    return FlattenedCourse(results[0].course_id, results[0].course_leaf_count, modules)


def flatten(root: HierarchyNode, course_id: str | None = None, depth_level: int = MAX_HIERARCHY_DEPTH) -> FlattenedCourse:
    # Level 0 is the course node, level 1 its modules; deeper nodes are never read.
    if not 1 <= depth_level <= MAX_HIERARCHY_DEPTH:
        raise ValueError(f"depth_level must be between 1 and {MAX_HIERARCHY_DEPTH}, got {depth_level}")

    initial = FlattenedCourse(course_id if course_id is not None else root.identifier)
    return _reduce_level((root,), 0, initial, depth_level)


def flatten_documents(hierarchies: pd.DataFrame, depth_level: int = MAX_HIERARCHY_DEPTH) -> tuple[pd.DataFrame, pd.DataFrame]:
    rows = []
    errors = []
    for course_id, document in hierarchies[["courseId", "hierarchy"]].itertuples(index=False):
        try:
            course = flatten(HierarchyNode.from_json(document), course_id=course_id, depth_level=depth_level)
        except HierarchyError as exc:
            logger.error("Skipping course %s: %s", course_id, exc)
            errors.append({"courseId": course_id, "error": str(exc)})
            continue

        if not course.modules:
            rows.append({"courseId": course.course_id, "leafNodesCount": course.course_leaf_count, "moduleId": None, "moduleLeafNodesCount": None})
        for module in course.modules:
            rows.append(
                {
                    "courseId": course.course_id,
                    "leafNodesCount": course.course_leaf_count,
                    "moduleId": module.module_id,
                    "moduleLeafNodesCount": module.leaf_count,
                }
            )

    leaf_counts = pd.DataFrame(rows, columns=["courseId", "leafNodesCount", "moduleId", "moduleLeafNodesCount"])
    return leaf_counts, pd.DataFrame(errors, columns=["courseId", "error"])
