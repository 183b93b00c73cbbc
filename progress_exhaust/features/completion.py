from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd

from progress_exhaust.features.activity import ActivityCounterLookup

logger = logging.getLogger(__name__)

PROGRESS_COLUMNS = ["courseId", "batchId", "userId", "completionPct", "moduleId", "modulePct"]


def completion_percentage(completed_count: int | str, leaf_count: int | str) -> int:
    completed_count = int(completed_count or 0)
    leaf_count = int(leaf_count or 0)
    # A course or module without leaf nodes has nothing to complete: reported as 0.
    if leaf_count <= 0:
        return 0
    if completed_count >= leaf_count:
        return 100
    return math.floor(completed_count * 100 / leaf_count)


def completion_percentages(completed: pd.Series, leaf: pd.Series) -> pd.Series:
    completed = pd.to_numeric(completed, errors="coerce").fillna(0)
    leaf = pd.to_numeric(leaf, errors="coerce").fillna(0)
    safe_leaf = leaf.where(leaf > 0, 1)
    pct = np.where(leaf <= 0, 0, np.where(completed >= leaf, 100, np.floor(completed * 100 / safe_leaf)))
    return pd.Series(pct, index=completed.index).astype(int)


def zero_leaf_diagnostics(leaf_counts: pd.DataFrame) -> pd.DataFrame:
    course_leaf = pd.to_numeric(leaf_counts["leafNodesCount"], errors="coerce").fillna(0)
    courses = leaf_counts.loc[course_leaf <= 0, ["courseId"]].assign(activityId=lambda df: df["courseId"], leafNodesCount=0)

    has_module = leaf_counts["moduleId"].notna()
    module_leaf = pd.to_numeric(leaf_counts["moduleLeafNodesCount"], errors="coerce").fillna(0)
    modules = leaf_counts.loc[has_module & (module_leaf <= 0), ["courseId", "moduleId"]]
    modules = modules.rename(columns={"moduleId": "activityId"}).assign(leafNodesCount=0)

    diagnostics = pd.concat([courses, modules], ignore_index=True).drop_duplicates().reset_index(drop=True)
    for course_id, activity_id in diagnostics[["courseId", "activityId"]].itertuples(index=False):
        logger.warning("Zero leaf nodes for activity %s in course %s; progress reported as 0", activity_id, course_id)
    return diagnostics[["courseId", "activityId", "leafNodesCount"]]


def build_progress_rows(leaf_counts: pd.DataFrame, lookup: ActivityCounterLookup, batch_id: str) -> pd.DataFrame:
    learners = lookup.learners()
    if learners.empty or leaf_counts.empty:
        return pd.DataFrame(columns=PROGRESS_COLUMNS)

    progress = leaf_counts.merge(learners, how="cross")
    progress = lookup.attach(progress, activity_col="courseId", out_col="courseCompleted")
    progress["completionPct"] = completion_percentages(progress["courseCompleted"], progress["leafNodesCount"])

    progress = lookup.attach(progress, activity_col="moduleId", out_col="moduleCompleted")
    module_pct = completion_percentages(progress["moduleCompleted"], progress["moduleLeafNodesCount"])
    progress["modulePct"] = pd.Series(np.where(progress["moduleId"].notna(), module_pct, None), index=progress.index, dtype=object)

    progress["batchId"] = batch_id
    return progress[PROGRESS_COLUMNS].sort_values(["courseId", "userId", "moduleId"], na_position="first").reset_index(drop=True)
