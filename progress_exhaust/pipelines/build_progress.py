from __future__ import annotations

import logging

import pandas as pd

from progress_exhaust.features.activity import ActivityCounterLookup
from progress_exhaust.features.assessment import aggregate_scores
from progress_exhaust.features.completion import build_progress_rows, zero_leaf_diagnostics
from progress_exhaust.features.enrolment import collection_batches, prepare_enrolments
from progress_exhaust.features.hierarchy import flatten_documents
from progress_exhaust.features.pivot import pivot_progress
from progress_exhaust.io.loaders import normalize_ids
from progress_exhaust.io.writers import ensure_dirs, save_table
from progress_exhaust.models.schema import CollectionBatch, Context, HierarchyError

logger = logging.getLogger(__name__)


def process_batch(
    batch: CollectionBatch,
    leaf_counts: pd.DataFrame,
    lookup: ActivityCounterLookup,
    assessments: pd.DataFrame,
    enrolments: pd.DataFrame,
    join_how: str = "inner",
) -> pd.DataFrame:
    """Wide progress rows of one batch, joined to its enrolments."""
    course_leaf_counts = leaf_counts[leaf_counts["courseId"] == batch.collection_id]
    if course_leaf_counts.empty:
        raise HierarchyError(f"no usable hierarchy document for course {batch.collection_id}")
    progress_rows = build_progress_rows(course_leaf_counts, lookup.for_batch(batch.batch_id), batch.batch_id)

    attempts = assessments[(assessments["courseId"] == batch.collection_id) & (assessments["batchId"] == batch.batch_id)]
    score_rows = aggregate_scores(attempts)

    wide = pivot_progress(progress_rows, score_rows, how=join_how)

    batch_enrolments = enrolments[(enrolments["courseId"] == batch.collection_id) & (enrolments["batchId"] == batch.batch_id)]
    return wide.merge(batch_enrolments, on=["courseId", "batchId", "userId"], how="inner")


def build_progress_report(ctx: Context) -> pd.DataFrame:
    settings = ctx.settings
    data = ctx.data

    ensure_dirs(settings.table_dir)

    activity_agg = normalize_ids(data["user_activity_agg"].copy())
    hierarchies = normalize_ids(data["content_hierarchy"].copy())
    assessments = normalize_ids(data["assessment_aggregator"].copy())
    enrolments = prepare_enrolments(data["user_enrolments"])

    leaf_counts, hierarchy_errors = flatten_documents(hierarchies, depth_level=settings.hierarchy_depth)
    save_table(hierarchy_errors, settings.table_dir / "hierarchy_errors.csv")
    ctx.add_result("hierarchy_errors", hierarchy_errors)

    zero_leaf = zero_leaf_diagnostics(leaf_counts)
    save_table(zero_leaf, settings.table_dir / "zero_leaf_nodes.csv")
    ctx.add_result("zero_leaf_nodes", zero_leaf)

    lookup = ActivityCounterLookup(activity_agg)

    frames = []
    failed = []
    batches = collection_batches(enrolments)
    if not batches:
        logger.info("No enrolments found; nothing to report")
    for batch in batches:
        try:
            frames.append(process_batch(batch, leaf_counts, lookup, assessments, enrolments, join_how=settings.join_how))
        except Exception as exc:
            logger.exception("Progress report failed for batch %s of course %s", batch.batch_id, batch.collection_id)
            failed.append({"batchId": batch.batch_id, "courseId": batch.collection_id, "error": str(exc)})

    failed_batches = pd.DataFrame(failed, columns=["batchId", "courseId", "error"])
    save_table(failed_batches, settings.table_dir / "failed_batches.csv")
    ctx.add_result("failed_batches", failed_batches)

    progress = pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    ctx.add_result("progress", progress)
    return progress
