"""
End-to-end tests for the progress exhaust pipeline (pipelines/build_progress.py, pipelines/build_report.py).
"""
from dataclasses import replace

import pandas as pd
import pytest
from factories import make_attempts, make_counters, make_enrolments

from progress_exhaust.config.constants import COLUMNS_ORDER, KEY_COLUMNS
from progress_exhaust.features.enrolment import certificate_status, collection_batches
from progress_exhaust.models.schema import CollectionBatch
from progress_exhaust.pipelines import build_progress as build_progress_module
from progress_exhaust.pipelines.build_progress import build_progress_report
from progress_exhaust.pipelines.build_report import build_report, organize_report


class TestBuildProgressReport:
    def test_report_rows_and_columns(self, ctx):
        build_progress_report(ctx)
        report = build_report(ctx)

        assert list(report.columns) == COLUMNS_ORDER + ["q1 - Score", "q2 - Score", "m1 - Progress", "m2 - Progress"]
        assert report["User UUID"].tolist() == ["u1", "u2"]

        u1 = report.iloc[0]
        assert u1["Progress"] == 50
        assert u1["Total Score"] == "80%"
        assert u1["m2 - Progress"] == 16
        assert u1["Enrolment Date"] == "2024-01-05 00:00:00"
        assert u1["Completion Date"] == ""
        assert u1["User Name"] == "U1"

        assert report.iloc[1]["q2 - Score"] == ""

    def test_writes_tables(self, ctx):
        build_progress_report(ctx)
        build_report(ctx)
        table_dir = ctx.settings.table_dir
        for name in ("progress_exhaust.csv", "hierarchy_errors.csv", "zero_leaf_nodes.csv", "failed_batches.csv"):
            assert (table_dir / name).exists()

    def test_unenrolled_learner_not_reported(self, ctx):
        progress = build_progress_report(ctx)
        assert "u9" not in set(progress["userId"])

    def test_bad_hierarchy_recorded(self, ctx):
        broken = pd.DataFrame({"courseId": ["c2"], "hierarchy": ["{"]})
        ctx.data["content_hierarchy"] = pd.concat([ctx.data["content_hierarchy"], broken], ignore_index=True)
        progress = build_progress_report(ctx)
        assert ctx.get("hierarchy_errors")["courseId"].tolist() == ["c2"]
        assert len(progress) == 2

    def test_failing_batch_does_not_stop_others(self, ctx, monkeypatch):
        ctx.data["user_enrolments"] = pd.concat(
            [ctx.data["user_enrolments"], make_enrolments([("c1", "b2", "u9")])], ignore_index=True
        )
        original = build_progress_module.process_batch

        def flaky(batch, *args, **kwargs):
            if batch.batch_id == "b2":
                raise RuntimeError("store timeout")
            return original(batch, *args, **kwargs)

        monkeypatch.setattr(build_progress_module, "process_batch", flaky)
        progress = build_progress_report(ctx)

        assert ctx.get("failed_batches")["batchId"].tolist() == ["b2"]
        assert set(progress["userId"]) == {"u1", "u2"}

    def test_outer_join_keeps_learner_without_scores(self, ctx):
        ctx.settings = replace(ctx.settings, join_how="outer")
        ctx.data["assessment_aggregator"] = ctx.data["assessment_aggregator"].query("userId == 'u1'")
        progress = build_progress_report(ctx)
        assert progress["userId"].tolist() == ["u1", "u2"]

    def test_inner_join_drops_learner_without_scores(self, ctx):
        ctx.data["assessment_aggregator"] = ctx.data["assessment_aggregator"].query("userId == 'u1'")
        progress = build_progress_report(ctx)
        assert progress["userId"].tolist() == ["u1"]

    def test_duplicate_enrolment_gives_one_row(self, ctx):
        enrolments = ctx.data["user_enrolments"]
        ctx.data["user_enrolments"] = pd.concat([enrolments, enrolments.iloc[[0]]], ignore_index=True)
        progress = build_progress_report(ctx)
        assert len(progress) == 2
        assert not progress.duplicated(subset=KEY_COLUMNS).any()

    def test_course_without_hierarchy_is_reported(self, ctx, caplog):
        ctx.data["user_enrolments"] = pd.concat(
            [ctx.data["user_enrolments"], make_enrolments([("c9", "b9", "u1")])], ignore_index=True
        )
        with caplog.at_level("ERROR"):
            progress = build_progress_report(ctx)
        failed = ctx.get("failed_batches")
        assert failed[["batchId", "courseId"]].values.tolist() == [["b9", "c9"]]
        assert "hierarchy" in failed.loc[0, "error"]
        assert "c9" in caplog.text
        assert set(progress["courseId"]) == {"c1"}

    def test_numeric_batch_ids(self, ctx):
        ctx.data["user_activity_agg"] = make_counters([("u1", "c1", 5, 7), ("u1", "m1", 4, 7)])
        ctx.data["assessment_aggregator"] = make_attempts([("c1", 7, "q1", "a1", "u1", 3, 5, "3/5")])
        enrolments = make_enrolments([("c1", "b1", "u1")])
        enrolments["batchId"] = 7
        ctx.data["user_enrolments"] = enrolments

        progress = build_progress_report(ctx)

        assert progress[KEY_COLUMNS].values.tolist() == [["c1", "7", "u1"]]
        assert progress.loc[0, "completionPct"] == 50
        assert progress.loc[0, "totalScorePct"] == "60%"
        assert ctx.get("failed_batches").empty


class TestEnrolments:
    def test_certificate_status(self):
        enrolments = make_enrolments([("c1", "b1", "u1"), ("c1", "b1", "u2"), ("c1", "b1", "u3")])
        enrolments["certificates"] = [[{"id": "x"}], [], None]
        enrolments["issuedCertificates"] = [[], [{"name": "y"}], None]
        assert certificate_status(enrolments).tolist() == ["Issued", "Issued", ""]

    def test_collection_batches(self):
        enrolments = make_enrolments([("c2", "b9", "u1"), ("c1", "b1", "u1"), ("c1", "b1", "u2")])
        assert collection_batches(enrolments) == [CollectionBatch("b1", "c1"), CollectionBatch("b9", "c2")]


class TestOrganizeReport:
    def test_missing_fixed_columns_are_blank(self):
        progress = pd.DataFrame([{"courseId": "c1", "batchId": "b1", "userId": "u1", "completionPct": 10, "totalScorePct": None}])
        report = organize_report(progress)
        assert list(report.columns) == COLUMNS_ORDER
        assert report.loc[0, "State"] == ""
        assert report.loc[0, "Total Score"] == ""

    @pytest.mark.parametrize("extra", ["certificates", "contextId"])
    def test_unmapped_columns_dropped(self, extra):
        progress = pd.DataFrame([{"courseId": "c1", "batchId": "b1", "userId": "u1", extra: "x"}])
        assert extra not in organize_report(progress).columns
