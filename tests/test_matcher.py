"""
Tests for evidence-to-obligation confidence scoring and batch matching.
"""

import pytest
from datetime import date, datetime

from corecomply.core.schema import EvidenceSource, Obligation, Period, RawEvidence
from corecomply.evidence.matcher import (
    calculate_confidence,
    integration_key,
    match_evidence_to_obligations,
    months_before,
    rank_matches,
)

NOW = date(2025, 1, 15)

BAS_TAGS = ["BAS", "tax", "GST", "PAYG", "ATO"]


def make_evidence(tags, end=date(2025, 1, 10), start=None, ref=None, source=None, title="Evidence"):
    return RawEvidence(
        title=title,
        period=Period(start=start or end.replace(day=1), end=end),
        tags=tags,
        integration_ref=ref,
        integration_source=source,
    )


@pytest.fixture
def bas_obligation():
    return Obligation(id="BAS-001", title="Business Activity Statement Lodgement",
                      control_ref="BAS-001", tags=list(BAS_TAGS))


class TestCalculateConfidence:
    """Scoring signals and their combination."""

    def test_all_signals_clamp_to_one(self, bas_obligation):
        """BAS evidence from this month against the BAS obligation scores 1.00."""
        evidence = make_evidence(list(BAS_TAGS), ref="BAS-Q3-2024")
        assert calculate_confidence(evidence, bas_obligation, now=NOW) == 1.0

    def test_no_signal_scores_zero(self, bas_obligation):
        evidence = make_evidence(["unrelated"], end=date(2023, 1, 1))
        assert calculate_confidence(evidence, bas_obligation, now=NOW) == 0.0

    def test_control_ref_substring_hit(self):
        obligation = Obligation(id="o1", title="Other", control_ref="ABC-XYZ-01", tags=[])
        evidence = make_evidence(["xyz"], end=date(2020, 1, 31))
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.5

    def test_tag_overlap_capped(self):
        obligation = Obligation(id="o1", title="Nothing", tags=["a", "b", "c", "d", "e", "f"])
        evidence = make_evidence(["a", "b", "c", "d", "e", "f"], end=date(2020, 1, 31))
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.2

    def test_tag_found_in_title(self):
        obligation = Obligation(id="o1", title="Long Service Leave Register", tags=[])
        evidence = make_evidence(["leave"], end=date(2020, 1, 31))
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.05

    def test_tags_compared_case_insensitively(self):
        obligation = Obligation(id="o1", title="Nothing", tags=["GST"])
        evidence = make_evidence(["gst"], end=date(2020, 1, 31))
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.05

    def test_recency_windows(self):
        obligation = Obligation(id="o1", title="Nothing", tags=[])
        within_quarter = make_evidence([], end=date(2024, 12, 31))
        within_year = make_evidence([], end=date(2024, 6, 30))
        older = make_evidence([], end=date(2023, 12, 31))

        assert calculate_confidence(within_quarter, obligation, now=NOW) == 0.2
        assert calculate_confidence(within_year, obligation, now=NOW) == 0.15
        assert calculate_confidence(older, obligation, now=NOW) == 0.0

    def test_recency_boundary_is_inclusive(self):
        obligation = Obligation(id="o1", title="Nothing", tags=[])
        evidence = make_evidence([], end=date(2024, 1, 15))
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.15

    def test_empty_tags_only_recency(self, bas_obligation):
        evidence = make_evidence([])
        assert calculate_confidence(evidence, bas_obligation, now=NOW) == 0.2

    def test_empty_tags_still_match_obligation_keywords(self, bas_obligation):
        evidence = make_evidence([], ref="BAS-Q4-2024")
        assert calculate_confidence(evidence, bas_obligation, now=NOW) == 0.3

    def test_accepts_datetime_now(self, bas_obligation):
        evidence = make_evidence(list(BAS_TAGS), ref="BAS-Q3-2024")
        assert calculate_confidence(evidence, bas_obligation, now=datetime(2025, 1, 15, 9, 30)) == 1.0


class TestIntegrationRelevance:
    """Integration-type bonus from the source lookup table."""

    @pytest.fixture
    def obligation(self):
        return Obligation(id="o1", title="Nothing", tags=["other"])

    def test_explicit_source_awards_bonus(self, obligation):
        evidence = make_evidence(["superannuation"], end=date(2020, 1, 31),
                                 ref="SS-Q1-2025", source=EvidenceSource.SUPERSTREAM)
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.1

    def test_unrecognized_prefix_no_bonus(self, obligation):
        evidence = make_evidence(["superannuation"], end=date(2020, 1, 31), ref="SS-Q1-2025")
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.0

    def test_prefix_fallback_is_case_sensitive(self, obligation):
        exact = make_evidence(["superannuation"], end=date(2020, 1, 31), ref="SuperStream-1")
        lowered = make_evidence(["superannuation"], end=date(2020, 1, 31), ref="superstream-1")

        assert calculate_confidence(exact, obligation, now=NOW) == 0.1
        assert calculate_confidence(lowered, obligation, now=NOW) == 0.0

    def test_keyword_in_obligation_tags_counts(self):
        obligation = Obligation(id="o1", title="Nothing", tags=["payroll"])
        evidence = make_evidence(["x"], end=date(2020, 1, 31), source=EvidenceSource.STP)
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.1

    def test_integration_key_resolution(self):
        assert integration_key(make_evidence([], ref="BAS-Q3-2024")) == "BAS"
        assert integration_key(make_evidence([], ref="STAPLED-2024", source=EvidenceSource.STAPLED)) == "Stapled"
        assert integration_key(make_evidence([])) is None


class TestScoreProperties:
    """Boundedness and monotonicity over the sample data."""

    def test_scores_bounded(self, bas_obligation):
        from corecomply.evidence.adapters import get_sample_obligations

        obligations = get_sample_obligations() + [bas_obligation]
        records = [
            make_evidence(list(BAS_TAGS) + ["payroll", "superannuation", "SG", "LSL"], ref="BAS-1",
                          source=EvidenceSource.BAS),
            make_evidence([], end=date(2000, 1, 1)),
            make_evidence(["a"] * 20, ref="STP-1"),
        ]
        for evidence in records:
            for obligation in obligations:
                assert 0.0 <= calculate_confidence(evidence, obligation, now=NOW) <= 1.0

    def test_adding_signal_never_decreases_score(self, bas_obligation):
        base = make_evidence(["GST"], end=date(2020, 1, 31))
        with_tag = make_evidence(["GST", "PAYG"], end=date(2020, 1, 31))
        with_control = make_evidence(["GST", "bas"], end=date(2020, 1, 31))
        recent = make_evidence(["GST"], end=date(2025, 1, 1))

        base_score = calculate_confidence(base, bas_obligation, now=NOW)
        assert calculate_confidence(with_tag, bas_obligation, now=NOW) >= base_score
        assert calculate_confidence(with_control, bas_obligation, now=NOW) >= base_score
        assert calculate_confidence(recent, bas_obligation, now=NOW) >= base_score


class TestMonthsBefore:
    def test_same_day(self):
        assert months_before(date(2025, 1, 15), 3) == date(2024, 10, 15)
        assert months_before(date(2025, 1, 15), 12) == date(2024, 1, 15)

    def test_clamps_to_month_end(self):
        assert months_before(date(2025, 3, 31), 1) == date(2025, 2, 28)
        assert months_before(date(2024, 5, 31), 3) == date(2024, 2, 29)


class TestMatchBatch:
    """Artifact construction, threshold and top-N cap."""

    def test_unmatched_evidence_still_produces_artifact(self, bas_obligation):
        evidence = make_evidence(["unrelated"], end=date(2023, 1, 1))
        results = match_evidence_to_obligations([evidence], [bas_obligation], now=NOW)

        assert len(results) == 1
        artifact = results[0].artifact
        assert artifact.obligation_refs == []
        assert artifact.confidence is None
        assert artifact.accepted is None
        assert results[0].matches == []

    def test_empty_obligation_list(self):
        results = match_evidence_to_obligations([make_evidence(list(BAS_TAGS))], [], now=NOW)
        assert results[0].artifact.obligation_refs == []
        assert results[0].artifact.confidence is None

    def test_exact_threshold_retained(self):
        obligation = Obligation(id="o1", title="Other", control_ref="ABC-XYZ-01", tags=[])
        evidence = make_evidence(["xyz"], end=date(2020, 1, 31))

        matches = rank_matches(evidence, [obligation], now=NOW)
        assert [m.obligation_id for m in matches] == ["o1"]
        assert matches[0].confidence == 0.5

    def test_below_threshold_discarded(self):
        obligation = Obligation(id="o1", title="Nothing", tags=["GST"])
        evidence = make_evidence(["GST"], end=date(2025, 1, 1), source=EvidenceSource.BAS)
        # 0.05 + 0.15 + 0.10 + 0.05
        assert calculate_confidence(evidence, obligation, now=NOW) == 0.35
        assert rank_matches(evidence, [obligation], now=NOW) == []

    def test_top_three_ranked_with_stable_ties(self):
        obligations = [
            Obligation(id="tie-a", title="Other", control_ref="REF-XYZ", tags=[]),
            Obligation(id="best", title="Other", control_ref="REF-XYZ", tags=["xyz"]),
            Obligation(id="tie-b", title="Other", control_ref="REF-XYZ", tags=[]),
            Obligation(id="tie-c", title="Other", control_ref="REF-XYZ", tags=[]),
            Obligation(id="none", title="Other", control_ref="REF-ABC", tags=[]),
        ]
        evidence = make_evidence(["xyz"], end=date(2020, 1, 31))

        result = match_evidence_to_obligations([evidence], obligations, now=NOW)[0]
        assert [m.obligation_id for m in result.matches] == ["best", "tie-a", "tie-b", "tie-c"]
        assert result.artifact.obligation_refs == ["best", "tie-a", "tie-b"]
        assert result.artifact.confidence == 0.55

    def test_every_ref_meets_threshold(self):
        from corecomply.evidence.adapters import get_sample_obligations

        obligations = get_sample_obligations()
        records = [
            make_evidence(["STP", "payroll", "tax", "ATO"], ref="STP-1", source=EvidenceSource.STP),
            make_evidence(["payslip", "payroll", "wages"], ref="PAYSLIP-1", source=EvidenceSource.PAYSLIP),
        ]
        for result in match_evidence_to_obligations(records, obligations, now=NOW):
            assert len(result.artifact.obligation_refs) <= 3
            scores = {m.obligation_id: m.confidence for m in result.matches}
            for ref in result.artifact.obligation_refs:
                assert scores[ref] >= 0.5
            if result.matches:
                assert result.artifact.confidence == max(scores.values())

    def test_artifact_fields_copied_from_record(self):
        evidence = make_evidence(list(BAS_TAGS), ref="BAS-Q3-2024", title="BAS Lodgement")
        artifact = match_evidence_to_obligations([evidence], [], now=NOW,
                                                 source=EvidenceSource.BAS)[0].artifact

        assert artifact.id.startswith("evidence-")
        assert artifact.title == "BAS Lodgement"
        assert artifact.source == EvidenceSource.BAS
        assert artifact.integration_ref == "BAS-Q3-2024"
        assert artifact.tags == BAS_TAGS
        assert artifact.period == evidence.period

    def test_custom_threshold_and_top_n(self, bas_obligation):
        evidence = make_evidence(["GST"], end=date(2025, 1, 1), source=EvidenceSource.BAS)
        results = match_evidence_to_obligations([evidence], [bas_obligation, bas_obligation], now=NOW,
                                                threshold=0.3, top_n=1)
        assert results[0].artifact.obligation_refs == ["BAS-001"]
