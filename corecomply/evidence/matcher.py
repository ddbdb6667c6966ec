"""
Evidence-to-obligation confidence scoring.

A score is the sum of five additive signals, clamped to 1.0:

    +0.50  obligation control reference contains one of the evidence tags
    +0.20  keyword overlap, +0.05 per evidence tag found in the obligation
           tags or title (capped)
    +0.15  evidence period ends within the last 12 months
    +0.10  integration relevance keyword present in either tag set
    +0.05  evidence period ends within the last 3 months

Matches below the retention threshold are discarded; the rest are ranked by
score with ties kept in obligation input order.
"""

import calendar
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.config import get_match_threshold, get_match_top_n
from ..core.schema import (
    EvidenceArtifact,
    EvidenceSource,
    Obligation,
    ObligationMatch,
    RawEvidence,
)

CONTROL_REF_WEIGHT = 0.50
TAG_MATCH_WEIGHT = 0.05
TAG_MATCH_CAP = 0.20
RECENT_YEAR_WEIGHT = 0.15
INTEGRATION_WEIGHT = 0.10
RECENT_QUARTER_WEIGHT = 0.05

# Integration source -> keywords that make its evidence relevant
INTEGRATION_KEYWORDS: Dict[str, List[str]] = {
    "STP": ["payroll", "tax", "ato"],
    "SuperStream": ["superannuation", "sg"],
    "BAS": ["bas", "gst", "payg", "tax"],
    "PayrollTax": ["payroll-tax", "state"],
    "WorkersComp": ["workers-comp", "whs", "insurance"],
    "LSL": ["lsl", "leave"],
    "VEVO": ["vevo", "visa", "immigration"],
    "Stapled": ["stapled", "choice", "superannuation"],
    "Payslip": ["payslip", "payroll", "wages"],
}


@dataclass
class MatchResult:
    """An artifact built from one raw record plus every retained match."""
    artifact: EvidenceArtifact
    matches: List[ObligationMatch] = field(default_factory=list)


def months_before(today: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the end of shorter months."""
    month_index = today.year * 12 + (today.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(today.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def integration_key(evidence: RawEvidence) -> Optional[str]:
    """
    Source identifier used for the relevance lookup.

    The explicit integration_source wins; otherwise the text before the first
    '-' of integration_ref is used as-is (case-sensitive).
    """
    if evidence.integration_source is not None:
        return evidence.integration_source.value
    if evidence.integration_ref:
        return evidence.integration_ref.split("-", 1)[0]
    return None


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def calculate_confidence(evidence: RawEvidence, obligation: Obligation, now: Optional[date] = None) -> float:
    """Score how well one piece of evidence supports one obligation, in [0, 1]."""
    today = _as_date(now) if now is not None else date.today()
    score = 0.0

    evidence_tags = [t.lower() for t in evidence.tags]
    obligation_tags = [t.lower() for t in obligation.tags]
    obligation_title = obligation.title.lower()

    if obligation.control_ref:
        control_ref = obligation.control_ref.lower()
        if any(tag in control_ref for tag in evidence_tags):
            score += CONTROL_REF_WEIGHT

    tag_matches = sum(
        1 for tag in evidence_tags
        if tag in obligation_tags or tag in obligation_title
    )
    if tag_matches > 0:
        score += min(TAG_MATCH_CAP, tag_matches * TAG_MATCH_WEIGHT)

    period_end = evidence.period.end
    if period_end >= months_before(today, 12):
        score += RECENT_YEAR_WEIGHT

    source_keywords = INTEGRATION_KEYWORDS.get(integration_key(evidence) or "", [])
    if any(k in evidence_tags or k in obligation_tags for k in source_keywords):
        score += INTEGRATION_WEIGHT

    if period_end >= months_before(today, 3):
        score += RECENT_QUARTER_WEIGHT

    # Weights are multiples of 0.05
    return round(min(1.0, score), 2)


def rank_matches(evidence: RawEvidence, obligations: Sequence[Obligation],
                 now: Optional[date] = None, threshold: Optional[float] = None) -> List[ObligationMatch]:
    """Retained matches for one record, best first (stable for ties)."""
    if threshold is None:
        threshold = get_match_threshold()

    matches = []
    for obligation in obligations:
        confidence = calculate_confidence(evidence, obligation, now=now)
        if confidence >= threshold:
            matches.append(ObligationMatch(obligation_id=obligation.id, confidence=confidence))

    matches.sort(key=lambda m: m.confidence, reverse=True)
    return matches


def new_artifact_id() -> str:
    return f"evidence-{uuid.uuid4().hex[:12]}"


def match_evidence_to_obligations(evidence_list: Iterable[RawEvidence], obligations: Sequence[Obligation],
                                  now: Optional[datetime] = None, threshold: Optional[float] = None,
                                  top_n: Optional[int] = None,
                                  source: EvidenceSource = EvidenceSource.MANUAL) -> List[MatchResult]:
    """
    Build one artifact per raw record, linked to its best obligations.

    The artifact keeps the top_n obligation ids and the best score as its
    confidence; with no retained match the refs are empty and confidence None.
    """
    if top_n is None:
        top_n = get_match_top_n()
    uploaded_at = now if isinstance(now, datetime) else datetime.now()

    results = []
    for evidence in evidence_list:
        matches = rank_matches(evidence, obligations, now=now, threshold=threshold)
        artifact = EvidenceArtifact(
            id=new_artifact_id(),
            title=evidence.title,
            source=source,
            period=evidence.period,
            uploaded_at=uploaded_at,
            integration_ref=evidence.integration_ref,
            obligation_refs=[m.obligation_id for m in matches[:top_n]],
            confidence=matches[0].confidence if matches else None,
            accepted=None,
            tags=list(evidence.tags),
        )
        results.append(MatchResult(artifact=artifact, matches=matches))

    return results
