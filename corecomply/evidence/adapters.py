"""
Integration adapters that supply raw evidence records.

Each adapter is a callable (period, footprint) -> list of RawEvidence, sync or
async. The built-in adapters return fixed sample records shaped like the
payroll, tax and super feeds they stand in for.
"""

from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, List, Union

from ..core.schema import EvidenceSource, Footprint, Obligation, Period, RawEvidence

AdapterResult = Union[List[RawEvidence], Awaitable[List[RawEvidence]]]
FetchFn = Callable[[Period, Footprint], AdapterResult]

# Jurisdictions with long service leave legislation
LSL_JURISDICTIONS = ["NSW", "VIC", "QLD", "WA", "SA", "TAS", "ACT", "NT"]


@dataclass(frozen=True)
class IntegrationAdapter:
    source: EvidenceSource
    name: str
    fetch: FetchFn


def _record(title: str, period: Period, tags: List[str], ref: str, source: EvidenceSource) -> RawEvidence:
    return RawEvidence(
        title=title,
        period=period,
        tags=tags,
        integration_ref=ref,
        integration_source=source,
    )


def _span(start: date, end: date) -> Period:
    return Period(start=start, end=end)


async def fetch_stp(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.STP
    return [
        _record("STP Phase 2 Submission Receipt", period,
                ["STP", "payroll", "tax", "ATO"], "STP-20250101-001", source),
        _record("STP Finalisation Declaration", _span(date(2024, 7, 1), date(2024, 7, 14)),
                ["STP", "finalisation", "tax", "ATO"], "STP-FIN-2024", source),
    ]


async def fetch_superstream(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.SUPERSTREAM
    return [
        _record("SuperStream Payment Confirmation Q1", period,
                ["superannuation", "SG", "superstream"], "SS-Q1-2025", source),
        _record("SuperStream Payment Confirmation Q2", _span(date(2024, 10, 1), date(2024, 12, 31)),
                ["superannuation", "SG", "superstream"], "SS-Q2-2024", source),
    ]


async def fetch_bas(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.BAS
    tags = ["BAS", "tax", "GST", "PAYG", "ATO"]
    return [
        _record("BAS Lodgement Q3 2024", _span(date(2024, 7, 1), date(2024, 9, 30)),
                list(tags), "BAS-Q3-2024", source),
        _record("BAS Lodgement Q4 2024", _span(date(2024, 10, 1), date(2024, 12, 31)),
                list(tags), "BAS-Q4-2024", source),
    ]


async def fetch_payroll_tax(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.PAYROLL_TAX
    records = []
    for state in footprint.states:
        records.append(_record(f"Payroll Tax Return {state} - January", _span(date(2025, 1, 1), date(2025, 1, 31)),
                               ["payroll-tax", state, "state-obligation"], f"PT-{state}-JAN-2025", source))
        records.append(_record(f"Payroll Tax Return {state} - December", _span(date(2024, 12, 1), date(2024, 12, 31)),
                               ["payroll-tax", state, "state-obligation"], f"PT-{state}-DEC-2024", source))
    return records


async def fetch_workers_comp(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.WORKERS_COMP
    return [
        _record(f"Workers Comp Policy {state}", _span(date(2024, 7, 1), date(2025, 6, 30)),
                ["workers-comp", state, "insurance", "WHS"], f"WC-{state}-2024-25", source)
        for state in footprint.states
    ]


async def fetch_lsl(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.LSL
    return [
        _record(f"Long Service Leave Register {state}", period,
                ["LSL", "leave", state], f"LSL-{state}-2024", source)
        for state in footprint.states
        if state in LSL_JURISDICTIONS
    ]


async def fetch_vevo(period: Period, footprint: Footprint) -> List[RawEvidence]:
    return [
        _record("VEVO Visa Verification Report", period,
                ["VEVO", "visa", "immigration", "compliance"], "VEVO-2025-Q1", EvidenceSource.VEVO),
    ]


async def fetch_stapled(period: Period, footprint: Footprint) -> List[RawEvidence]:
    return [
        _record("Stapled Super Fund Request Records", period,
                ["stapled", "superannuation", "SG", "choice"], "STAPLED-2024-2025", EvidenceSource.STAPLED),
    ]


async def fetch_payslip(period: Period, footprint: Footprint) -> List[RawEvidence]:
    source = EvidenceSource.PAYSLIP
    return [
        _record("Payslip Sample - January 2025", _span(date(2025, 1, 1), date(2025, 1, 31)),
                ["payslip", "payroll", "wages"], "PAYSLIP-JAN-2025", source),
        _record("Payslip Sample - December 2024", _span(date(2024, 12, 1), date(2024, 12, 31)),
                ["payslip", "payroll", "wages"], "PAYSLIP-DEC-2024", source),
    ]


def default_adapters() -> List[IntegrationAdapter]:
    """The nine built-in integration adapters, in registry order."""
    return [
        IntegrationAdapter(EvidenceSource.STP, "Single Touch Payroll", fetch_stp),
        IntegrationAdapter(EvidenceSource.SUPERSTREAM, "SuperStream Confirmations", fetch_superstream),
        IntegrationAdapter(EvidenceSource.BAS, "Business Activity Statement", fetch_bas),
        IntegrationAdapter(EvidenceSource.PAYROLL_TAX, "State Payroll Tax", fetch_payroll_tax),
        IntegrationAdapter(EvidenceSource.WORKERS_COMP, "Workers Compensation", fetch_workers_comp),
        IntegrationAdapter(EvidenceSource.LSL, "Long Service Leave", fetch_lsl),
        IntegrationAdapter(EvidenceSource.VEVO, "Visa Entitlement Verification", fetch_vevo),
        IntegrationAdapter(EvidenceSource.STAPLED, "Stapled Super Fund", fetch_stapled),
        IntegrationAdapter(EvidenceSource.PAYSLIP, "Payslip Sample", fetch_payslip),
    ]


def get_sample_obligations() -> List[Obligation]:
    """Sample obligation register covering each built-in integration."""
    return [
        Obligation(id="STP-001", title="Single Touch Payroll Phase 2 Reporting", control_ref="STP-001",
                   tags=["STP", "payroll", "tax", "ATO", "reporting"]),
        Obligation(id="SG-001", title="Superannuation Guarantee Contributions", control_ref="SG-001",
                   tags=["superannuation", "SG", "contributions", "payroll"]),
        Obligation(id="BAS-001", title="Business Activity Statement Lodgement", control_ref="BAS-001",
                   tags=["BAS", "tax", "GST", "PAYG", "ATO"]),
        Obligation(id="PT-001", title="State Payroll Tax Compliance", control_ref="PT-001",
                   tags=["payroll-tax", "state-obligation", "tax"]),
        Obligation(id="WC-001", title="Workers Compensation Insurance", control_ref="WC-001",
                   tags=["workers-comp", "insurance", "WHS", "state-obligation"]),
        Obligation(id="LSL-001", title="Long Service Leave Register", control_ref="LSL-001",
                   tags=["LSL", "leave", "entitlements", "state-obligation"]),
        Obligation(id="VEVO-001", title="Visa Entitlement Verification", control_ref="VEVO-001",
                   tags=["VEVO", "visa", "immigration", "compliance"]),
        Obligation(id="CHOICE-001", title="Choice of Superannuation Fund", control_ref="CHOICE-001",
                   tags=["stapled", "choice", "superannuation", "SG"]),
        Obligation(id="PAYSLIP-001", title="Payslip Requirements Compliance", control_ref="PAYSLIP-001",
                   tags=["payslip", "payroll", "wages", "fair-work"]),
    ]
