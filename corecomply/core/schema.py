"""
Domain types shared by the evidence, RASCI and setup components.
"""

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..util.logging import logger


class EvidenceSource(str, Enum):
    STP = "STP"
    SUPERSTREAM = "SuperStream"
    BAS = "BAS"
    PAYROLL_TAX = "PayrollTax"
    WORKERS_COMP = "WorkersComp"
    LSL = "LSL"
    VEVO = "VEVO"
    STAPLED = "Stapled"
    PAYSLIP = "Payslip"
    MANUAL = "Manual"


class RasciRole(str, Enum):
    R = "R"
    A = "A"
    S = "S"
    C = "C"
    I = "I"  # noqa: E741


class RoleKey(str, Enum):
    CEO = "CEO"
    BOARD_CHAIR = "BoardChair"
    AUDIT_RISK_CHAIR = "AuditRiskChair"
    COMPLIANCE_OWNER = "ComplianceOwner"
    PAYROLL_OFFICER = "PayrollOfficer"
    PAYROLL_MANAGER = "PayrollManager"
    HR_OFFICER = "HROfficer"
    HR_MANAGER = "HRManager"
    FINANCE_MANAGER = "FinanceManager"
    CFO = "CFO"
    IT_SECURITY = "ITSecurity"
    INTERNAL_AUDIT = "InternalAudit"
    EXTERNAL_ACCOUNTANT = "ExternalAccountant"


class ControlDomain(str, Enum):
    PAYROLL_PROCESSING = "payroll-processing"
    TAX_COMPLIANCE = "tax-compliance"
    SUPERANNUATION = "superannuation"
    LEAVE_MANAGEMENT = "leave-management"
    TIME_ATTENDANCE = "time-attendance"
    EMPLOYEE_DATA = "employee-data"
    ACCESS_CONTROL = "access-control"
    GOVERNANCE = "governance"
    STATE_OBLIGATIONS = "state-obligations"
    QUALITY_MANAGEMENT = "quality-management"
    FINANCIAL_CONTROLS = "financial-controls"
    DATA_MANAGEMENT = "data-management"


class SetupStepKey(str, Enum):
    INTEGRATIONS = "integrations"
    COMPANY_PROFILE = "companyProfile"
    PEOPLE = "people"
    RASCI = "rasci"
    OBLIGATIONS_SEED = "obligationsSeed"
    TIMETABLE = "timetable"
    EVIDENCE_DISCOVERY = "evidenceDiscovery"
    REVIEW = "review"


class Period(BaseModel):
    """Date interval an artifact covers."""
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @model_validator(mode='after')
    def end_not_before_start(self):
        if self.end < self.start:
            raise ValueError('period end cannot precede period start')
        return self


class Footprint(BaseModel):
    """Jurisdictions the organisation operates in."""
    states: List[str] = Field(default_factory=list)

    @field_validator('states')
    @classmethod
    def states_must_not_be_blank(cls, v):
        if any(not s.strip() for s in v):
            raise ValueError('state codes cannot be blank')
        return v


class Obligation(BaseModel):
    """Compliance requirement supplied by the obligations register."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    control_ref: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator('id')
    @classmethod
    def id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('obligation id cannot be empty')
        return v


class RawEvidence(BaseModel):
    """Record returned by an integration adapter before matching."""
    title: str
    period: Period
    tags: List[str] = Field(default_factory=list)
    integration_ref: Optional[str] = None
    integration_source: Optional[EvidenceSource] = None


class ObligationMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    obligation_id: str
    confidence: float = Field(ge=0.0, le=1.0)


class EvidenceArtifact(BaseModel):
    """Evidence held by the evidence store."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    source: EvidenceSource = EvidenceSource.MANUAL
    period: Period
    uploaded_at: datetime
    file_url: Optional[str] = None
    integration_ref: Optional[str] = None
    obligation_refs: List[str] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    accepted: Optional[bool] = None
    tags: List[str] = Field(default_factory=list)


class RasciAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    role_key: RoleKey
    rasci_role: RasciRole


# Role-key -> person identifier; missing keys and None are both "unassigned"
RoleDirectory = Mapping[RoleKey, Optional[str]]


def normalize_directory(directory: Mapping) -> Dict[RoleKey, str]:
    """
    Reduce a role directory to its assigned entries.

    Keys may be RoleKey members or their string values. Keys that are not a
    known role and non-string person ids are skipped with a warning; None and
    empty person ids count as unassigned.
    """
    normalized: Dict[RoleKey, str] = {}
    for key, person_id in directory.items():
        try:
            role_key = RoleKey(key)
        except ValueError:
            logger.warning(f"Ignoring unknown role key in directory: {key!r}")
            continue
        if person_id is None:
            continue
        if not isinstance(person_id, str):
            logger.warning(f"Ignoring non-string person id for {role_key.value}: {type(person_id).__name__}")
            continue
        if person_id:
            normalized[role_key] = person_id
    return normalized
