"""
Request and response models for the CoreComply HTTP API.
"""

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.schema import EvidenceArtifact, Obligation, RoleKey, SetupStepKey


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: Optional[bool] = None
    persisted_stores: List[str] = Field(default_factory=list)


class StepStatus(BaseModel):
    key: SetupStepKey
    title: str
    route: str
    complete: bool
    visited: bool
    depends_on: List[SetupStepKey]
    nudge: Optional[str] = None
    manual_fallback: Optional[str] = None


class SetupResponse(BaseModel):
    completion: int
    last_step: Optional[SetupStepKey] = None
    steps: List[StepStatus]


class RoleAssignmentRequest(BaseModel):
    user_id: str

    @field_validator('user_id')
    @classmethod
    def user_id_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('user_id cannot be empty')
        return v


class HandOverRequest(BaseModel):
    from_user_id: str
    to_user_id: str

    @field_validator('from_user_id', 'to_user_id')
    @classmethod
    def ids_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('user ids cannot be empty')
        return v


class HandOverResponse(BaseModel):
    moved_roles: List[RoleKey]
    rasci_readopted: bool


class DirectoryResponse(BaseModel):
    key_personnel: Dict[RoleKey, str]
    configured: bool


class RasciAdoptRequest(BaseModel):
    # Omitted: adopt from the current key personnel directory
    directory: Optional[Dict[RoleKey, Optional[str]]] = None


class RasciAdoptResponse(BaseModel):
    adopted: bool
    adopted_at: Optional[datetime] = None
    assignments: int


class RasciGroupResponse(BaseModel):
    key: str
    R: List[RoleKey]
    A: List[RoleKey]
    S: List[RoleKey]
    C: List[RoleKey]
    I: List[RoleKey]  # noqa: E741


class DiscoveryRequest(BaseModel):
    start: date
    end: date
    # Omitted: use the company profile's site states
    states: Optional[List[str]] = None
    # Omitted: match against the sample obligation register
    obligations: Optional[List[Obligation]] = None

    @model_validator(mode='after')
    def end_not_before_start(self):
        if self.end < self.start:
            raise ValueError('end cannot precede start')
        return self


class DiscoveryResponse(BaseModel):
    artifacts_added: int
    per_adapter: Dict[str, int]
    failed_adapters: List[str]
    completion: int


class EvidenceListResponse(BaseModel):
    artifacts: List[EvidenceArtifact]


class LinkRequest(BaseModel):
    obligation_ref: str

    @field_validator('obligation_ref')
    @classmethod
    def ref_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('obligation_ref cannot be empty')
        return v
