"""
RASCI adoption - expands per-domain responsibility templates against the key
personnel directory.

Adoption always rebuilds the whole assignment map and swaps it in; there is no
merge with a previous adoption.
"""

from datetime import datetime
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, Field

from ..core.schema import ControlDomain, RasciAssignment, RasciRole, RoleKey, normalize_directory
from ..core.store import PersistentStore
from ..util.logging import logger

R, A, S, C, I = RasciRole.R, RasciRole.A, RasciRole.S, RasciRole.C, RasciRole.I  # noqa: E741

# Control domain -> ordered role-key -> RASCI letters
RASCI_TEMPLATES: Dict[ControlDomain, Dict[RoleKey, List[RasciRole]]] = {
    ControlDomain.PAYROLL_PROCESSING: {
        RoleKey.PAYROLL_OFFICER: [R],
        RoleKey.PAYROLL_MANAGER: [A],
        RoleKey.HR_MANAGER: [C],
        RoleKey.FINANCE_MANAGER: [S],
        RoleKey.COMPLIANCE_OWNER: [I],
    },
    ControlDomain.TAX_COMPLIANCE: {
        RoleKey.PAYROLL_MANAGER: [R],
        RoleKey.CFO: [A],
        RoleKey.EXTERNAL_ACCOUNTANT: [C],
        RoleKey.COMPLIANCE_OWNER: [S],
    },
    ControlDomain.SUPERANNUATION: {
        RoleKey.PAYROLL_OFFICER: [R],
        RoleKey.PAYROLL_MANAGER: [A],
        RoleKey.EXTERNAL_ACCOUNTANT: [C],
        RoleKey.COMPLIANCE_OWNER: [S],
    },
    ControlDomain.LEAVE_MANAGEMENT: {
        RoleKey.HR_OFFICER: [R],
        RoleKey.HR_MANAGER: [A],
        RoleKey.PAYROLL_OFFICER: [S],
        RoleKey.COMPLIANCE_OWNER: [I],
    },
    ControlDomain.TIME_ATTENDANCE: {
        RoleKey.HR_OFFICER: [R],
        RoleKey.HR_MANAGER: [A],
        RoleKey.PAYROLL_MANAGER: [C],
    },
    ControlDomain.EMPLOYEE_DATA: {
        RoleKey.HR_OFFICER: [R],
        RoleKey.HR_MANAGER: [A],
        RoleKey.IT_SECURITY: [C],
        RoleKey.COMPLIANCE_OWNER: [I],
    },
    ControlDomain.ACCESS_CONTROL: {
        RoleKey.IT_SECURITY: [R, A],
        RoleKey.HR_MANAGER: [C],
        RoleKey.COMPLIANCE_OWNER: [S],
    },
    ControlDomain.GOVERNANCE: {
        RoleKey.COMPLIANCE_OWNER: [R],
        RoleKey.CEO: [A],
        RoleKey.BOARD_CHAIR: [C],
        RoleKey.INTERNAL_AUDIT: [I],
    },
    ControlDomain.STATE_OBLIGATIONS: {
        RoleKey.PAYROLL_MANAGER: [R],
        RoleKey.COMPLIANCE_OWNER: [A],
        RoleKey.CFO: [C],
        RoleKey.EXTERNAL_ACCOUNTANT: [S],
    },
    ControlDomain.QUALITY_MANAGEMENT: {
        RoleKey.COMPLIANCE_OWNER: [R],
        RoleKey.CEO: [A],
        RoleKey.INTERNAL_AUDIT: [C],
    },
    ControlDomain.FINANCIAL_CONTROLS: {
        RoleKey.FINANCE_MANAGER: [R],
        RoleKey.CFO: [A],
        RoleKey.COMPLIANCE_OWNER: [C],
        RoleKey.INTERNAL_AUDIT: [I],
    },
    ControlDomain.DATA_MANAGEMENT: {
        RoleKey.IT_SECURITY: [R],
        RoleKey.COMPLIANCE_OWNER: [A],
        RoleKey.HR_MANAGER: [C],
    },
}


class RasciState(BaseModel):
    # Lookup key (domain name, or a control reference set manually) -> assignments
    default_assignments: Dict[str, List[RasciAssignment]] = Field(default_factory=dict)
    adopted: bool = False
    adopted_at: Optional[datetime] = None


def expand_templates(directory: Mapping) -> Dict[str, List[RasciAssignment]]:
    """Build the assignment list for every control domain from a role directory."""
    assigned = normalize_directory(directory)
    assignments: Dict[str, List[RasciAssignment]] = {}

    for domain in ControlDomain:
        domain_assignments = []
        for role_key, letters in RASCI_TEMPLATES[domain].items():
            if role_key not in assigned:
                continue
            for letter in letters:
                domain_assignments.append(RasciAssignment(role_key=role_key, rasci_role=letter))
        assignments[domain.value] = domain_assignments

    return assignments


class RasciStore(PersistentStore):
    """Default RASCI assignments adopted from key personnel."""

    name = "corecomply-rasci"
    state_model = RasciState

    @property
    def adopted(self) -> bool:
        return self.state.adopted

    @property
    def adopted_at(self) -> Optional[datetime]:
        return self.state.adopted_at

    def adopt_from_key_personnel(self, directory: Mapping) -> None:
        """Replace all assignments with a fresh expansion of the templates."""
        assignments = expand_templates(directory)
        self._replace(RasciState(
            default_assignments=assignments,
            adopted=True,
            adopted_at=datetime.now(),
        ))

        logger.log_rasci_adoption(
            assigned_roles=len(normalize_directory(directory)),
            domains=len(assignments),
            assignments=sum(len(a) for a in assignments.values()),
        )

    def rasci_for(self, key: str) -> Dict[str, List[RoleKey]]:
        """
        Group the assignments stored under key by RASCI letter.

        Adoption only stores domain names (e.g. "governance"). A control
        reference that is not itself a domain name returns all-empty groups
        unless set_control_rasci stored something under it.
        """
        if isinstance(key, ControlDomain):
            key = key.value

        grouped: Dict[str, List[RoleKey]] = {letter.value: [] for letter in RasciRole}
        for assignment in self.state.default_assignments.get(key, []):
            grouped[assignment.rasci_role.value].append(assignment.role_key)
        return grouped

    def assignments_for(self, key: str) -> List[RasciAssignment]:
        return list(self.state.default_assignments.get(key, []))

    def set_control_rasci(self, key: str, assignments: List[RasciAssignment]) -> None:
        """Manually override the assignment list for one lookup key."""
        if not key or not key.strip():
            raise ValueError("RASCI key cannot be empty")

        self._mutate(lambda s: s.model_copy(update={
            "default_assignments": {**s.default_assignments, key: list(assignments)}
        }))

    def reset(self) -> None:
        self._replace(RasciState())
