"""
Setup steps and the completion calculator.

Every step's completion is a live predicate read through a SetupPorts object,
so nothing here is cached and the calculator never touches a concrete store.
Dependencies between steps are advisory (nudges); they never block a step
from counting as complete.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.schema import SetupStepKey

Predicate = Callable[[], bool]


@dataclass(frozen=True)
class SetupPorts:
    """Read-only accessors into the stores each step depends on."""
    integrations_connected: Predicate
    company_configured: Predicate
    key_personnel_assigned: Predicate
    rasci_adopted: Predicate
    framework_selected: Predicate
    timetable_configured: Predicate
    evidence_present: Predicate


@dataclass(frozen=True)
class SetupStep:
    key: SetupStepKey
    title: str
    description: str
    route: str
    complete: Predicate
    depends_on: Tuple[SetupStepKey, ...] = field(default_factory=tuple)
    manual_fallback: Optional[str] = None
    hard_block: bool = False


def _never() -> bool:
    return False


def build_setup_steps(ports: SetupPorts) -> List[SetupStep]:
    """The eight setup steps in wizard order."""
    K = SetupStepKey
    return [
        SetupStep(
            key=K.INTEGRATIONS,
            title="Connect Integrations",
            description="Connect M365/Entra, Payroll, HRIS, Accounting, and Super systems to auto-sync data",
            route="/integrations",
            complete=ports.integrations_connected,
            manual_fallback="Upload CSV files manually for people, payroll, and accounting data",
        ),
        SetupStep(
            key=K.COMPANY_PROFILE,
            title="Company Profile",
            description="Set up entities, ABNs, sites/states, awards footprint, and select framework (APGF-MS)",
            route="/company-profile",
            complete=ports.company_configured,
            manual_fallback="Enter company details manually",
        ),
        SetupStep(
            key=K.PEOPLE,
            title="People & Key Personnel",
            description="Sync people from integrations and assign Key Personnel roles (CEO, Compliance Owner, etc.)",
            route="/people",
            complete=ports.key_personnel_assigned,
            depends_on=(K.INTEGRATIONS,),
            manual_fallback="Add people manually and assign roles",
        ),
        SetupStep(
            key=K.RASCI,
            title="Adopt RASCI",
            description="Apply Key Personnel assignments to default RASCI matrix for all control domains",
            route="/setup?step=rasci",
            complete=ports.rasci_adopted,
            depends_on=(K.PEOPLE,),
            manual_fallback="Configure RASCI manually for each control",
        ),
        SetupStep(
            key=K.OBLIGATIONS_SEED,
            title="Seed Obligations",
            description="Load APGF-MS obligations based on your framework selection and footprint",
            route="/obligations",
            complete=ports.framework_selected,
            depends_on=(K.COMPANY_PROFILE,),
            manual_fallback="Import obligations from CSV",
        ),
        SetupStep(
            key=K.TIMETABLE,
            title="Statutory Timetable",
            description="Generate compliance calendar with BAS, PAYG, SG, payroll tax, and other statutory deadlines",
            route="/calendar",
            complete=ports.timetable_configured,
            depends_on=(K.COMPANY_PROFILE, K.OBLIGATIONS_SEED),
            manual_fallback="Add key dates manually",
        ),
        SetupStep(
            key=K.EVIDENCE_DISCOVERY,
            title="Evidence Discovery",
            description="Auto-collect evidence from integrations (STP, SuperStream, BAS, payslips) and match to obligations",
            route="/setup?step=evidenceDiscovery",
            complete=ports.evidence_present,
            depends_on=(K.INTEGRATIONS, K.OBLIGATIONS_SEED),
            manual_fallback="Upload evidence files manually",
        ),
        SetupStep(
            key=K.REVIEW,
            title="Review & Finish",
            description="Review setup completion and optionally start Comprehensive Payroll Audit",
            route="/setup?step=review",
            # Terminal manual action, never a completion state
            complete=_never,
            depends_on=(K.COMPANY_PROFILE, K.PEOPLE, K.OBLIGATIONS_SEED),
        ),
    ]


def _coerce_key(key) -> Optional[SetupStepKey]:
    try:
        return SetupStepKey(key)
    except ValueError:
        return None


class SetupCalculator:
    """Completion percentage and nudges over an ordered step list."""

    def __init__(self, steps: Sequence[SetupStep]):
        self.steps = list(steps)
        self._by_key: Dict[SetupStepKey, SetupStep] = {s.key: s for s in self.steps}

    def get_step(self, key) -> Optional[SetupStep]:
        """Step for key, or None when the key is unknown."""
        step_key = _coerce_key(key)
        if step_key is None:
            return None
        return self._by_key.get(step_key)

    def get_step_index(self, key) -> int:
        """Position of the step in wizard order, or -1 when unknown."""
        step = self.get_step(key)
        if step is None:
            return -1
        return self.steps.index(step)

    def completable_steps(self) -> List[SetupStep]:
        return [s for s in self.steps if s.key != SetupStepKey.REVIEW]

    def complete_keys(self) -> List[SetupStepKey]:
        return [s.key for s in self.completable_steps() if s.complete()]

    def calculate_completion(self) -> int:
        """Percentage of completable steps whose predicate currently holds."""
        completable = self.completable_steps()
        if not completable:
            return 0
        completed = sum(1 for s in completable if s.complete())
        return int(round(100 * completed / len(completable)))

    def unmet_dependencies(self, key) -> List[SetupStepKey]:
        """Prerequisites of a step that are not complete yet, in declared order."""
        step = self.get_step(key)
        if step is None:
            return []
        return [dep for dep in step.depends_on if not self._by_key[dep].complete()]

    def nudge_for(self, key) -> Optional[str]:
        """Suggestion to visit prerequisites first, or None when nothing is pending."""
        pending = self.unmet_dependencies(key)
        if not pending:
            return None
        titles = ", ".join(self._by_key[dep].title for dep in pending)
        return f"Recommended after: {titles}"

    def step_statuses(self) -> List[Dict[str, object]]:
        statuses = []
        for step in self.steps:
            statuses.append({
                "key": step.key,
                "title": step.title,
                "route": step.route,
                "complete": step.complete(),
                "depends_on": list(step.depends_on),
                "nudge": self.nudge_for(step.key),
                "manual_fallback": step.manual_fallback,
            })
        return statuses
