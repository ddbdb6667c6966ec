"""
Application context - constructs every store once and wires their read ports.

Build one AppContext at application start and pass it to whatever needs it.
"""

from typing import Dict, Mapping, Optional, Sequence

from .core.config import validate_config, get_db_path, is_persistence_enabled
from .core.errors import ConfigurationError
from .core.persistence import StateRepository
from .core.schema import Footprint, Obligation, Period, RoleKey
from .evidence.adapters import IntegrationAdapter
from .evidence.discovery import DiscoveryReport, EvidenceDiscovery
from .evidence.store import EvidenceStore
from .setup.company import CompanyStore
from .setup.integrations import IntegrationsStore
from .setup.people import PeopleStore
from .setup.rasci import RasciStore
from .setup.steps import SetupCalculator, SetupPorts, build_setup_steps
from .setup.timetable import TimetableStore
from .setup.wizard import SetupStore
from .util.logging import logger


class AppContext:
    """Owns the stores, the setup calculator and the discovery orchestrator."""

    def __init__(self, repository: Optional[StateRepository] = None,
                 adapters: Optional[Sequence[IntegrationAdapter]] = None):
        issues = validate_config()
        if issues:
            raise ConfigurationError(issues)

        self.repository = repository

        self.integrations = IntegrationsStore(repository)
        self.company = CompanyStore(repository)
        self.people = PeopleStore(repository)
        self.rasci = RasciStore(repository)
        self.timetable = TimetableStore(repository)
        self.evidence = EvidenceStore(repository)

        self.ports = SetupPorts(
            integrations_connected=self.integrations.is_any_connected,
            company_configured=self.company.is_configured,
            key_personnel_assigned=self.people.has_key_personnel,
            rasci_adopted=lambda: self.rasci.adopted,
            framework_selected=lambda: bool(self.company.state.selected_framework),
            timetable_configured=self.timetable.is_configured,
            evidence_present=self.evidence.has_evidence,
        )
        self.calculator = SetupCalculator(build_setup_steps(self.ports))
        self.setup = SetupStore(self.calculator, repository)
        self.discovery = EvidenceDiscovery(self.evidence, adapters=adapters)

        self.people.subscribe(self._propagate_key_personnel)

    @classmethod
    def from_config(cls, adapters: Optional[Sequence[IntegrationAdapter]] = None) -> "AppContext":
        """Context backed by the configured SQLite database, rehydrated."""
        repository = StateRepository(get_db_path()) if is_persistence_enabled() else None
        context = cls(repository=repository, adapters=adapters)
        context.rehydrate()
        return context

    @property
    def stores(self):
        return [self.integrations, self.company, self.people, self.rasci,
                self.timetable, self.evidence, self.setup]

    def rehydrate(self) -> Dict[str, bool]:
        """Restore every persisted store, then refresh setup completion."""
        restored = {store.name: store.rehydrate() for store in self.stores}
        self.setup.recalc_completion()
        return restored

    def _propagate_key_personnel(self, directory: Mapping[RoleKey, str]) -> None:
        # Successors inherit responsibilities only once RASCI has been adopted
        if self.rasci.adopted:
            logger.info("Key personnel changed; re-adopting RASCI assignments")
            self.rasci.adopt_from_key_personnel(directory)

    def adopt_rasci(self, directory: Optional[Mapping] = None) -> None:
        """Adopt RASCI from the given directory, or from current key personnel."""
        self.rasci.adopt_from_key_personnel(directory if directory is not None else self.people.role_directory())
        self.setup.recalc_completion()

    async def run_discovery(self, period: Period, obligations: Sequence[Obligation],
                            footprint: Optional[Footprint] = None) -> DiscoveryReport:
        """Run evidence discovery; the footprint defaults to the company's site states."""
        if footprint is None:
            footprint = self.company.footprint()
        report = await self.discovery.run_discovery(period, footprint, obligations)
        self.setup.recalc_completion()
        return report
