"""
Evidence discovery - runs every integration adapter concurrently, scores the
records against the obligation register and appends the results to the
evidence store.

One adapter failing (raising, rejecting or timing out) contributes nothing;
the remaining adapters are unaffected and the run itself does not raise.
"""

import asyncio
import inspect
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..core.config import get_adapter_timeout
from ..core.schema import EvidenceArtifact, Footprint, Obligation, Period
from .adapters import IntegrationAdapter, default_adapters
from .matcher import match_evidence_to_obligations
from .store import EvidenceStore
from ..util.logging import logger


@dataclass
class DiscoveryReport:
    """Summary of one discovery run."""
    artifacts_added: int = 0
    per_adapter: Dict[str, int] = field(default_factory=dict)
    failed_adapters: List[str] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return not self.failed_adapters


class EvidenceDiscovery:
    """Fan-out/fan-in over the integration adapter registry."""

    def __init__(self, store: EvidenceStore, adapters: Optional[Sequence[IntegrationAdapter]] = None,
                 adapter_timeout: Optional[float] = None):
        self.store = store
        self.adapters = list(adapters) if adapters is not None else default_adapters()
        self.adapter_timeout = adapter_timeout if adapter_timeout is not None else get_adapter_timeout()

    async def _fetch(self, adapter: IntegrationAdapter, period: Period, footprint: Footprint):
        if inspect.iscoroutinefunction(adapter.fetch):
            pending = adapter.fetch(period, footprint)
        else:
            # Blocking adapters run in a worker thread so they overlap
            pending = asyncio.to_thread(adapter.fetch, period, footprint)

        if self.adapter_timeout:
            result = await asyncio.wait_for(pending, timeout=self.adapter_timeout)
        else:
            result = await pending
        if inspect.isawaitable(result):
            result = await result
        return list(result)

    async def _run_adapter(self, adapter: IntegrationAdapter, period: Period, footprint: Footprint,
                           obligations: Sequence[Obligation], now: Optional[datetime]):
        """Fetch and score one adapter's records. Returns (artifacts, error)."""
        try:
            records = await self._fetch(adapter, period, footprint)
            matched = match_evidence_to_obligations(records, obligations, now=now, source=adapter.source)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.log_adapter_failure(adapter.name, adapter.source.value, e)
            return [], e

        return [result.artifact for result in matched], None

    async def run_discovery(self, period: Period, footprint: Footprint, obligations: Sequence[Obligation],
                            now: Optional[datetime] = None) -> DiscoveryReport:
        """
        Run all adapters, then append every resulting artifact to the store.

        Artifacts are appended one at a time in adapter registry order, each
        adapter's records in the order it returned them. A second run adds
        duplicates; nothing is deduplicated.
        """
        report = DiscoveryReport()

        outcomes = await asyncio.gather(
            *(self._run_adapter(adapter, period, footprint, obligations, now) for adapter in self.adapters)
        )

        collected: List[EvidenceArtifact] = []
        for adapter, (artifacts, error) in zip(self.adapters, outcomes):
            if error is not None:
                report.failed_adapters.append(adapter.name)
            report.per_adapter[adapter.name] = len(artifacts)
            collected.extend(artifacts)

        for artifact in collected:
            self.store.add_artifact(artifact)
            report.artifacts_added += 1

        report.finished_at = datetime.now()
        logger.log_discovery_run(len(self.adapters), report.artifacts_added, report.failed_adapters)
        return report

    def run_discovery_sync(self, period: Period, footprint: Footprint, obligations: Sequence[Obligation],
                           now: Optional[datetime] = None) -> DiscoveryReport:
        """Blocking wrapper for callers outside an event loop."""
        return asyncio.run(self.run_discovery(period, footprint, obligations, now=now))
