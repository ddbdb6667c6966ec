"""
Evidence collection - integration adapters, obligation matching and the evidence store.
"""

# Package initialization for evidence module
from .matcher import calculate_confidence, match_evidence_to_obligations, MatchResult, INTEGRATION_KEYWORDS
from .adapters import IntegrationAdapter, default_adapters, get_sample_obligations
from .discovery import EvidenceDiscovery, DiscoveryReport
from .store import EvidenceStore

__all__ = [
    'calculate_confidence',
    'match_evidence_to_obligations',
    'MatchResult',
    'INTEGRATION_KEYWORDS',
    'IntegrationAdapter',
    'default_adapters',
    'get_sample_obligations',
    'EvidenceDiscovery',
    'DiscoveryReport',
    'EvidenceStore'
]
