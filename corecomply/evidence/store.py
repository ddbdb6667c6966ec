"""
Evidence store - the only owner of the evidence artifact list.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from ..core.errors import ArtifactNotFoundError
from ..core.schema import EvidenceArtifact, EvidenceSource
from ..core.store import PersistentStore
from ..util.logging import logger


class EvidenceState(BaseModel):
    artifacts: List[EvidenceArtifact] = Field(default_factory=list)


class EvidenceStore(PersistentStore):
    """Append-only artifact list with reviewer dispositions and manual links."""

    name = "corecomply-evidence"
    state_model = EvidenceState

    @property
    def artifacts(self) -> List[EvidenceArtifact]:
        return list(self.state.artifacts)

    def add_artifact(self, artifact: EvidenceArtifact) -> None:
        """Append an artifact. No deduplication against existing artifacts."""
        if not isinstance(artifact, EvidenceArtifact):
            raise TypeError(f"expected EvidenceArtifact, got {type(artifact).__name__}")

        self._mutate(lambda s: EvidenceState(artifacts=[*s.artifacts, artifact]))
        logger.log_artifact_added(artifact.id, artifact.source.value, artifact.confidence,
                                  len(artifact.obligation_refs))

    def remove_artifact(self, artifact_id: str) -> bool:
        removed = False

        def change(state):
            nonlocal removed
            kept = [a for a in state.artifacts if a.id != artifact_id]
            removed = len(kept) < len(state.artifacts)
            return EvidenceState(artifacts=kept)

        self._mutate(change)
        logger.log_evidence_review(artifact_id, "removed", found=removed)
        return removed

    def _update_artifact(self, artifact_id: str, action: str, changes) -> bool:
        """Apply changes(artifact) -> field updates to the matching artifact."""
        found = []

        def change(state):
            updated = []
            for a in state.artifacts:
                if a.id == artifact_id:
                    found.append(a)
                    a = a.model_copy(update=changes(a))
                updated.append(a)
            return EvidenceState(artifacts=updated)

        self._mutate(change)
        logger.log_evidence_review(artifact_id, action, found=bool(found))
        return bool(found)

    def accept_artifact(self, artifact_id: str) -> bool:
        return self._update_artifact(artifact_id, "accepted", lambda a: {"accepted": True})

    def reject_artifact(self, artifact_id: str) -> bool:
        return self._update_artifact(artifact_id, "rejected", lambda a: {"accepted": False})

    def set_confidence(self, artifact_id: str, confidence: float) -> bool:
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1]: {confidence}")
        return self._update_artifact(artifact_id, "confidence_set", lambda a: {"confidence": confidence})

    def link_to_obligation(self, artifact_id: str, obligation_ref: str) -> bool:
        """Manually re-link an artifact; existing refs keep their order."""
        if not obligation_ref or not obligation_ref.strip():
            raise ValueError("obligation_ref cannot be empty")

        return self._update_artifact(
            artifact_id, "linked",
            lambda a: {"obligation_refs": list(dict.fromkeys([*a.obligation_refs, obligation_ref]))}
        )

    def has_evidence(self) -> bool:
        return len(self.state.artifacts) > 0

    def get_artifact(self, artifact_id: str) -> Optional[EvidenceArtifact]:
        for artifact in self.state.artifacts:
            if artifact.id == artifact_id:
                return artifact
        return None

    def require_artifact(self, artifact_id: str) -> EvidenceArtifact:
        artifact = self.get_artifact(artifact_id)
        if artifact is None:
            raise ArtifactNotFoundError(artifact_id)
        return artifact

    def list_artifacts(self, source: Optional[EvidenceSource] = None,
                       accepted: Optional[bool] = None) -> List[EvidenceArtifact]:
        """List artifacts, optionally filtered by source and reviewer disposition."""
        results = self.state.artifacts
        if source is not None:
            results = [a for a in results if a.source == source]
        if accepted is not None:
            results = [a for a in results if a.accepted is accepted]
        return list(results)

    def pending_review(self) -> List[EvidenceArtifact]:
        """Artifacts with no reviewer disposition yet."""
        return [a for a in self.state.artifacts if a.accepted is None]
