"""
Base class for state containers that persist a snapshot after every change.

A store holds one immutable pydantic state model. Mutations build a new model
and swap it in under the store lock, so readers always see a complete state.
"""

import threading
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from .config import is_persistence_enabled
from .persistence import StateRepository
from ..util.logging import logger


class PersistentStore:
    """State container with an explicit serialize/deserialize pair."""

    name: str = ""
    state_model: Type[BaseModel] = BaseModel

    def __init__(self, repository: Optional[StateRepository] = None):
        if not self.name:
            raise TypeError(f"{type(self).__name__} must define a store name")
        self._lock = threading.RLock()
        self._repository = repository
        self._state = self.state_model()

    @property
    def state(self):
        """Current committed state snapshot."""
        return self._state

    def _mutate(self, change: Callable[[Any], Any]):
        """Apply change(state) -> new state and persist it, both under the store lock."""
        with self._lock:
            new_state = change(self._state)
            self._state = new_state
            self.persist()
        return new_state

    def _replace(self, new_state) -> None:
        self._mutate(lambda _state: new_state)

    def to_state(self) -> Dict[str, Any]:
        """Serialize the current state to a JSON-compatible dict."""
        return self._state.model_dump(mode="json")

    def load_state(self, payload: Dict[str, Any]) -> None:
        """Replace the in-memory state from a persisted payload."""
        with self._lock:
            self._state = self.state_model.model_validate(payload)

    def persist(self) -> None:
        if self._repository is None or not is_persistence_enabled():
            return
        self._repository.save_state(self.name, self.to_state())

    def rehydrate(self) -> bool:
        """Load the persisted snapshot if one exists. Returns True when restored."""
        if self._repository is None:
            return False

        payload = self._repository.load_state(self.name)
        if payload is None:
            logger.log_store_rehydrated(self.name, found=False)
            return False

        try:
            self.load_state(payload)
        except ValidationError as e:
            logger.error(f"Discarding invalid snapshot for store '{self.name}': {e.error_count()} errors")
            return False

        logger.log_store_rehydrated(self.name, found=True)
        return True
