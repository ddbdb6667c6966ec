"""
Setup wizard state - visited steps and the last computed completion.
"""

from typing import Any, Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from ..core.errors import UnknownStepError
from ..core.schema import SetupStepKey
from ..core.store import PersistentStore
from .steps import SetupCalculator
from ..util.logging import logger

STEP_ORDER = list(SetupStepKey)


class SetupState(BaseModel):
    completion: int = Field(default=0, ge=0, le=100)
    visited: Set[SetupStepKey] = Field(default_factory=set)
    last_step: Optional[SetupStepKey] = None


def visited_to_list(visited: Iterable[SetupStepKey]) -> List[str]:
    """Persisted form of the visited set: step values in wizard order."""
    visited = set(visited)
    return [key.value for key in STEP_ORDER if key in visited]


def visited_from_list(values: Iterable[str]) -> Set[SetupStepKey]:
    """In-memory form of the visited list; unknown step names are dropped."""
    visited = set()
    for value in values or []:
        try:
            visited.add(SetupStepKey(value))
        except ValueError:
            logger.warning(f"Ignoring unknown visited setup step '{value}'")
    return visited


class SetupStore(PersistentStore):
    """Tracks wizard progress; completion itself comes from the calculator."""

    name = "corecomply-setup"
    state_model = SetupState

    def __init__(self, calculator: SetupCalculator, repository=None):
        super().__init__(repository)
        self.calculator = calculator

    @property
    def completion(self) -> int:
        return self.state.completion

    @property
    def visited(self) -> Set[SetupStepKey]:
        return set(self.state.visited)

    @property
    def last_step(self) -> Optional[SetupStepKey]:
        return self.state.last_step

    def visit_step(self, key) -> int:
        """Mark a step visited, then recalculate completion. Returns the new completion."""
        try:
            step_key = SetupStepKey(key)
        except ValueError:
            raise UnknownStepError(f"Unknown setup step: {key}") from None

        self._mutate(lambda s: s.model_copy(update={
            "visited": s.visited | {step_key},
            "last_step": step_key,
        }))
        return self.recalc_completion()

    def recalc_completion(self) -> int:
        completion = self.calculator.calculate_completion()
        self._mutate(lambda s: s.model_copy(update={"completion": completion}))
        logger.log_setup_completion(completion, [k.value for k in self.calculator.complete_keys()])
        return completion

    def reset(self) -> None:
        self._replace(SetupState())

    def to_state(self) -> Dict[str, Any]:
        state = self.state
        return {
            "completion": state.completion,
            "visited": visited_to_list(state.visited),
            "last_step": state.last_step.value if state.last_step else None,
        }

    def load_state(self, payload: Dict[str, Any]) -> None:
        last_step = payload.get("last_step")
        restored = SetupState(
            completion=payload.get("completion", 0),
            visited=visited_from_list(payload.get("visited", [])),
            last_step=SetupStepKey(last_step) if last_step in {k.value for k in SetupStepKey} else None,
        )
        with self._lock:
            self._state = restored
