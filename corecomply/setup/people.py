"""
People and key personnel - the role directory that RASCI assignments derive from.
"""

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.schema import RoleKey, normalize_directory
from ..core.store import PersistentStore
from ..util.logging import logger

ROLE_DESCRIPTIONS: Dict[RoleKey, str] = {
    RoleKey.CEO: "Chief Executive Officer - Overall accountability",
    RoleKey.BOARD_CHAIR: "Board Chair - Governance oversight",
    RoleKey.AUDIT_RISK_CHAIR: "Audit & Risk Committee Chair - Risk and compliance oversight",
    RoleKey.COMPLIANCE_OWNER: "Compliance Owner - Primary compliance responsibility",
    RoleKey.PAYROLL_OFFICER: "Payroll Officer - Day-to-day payroll processing",
    RoleKey.PAYROLL_MANAGER: "Payroll Manager - Payroll function management",
    RoleKey.HR_OFFICER: "HR Officer - HR administration",
    RoleKey.HR_MANAGER: "HR Manager - HR function management",
    RoleKey.FINANCE_MANAGER: "Finance Manager - Financial management",
    RoleKey.CFO: "Chief Financial Officer - Financial oversight",
    RoleKey.IT_SECURITY: "IT Security - Information security",
    RoleKey.INTERNAL_AUDIT: "Internal Audit - Internal audit function",
    RoleKey.EXTERNAL_ACCOUNTANT: "External Accountant - External accounting support",
}

# Roles that must be filled before key personnel counts as configured
REQUIRED_ROLES = (RoleKey.CEO, RoleKey.COMPLIANCE_OWNER, RoleKey.PAYROLL_MANAGER)

DirectoryListener = Callable[[Dict[RoleKey, str]], None]


class SyncedUser(BaseModel):
    id: str
    display_name: str
    email: Optional[str] = None
    title: Optional[str] = None


class PeopleState(BaseModel):
    synced_users: List[SyncedUser] = Field(default_factory=list)
    key_personnel: Dict[RoleKey, str] = Field(default_factory=dict)


class PeopleStore(PersistentStore):
    """Synced users plus the role-key -> person directory."""

    name = "corecomply-people"
    state_model = PeopleState

    def __init__(self, repository=None):
        super().__init__(repository)
        self._listeners: List[DirectoryListener] = []

    def subscribe(self, listener: DirectoryListener) -> None:
        """Call listener(directory) after every directory change."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        directory = self.role_directory()
        for listener in self._listeners:
            listener(directory)

    def set_synced_users(self, users: List[SyncedUser]) -> None:
        self._mutate(lambda s: s.model_copy(update={"synced_users": list(users)}))

    def assign_role(self, role_key, user_id: str) -> None:
        role_key = RoleKey(role_key)
        if not user_id or not user_id.strip():
            raise ValueError("user_id cannot be empty")

        self._mutate(lambda s: s.model_copy(update={"key_personnel": {**s.key_personnel, role_key: user_id}}))
        logger.log_key_personnel_change("assigned", [role_key.value], user_id)
        self._notify()

    def unassign_role(self, role_key) -> None:
        role_key = RoleKey(role_key)

        def change(state):
            personnel = dict(state.key_personnel)
            personnel.pop(role_key, None)
            return state.model_copy(update={"key_personnel": personnel})

        self._mutate(change)
        logger.log_key_personnel_change("unassigned", [role_key.value])
        self._notify()

    def hand_over(self, from_user_id: str, to_user_id: str) -> List[RoleKey]:
        """
        Move every role held by a departing person to their successor.

        Returns the role keys that changed hands (empty when the person held
        no roles, in which case listeners are not notified).
        """
        if not to_user_id or not to_user_id.strip():
            raise ValueError("successor user_id cannot be empty")

        moved: List[RoleKey] = []

        def change(state):
            personnel = dict(state.key_personnel)
            for role_key, person_id in personnel.items():
                if person_id == from_user_id:
                    personnel[role_key] = to_user_id
                    moved.append(role_key)
            return state.model_copy(update={"key_personnel": personnel})

        self._mutate(change)
        if moved:
            logger.log_key_personnel_change("handed_over", [k.value for k in moved], to_user_id)
            self._notify()
        return moved

    def role_directory(self) -> Dict[RoleKey, str]:
        """Assigned role keys only; unassigned roles are absent."""
        return normalize_directory(self.state.key_personnel)

    def has_key_personnel(self) -> bool:
        personnel = self.state.key_personnel
        return all(personnel.get(role_key) for role_key in REQUIRED_ROLES)

    def get_assigned_user(self, role_key) -> Optional[SyncedUser]:
        user_id = self.state.key_personnel.get(RoleKey(role_key))
        if not user_id:
            return None
        for user in self.state.synced_users:
            if user.id == user_id:
                return user
        return None
