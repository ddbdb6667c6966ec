"""
Integration connections (M365/Entra, payroll, HRIS, accounting, super).
"""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from ..core.store import PersistentStore


class IntegrationKey(str, Enum):
    M365 = "m365"
    PAYROLL = "payroll"
    HRIS = "hris"
    ACCOUNTING = "accounting"
    SUPER = "super"


class IntegrationConnection(BaseModel):
    connected: bool = False
    connected_at: Optional[datetime] = None
    tenant_id: Optional[str] = None
    display_name: Optional[str] = None
    error: Optional[str] = None


def _default_connections() -> Dict[IntegrationKey, IntegrationConnection]:
    return {key: IntegrationConnection() for key in IntegrationKey}


class IntegrationsState(BaseModel):
    connections: Dict[IntegrationKey, IntegrationConnection] = Field(default_factory=_default_connections)


class IntegrationsStore(PersistentStore):
    name = "corecomply-integrations"
    state_model = IntegrationsState

    def _set_connection(self, key: IntegrationKey, connection: IntegrationConnection) -> None:
        self._mutate(lambda s: s.model_copy(update={
            "connections": {**s.connections, key: connection}
        }))

    def connect(self, key, tenant_id: Optional[str] = None, display_name: Optional[str] = None) -> None:
        self._set_connection(IntegrationKey(key), IntegrationConnection(
            connected=True,
            connected_at=datetime.now(),
            tenant_id=tenant_id,
            display_name=display_name,
        ))

    def disconnect(self, key) -> None:
        self._set_connection(IntegrationKey(key), IntegrationConnection())

    def set_error(self, key, error: str) -> None:
        key = IntegrationKey(key)
        current = self.state.connections.get(key, IntegrationConnection())
        self._set_connection(key, current.model_copy(update={"error": error}))

    def is_any_connected(self) -> bool:
        return any(c.connected for c in self.state.connections.values())
