"""
Company profile - legal entities, sites and the selected compliance framework.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..core.schema import Footprint
from ..core.store import PersistentStore


class Entity(BaseModel):
    id: str
    name: str
    abn: str
    acn: Optional[str] = None

    @field_validator('abn')
    @classmethod
    def abn_must_have_eleven_digits(cls, v):
        digits = v.replace(" ", "")
        if len(digits) != 11 or not digits.isdigit():
            raise ValueError('abn must contain 11 digits')
        return digits


class Site(BaseModel):
    id: str
    name: str
    state: str
    address: str = ""


class CompanyState(BaseModel):
    entities: List[Entity] = Field(default_factory=list)
    sites: List[Site] = Field(default_factory=list)
    awards_footprint: List[str] = Field(default_factory=list)
    selected_framework: Optional[str] = None


class CompanyStore(PersistentStore):
    name = "corecomply-company"
    state_model = CompanyState

    def add_entity(self, entity: Entity) -> None:
        self._mutate(lambda s: s.model_copy(update={"entities": [*s.entities, entity]}))

    def remove_entity(self, entity_id: str) -> None:
        self._mutate(lambda s: s.model_copy(update={
            "entities": [e for e in s.entities if e.id != entity_id]
        }))

    def add_site(self, site: Site) -> None:
        self._mutate(lambda s: s.model_copy(update={"sites": [*s.sites, site]}))

    def remove_site(self, site_id: str) -> None:
        self._mutate(lambda s: s.model_copy(update={
            "sites": [site for site in s.sites if site.id != site_id]
        }))

    def set_awards_footprint(self, awards: List[str]) -> None:
        self._mutate(lambda s: s.model_copy(update={"awards_footprint": list(awards)}))

    def set_framework(self, framework: str) -> None:
        self._mutate(lambda s: s.model_copy(update={"selected_framework": framework}))

    def is_configured(self) -> bool:
        state = self.state
        return bool(state.entities) and bool(state.sites) and bool(state.selected_framework)

    def footprint(self) -> Footprint:
        """Distinct site states, in the order sites were added."""
        return Footprint(states=list(dict.fromkeys(site.state for site in self.state.sites)))
