"""
Tests for the company profile and integration connection stores.
"""

import pytest
from pydantic import ValidationError

from corecomply.setup.company import CompanyStore, Entity, Site
from corecomply.setup.integrations import IntegrationKey, IntegrationsStore


class TestCompanyStore:
    @pytest.fixture
    def store(self):
        return CompanyStore()

    def test_abn_normalised(self):
        entity = Entity(id="ent1", name="Acme Pty Ltd", abn="51 824 753 556")
        assert entity.abn == "51824753556"

    @pytest.mark.parametrize("abn", ["1234", "5182475355X", ""])
    def test_invalid_abn_rejected(self, abn):
        with pytest.raises(ValidationError):
            Entity(id="ent1", name="Acme Pty Ltd", abn=abn)

    def test_configured_requires_entity_site_and_framework(self, store):
        store.add_entity(Entity(id="ent1", name="Acme Pty Ltd", abn="51824753556"))
        store.add_site(Site(id="s1", name="Sydney Office", state="NSW"))
        assert store.is_configured() is False

        store.set_framework("APGF-MS")
        assert store.is_configured() is True

        store.remove_site("s1")
        assert store.is_configured() is False

    def test_footprint_distinct_states_in_order(self, store):
        store.add_site(Site(id="s1", name="Melbourne", state="VIC"))
        store.add_site(Site(id="s2", name="Sydney", state="NSW"))
        store.add_site(Site(id="s3", name="Geelong", state="VIC"))

        assert store.footprint().states == ["VIC", "NSW"]

    def test_remove_entity_and_awards(self, store):
        store.add_entity(Entity(id="ent1", name="Acme Pty Ltd", abn="51824753556"))
        store.remove_entity("ent1")
        store.set_awards_footprint(["MA000002"])

        assert store.state.entities == []
        assert store.state.awards_footprint == ["MA000002"]


class TestIntegrationsStore:
    @pytest.fixture
    def store(self):
        return IntegrationsStore()

    def test_all_integrations_start_disconnected(self, store):
        assert set(store.state.connections) == set(IntegrationKey)
        assert store.is_any_connected() is False

    def test_connect_and_disconnect(self, store):
        store.connect("payroll", tenant_id="t-1", display_name="KeyPay")
        assert store.is_any_connected() is True
        assert store.state.connections[IntegrationKey.PAYROLL].connected_at is not None

        store.disconnect(IntegrationKey.PAYROLL)
        assert store.is_any_connected() is False

    def test_set_error_keeps_connection(self, store):
        store.connect("m365")
        store.set_error("m365", "token expired")

        connection = store.state.connections[IntegrationKey.M365]
        assert connection.connected is True
        assert connection.error == "token expired"

    def test_unknown_integration_rejected(self, store):
        with pytest.raises(ValueError):
            store.connect("myob")
