"""
Tests for RASCI adoption from the key personnel directory.
"""

import pytest

from corecomply.core.schema import ControlDomain, RasciAssignment, RasciRole, RoleKey
from corecomply.setup.rasci import RASCI_TEMPLATES, RasciStore, expand_templates


@pytest.fixture
def store():
    return RasciStore()


def assignment_pairs(assignments):
    return {(a.role_key, a.rasci_role) for a in assignments}


class TestExpandTemplates:
    """Template expansion against a role directory."""

    def test_governance_with_two_roles(self):
        """CEO and ComplianceOwner only: BoardChair and InternalAudit produce nothing."""
        result = expand_templates({RoleKey.CEO: "u1", RoleKey.COMPLIANCE_OWNER: "u2"})

        assert result["governance"] == [
            RasciAssignment(role_key=RoleKey.COMPLIANCE_OWNER, rasci_role=RasciRole.R),
            RasciAssignment(role_key=RoleKey.CEO, rasci_role=RasciRole.A),
        ]

    def test_all_domains_present_for_empty_directory(self):
        result = expand_templates({})

        assert set(result) == {d.value for d in ControlDomain}
        assert all(assignments == [] for assignments in result.values())

    def test_completeness_against_templates(self):
        directory = {
            RoleKey.PAYROLL_OFFICER: "p1",
            RoleKey.HR_MANAGER: "h1",
            RoleKey.IT_SECURITY: "it1",
            RoleKey.CFO: "c1",
            RoleKey.BOARD_CHAIR: None,
            RoleKey.CEO: "",
        }
        result = expand_templates(directory)

        for domain, template in RASCI_TEMPLATES.items():
            pairs = assignment_pairs(result[domain.value])
            for role_key, letters in template.items():
                assigned = bool(directory.get(role_key))
                for letter in letters:
                    assert ((role_key, letter) in pairs) == assigned
            assert {role for role, _ in pairs} <= set(template)

    def test_multiple_letters_for_one_role(self):
        result = expand_templates({RoleKey.IT_SECURITY: "it1"})
        assert result["access-control"] == [
            RasciAssignment(role_key=RoleKey.IT_SECURITY, rasci_role=RasciRole.R),
            RasciAssignment(role_key=RoleKey.IT_SECURITY, rasci_role=RasciRole.A),
        ]

    def test_string_role_keys_accepted(self):
        result = expand_templates({"CEO": "u1"})
        assert assignment_pairs(result["governance"]) == {(RoleKey.CEO, RasciRole.A)}

    def test_unknown_role_key_ignored(self):
        result = expand_templates({"CEO": "u1", "Janitor": "u9"})
        assert assignment_pairs(result["governance"]) == {(RoleKey.CEO, RasciRole.A)}

    def test_non_string_person_id_ignored(self):
        result = expand_templates({RoleKey.CEO: 42, RoleKey.COMPLIANCE_OWNER: "u2"})
        assert assignment_pairs(result["governance"]) == {(RoleKey.COMPLIANCE_OWNER, RasciRole.R)}

    def test_whitespace_person_id_counts_as_assigned(self):
        result = expand_templates({RoleKey.CEO: "  ", RoleKey.BOARD_CHAIR: ""})
        assert assignment_pairs(result["governance"]) == {(RoleKey.CEO, RasciRole.A)}


class TestRasciStore:
    """Adoption state and the grouped read accessor."""

    def test_initial_state(self, store):
        assert store.adopted is False
        assert store.adopted_at is None
        assert store.rasci_for("governance") == {"R": [], "A": [], "S": [], "C": [], "I": []}

    def test_adopt_sets_flag_and_timestamp(self, store):
        store.adopt_from_key_personnel({RoleKey.CEO: "u1"})

        assert store.adopted is True
        assert store.adopted_at is not None
        assert len(store.state.default_assignments) == 12

    def test_adopt_ignores_unknown_role_key(self, store):
        store.adopt_from_key_personnel({"CEO": "u1", "ComplianceOwner": "u2", "Janitor": "u9"})

        assert store.adopted is True
        assert store.rasci_for("governance")["R"] == [RoleKey.COMPLIANCE_OWNER]
        assert store.rasci_for("governance")["A"] == [RoleKey.CEO]

    def test_rasci_for_groups_by_letter(self, store):
        store.adopt_from_key_personnel({
            RoleKey.COMPLIANCE_OWNER: "u2",
            RoleKey.CEO: "u1",
            RoleKey.BOARD_CHAIR: "u3",
            RoleKey.INTERNAL_AUDIT: "u4",
        })

        assert store.rasci_for("governance") == {
            "R": [RoleKey.COMPLIANCE_OWNER],
            "A": [RoleKey.CEO],
            "S": [],
            "C": [RoleKey.BOARD_CHAIR],
            "I": [RoleKey.INTERNAL_AUDIT],
        }
        assert store.rasci_for(ControlDomain.GOVERNANCE) == store.rasci_for("governance")

    def test_control_reference_lookup_is_empty(self, store):
        store.adopt_from_key_personnel({role: "u1" for role in RoleKey})
        assert store.rasci_for("BAS-001") == {"R": [], "A": [], "S": [], "C": [], "I": []}

    def test_second_adoption_replaces_first(self, store):
        first = {RoleKey.CEO: "u1", RoleKey.COMPLIANCE_OWNER: "u2", RoleKey.PAYROLL_OFFICER: "u3"}
        second = {RoleKey.HR_OFFICER: "u4"}

        store.adopt_from_key_personnel(first)
        store.adopt_from_key_personnel(second)

        fresh = RasciStore()
        fresh.adopt_from_key_personnel(second)
        assert store.state.default_assignments == fresh.state.default_assignments

    def test_manual_override(self, store):
        override = [RasciAssignment(role_key=RoleKey.CFO, rasci_role=RasciRole.A)]
        store.set_control_rasci("BAS-001", override)

        assert store.rasci_for("BAS-001")["A"] == [RoleKey.CFO]
        assert store.assignments_for("BAS-001") == override

    def test_manual_override_requires_key(self, store):
        with pytest.raises(ValueError):
            store.set_control_rasci("", [])

    def test_reset(self, store):
        store.adopt_from_key_personnel({RoleKey.CEO: "u1"})
        store.reset()

        assert store.adopted is False
        assert store.state.default_assignments == {}
