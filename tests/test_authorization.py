"""
Authorization predicates: pure functions of the caller and lease ownership.
Run: python -m pytest tests/test_authorization.py -v
"""
import unittest
from types import SimpleNamespace

from services.authorization import (
    Principal,
    can_request_lease,
    can_view_lease,
    is_lease_landlord,
    is_lease_tenant,
    require_landlord,
    require_role,
    require_tenant,
    require_view,
)
from services.errors import Forbidden


def _lease():
    return SimpleNamespace(tenant_id="tenant-1", landlord_id="landlord-1")


class TestAuthorization(unittest.TestCase):
    def test_tenant_and_landlord_can_view(self):
        lease = _lease()
        self.assertTrue(can_view_lease(Principal.of("tenant-1", ["tenant"]), lease))
        self.assertTrue(can_view_lease(Principal.of("landlord-1", ["landlord"]), lease))

    def test_admin_can_view_any_lease(self):
        self.assertTrue(can_view_lease(Principal.of("someone", ["admin"]), _lease()))

    def test_stranger_cannot_view(self):
        stranger = Principal.of("stranger", ["tenant", "landlord"])
        self.assertFalse(can_view_lease(stranger, _lease()))
        with self.assertRaises(Forbidden):
            require_view(stranger, _lease())

    def test_roles_do_not_grant_ownership(self):
        """Holding the landlord role is not enough to act as this lease's landlord."""
        other_landlord = Principal.of("landlord-2", ["landlord"])
        self.assertFalse(is_lease_landlord(other_landlord, _lease()))
        with self.assertRaises(Forbidden):
            require_landlord(other_landlord, _lease())

    def test_landlord_cannot_act_as_tenant(self):
        landlord = Principal.of("landlord-1", ["tenant", "landlord"])
        self.assertFalse(is_lease_tenant(landlord, _lease()))
        with self.assertRaises(Forbidden):
            require_tenant(landlord, _lease())

    def test_can_request_lease(self):
        tenant = Principal.of("tenant-1", ["tenant"])
        self.assertTrue(can_request_lease(tenant, "landlord-1"))
        self.assertFalse(can_request_lease(tenant, "tenant-1"))
        self.assertFalse(can_request_lease(Principal.of("x", ["landlord"]), "landlord-1"))

    def test_require_role(self):
        require_role(Principal.of("u", ["tenant"]), "tenant")
        with self.assertRaises(Forbidden):
            require_role(Principal.of("u", ["landlord"]), "tenant")
