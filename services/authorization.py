# services/authorization.py
"""
Authorization predicates for the rental workflow.

A `Principal` is the authenticated caller: an id plus a capability set of
roles. Every predicate here is a pure function of the principal and the
ownership fields of the resource, so it can be tested without a database.
The `require_*` helpers raise the matching domain error.
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from models.user import ROLE_ADMIN, ROLE_LANDLORD, ROLE_TENANT
from services.errors import Forbidden


@dataclass(frozen=True)
class Principal:
     id: str
     roles: FrozenSet[str] = field(default_factory=frozenset)
     email: str = ""

     @classmethod
     def of(cls, user_id: str, roles: Iterable[str], email: str = "") -> "Principal":
          return cls(id=user_id, roles=frozenset(roles), email=email)

     def has_role(self, role: str) -> bool:
          return role in self.roles

     @property
     def is_admin(self) -> bool:
          return ROLE_ADMIN in self.roles


def is_lease_tenant(principal: Principal, lease) -> bool:
     return lease.tenant_id == principal.id


def is_lease_landlord(principal: Principal, lease) -> bool:
     return lease.landlord_id == principal.id


def can_view_lease(principal: Principal, lease) -> bool:
     """Tenant, landlord, or an admin."""
     return is_lease_tenant(principal, lease) or is_lease_landlord(principal, lease) or principal.is_admin


def can_request_lease(principal: Principal, property_owner_id: str) -> bool:
     """Tenants may apply for any property except their own."""
     return principal.has_role(ROLE_TENANT) and property_owner_id != principal.id


def require_view(principal: Principal, lease) -> None:
     if not can_view_lease(principal, lease):
          raise Forbidden("You do not have permission to view this lease")


def require_tenant(principal: Principal, lease) -> None:
     if not is_lease_tenant(principal, lease):
          raise Forbidden("You do not have permission to modify this lease")


def require_landlord(principal: Principal, lease) -> None:
     if not is_lease_landlord(principal, lease):
          raise Forbidden("You do not have permission to respond to this lease")


def require_role(principal: Principal, role: str) -> None:
     if not principal.has_role(role):
          raise Forbidden(f"You must have the {role} role")


__all__ = [
     "Principal",
     "ROLE_ADMIN",
     "ROLE_LANDLORD",
     "ROLE_TENANT",
     "is_lease_tenant",
     "is_lease_landlord",
     "can_view_lease",
     "can_request_lease",
     "require_view",
     "require_tenant",
     "require_landlord",
     "require_role",
]
