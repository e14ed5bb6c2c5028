"""
Authorization for the petpal-core package.

Principals, roles, the ownership-aware authorization policy and the
identity provider contract.
"""

from .identity import IdentityProvider, resolve_principal
from .policy import (
    CLINICAL_KINDS,
    LOGISTICS_KINDS,
    VET_READABLE_KINDS,
    Action,
    AuthorizationPolicy,
    Decision,
    OwnerLink,
    ResourceKind,
    default_policy,
    owner_links,
)
from .principal import Principal, Role

__all__ = [
    "Role",
    "Principal",
    "Action",
    "ResourceKind",
    "CLINICAL_KINDS",
    "LOGISTICS_KINDS",
    "VET_READABLE_KINDS",
    "OwnerLink",
    "owner_links",
    "Decision",
    "AuthorizationPolicy",
    "default_policy",
    "IdentityProvider",
    "resolve_principal",
]
