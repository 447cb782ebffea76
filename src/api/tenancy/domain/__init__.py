"""Domain layer for the tenancy context."""

from tenancy.domain.aggregates import Branding, Tenant
from tenancy.domain.value_objects import (
    EnvironmentScope,
    OtherAbility,
    Principal,
    TenantId,
    TokenAbility,
    first_environment_scope,
    parse_ability,
    token_id_from_bearer,
)

__all__ = [
    "Branding",
    "EnvironmentScope",
    "OtherAbility",
    "Principal",
    "Tenant",
    "TenantId",
    "TokenAbility",
    "first_environment_scope",
    "parse_ability",
    "token_id_from_bearer",
]
