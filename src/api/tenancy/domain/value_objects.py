"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass

ENVIRONMENT_ABILITY_PREFIX = "environment_id:"


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant (environment)."""

    value: int

    def __str__(self) -> str:
        """Return string representation."""
        return str(self.value)

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True)
class Principal:
    """An authenticated caller.

    Attributes:
        user_id: Identifier of the authenticated user.
        token_id: Identifier of the API token used to authenticate, if the
            caller authenticated with a bearer token.
    """

    user_id: str
    token_id: str | None = None


@dataclass(frozen=True)
class EnvironmentScope:
    """Token ability that scopes an API token to one environment."""

    environment_id: int

    def to_wire(self) -> str:
        """Encode the ability the way token issuance stores it."""
        return f"{ENVIRONMENT_ABILITY_PREFIX}{self.environment_id}"


@dataclass(frozen=True)
class OtherAbility:
    """Any token ability that carries no tenant scope."""

    raw: str

    def to_wire(self) -> str:
        """Return the ability unchanged."""
        return self.raw


TokenAbility = EnvironmentScope | OtherAbility


def parse_ability(raw: str) -> TokenAbility:
    """Parse a stored ability string into a typed ability.

    ``environment_id:<integer>`` becomes an EnvironmentScope when the
    integer is a positive id. Everything else, including an
    ``environment_id:`` prefix with a suffix that is not an integer, is an
    OtherAbility.

    Args:
        raw: Ability string as attached to the token.

    Returns:
        The typed ability.
    """
    if raw.startswith(ENVIRONMENT_ABILITY_PREFIX):
        suffix = raw[len(ENVIRONMENT_ABILITY_PREFIX) :]
        try:
            environment_id = int(suffix)
        except ValueError:
            return OtherAbility(raw=raw)
        if environment_id > 0:
            return EnvironmentScope(environment_id=environment_id)
    return OtherAbility(raw=raw)


def first_environment_scope(abilities: list[str]) -> EnvironmentScope | None:
    """Return the first environment scope among a token's abilities."""
    for raw in abilities:
        ability = parse_ability(raw)
        if isinstance(ability, EnvironmentScope):
            return ability
    return None


def token_id_from_bearer(token: str) -> str:
    """Extract the token id from a ``<id>|<secret>`` bearer token.

    Tokens without a separator are returned whole.
    """
    return token.split("|", 1)[0].strip()
