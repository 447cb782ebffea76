"""Observability for tenancy application services."""

from tenancy.application.observability.environment_resolver_probe import (
    DefaultEnvironmentResolverProbe,
    EnvironmentResolverProbe,
)
from tenancy.application.observability.response_augmenter_probe import (
    DefaultResponseAugmenterProbe,
    ResponseAugmenterProbe,
)

__all__ = [
    "DefaultEnvironmentResolverProbe",
    "DefaultResponseAugmenterProbe",
    "EnvironmentResolverProbe",
    "ResponseAugmenterProbe",
]
