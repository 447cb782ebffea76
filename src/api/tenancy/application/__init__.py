"""Application services for the tenancy context."""

from tenancy.application.environment_resolver import EnvironmentResolver
from tenancy.application.response_augmenter import (
    ResponseAugmenter,
    is_json_content_type,
)

__all__ = [
    "EnvironmentResolver",
    "ResponseAugmenter",
    "is_json_content_type",
]
