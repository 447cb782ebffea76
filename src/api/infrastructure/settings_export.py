"""Environment variable reference generated from the settings classes."""

from typing import Any

from pydantic import SecretStr
from pydantic_core import PydanticUndefined
from pydantic_settings import BaseSettings

from infrastructure.settings import (
    CorsSettings,
    SessionSettings,
    Settings,
    TenancySettings,
)

SETTINGS_CLASSES: tuple[type[BaseSettings], ...] = (
    Settings,
    SessionSettings,
    CorsSettings,
    TenancySettings,
)


def describe_settings(settings_class: type[BaseSettings]) -> dict[str, Any]:
    """Describe every environment variable a settings class reads."""
    prefix = settings_class.model_config.get("env_prefix", "")
    variables = []

    for name, field in settings_class.model_fields.items():
        type_name = getattr(field.annotation, "__name__", str(field.annotation))
        default = field.get_default(call_default_factory=True)

        # Secrets without a usable value must be set explicitly
        is_required = default is PydanticUndefined or (
            isinstance(default, SecretStr) and default.get_secret_value() == ""
        )

        if isinstance(default, SecretStr):
            display_default = None if is_required else "********"
        elif is_required or default is None:
            display_default = None
        elif isinstance(default, (list, dict, bool, int)):
            display_default = default
        else:
            display_default = str(default)

        variables.append(
            {
                "env_var": f"{prefix}{name.upper()}",
                "type": "Secret" if "Secret" in type_name else type_name,
                "default": display_default,
                "required": is_required,
                "description": field.description or "",
            }
        )

    return {
        "class_name": settings_class.__name__,
        "prefix": prefix,
        "doc": settings_class.__doc__ or "",
        "variables": variables,
    }


def describe_all_settings() -> dict[str, dict[str, Any]]:
    """Describe every settings class of the application."""
    return {cls.__name__: describe_settings(cls) for cls in SETTINGS_CLASSES}
