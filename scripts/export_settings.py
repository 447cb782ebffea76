"""Write the environment variable reference to docs/env-vars.json."""

import json
import sys
from pathlib import Path

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "api"))

from infrastructure.settings_export import describe_all_settings  # noqa: E402


def export_settings() -> Path:
    output_path = root_path / "docs" / "env-vars.json"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(describe_all_settings(), f, indent=2)

    return output_path


if __name__ == "__main__":
    print(f"Exported settings to {export_settings()}")
