"""Load [tool.bugscope] from pyproject.toml. Infrastructure I/O only."""

import logging
import tomllib
from pathlib import Path

from bugscope.domain.constants import CONFIG_SECTION


class ConfigFileLoader:
    """Loads config from the nearest pyproject.toml at or above a start directory."""

    @staticmethod
    def load_config_from_fs(start: Path | None = None) -> dict[str, object]:
        """Return the [tool.bugscope] table, or {} when there is none."""
        current_path = (start or Path.cwd()).resolve()
        for directory in (current_path, *current_path.parents):
            config_file = directory / "pyproject.toml"
            if not config_file.exists():
                continue
            try:
                with config_file.open("rb") as f:
                    data = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                logging.warning("Configuration Warning: cannot read %s: %s", config_file, exc)
                return {}
            tool_section = data.get("tool", {}) or {}
            section = tool_section.get(CONFIG_SECTION, {}) or {}
            return section if isinstance(section, dict) else {}
        return {}
