"""Configuration for bugscope. Immutable value object created by Infrastructure."""

import logging

from bugscope.domain.constants import (
    DEFAULT_GENERATED_MARKERS,
    DEFAULT_GENERATED_PREFIX,
    DEFAULT_MARKER_ANNOTATION,
    DEFAULT_MAX_WORKERS,
    DEFAULT_RANDOM_METHOD,
    DEFAULT_RANDOM_TYPE,
    DEFAULT_SUPPRESSION_ANNOTATION,
)

KNOWN_KEYS = frozenset(
    {
        "disabled_rules",
        "max_workers",
        "generated_markers",
        "suppression_annotation",
        "generated-subclass-leaked",
        "random-mod-integer",
    }
)


class ConfigurationLoader:
    """
    Immutable configuration read from the [tool.bugscope] table.

    Created by Infrastructure from the parsed dict; the domain never reads the
    filesystem. Values of the wrong type fall back to their defaults.
    """

    def __init__(self, config_dict: dict[str, object] | None = None) -> None:
        self._config: dict[str, object] = dict(config_dict or {})
        if self._config:
            self.validate_config(self._config)

    def validate_config(self, config: dict[str, object]) -> None:
        """Warn about unknown keys and malformed values."""
        for key in sorted(set(config) - KNOWN_KEYS):
            logging.warning("Configuration Warning: unknown key '%s' in [tool.bugscope].", key)
        workers = config.get("max_workers")
        if workers is not None and (not isinstance(workers, int) or workers < 1):
            logging.warning(
                "Configuration Warning: 'max_workers' must be a positive integer; using %d.",
                DEFAULT_MAX_WORKERS,
            )

    @property
    def config(self) -> dict[str, object]:
        """Return the loaded configuration."""
        return self._config

    @property
    def disabled_rules(self) -> frozenset[str]:
        raw = self._config.get("disabled_rules", [])
        return frozenset(str(x) for x in raw) if isinstance(raw, list) else frozenset()

    @property
    def max_workers(self) -> int:
        raw = self._config.get("max_workers", DEFAULT_MAX_WORKERS)
        return raw if isinstance(raw, int) and raw > 0 else DEFAULT_MAX_WORKERS

    @property
    def generated_markers(self) -> tuple[str, ...]:
        """Decorator names the front end records as provenance markers."""
        raw = self._config.get("generated_markers")
        if isinstance(raw, list) and raw:
            return tuple(str(x) for x in raw)
        return DEFAULT_GENERATED_MARKERS

    @property
    def suppression_annotation(self) -> str:
        raw = self._config.get("suppression_annotation", DEFAULT_SUPPRESSION_ANNOTATION)
        return raw if isinstance(raw, str) and raw else DEFAULT_SUPPRESSION_ANNOTATION

    # GeneratedSubclassLeaked

    @property
    def generated_subclass_config(self) -> dict[str, object]:
        raw = self._config.get("generated-subclass-leaked", {})
        return raw if isinstance(raw, dict) else {}

    @property
    def marker_annotation(self) -> str:
        raw = self.generated_subclass_config.get("marker_annotation", DEFAULT_MARKER_ANNOTATION)
        return raw if isinstance(raw, str) and raw else DEFAULT_MARKER_ANNOTATION

    @property
    def generated_prefix(self) -> str:
        raw = self.generated_subclass_config.get("generated_prefix", DEFAULT_GENERATED_PREFIX)
        return raw if isinstance(raw, str) and raw else DEFAULT_GENERATED_PREFIX

    # RandomModInteger

    @property
    def random_mod_config(self) -> dict[str, object]:
        raw = self._config.get("random-mod-integer", {})
        return raw if isinstance(raw, dict) else {}

    @property
    def random_type(self) -> str:
        raw = self.random_mod_config.get("random_type", DEFAULT_RANDOM_TYPE)
        return raw if isinstance(raw, str) and raw else DEFAULT_RANDOM_TYPE

    @property
    def random_method(self) -> str:
        raw = self.random_mod_config.get("method_name", DEFAULT_RANDOM_METHOD)
        return raw if isinstance(raw, str) and raw else DEFAULT_RANDOM_METHOD
