"""RuleCatalogService: per-rule documentation for `bugscope rules` and `bugscope explain`."""

from pathlib import Path
from typing import cast

import yaml

from bugscope.domain.protocols import RuleCatalogProtocol
from bugscope.domain.registry_types import RuleRegistryEntry

RULE_REGISTRY = Path(__file__).resolve().parent.parent / "resources" / "rule_registry.yaml"


def load_rule_registry(path: Path) -> dict[str, RuleRegistryEntry]:
    """Rule id -> entry; a missing file or a non-mapping document yields {}."""
    if not path.is_file():
        return {}
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    return {str(rule_id): cast(RuleRegistryEntry, entry) for rule_id, entry in data.items() if isinstance(entry, dict)}


class RuleCatalogService(RuleCatalogProtocol):
    """Answers rule documentation lookups from rule_registry.yaml."""

    def __init__(self, registry_path: str | None = None) -> None:
        self._registry = load_rule_registry(Path(registry_path) if registry_path else RULE_REGISTRY)

    def get_registry(self) -> dict[str, RuleRegistryEntry]:
        return dict(self._registry)

    def get_entry(self, rule_id: str) -> RuleRegistryEntry | None:
        """Entry for rule_id; ids are matched case-insensitively when there is no exact hit."""
        entry = self._registry.get(rule_id)
        if entry is None:
            wanted = rule_id.lower()
            entry = next((e for rid, e in self._registry.items() if rid.lower() == wanted), None)
        return cast(RuleRegistryEntry, dict(entry)) if entry is not None else None

    def get_fixable_rules(self) -> list[str]:
        """Ids of rules whose entry is marked fixable."""
        return sorted(rid for rid, entry in self._registry.items() if entry.get("fixable"))
