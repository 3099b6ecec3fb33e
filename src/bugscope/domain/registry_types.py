from typing import TypedDict


class RuleRegistryEntry(TypedDict, total=False):
    display_name: str
    summary: str
    explanation: str
    severity: str
    fixable: bool
    references: list[str]
