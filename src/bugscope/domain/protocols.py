from typing import Protocol

from bugscope.domain.fixes import Fix
from bugscope.domain.registry_types import RuleRegistryEntry
from bugscope.domain.tree import BugscopeError, CompilationUnit


class FrontEndError(BugscopeError):
    """The front end could not produce a resolved tree for a source file."""


class FrontEndProtocol(Protocol):
    """Produces resolved compilation units (parse + symbol/type resolution)."""

    def parse_source(self, source: str, path: str = "<string>", module_name: str = "") -> CompilationUnit:
        """Lower source text into a resolved CompilationUnit. Raises FrontEndError."""
        ...

    def parse_file(self, file_path: str) -> CompilationUnit:
        """Read and lower a file. Raises FrontEndError."""
        ...


class FixerGatewayProtocol(Protocol):
    """Applies fixes to files on disk."""

    def apply_fixes(self, file_path: str, fixes: list[Fix], expected_source: str | None = None) -> bool:
        """Apply fixes to a file. Returns True if the file was modified.

        When expected_source is given, a file whose text differs from it is left alone.
        """
        ...


class RuleCatalogProtocol(Protocol):
    """Read access to rule documentation (display name, explanation, references)."""

    def get_registry(self) -> dict[str, RuleRegistryEntry]:
        ...

    def get_entry(self, rule_id: str) -> RuleRegistryEntry | None:
        ...
