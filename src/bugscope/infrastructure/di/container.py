from typing import TYPE_CHECKING, Any, Optional, cast

from bugscope.domain.config import ConfigurationLoader
from bugscope.domain.rules import RegisteredRules
from bugscope.domain.rules.defaults import default_rules
from bugscope.domain.traversal import SuppressionPredicate, generated_code, suppress_warnings
from bugscope.infrastructure.config_file_loader import ConfigFileLoader
from bugscope.infrastructure.gateways.astroid_gateway import AstroidFrontEnd
from bugscope.infrastructure.gateways.libcst_fixer_gateway import LibCSTFixerGateway
from bugscope.infrastructure.services.rule_catalog import RuleCatalogService
from bugscope.use_cases.analyze_batch import AnalyzeBatchUseCase
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase
from bugscope.use_cases.apply_fixes import ApplyFixesUseCase

if TYPE_CHECKING:
    from bugscope.domain.protocols import (
        FixerGatewayProtocol,
        FrontEndProtocol,
        RuleCatalogProtocol,
    )


class BugscopeContainer:
    """Dependency Injection Container for bugscope."""

    _instance: Optional["BugscopeContainer"] = None

    def __init__(self, config_dict: dict[str, object] | None = None) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults(config_dict)

    def _register_defaults(self, config_dict: dict[str, object] | None) -> None:
        """Register default implementations for protocols."""
        if config_dict is None:
            config_dict = ConfigFileLoader.load_config_from_fs()
        config_loader = ConfigurationLoader(config_dict)
        self.register_singleton("ConfigurationLoader", config_loader)

        self.register_singleton(
            "AstroidFrontEnd", AstroidFrontEnd(generated_markers=config_loader.generated_markers)
        )
        self.register_singleton("LibCSTFixerGateway", LibCSTFixerGateway())
        self.register_singleton("RuleCatalogService", RuleCatalogService())

        rules = default_rules(config_loader)
        self.register_singleton("RegisteredRules", rules)
        suppressions: tuple[SuppressionPredicate, ...] = (
            generated_code,
            suppress_warnings(config_loader.suppression_annotation),
        )
        analyze_unit = AnalyzeUnitUseCase(rules, suppressions=suppressions)
        self.register_singleton("AnalyzeUnitUseCase", analyze_unit)
        self.register_singleton(
            "AnalyzeBatchUseCase",
            AnalyzeBatchUseCase(analyze_unit, max_workers=config_loader.max_workers),
        )
        self.register_singleton(
            "ApplyFixesUseCase",
            ApplyFixesUseCase(
                front_end=self.get("AstroidFrontEnd"),
                analyze_unit=analyze_unit,
                fixer_gateway=self.get("LibCSTFixerGateway"),
            ),
        )

    # JUSTIFICATION: DI Container must handle any type of service
    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    # JUSTIFICATION: DI Container must return any type of service
    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_config_loader(self) -> ConfigurationLoader:
        """Return the configuration loader (created at composition root)."""
        return cast(ConfigurationLoader, self.get("ConfigurationLoader"))

    def get_front_end(self) -> "FrontEndProtocol":
        """Return the astroid front end."""
        return cast("FrontEndProtocol", self.get("AstroidFrontEnd"))

    def get_fixer_gateway(self) -> "FixerGatewayProtocol":
        """Return the LibCST fixer gateway."""
        return cast("FixerGatewayProtocol", self.get("LibCSTFixerGateway"))

    def get_rule_catalog(self) -> "RuleCatalogProtocol":
        """Return the rule catalog (rule_registry.yaml)."""
        return cast("RuleCatalogProtocol", self.get("RuleCatalogService"))

    def get_rules(self) -> RegisteredRules:
        """Return the frozen set of enabled rules."""
        return cast(RegisteredRules, self.get("RegisteredRules"))

    def get_analyze_batch(self) -> AnalyzeBatchUseCase:
        return cast(AnalyzeBatchUseCase, self.get("AnalyzeBatchUseCase"))

    def get_apply_fixes(self) -> ApplyFixesUseCase:
        return cast(ApplyFixesUseCase, self.get("ApplyFixesUseCase"))

    @classmethod
    def get_instance(cls) -> "BugscopeContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = BugscopeContainer()
        return cls._instance
