"""Built-in rule set, configured from ConfigurationLoader."""

from bugscope.domain.config import ConfigurationLoader
from bugscope.domain.rules import RegisteredRules, Rule, RuleRegistry
from bugscope.domain.rules.generated_subclass_leaked import GeneratedSubclassLeakedRule
from bugscope.domain.rules.random_mod_integer import RandomModIntegerRule


def builtin_rules(config: ConfigurationLoader) -> list[Rule]:
    return [
        GeneratedSubclassLeakedRule(
            marker_annotation=config.marker_annotation,
            generated_prefix=config.generated_prefix,
        ),
        RandomModIntegerRule(
            random_type=config.random_type,
            method_name=config.random_method,
        ),
    ]


def default_rules(config: ConfigurationLoader) -> RegisteredRules:
    """Register every enabled built-in rule and freeze the registry."""
    registry = RuleRegistry()
    for rule in builtin_rules(config):
        if rule.rule_id in config.disabled_rules:
            continue
        registry.register(rule)
    return registry.freeze()
