"""Unit tests for RuleCatalogService."""

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from bugscope.infrastructure.services.rule_catalog import RULE_REGISTRY, RuleCatalogService, load_rule_registry


class TestRuleCatalogService(unittest.TestCase):
    """Test RuleCatalogService loads the packaged registry and answers lookups."""

    def setUp(self) -> None:
        self.service = RuleCatalogService()

    def test_packaged_registry_documents_every_builtin_rule(self) -> None:
        registry = self.service.get_registry()
        for rule_id in ("GeneratedSubclassLeaked", "RandomModInteger", "RuleFailure"):
            self.assertIn(rule_id, registry)
            self.assertTrue(registry[rule_id].get("explanation"))

    def test_get_entry(self) -> None:
        entry = self.service.get_entry("RandomModInteger")
        self.assertIsNotNone(entry)
        self.assertEqual(entry["severity"], "ERROR")
        self.assertTrue(entry["fixable"])

    def test_get_entry_is_case_insensitive_fallback(self) -> None:
        self.assertIsNotNone(self.service.get_entry("randommodinteger"))
        self.assertIsNone(self.service.get_entry("NoSuchRule"))

    def test_fixable_rules(self) -> None:
        self.assertEqual(self.service.get_fixable_rules(), ["RandomModInteger"])

    def test_custom_registry_path(self) -> None:
        with TemporaryDirectory() as tmpdir:
            registry = Path(tmpdir) / "rules.yaml"
            registry.write_text(
                "Custom:\n  display_name: Custom rule\n  fixable: true\nbroken: just a string\n",
                encoding="utf-8",
            )
            svc = RuleCatalogService(registry_path=str(registry))
        self.assertEqual(list(svc.get_registry()), ["Custom"])
        self.assertEqual(svc.get_fixable_rules(), ["Custom"])

    def test_non_mapping_document_gives_empty_registry(self) -> None:
        with TemporaryDirectory() as tmpdir:
            registry = Path(tmpdir) / "rules.yaml"
            registry.write_text("- a\n- b\n", encoding="utf-8")
            self.assertEqual(load_rule_registry(registry), {})

    def test_packaged_registry_path(self) -> None:
        self.assertEqual(RULE_REGISTRY.name, "rule_registry.yaml")
        self.assertTrue(RULE_REGISTRY.is_file())

    def test_nonexistent_path_gives_empty_registry(self) -> None:
        svc = RuleCatalogService(registry_path="/nonexistent/rule_registry.yaml")
        self.assertEqual(svc.get_registry(), {})
        self.assertIsNone(svc.get_entry("RandomModInteger"))
