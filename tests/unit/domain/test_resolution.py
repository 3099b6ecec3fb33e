"""Unit tests for ResolutionContext subtype and provenance queries."""

import unittest
from unittest.mock import Mock

from bugscope.domain.resolution import ResolutionContext
from bugscope.domain.tree import Annotation, Node, NodeKind, Symbol, SymbolKind, TypeRef
from tests.tree_builders import (
    ANIMAL,
    ANIMAL_CLASS,
    AUTO_ANIMAL,
    AUTO_ANIMAL_CLASS,
    OBJECT,
    RANDOM,
    SECURE_RANDOM,
    dice_unit,
)


class TestSubtypes(unittest.TestCase):

    def setUp(self) -> None:
        self.ctx = ResolutionContext(dice_unit())

    def test_reflexive(self) -> None:
        for type_ref in (OBJECT, RANDOM, SECURE_RANDOM, ANIMAL):
            self.assertTrue(self.ctx.is_subtype(type_ref, type_ref))

    def test_transitive(self) -> None:
        self.assertTrue(self.ctx.is_subtype(SECURE_RANDOM, RANDOM))
        self.assertTrue(self.ctx.is_subtype(RANDOM, OBJECT))
        self.assertTrue(self.ctx.is_subtype(SECURE_RANDOM, OBJECT))

    def test_not_a_supertype(self) -> None:
        self.assertFalse(self.ctx.is_subtype(RANDOM, SECURE_RANDOM))
        self.assertFalse(self.ctx.is_subtype(AUTO_ANIMAL, RANDOM))

    def test_accepts_names_and_erases_type_arguments(self) -> None:
        self.assertTrue(self.ctx.is_subtype(SECURE_RANDOM, "util.Random"))
        listed = TypeRef("List", (RANDOM,), supertypes=(TypeRef("Iterable", (RANDOM,)),))
        self.assertTrue(self.ctx.is_subtype(listed, TypeRef("Iterable", (OBJECT,))))

    def test_unresolved_is_false(self) -> None:
        self.assertFalse(self.ctx.is_subtype(None, RANDOM))
        self.assertFalse(self.ctx.is_subtype(RANDOM, None))

    def test_cyclic_supertypes_terminate(self) -> None:
        a = TypeRef("A", supertypes=(TypeRef("B", supertypes=(TypeRef("A"),)),))
        self.assertTrue(self.ctx.is_subtype(a, "B"))
        self.assertFalse(self.ctx.is_subtype(a, "C"))

    def test_closure_is_cached(self) -> None:
        first = self.ctx.supertype_names(SECURE_RANDOM)
        self.assertIs(first, self.ctx.supertype_names(SECURE_RANDOM))
        self.assertEqual(first, frozenset({"util.SecureRandom", "util.Random", "builtins.object"}))


class TestProvenance(unittest.TestCase):

    def test_declared_provenance_is_default(self) -> None:
        ctx = ResolutionContext(dice_unit())
        self.assertEqual(ctx.generated_by(AUTO_ANIMAL_CLASS), frozenset({"AutoValueProcessor"}))
        self.assertTrue(ctx.is_generated(AUTO_ANIMAL_CLASS))
        self.assertFalse(ctx.is_generated(ANIMAL_CLASS))
        self.assertFalse(ctx.is_generated(None))

    def test_injected_query_is_memoized_per_symbol(self) -> None:
        query = Mock(return_value=frozenset({"tool"}))
        ctx = ResolutionContext(dice_unit(), provenance=query)
        self.assertTrue(ctx.is_generated(ANIMAL_CLASS))
        self.assertTrue(ctx.is_generated(ANIMAL_CLASS))
        query.assert_called_once_with(ANIMAL_CLASS)


class TestAnnotations(unittest.TestCase):

    def test_node_annotations_precede_symbol_annotations(self) -> None:
        symbol = Symbol("Foo", SymbolKind.CLASS, annotations=(Annotation("AutoValue"),))
        node = Node(NodeKind.CLASS, symbol=symbol, annotations=(Annotation("SuppressWarnings", ("X",)),))
        ctx = ResolutionContext(dice_unit())
        self.assertEqual(
            [a.name for a in ctx.annotations_of(node)], ["SuppressWarnings", "AutoValue"]
        )
        self.assertTrue(ctx.has_annotation(node, "AutoValue"))
        self.assertEqual(ctx.find_annotation(node, "SuppressWarnings").arguments, ("X",))
        self.assertIsNone(ctx.find_annotation(None, "AutoValue"))

    def test_symbol_and_type_lookups_are_total(self) -> None:
        ctx = ResolutionContext(dice_unit())
        bare = Node(NodeKind.IDENTIFIER)
        self.assertIsNone(ctx.symbol_of(bare))
        self.assertIsNone(ctx.type_of(bare))
        self.assertIsNone(ctx.symbol_of(None))
