"""Unit tests for the resolved tree model and span mapper."""

import unittest

import pytest

from bugscope.domain.spans import SpanMapper
from bugscope.domain.tree import (
    Annotation,
    CompilationUnit,
    NoSourceSpan,
    Node,
    NodeKind,
    Span,
    Symbol,
    SymbolKind,
    TypeRef,
    get_arguments,
    get_method_select,
    get_receiver,
    get_type,
    iter_nodes,
)
from tests.tree_builders import INT, NEXT_INT, RANDOM, RANDOM_CLASS, dice_unit


class TestSpan(unittest.TestCase):

    def test_rejects_negative_or_inverted_ranges(self) -> None:
        with self.assertRaises(ValueError):
            Span(-1, 2)
        with self.assertRaises(ValueError):
            Span(5, 4)

    def test_overlap_is_half_open(self) -> None:
        self.assertTrue(Span(0, 5).overlaps(Span(4, 8)))
        self.assertFalse(Span(0, 5).overlaps(Span(5, 8)))
        self.assertTrue(Span(3, 3).overlaps(Span(0, 10)))
        self.assertFalse(Span(5, 5).overlaps(Span(0, 5)))

    def test_contains(self) -> None:
        self.assertTrue(Span(0, 10).contains(Span(2, 3)))
        self.assertFalse(Span(2, 3).contains(Span(0, 10)))


class TestSymbolsAndTypes(unittest.TestCase):

    def test_symbol_identity_ignores_type_and_provenance(self) -> None:
        a = Symbol("Foo", SymbolKind.CLASS, type=TypeRef("a.Foo"))
        b = Symbol("Foo", SymbolKind.CLASS, generated_by=frozenset({"gen"}))
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_overloads_are_distinct_symbols(self) -> None:
        bounded = Symbol("nextInt", SymbolKind.METHOD, owner=RANDOM_CLASS, parameters=("bound",))
        self.assertNotEqual(NEXT_INT, bounded)

    def test_qualified_name_and_enclosing_class(self) -> None:
        self.assertEqual(NEXT_INT.qualified_name, "util.Random.nextInt")
        self.assertIs(NEXT_INT.enclosing_class(), RANDOM_CLASS)

    def test_type_equality_ignores_supertypes(self) -> None:
        self.assertEqual(TypeRef("util.Random"), RANDOM)
        self.assertEqual(RANDOM.simple_name, "Random")
        self.assertEqual(str(TypeRef("List", (INT,))), "List<builtins.int>")

    def test_annotation_matches_simple_or_qualified_name(self) -> None:
        annotation = Annotation("auto.value.AutoValue")
        self.assertTrue(annotation.matches("AutoValue"))
        self.assertTrue(annotation.matches("auto.value.AutoValue"))
        self.assertFalse(annotation.matches("Value"))


class TestNodeHelpers:

    def test_nodes_compare_by_identity(self) -> None:
        assert Node(NodeKind.LITERAL) != Node(NodeKind.LITERAL)

    def test_unit_root_must_be_compilation_unit(self) -> None:
        with pytest.raises(ValueError):
            CompilationUnit(path="x.py", source="", tree=Node(NodeKind.CLASS))

    def test_iter_nodes_is_pre_order(self) -> None:
        unit = dice_unit()
        kinds = [n.kind for n in iter_nodes(unit.tree)]
        assert kinds[:6] == [
            NodeKind.COMPILATION_UNIT,
            NodeKind.CLASS,
            NodeKind.METHOD,
            NodeKind.RETURN,
            NodeKind.BINARY,
            NodeKind.INVOCATION,
        ]

    def test_invocation_accessors(self) -> None:
        unit = dice_unit(arguments=("10",))
        binary = next(n for n in iter_nodes(unit.tree) if n.kind is NodeKind.BINARY)
        call = binary.children[0]
        assert get_method_select(call).kind is NodeKind.MEMBER_ACCESS
        assert len(get_arguments(call)) == 1
        assert get_receiver(call).name == "rng"
        assert get_type(get_receiver(call)) == RANDOM

    def test_implicit_receiver_is_none(self) -> None:
        unit = dice_unit(receiver=None)
        call = next(n for n in iter_nodes(unit.tree) if n.kind is NodeKind.INVOCATION)
        assert get_receiver(call) is None

    def test_accessors_on_wrong_kind(self) -> None:
        literal = Node(NodeKind.LITERAL)
        assert get_method_select(literal) is None
        assert get_arguments(literal) == ()
        assert get_receiver(literal) is None
        assert get_type(None) is None

    def test_declarations(self) -> None:
        unit = dice_unit()
        assert [d.name for d in unit.declarations()] == ["Dice"]


class TestSpanMapper:

    def test_source_for_returns_original_text(self) -> None:
        unit = dice_unit()
        mapper = SpanMapper(unit)
        binary = next(n for n in iter_nodes(unit.tree) if n.kind is NodeKind.BINARY)
        assert mapper.source_for(binary) == "rng.nextInt() % bound"
        assert mapper.source_for(binary.children[1]) == "bound"

    def test_span_less_node_raises(self) -> None:
        mapper = SpanMapper(dice_unit())
        synthetic = Node(NodeKind.IDENTIFIER, name="generated")
        assert not mapper.has_span(synthetic)
        with pytest.raises(NoSourceSpan):
            mapper.span_of(synthetic)

    def test_span_beyond_source_raises(self) -> None:
        mapper = SpanMapper(dice_unit())
        with pytest.raises(NoSourceSpan):
            mapper.span_of(Node(NodeKind.IDENTIFIER, span=Span(0, 10_000)))

    def test_enclosing_span_falls_back_to_nearest_ancestor(self) -> None:
        unit = dice_unit()
        mapper = SpanMapper(unit)
        method = unit.tree.children[0].children[0]
        synthetic = Node(NodeKind.IDENTIFIER)
        assert mapper.enclosing_span(synthetic, (unit.tree, unit.tree.children[0], method)) == method.span
        assert mapper.enclosing_span(synthetic) is None

    def test_line_col(self) -> None:
        unit = dice_unit()
        mapper = SpanMapper(unit)
        offset = unit.source.index("rng.nextInt")
        assert mapper.line_col(0) == (1, 0)
        assert mapper.line_col(offset) == (3, 15)
