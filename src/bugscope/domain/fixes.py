"""Suggested fixes: ordered, non-overlapping text replacements over an immutable source buffer."""

from dataclasses import dataclass

from bugscope.domain.spans import SpanMapper
from bugscope.domain.tree import BugscopeError, Node, Span


class OverlappingEditsError(BugscopeError):
    """Raised when a fix would contain two edits touching the same offset."""

    def __init__(self, first: "Edit", second: "Edit") -> None:
        super().__init__(
            f"Edit [{first.span.start}, {first.span.end}) conflicts with "
            f"[{second.span.start}, {second.span.end})"
        )
        self.first = first
        self.second = second


@dataclass(frozen=True)
class Edit:
    """Replace span with replacement. Zero-width spans are insertions."""
    span: Span
    replacement: str

    def as_triple(self) -> tuple[int, int, str]:
        return (self.span.start, self.span.end, self.replacement)


def conflicts(first: Edit, second: Edit) -> bool:
    """Edits conflict when their ranges share an offset or start at the same point."""
    return first.span.overlaps(second.span) or first.span.start == second.span.start


@dataclass(frozen=True)
class Fix:
    """
    A validated set of edits, ordered by ascending start offset.

    Only SuggestedFix.build() and Fix.of() construct fixes, and both reject
    conflicting edits, so every Fix satisfies the non-overlap invariant.
    """
    edits: tuple[Edit, ...]

    @classmethod
    def of(cls, edits: list[Edit] | tuple[Edit, ...]) -> "Fix":
        ordered = tuple(sorted(edits, key=lambda e: (e.span.start, e.span.end)))
        for previous, current in zip(ordered, ordered[1:]):
            if conflicts(previous, current):
                raise OverlappingEditsError(previous, current)
        return cls(edits=ordered)

    @property
    def is_empty(self) -> bool:
        return not self.edits

    @property
    def is_well_formed(self) -> bool:
        """Edits ascend and no two conflict. Always true for fixes built via of()."""
        return all(
            previous.span.start < current.span.start and not conflicts(previous, current)
            for previous, current in zip(self.edits, self.edits[1:])
        )

    def as_triples(self) -> list[tuple[int, int, str]]:
        return [e.as_triple() for e in self.edits]

    def conflicts_with(self, other: "Fix") -> bool:
        return any(conflicts(a, b) for a in self.edits for b in other.edits)

    def merge(self, other: "Fix") -> "Fix":
        """Combine two fixes; raises OverlappingEditsError if they conflict."""
        return Fix.of(self.edits + other.edits)


def apply_fix(source: str, fix: Fix) -> str:
    """Apply edits in descending start order so earlier offsets stay valid."""
    result = source
    for edit in sorted(fix.edits, key=lambda e: e.span.start, reverse=True):
        if edit.span.end > len(source):
            raise ValueError(f"Edit [{edit.span.start}, {edit.span.end}) is outside the source")
        result = result[:edit.span.start] + edit.replacement + result[edit.span.end:]
    return result


class SuggestedFix:
    """
    Builder for a Fix targeting nodes of one unit.

    Targets without a source span raise NoSourceSpan; conflicting edits raise
    OverlappingEditsError from build(). Either way no Fix is produced.
    """

    def __init__(self, spans: SpanMapper) -> None:
        self._spans = spans
        self._edits: list[Edit] = []

    def replace(self, node: Node, replacement: str) -> "SuggestedFix":
        self._edits.append(Edit(self._spans.span_of(node), replacement))
        return self

    def replace_span(self, span: Span, replacement: str) -> "SuggestedFix":
        if span.end > len(self._spans.source):
            raise ValueError(f"Span [{span.start}, {span.end}) is outside the source")
        self._edits.append(Edit(span, replacement))
        return self

    def prefix_with(self, node: Node, text: str) -> "SuggestedFix":
        start = self._spans.span_of(node).start
        self._edits.append(Edit(Span(start, start), text))
        return self

    def postfix_with(self, node: Node, text: str) -> "SuggestedFix":
        end = self._spans.span_of(node).end
        self._edits.append(Edit(Span(end, end), text))
        return self

    def delete(self, node: Node) -> "SuggestedFix":
        return self.replace(node, "")

    def build(self) -> Fix:
        return Fix.of(self._edits)
