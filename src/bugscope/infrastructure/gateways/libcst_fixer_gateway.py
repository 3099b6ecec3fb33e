"""LibCST verified fixer gateway."""

import logging
from pathlib import Path

import libcst as cst

from bugscope.domain.fixes import Fix, apply_fix
from bugscope.domain.protocols import FixerGatewayProtocol

logger = logging.getLogger(__name__)


class LibCSTFixerGateway(FixerGatewayProtocol):
    """
    Gateway for writing fixes to Python files.

    Fixes are merged in order; a fix that conflicts with one already
    accepted is skipped. The edited text must still parse with LibCST,
    otherwise nothing is written.
    """

    def merge_fixes(self, fixes: list[Fix]) -> Fix:
        merged = Fix(edits=())
        for fix in fixes:
            if fix is None or fix.is_empty:
                continue
            if merged.conflicts_with(fix):
                logger.info("Skipping fix that conflicts with an earlier fix: %s", fix.as_triples())
                continue
            merged = merged.merge(fix)
        return merged

    def preview(self, source: str, fixes: list[Fix]) -> str | None:
        """Edited source, or None when the result would not parse."""
        edited = apply_fix(source, self.merge_fixes(fixes))
        try:
            cst.parse_module(edited)
        except cst.ParserSyntaxError as exc:
            logger.warning("Fixed source does not parse; leaving it untouched: %s", exc)
            return None
        return edited

    def apply_fixes(self, file_path: str, fixes: list[Fix], expected_source: str | None = None) -> bool:
        """
        Apply fixes to a file.

        Args:
            file_path: Path to the file to modify
            fixes: Fixes computed against the file's current content
            expected_source: Text the fixes were computed against; the file
                is not touched when its current text differs

        Returns:
            True if the file was modified, False otherwise
        """
        path = Path(file_path)
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot read %s: %s", file_path, exc)
            return False
        if expected_source is not None and source != expected_source:
            logger.warning("%s changed since it was analyzed; not applying fixes", file_path)
            return False
        edited = self.preview(source, fixes)
        if edited is None or edited == source:
            return False
        try:
            path.write_text(edited, encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot write %s: %s", file_path, exc)
            return False
        return True
