"""Unit tests for ApplyFixesUseCase."""

from unittest.mock import Mock

from bugscope.domain.protocols import FrontEndError
from bugscope.domain.rules import RuleRegistry
from bugscope.domain.rules.random_mod_integer import RandomModIntegerRule
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase
from bugscope.use_cases.apply_fixes import ApplyFixesUseCase
from tests.tree_builders import dice_unit


def _use_case(front_end: Mock, fixer: Mock) -> ApplyFixesUseCase:
    rules = RuleRegistry().register(RandomModIntegerRule(random_type="util.Random")).freeze()
    return ApplyFixesUseCase(front_end=front_end, analyze_unit=AnalyzeUnitUseCase(rules), fixer_gateway=fixer)


class TestApplyFixesUseCase:

    def test_fixes_are_handed_to_the_gateway(self) -> None:
        front_end = Mock()
        front_end.parse_file.return_value = dice_unit()
        fixer = Mock()
        fixer.apply_fixes.return_value = True

        summary = _use_case(front_end, fixer).execute(["dice.py"])

        assert summary.modified_files == ["dice.py"]
        assert summary.fixes_offered == 1
        path, fixes = fixer.apply_fixes.call_args[0]
        assert path == "dice.py"
        assert fixes[0].edits[0].replacement == "rng.nextInt(bound)"
        assert fixer.apply_fixes.call_args.kwargs["expected_source"] == front_end.parse_file.return_value.source

    def test_clean_file_is_not_touched(self) -> None:
        front_end = Mock()
        front_end.parse_file.return_value = dice_unit(arguments=("10",))
        fixer = Mock()

        summary = _use_case(front_end, fixer).execute(["dice.py"])

        fixer.apply_fixes.assert_not_called()
        assert summary.modified_files == []
        assert summary.fixes_offered == 0

    def test_unparseable_file_is_skipped(self) -> None:
        front_end = Mock()
        front_end.parse_file.side_effect = [FrontEndError("bad"), dice_unit()]
        fixer = Mock()
        fixer.apply_fixes.return_value = False

        summary = _use_case(front_end, fixer).execute(["bad.py", "dice.py"])

        assert summary.skipped_files == ["bad.py"]
        assert summary.modified_files == []
        assert summary.fixes_offered == 1
