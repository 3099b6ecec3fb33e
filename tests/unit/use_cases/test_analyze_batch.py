"""Unit tests for AnalyzeBatchUseCase."""

from unittest.mock import Mock

from bugscope.domain.rules import RuleRegistry
from bugscope.domain.rules.generated_subclass_leaked import GeneratedSubclassLeakedRule
from bugscope.domain.rules.random_mod_integer import RandomModIntegerRule
from bugscope.domain.traversal import CancellationToken
from bugscope.use_cases.analyze_batch import AnalyzeBatchUseCase
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase
from tests.tree_builders import RANDOM, SECURE_RANDOM, animal_unit, dice_unit, zoo_unit


def _summary(reports):
    return [(r.path, [(d.rule_id, d.span, d.message, d.fix) for d in r.diagnostics]) for r in reports]


class TestAnalyzeBatchUseCase:

    def setup_method(self) -> None:
        rules = (
            RuleRegistry()
            .register(GeneratedSubclassLeakedRule())
            .register(RandomModIntegerRule(random_type="util.Random"))
            .freeze()
        )
        self.analyze = AnalyzeUnitUseCase(rules)

    def test_parallel_run_equals_sequential_run(self) -> None:
        units = [
            dice_unit(path=f"dice_{i}.py", receiver_type=SECURE_RANDOM if i % 2 else RANDOM)
            for i in range(8)
        ] + [animal_unit(), zoo_unit()]
        sequential = AnalyzeBatchUseCase(self.analyze, max_workers=1).execute(units)
        parallel = AnalyzeBatchUseCase(self.analyze, max_workers=4).execute(units)
        assert _summary(parallel) == _summary(sequential)
        assert [r.path for r in parallel] == [u.path for u in units]

    def test_empty_batch(self) -> None:
        assert AnalyzeBatchUseCase(self.analyze).execute([]) == []

    def test_token_is_passed_to_every_unit(self) -> None:
        analyze = Mock()
        token = CancellationToken()
        units = [dice_unit(path="a.py"), dice_unit(path="b.py")]
        AnalyzeBatchUseCase(analyze, max_workers=2).execute(units, token)
        assert analyze.execute.call_count == 2
        assert all(call.args[1] is token for call in analyze.execute.call_args_list)

    def test_workers_are_at_least_one(self) -> None:
        assert AnalyzeBatchUseCase(self.analyze, max_workers=0).max_workers == 1
