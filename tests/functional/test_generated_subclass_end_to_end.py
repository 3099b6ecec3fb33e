"""End-to-end: GeneratedSubclassLeaked through the astroid front end."""

from bugscope.domain.config import ConfigurationLoader
from bugscope.domain.rules.defaults import default_rules
from bugscope.infrastructure.gateways.astroid_gateway import AstroidFrontEnd
from bugscope.use_cases.analyze_unit import AnalyzeUnitUseCase

OWNER = '''
@AutoValue
class Animal:
    @staticmethod
    def create(name):
        return AutoValue_Animal(name)


@Generated("AutoValueProcessor")
class AutoValue_Animal(Animal):
    def __init__(self, name):
        self.name = name

    def copy(self):
        return AutoValue_Animal(self.name)
'''

LEAKY = '''
class Animal:
    pass


class AutoValue_Animal(Animal):
    pass


def adopt():
    return AutoValue_Animal()


def breed():
    pet = AutoValue_Animal()
    return pet
'''


def _analyze(source: str, module_name: str):
    rules = default_rules(ConfigurationLoader({"disabled_rules": ["RandomModInteger"]}))
    unit = AstroidFrontEnd().parse_source(source, path=f"{module_name}.py", module_name=module_name)
    return unit, AnalyzeUnitUseCase(rules).execute(unit)


class TestGeneratedSubclassEndToEnd:

    def test_unit_declaring_the_marked_base_is_clean(self) -> None:
        _, report = _analyze(OWNER, "animal")
        assert report.diagnostics == ()

    def test_references_without_a_marked_base_are_reported(self) -> None:
        unit, report = _analyze(LEAKY, "zoo")
        assert [unit.source[d.span.start:d.span.end] for d in report.diagnostics] == [
            "AutoValue_Animal",
            "AutoValue_Animal",
        ]
        assert [d.location for d in report.diagnostics] == ["zoo.py:11:11", "zoo.py:15:10"]
