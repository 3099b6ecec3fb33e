"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from bugscope.infrastructure.di.container import BugscopeContainer
from bugscope.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = BugscopeContainer.get_instance()

    deps = CLIDependencies(
        config_loader=container.get_config_loader(),
        front_end=container.get_front_end(),
        rules=container.get_rules(),
        analyze_batch=container.get_analyze_batch(),
        apply_fixes=container.get_apply_fixes(),
        rule_catalog=container.get_rule_catalog(),
    )

    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
