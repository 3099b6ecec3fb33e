"""CLI entry points for bugscope - Thin Controller using Typer."""

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer

from bugscope.domain.config import ConfigurationLoader
from bugscope.domain.protocols import FrontEndError, FrontEndProtocol, RuleCatalogProtocol
from bugscope.domain.rules import Diagnostic, RegisteredRules
from bugscope.domain.tree import CompilationUnit
from bugscope.use_cases.analyze_batch import AnalyzeBatchUseCase
from bugscope.use_cases.apply_fixes import ApplyFixesUseCase


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    config_loader: ConfigurationLoader
    front_end: FrontEndProtocol
    rules: RegisteredRules
    analyze_batch: AnalyzeBatchUseCase
    apply_fixes: ApplyFixesUseCase
    rule_catalog: RuleCatalogProtocol


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def resolve_target_path(path: Path | None) -> str:
        """Resolve target path: explicit path, else src/ if exists, else '.'."""
        if path and str(path) != ".":
            return str(path)
        src_dir = Path.cwd() / "src"
        if src_dir.exists() and src_dir.is_dir():
            return "src"
        return "."

    @staticmethod
    def collect_files(paths: list[Path] | None) -> list[str]:
        """Expand files and directories into a sorted, de-duplicated list of .py files."""
        targets = paths or [Path(CLIAppFactory.resolve_target_path(None))]
        found: set[str] = set()
        for target in targets:
            if target.is_dir():
                found.update(str(p) for p in target.rglob("*.py"))
            else:
                found.add(str(target))
        return sorted(found)

    @staticmethod
    def format_diagnostic(diagnostic: Diagnostic) -> str:
        line = f"{diagnostic.location}: {diagnostic.severity.value} [{diagnostic.rule_id}] {diagnostic.message}"
        if diagnostic.has_fix:
            line += " (fix available)"
        return line

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="bugscope",
            help="bugscope: anti-pattern checks with suggested fixes. Run 'bugscope check' to report; 'bugscope fix' to apply fixes.",
            add_completion=False,
        )

        @app.callback()
        def main(
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
        ) -> None:
            logging.basicConfig(
                level=logging.DEBUG if verbose else logging.WARNING,
                format="%(levelname)s %(name)s: %(message)s",
            )

        def _parse_all(files: list[str]) -> tuple[list[CompilationUnit], list[str]]:
            units: list[CompilationUnit] = []
            failed: list[str] = []
            for file_path in files:
                try:
                    units.append(deps.front_end.parse_file(file_path))
                except FrontEndError as exc:
                    print(f"{file_path}: cannot analyze: {exc}", file=sys.stderr)
                    failed.append(file_path)
            return units, failed

        @app.command()
        def check(
            paths: list[Path] | None = typer.Argument(None, help="Files or directories to check (default: src/ or .)"),  # noqa: B008, RUF100
            output: str = typer.Option("text", "--format", help="Output format: text (default) or json"),
        ) -> None:
            """Report diagnostics for every Python file under the given paths."""
            files = CLIAppFactory.collect_files(paths)
            units, failed = _parse_all(files)
            reports = deps.analyze_batch.execute(units)
            diagnostics = [d for report in reports for d in report.diagnostics]
            if output == "json":
                print(json.dumps([d.to_dict() for d in diagnostics], indent=2))
            else:
                for diagnostic in diagnostics:
                    typer.echo(CLIAppFactory.format_diagnostic(diagnostic))
                typer.echo(
                    f"{len(diagnostics)} diagnostic(s) in {len(units)} file(s)"
                    + (f", {len(failed)} file(s) skipped" if failed else "")
                )
            if any(report.has_errors for report in reports):
                sys.exit(1)

        @app.command()
        def fix(
            paths: list[Path] | None = typer.Argument(None, help="Files or directories to fix (default: src/ or .)"),  # noqa: B008, RUF100
        ) -> None:
            """Apply every suggested fix in place."""
            files = CLIAppFactory.collect_files(paths)
            summary = deps.apply_fixes.execute(files)
            for file_path in summary.skipped_files:
                print(f"{file_path}: cannot analyze", file=sys.stderr)
            for file_path in summary.modified_files:
                typer.echo(f"fixed {file_path}")
            typer.echo(
                f"{summary.fixes_offered} fix(es) offered, {len(summary.modified_files)} file(s) modified"
            )

        @app.command()
        def rules() -> None:
            """List the enabled rules."""
            for rule_id in deps.rules.rule_ids:
                rule = deps.rules.get(rule_id)
                if rule is None:
                    continue
                entry = deps.rule_catalog.get_entry(rule_id) or {}
                fixable = " (fixable)" if entry.get("fixable") else ""
                typer.echo(f"{rule_id} v{rule.version} {rule.severity.value}{fixable}: {rule.summary}")
            disabled = sorted(deps.config_loader.disabled_rules)
            if disabled:
                typer.echo(f"disabled: {', '.join(disabled)}")

        @app.command()
        def explain(
            rule_id: str = typer.Argument(..., help="Rule id, e.g. RandomModInteger"),
        ) -> None:
            """Show the documentation for one rule."""
            entry = deps.rule_catalog.get_entry(rule_id)
            if entry is None:
                print(f"Unknown rule: {rule_id}", file=sys.stderr)
                sys.exit(2)
            typer.echo(f"{rule_id}: {entry.get('display_name', rule_id)}")
            typer.echo(f"Severity: {entry.get('severity', 'WARNING')}")
            typer.echo(f"Fixable: {'yes' if entry.get('fixable') else 'no'}")
            if entry.get("summary"):
                typer.echo(f"\n{entry['summary']}")
            if entry.get("explanation"):
                typer.echo(f"\n{entry['explanation']}")
            for ref in entry.get("references", []) or []:
                typer.echo(f"  see: {ref}")

        return app
