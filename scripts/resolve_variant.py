#!/usr/bin/env python3
"""
Resolve Resume Variants

Applies a variant specification (section settings, rules, overrides) to a
master resume and shows or saves the resolved resume.

Examples:
    # Print the resolved resume as YAML
    python scripts/resolve_variant.py resolve data/master.yaml data/variants/grc.yaml

    # Save it and show what changed
    python scripts/resolve_variant.py resolve data/master.yaml data/variants/grc.yaml -o outs/grc.yaml --diff

    # Only show what the variant changes
    python scripts/resolve_variant.py diff data/master.yaml data/variants/grc.yaml

    # Check a variant file for malformed rules and overrides
    python scripts/resolve_variant.py validate data/variants/grc.yaml
"""

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from prism.contexts.modeling import (
    InvalidDocumentError,
    VariantValidationError,
    load_master,
    load_variant,
    resume_to_yaml,
    save_resume,
)
from prism.contexts.resolution import ResolutionError, format_diff_report, generate_diff, resolve_variant
from prism.contexts.resolution.logger import setup_resolution_logger
from prism.utils.logger import get_session_log_dir

load_dotenv()

app = typer.Typer(
    help="Resolve resume variants against a master resume",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load_inputs(master_path: Path, variant_path: Path):
    try:
        master = load_master(master_path)
        variant = load_variant(variant_path)
    except (FileNotFoundError, InvalidDocumentError, VariantValidationError, ValueError) as e:
        _fail(str(e))
    return master, variant


@app.command("resolve")
def resolve_command(
    master_path: Annotated[Path, typer.Argument(help="Master resume file (YAML or JSON)")],
    variant_path: Annotated[Path, typer.Argument(help="Variant specification file (YAML or JSON)")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the resolved resume here instead of stdout"),
    ] = None,
    show_diff: Annotated[
        bool,
        typer.Option("--diff", "-d", help="Also print the diff against the master"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Echo debug logging to the console"),
    ] = False,
):
    """
    Resolve a variant and output the resulting resume.

    Examples:\n
        $ resolve_variant.py resolve master.yaml grc.yaml

        $ resolve_variant.py resolve master.yaml grc.yaml -o outs/grc.yaml --diff
    """
    log_file = setup_resolution_logger(
        get_session_log_dir("resolve"),
        variant_name=variant_path.stem,
        console_level="DEBUG" if verbose else "WARNING",
    )
    master, variant = _load_inputs(master_path, variant_path)

    try:
        resolved = resolve_variant(master, variant)
    except ResolutionError as e:
        _fail(f"Error: {e}\n  Log: {log_file}")

    if output:
        save_resume(resolved, output)
        typer.secho("✓ Variant resolved", fg=typer.colors.GREEN, bold=True, err=True)
        typer.echo(f"  Output: {output}", err=True)
    else:
        typer.echo(resume_to_yaml(resolved).rstrip())

    if show_diff:
        report = generate_diff(master, resolved, variant)
        typer.echo(format_diff_report(report, title=f"Diff: {variant.name or variant_path.stem}"), err=output is None)


@app.command("diff")
def diff_command(
    master_path: Annotated[Path, typer.Argument(help="Master resume file (YAML or JSON)")],
    variant_path: Annotated[Path, typer.Argument(help="Variant specification file (YAML or JSON)")],
):
    """
    Show what a variant changes relative to the master.

    Examples:\n
        $ resolve_variant.py diff master.yaml grc.yaml
    """
    setup_resolution_logger(get_session_log_dir("diff"), variant_name=variant_path.stem, console_level="WARNING")
    master, variant = _load_inputs(master_path, variant_path)

    try:
        resolved = resolve_variant(master, variant)
    except ResolutionError as e:
        _fail(f"Error: {e}")

    report = generate_diff(master, resolved, variant)
    typer.echo(format_diff_report(report, title=f"Diff: {variant.name or variant_path.stem}"))


@app.command("validate")
def validate_command(
    variant_paths: Annotated[
        list[Path],
        typer.Argument(help="Variant specification files to check"),
    ],
):
    """
    Check variant files for malformed rules, overrides and section settings.

    Examples:\n
        $ resolve_variant.py validate data/variants/*.yaml
    """
    failures = 0
    for variant_path in variant_paths:
        try:
            variant = load_variant(variant_path)
        except VariantValidationError as e:
            typer.secho(f"✗ {variant_path}", fg=typer.colors.RED, bold=True)
            for issue in e.issues:
                typer.echo(f"    {issue}")
            failures += 1
            continue
        except (FileNotFoundError, ValueError) as e:
            # Missing file, unparseable YAML or a top level that isn't a mapping
            typer.secho(f"✗ {e}", fg=typer.colors.RED)
            failures += 1
            continue

        typer.secho(
            f"✓ {variant_path} ({len(variant.rules)} rules, {len(variant.overrides)} overrides)",
            fg=typer.colors.GREEN,
        )

    if failures:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
