from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from muse_prep.core.characters import LANGUAGE_PROFILES, available_languages
from muse_prep.core.config import DEFAULT_CONFIG_PATH, PreprocessConfig, load_preprocess_config
from muse_prep.core.diagnostics import FootnoteMismatch, FootnoteMismatchError
from muse_prep.core.footnotes import FootnoteFixer
from muse_prep.core.io import read_text
from muse_prep.core.pipelines import preprocess_dir_pipeline, preprocess_file, preprocess_text


app = typer.Typer(no_args_is_help=True, add_completion=False)

EXIT_USAGE = 1
EXIT_MISMATCH = 2


def _setup_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_mismatch(mismatch: FootnoteMismatch) -> None:
    title = f"Footnotes mismatch ({mismatch.kind})"
    if mismatch.source:
        title += f": {escape(mismatch.source)}"
    table = Table(title=title)
    table.add_column("", style="cyan")
    table.add_column("count", justify="right")
    table.add_column("found (original numbers)")
    table.add_row("references", str(mismatch.references), escape(mismatch.references_found) or "—")
    table.add_row("footnotes", str(mismatch.footnotes), escape(mismatch.footnotes_found) or "—")
    print(table)
    if mismatch.differences:
        # plain echo: the diff is full of [n] markers
        typer.echo(mismatch.differences)


def _require_file(path: Path) -> None:
    if not path.is_file():
        typer.secho(f"Input file not found: {path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_USAGE)


@app.command("fix")
def fix_cmd(
    input: Path = typer.Argument(..., help="Muse document"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file (stdout if omitted)"),
    lang: Optional[str] = typer.Option(None, "--lang", help="Language code for typography"),
    links: Optional[bool] = typer.Option(None, "--links/--no-links", help="Wrap bare URLs"),
    typography: Optional[bool] = typer.Option(None, "--typography/--no-typography", help="Fix quotes and dashes"),
    footnotes: Optional[bool] = typer.Option(None, "--footnotes/--no-footnotes", help="Renumber footnotes"),
    fix_nbsp: Optional[bool] = typer.Option(None, "--fix-nbsp/--no-fix-nbsp", help="Insert non-breaking spaces"),
    remove_nbsp: bool = typer.Option(False, "--remove-nbsp", help="Replace non-breaking spaces with plain ones"),
    show_nbsp: bool = typer.Option(False, "--show-nbsp", help="Show non-breaking spaces as ~~"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to preprocess.yaml"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Run the whole preprocessing pipeline on one document."""
    cfg = load_preprocess_config(config)
    _setup_logging(cfg.log_level, verbose)
    overrides = {
        "lang": lang,
        "fix_links": links,
        "fix_typography": typography,
        "fix_footnotes": footnotes,
        "fix_nbsp": fix_nbsp,
        "remove_nbsp": remove_nbsp or None,
        "show_nbsp": show_nbsp or None,
    }
    cfg = PreprocessConfig(**{**cfg.model_dump(), **{k: v for k, v in overrides.items() if v is not None}})

    _require_file(input)
    try:
        if output is None:
            typer.echo(preprocess_text(read_text(input, encoding=cfg.encoding), cfg), nl=False)
        else:
            out = preprocess_file(input, output, cfg)
            print(f"[green]Written[/green]: {out}")
    except FootnoteMismatchError as exc:
        exc.mismatch.source = exc.mismatch.source or str(input)
        _print_mismatch(exc.mismatch)
        raise typer.Exit(code=EXIT_MISMATCH)


@app.command("footnotes")
def footnotes_cmd(
    input: Path = typer.Argument(..., help="Muse document"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Output file (dry run if omitted)"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Check and renumber footnotes only."""
    _setup_logging("INFO", verbose)
    _require_file(input)
    fixer = FootnoteFixer(input, output, debug=verbose)
    result = fixer.process()
    if result is None:
        _print_mismatch(fixer.error)
        raise typer.Exit(code=EXIT_MISMATCH)
    if output is None:
        print(f"[green]Footnotes OK[/green]: {input}")
    else:
        print(f"[green]Written[/green]: {result}")


@app.command("batch")
def batch_cmd(
    in_dir: Path = typer.Argument(..., help="Folder with Muse documents"),
    out_dir: Path = typer.Argument(..., help="Output folder"),
    pattern: str = typer.Option("*.muse", "--pattern", help="Glob for input files"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="Path to preprocess.yaml"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Debug logging"),
):
    """Preprocess a whole folder; files with footnote problems are skipped."""
    cfg = load_preprocess_config(config)
    _setup_logging(cfg.log_level, verbose)
    if not in_dir.is_dir():
        typer.secho(f"Not a directory: {in_dir}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_USAGE)

    result = preprocess_dir_pipeline(in_dir, out_dir, cfg, pattern=pattern)
    for p in result.produced:
        print(f"[green]Written[/green]: {p}")
    for mismatch in result.failed:
        _print_mismatch(mismatch)
    if not result.ok:
        raise typer.Exit(code=EXIT_MISMATCH)


@app.command("langs")
def langs_cmd():
    """List the supported languages and their punctuation."""
    table = Table(title="Typography profiles")
    table.add_column("lang", style="cyan")
    table.add_column("double")
    table.add_column("single")
    table.add_column("dash")
    table.add_column("range")
    table.add_column("extras")
    for code in available_languages():
        p = LANGUAGE_PROFILES[code]
        extras = [name for name, on in (
            ("ordinals", p.ordinals),
            ("ellipsis", p.ellipsis),
            ("nbsp", p.has_nbsp_rules),
        ) if on]
        table.add_row(
            code,
            f"{p.ldouble}…{p.rdouble}",
            f"{p.lsingle}…{p.rsingle}",
            p.emdash,
            p.endash,
            ", ".join(extras) or "—",
        )
    print(table)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
