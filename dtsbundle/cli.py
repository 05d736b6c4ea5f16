"""CLI entry point for dtsbundle."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from dtsbundle.core.bundler import BundleOutput, generate_dts_bundle, get_program_units
from dtsbundle.core.config import EntryPointConfig, LibrariesOptions, OutputOptions
from dtsbundle.core.exceptions import SnapshotError
from dtsbundle.core.graph import build_usage_graph
from dtsbundle.resolution import SnapshotOracle, load_snapshot

app = typer.Typer(
    name="dtsbundle",
    help="Bundle the public type surface of a program into one declaration file.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; stdout carries the bundles."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def output_file_name(entry_file: str) -> str:
    """``src/index.ts`` -> ``index.d.ts``."""
    name = Path(entry_file).name
    for suffix in (".d.ts", ".tsx", ".ts"):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return f"{name}.d.ts"


@app.command()
def bundle(
    snapshot: Annotated[Path, typer.Argument(help="Resolved program snapshot (JSON)")],
    entries: Annotated[list[str], typer.Argument(help="Entry files to bundle")],
    out_dir: Annotated[
        Path | None, typer.Option("--out-dir", "-o", help="Write <entry>.d.ts files here")
    ] = None,
    inline: Annotated[
        list[str] | None, typer.Option("--inline", help="Library whose declarations are inlined")
    ] = None,
    imported: Annotated[
        list[str] | None,
        typer.Option("--import", help="Library imported from (default: every library)"),
    ] = None,
    allowed_types: Annotated[
        list[str] | None,
        typer.Option("--allowed-types", help="@types library allowed as reference (default: all)"),
    ] = None,
    sort: Annotated[bool, typer.Option("--sort", help="Sort output statements")] = False,
    umd_module_name: Annotated[
        str | None, typer.Option("--umd-module-name", help="Emit 'export as namespace NAME'")
    ] = None,
    inline_declare_globals: Annotated[
        bool, typer.Option("--inline-declare-global", help="Inline 'declare global' blocks")
    ] = False,
    inline_declare_externals: Annotated[
        bool,
        typer.Option("--inline-declare-externals", help="Inline 'declare module' of libraries"),
    ] = False,
    no_banner: Annotated[bool, typer.Option("--no-banner", help="Omit the banner comment")] = False,
    respect_preserve_const_enum: Annotated[
        bool,
        typer.Option("--respect-preserve-const-enum", help="Honour preserveConstEnums"),
    ] = False,
    fail_on_class: Annotated[
        bool, typer.Option("--fail-on-class", help="Fail if a class ends up in a bundle")
    ] = False,
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Bundle one or more entry files of a program snapshot."""
    setup_logging(verbose)

    try:
        program = load_snapshot(snapshot)
    except SnapshotError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e

    libraries = LibrariesOptions(
        inlined_libraries=inline or [],
        imported_libraries=imported,
        allowed_types_libraries=allowed_types,
    )
    output = OutputOptions(
        sort_nodes=sort,
        umd_module_name=umd_module_name,
        inline_declare_globals=inline_declare_globals,
        inline_declare_externals=inline_declare_externals,
        no_banner=no_banner,
        respect_preserve_const_enum=respect_preserve_const_enum,
    )
    configs = [
        EntryPointConfig(
            file_path=entry, libraries=libraries, output=output, fail_on_class=fail_on_class
        )
        for entry in entries
    ]

    outputs = generate_dts_bundle(program, SnapshotOracle(program), configs)

    if output_json:
        print(json.dumps([output_to_dict(o) for o in outputs]))
    else:
        for result in outputs:
            write_output(result, out_dir)

    if not all(o.ok for o in outputs):
        raise typer.Exit(code=1)


def output_to_dict(output: BundleOutput) -> dict[str, object]:
    return {
        "entry": output.entry.file_path,
        "ok": output.ok,
        "text": output.text,
        "error": str(output.error) if output.error is not None else None,
    }


def write_output(output: BundleOutput, out_dir: Path | None) -> None:
    """Print or save one bundle; failures are reported and skipped."""
    entry = output.entry.file_path
    if output.text is None:
        err_console.print(f"[red]{entry}: {output.error}[/red]")
        return

    if out_dir is None:
        sys.stdout.write(output.text)
        return

    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / output_file_name(entry)
    target.write_text(output.text, encoding="utf-8")
    err_console.print(f"[green]{entry}[/green] -> {target}")


@app.command()
def stats(
    snapshot: Annotated[Path, typer.Argument(help="Resolved program snapshot (JSON)")],
    output_json: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show program and usage graph statistics of a snapshot."""
    try:
        program = load_snapshot(snapshot)
    except SnapshotError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e

    oracle = SnapshotOracle(program)
    units = get_program_units(program, oracle)
    graph = build_usage_graph(units, oracle)

    result = {
        "files": len(program.source_units),
        "root_files": len(program.root_file_names),
        "statements": sum(len(u.statements) for u in program.source_units),
        "graph_nodes": graph.num_nodes,
        "graph_edges": graph.num_edges,
    }

    if output_json:
        print(json.dumps(result))
    else:
        console.print(f"Files: {result['files']} ({result['root_files']} root)")
        console.print(f"Statements: {result['statements']}")
        console.print(f"Graph: {result['graph_nodes']} nodes, {result['graph_edges']} edges")


@app.command()
def version() -> None:
    """Print the dtsbundle version."""
    from dtsbundle import __version__

    console.print(f"dtsbundle {__version__}")


if __name__ == "__main__":
    app()
