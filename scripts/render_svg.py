#!/usr/bin/env python3
"""
SVG Rendering CLI

Renders SVG files to PNG through the native resvg engine.

Commands:
    render - Render a single SVG file to PNG
    check  - Verify the native library can be loaded

Examples:\n

    render_svg.py render logo.svg                                # Writes logo.png

    render_svg.py render logo.svg -o out/logo.png --width 512    # Fixed width

    render_svg.py render card.svg --font fonts/Inter-Bold.ttf --sans-serif-family Inter

    render_svg.py render card.svg --config presets/thumbnail.yaml

    render_svg.py check                                          # Library diagnostics
"""

import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from svgraster.contexts.rendering import (
    RenderConfiguration,
    SvgRasterError,
    load_render_configuration,
    read_font_files,
    render_to_png,
)
from svgraster.contexts.rendering.logger import setup_rendering_logger
from svgraster.contexts.rendering.native import POINTER_WIDTH, SIZE_WIDTH, NativeEngine
from svgraster.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


app = typer.Typer(
    help="Render SVG files to PNG with the native resvg engine",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def build_configuration(
    config_path: Optional[Path],
    overrides: dict,
    font_paths: List[Path],
) -> RenderConfiguration:
    """Merge a YAML preset (if any) with options given on the command line."""
    if config_path is not None:
        configuration = load_render_configuration(config_path)
    else:
        configuration = RenderConfiguration()

    changes = {key: value for key, value in overrides.items() if value is not None}
    if font_paths:
        changes["use_fonts"] = list(configuration.use_fonts or []) + read_font_files(font_paths)

    return configuration.replace(**changes)


@app.command("render")
def render_command(
    input_path: Annotated[Path, typer.Argument(help="SVG file to render")],
    output_path: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="PNG output path (default: input with .png suffix)"),
    ] = None,
    width: Annotated[Optional[int], typer.Option(help="Output width in pixels")] = None,
    height: Annotated[Optional[int], typer.Option(help="Output height in pixels")] = None,
    zoom: Annotated[Optional[float], typer.Option(help="Zoom factor")] = None,
    dpi: Annotated[Optional[int], typer.Option(help="Resolution for physical units")] = None,
    background: Annotated[Optional[str], typer.Option(help="Background color")] = None,
    export_id: Annotated[Optional[str], typer.Option(help="Id of the element to export")] = None,
    export_area_page: Annotated[
        bool, typer.Option("--export-area-page", help="Export the page area")
    ] = False,
    no_export_area_drawing: Annotated[
        bool, typer.Option("--no-export-area-drawing", help="Do not export the drawing area")
    ] = False,
    resources_dir: Annotated[
        Optional[str], typer.Option(help="Directory for relative image references")
    ] = None,
    fonts: Annotated[
        Optional[List[Path]],
        typer.Option("--font", "-f", help="Font file to embed (repeatable)"),
    ] = None,
    font_file: Annotated[Optional[str], typer.Option(help="Font file loaded by the engine")] = None,
    font_dir: Annotated[Optional[str], typer.Option(help="Font directory loaded by the engine")] = None,
    skip_system_fonts: Annotated[
        bool, typer.Option("--skip-system-fonts", help="Do not load system fonts")
    ] = False,
    serif_family: Annotated[Optional[str], typer.Option(help="Family for 'serif'")] = None,
    sans_serif_family: Annotated[Optional[str], typer.Option(help="Family for 'sans-serif'")] = None,
    cursive_family: Annotated[Optional[str], typer.Option(help="Family for 'cursive'")] = None,
    fantasy_family: Annotated[Optional[str], typer.Option(help="Family for 'fantasy'")] = None,
    monospace_family: Annotated[Optional[str], typer.Option(help="Family for 'monospace'")] = None,
    config_path: Annotated[
        Optional[Path], typer.Option("--config", "-c", help="YAML render preset")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Write a debug log for this render")
    ] = False,
):
    """
    Render an SVG file to PNG.

    Options given on the command line override values from --config.

    Examples:\n

        $ render_svg.py render logo.svg --zoom 2                  # Double size

        $ render_svg.py render logo.svg --background white        # Opaque background
    """
    if not input_path.is_file():
        typer.secho(f"Error: SVG file not found: {input_path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if output_path is None:
        output_path = input_path.with_suffix(".png")

    try:
        document = input_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        typer.secho(
            f"✗ SVG file is not valid UTF-8: {input_path} ({e.reason})\n", fg=typer.colors.RED, err=True
        )
        raise typer.Exit(code=1)

    try:
        configuration = build_configuration(
            config_path,
            overrides={
                "width": width,
                "height": height,
                "zoom": zoom,
                "dpi": dpi,
                "background": background,
                "export_id": export_id,
                "export_area_page": True if export_area_page else None,
                "export_area_drawing": False if no_export_area_drawing else None,
                "resources_dir": resources_dir,
                "use_font_file": font_file,
                "use_font_dir": font_dir,
                "skip_system_fonts": True if skip_system_fonts else None,
                "serif_family": serif_family,
                "sans_serif_family": sans_serif_family,
                "cursive_family": cursive_family,
                "fantasy_family": fantasy_family,
                "monospace_family": monospace_family,
            },
            font_paths=fonts or [],
        )

        engine = NativeEngine.load()
        if verbose:
            log_file = setup_rendering_logger(LOGS_PATH / f"render_{now()}", engine.source)
            typer.echo(f"  Log: {log_file}")

        png_data = render_to_png(document, configuration, engine=engine)
    except SvgRasterError as e:
        typer.secho(f"✗ Render failed: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(png_data)

    typer.secho("✓ Render succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  PNG: {output_path} ({len(png_data)} bytes)")


@app.command("check")
def check_command():
    """
    Load the native library and report platform widths.

    Examples:\n

        $ SVGRASTER_LIB_DIR=native/resvg-wrapper/target/release render_svg.py check
    """
    try:
        engine = NativeEngine.load()
    except SvgRasterError as e:
        typer.secho(f"✗ {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho("✓ Native library loaded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Library: {engine.source}")
    typer.echo(f"  Pointer width: {POINTER_WIDTH} bytes")
    typer.echo(f"  size_t width: {SIZE_WIDTH} bytes")


if __name__ == "__main__":
    app()
