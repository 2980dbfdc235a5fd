import typer
from bead import file_utils, legend, render
from bead.errors import BeadPatternError
from bead.pattern import generate_pattern, DEFAULT_GRID_SIZE, DEFAULT_NUM_COLORS
from bead.quantize import RandomSource
import os
from pathlib import Path
from typing import Optional, List, Dict
from enum import Enum

import traceback
import sys

import rich.traceback


class PatternFile(Enum):
    PATTERN_CHART = "pattern_chart"
    VECTOR_CHART = "vector_chart"
    QUANTIZED_GUIDE = "quantized_guide"
    PALETTE_LEGEND = "palette_legend"


PATTERN_FILE_BASENAMES: Dict[PatternFile, str] = {
    PatternFile.PATTERN_CHART: "bead-pattern_chart.png",
    PatternFile.VECTOR_CHART: "bead-pattern_chart.svg",
    PatternFile.QUANTIZED_GUIDE: "bead-pattern_guide.png",
    PatternFile.PALETTE_LEGEND: "bead-palette_legend.png",
}

PRESETS = {
    "small": {"grid_size": 20, "num_colors": 8},
    "medium": {"grid_size": DEFAULT_GRID_SIZE, "num_colors": DEFAULT_NUM_COLORS},
    "large": {"grid_size": 50, "num_colors": 32},
}


def validate_output_dir(
    output_dir: Path, overwrite: bool = False, expect: Optional[List[PatternFile]] = None,
) -> Dict[PatternFile, Path]:
    files_to_check_for_clobber: List[Path] = [output_dir / PATTERN_FILE_BASENAMES[key] for key in (expect or [])]

    if not overwrite:
        clobbered_files_found = [str(p) for p in files_to_check_for_clobber if p.exists()]
        if clobbered_files_found:
            typer.secho("Error: Files already exist:", fg=typer.colors.RED)
            for path_str in clobbered_files_found: typer.secho(f"  {path_str}", fg=typer.colors.RED)
            typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW); raise typer.Exit(code=1)

    return {key: output_dir / name for key, name in PATTERN_FILE_BASENAMES.items()}


def beadgen_cli(
    input_path: Path = typer.Argument(
        ...,
        help="Input image file (e.g., image.jpg).",
        metavar="INPUT_FILE",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    output_dir: Path = typer.Argument(
        ...,
        help="Directory for output files. Will be created if it doesn't exist.",
        metavar="OUTPUT_DIRECTORY",
        file_okay=False, dir_okay=True, writable=True, resolve_path=True,
    ),
    # --- Pattern Options ---
    preset: Optional[str] = typer.Option(
        None, help="Preset pattern size: small, medium, large."
    ),
    grid_size: Optional[int] = typer.Option(
        None, "--grid-size", min=1, help=f"Cells along the longer side of the pattern. Default: {DEFAULT_GRID_SIZE}."
    ),
    num_colors: Optional[int] = typer.Option(
        None, "--num-colors", min=1, help=f"Number of colors in the pattern palette. Default: {DEFAULT_NUM_COLORS}."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the color clustering. Omit for a different palette on every run."
    ),
    # --- Chart Options ---
    cell_size: int = typer.Option(20, "--cell-size", min=4, help="Rendered size of one cell in pixels. Default: 20."),
    show_symbols: bool = typer.Option(True, "--symbols/--no-symbols", help="Draw each cell's legend symbol. Default: True."),
    show_grid_lines: bool = typer.Option(True, "--grid-lines/--no-grid-lines", help="Outline every cell. Default: True."),
    font_path: Optional[Path] = typer.Option(
        None, "--font-path", help="Path to a .ttf font file.",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    # --- Legend Options ---
    swatch_size: int = typer.Option(40, "--swatch-size", min=10, help="Legend swatch size. Default: 40px."),
    legend_columns: int = typer.Option(8, "--legend-columns", min=1, help="Legend swatches per row. Default: 8."),
    skip_legend: bool = typer.Option(False, "--skip-legend", help="Skip generating the palette legend."),
    # --- Output and Operational Options ---
    raster_only: bool = typer.Option(False, "--raster-only", help="Skip vector SVG output."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
):
    """
    Generates a bead / cross-stitch / diamond-painting pattern from an input image.
    """
    command_line_str = " ".join(sys.argv)

    if preset and preset not in PRESETS:
        typer.secho(f"Error: Unknown preset '{preset}'. Choose from: {', '.join(PRESETS)}.", fg=typer.colors.RED); raise typer.Exit(code=1)

    try:
        os.makedirs(output_dir, exist_ok=True)
        typer.echo(f"Using output directory: {output_dir}")
    except OSError as e:
        typer.secho(f"Error creating output directory {output_dir}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    expected_outputs: List[PatternFile] = [PatternFile.PATTERN_CHART, PatternFile.QUANTIZED_GUIDE]
    if not raster_only:
        expected_outputs.append(PatternFile.VECTOR_CHART)
    if not skip_legend:
        expected_outputs.append(PatternFile.PALETTE_LEGEND)

    effective_grid_size = grid_size
    effective_num_colors = num_colors
    if preset:
        typer.echo(f"Applying preset: '{preset}'")
        if effective_grid_size is None: effective_grid_size = PRESETS[preset]["grid_size"]
        if effective_num_colors is None: effective_num_colors = PRESETS[preset]["num_colors"]
    if effective_grid_size is None: effective_grid_size = DEFAULT_GRID_SIZE
    if effective_num_colors is None: effective_num_colors = DEFAULT_NUM_COLORS

    output_paths = validate_output_dir(output_dir, overwrite=yes, expect=expected_outputs)

    typer.echo(f"Pattern grid: {effective_grid_size} cells on the longer side, aiming for {effective_num_colors} colors.")

    try:
        result = generate_pattern(
            input_path,
            grid_size=effective_grid_size,
            num_colors=effective_num_colors,
            rng=RandomSource(seed),
        )
    except BeadPatternError as e:
        typer.secho(f"Error generating pattern from {input_path}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)
    except FileNotFoundError as e:
        typer.secho(f"Error opening image {input_path}: {e}", fg=typer.colors.RED); raise typer.Exit(code=1)

    typer.echo(f"Pattern is {result.width}x{result.height} cells using {len(result.symbol_map)} colors.")

    run_metadata = {
        "SourceImage": str(input_path),
        "GridSize": str(effective_grid_size),
        "GridCells": f"{result.width}x{result.height}",
        "NumColorsTarget": str(effective_num_colors),
        "NumColorsActual": str(len(result.symbol_map)),
        "Seed": "random" if seed is None else str(seed),
    }

    guide_path = output_paths[PatternFile.QUANTIZED_GUIDE]
    chart_path = output_paths[PatternFile.PATTERN_CHART]
    vector_path = output_paths[PatternFile.VECTOR_CHART]
    legend_path = output_paths[PatternFile.PALETTE_LEGEND]
    font_path_str = str(font_path) if font_path else None

    try:
        file_utils.save_pattern_png(
            render.render_guide_image(result),
            guide_path,
            command_line_invocation=command_line_str,
            additional_metadata={"Beadgen-FileType": "Quantized Guide", **run_metadata}
        )
        typer.echo(f"Quantized guide saved to: {guide_path}")

        chart_img = render.render_pattern_image(
            result,
            cell_size=cell_size,
            show_symbols=show_symbols,
            show_grid_lines=show_grid_lines,
            font_path=font_path_str,
        )
        file_utils.save_pattern_png(
            chart_img,
            chart_path,
            command_line_invocation=command_line_str,
            additional_metadata={"Beadgen-FileType": "Pattern Chart", "CellSize": str(cell_size), **run_metadata}
        )
        typer.echo(f"Pattern chart saved to: {chart_path}")
    except Exception as e:
        typer.secho(f"Error rendering raster output: {e}", fg=typer.colors.RED)
        traceback.print_exc()
        raise typer.Exit(code=1)

    if not raster_only:
        try:
            file_utils.save_pattern_svg(
                vector_path,
                result,
                cell_size=cell_size,
                show_symbols=show_symbols,
                show_grid_lines=show_grid_lines,
                command_line_invocation=command_line_str,
                additional_metadata={"Beadgen-FileType": "Vector Pattern Chart", **run_metadata}
            )
            typer.echo(f"SVG chart saved to: {vector_path}")
        except Exception as e:
            typer.secho(f"Error writing SVG output: {e}", fg=typer.colors.RED); traceback.print_exc()

    legend_entries = result.legend_entries()
    typer.echo("\nLegend:")
    for line in legend.format_legend_lines(legend_entries):
        typer.echo(f"  {line}")

    if not skip_legend:
        try:
            legend_img = legend.create_legend_image(
                legend_entries,
                font_path=font_path_str,
                swatch_size=swatch_size,
                columns=legend_columns,
            )
            if legend_img:
                file_utils.save_pattern_png(
                    legend_img,
                    legend_path,
                    command_line_invocation=command_line_str,
                    additional_metadata={"Beadgen-FileType": "Palette Legend", "SwatchSize": str(swatch_size), **run_metadata}
                )
                typer.echo(f"Palette legend saved to: {legend_path}")
            else:
                typer.secho("Warning: Palette legend image could not be generated (empty palette).", fg=typer.colors.YELLOW)
        except Exception as e:
            typer.secho(f"Error generating or saving palette legend: {e}", fg=typer.colors.RED)
            traceback.print_exc()

    typer.secho("\nProcessing complete!", fg=typer.colors.GREEN)
    typer.echo(f"Outputs in: {output_dir.resolve()}")


if __name__ == "__main__":
    rich.traceback.install(show_locals=False, suppress=[typer])
    typer.run(beadgen_cli)
