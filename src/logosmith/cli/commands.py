"""
Click command definitions for the logosmith CLI.

Every command builds an Orchestrator from the environment, runs one
operation and prints the JSON result on stdout. Progress and summaries go to
stderr.
"""

from collections.abc import Callable
from pathlib import Path

import click

from logosmith import __version__
from logosmith.cli import progress
from logosmith.cli.handlers import run_with_error_handling
from logosmith.cli.utils import to_json
from logosmith.core.config import Config
from logosmith.core.models import (
    DEFAULT_STYLE,
    ENHANCEMENT_TYPES,
    REFERENCE_STYLE_SIMILAR,
    BusinessProfile,
    EnhancementOptions,
    ReferenceOptions,
    TextOptions,
)
from logosmith.core.orchestrator import Orchestrator
from logosmith.logging_config import configure_logging, get_verbosity_from_env


def _common_options(fn: Callable[..., None]) -> Callable[..., None]:
    """Options shared by every command."""
    fn = click.option(
        "--debug-api",
        is_flag=True,
        help="Log raw API request payload and response (image data truncated).",
    )(fn)
    fn = click.option(
        "--output-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=None,
        help="Directory for generated artifacts (overrides LOGOSMITH_OUTPUT_DIR).",
    )(fn)
    fn = click.option(
        "--verbose",
        "-v",
        "verbose_count",
        count=True,
        help="Increase verbosity: -v also show instructions, -vv show HTTP/cache detail.",
    )(fn)
    fn = click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Only print the JSON result or errors.",
    )(fn)
    return fn


def _setup(
    quiet: bool, verbose_count: int, output_dir: Path | None, debug_api: bool
) -> Orchestrator:
    """Apply logging flags and build the orchestrator from the environment."""
    # CLI flags override LOGOSMITH_VERBOSITY
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    config = Config.from_env()
    if output_dir is not None:
        config.output_dir = output_dir
    if debug_api:
        config.debug_api = True
    return Orchestrator.from_config(config)


def _remote_model(orchestrator: Orchestrator) -> str | None:
    return orchestrator.remote.model if orchestrator.remote is not None else None


@click.group(
    help=f"""Logo generation and enhancement with tiered fallback (Gemini, Pillow, synthetic).

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="logosmith")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--type",
    "enhancement_type",
    type=click.Choice(ENHANCEMENT_TYPES, case_sensitive=False),
    default="quality",
    show_default=True,
    help="Kind of enhancement.",
)
@click.option("--style", default=DEFAULT_STYLE, show_default=True, help="Style for --type style.")
@click.option("--custom-prompt", default="", help="Extra instructions for the remote model.")
@_common_options
def enhance(
    image: Path,
    enhancement_type: str,
    style: str,
    custom_prompt: str,
    quiet: bool,
    verbose_count: int,
    output_dir: Path | None,
    debug_api: bool,
) -> None:
    """Enhance an existing logo image. The input file is left untouched."""

    def do_enhance() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        options = EnhancementOptions(
            type=enhancement_type.lower(), style=style, custom_prompt=custom_prompt
        )
        data = image.read_bytes()
        if quiet:
            result = orchestrator.enhance(data, options)
        else:
            with progress.operation_progress("Enhancing logo", _remote_model(orchestrator)):
                result = orchestrator.enhance(data, options)
            progress.print_success_result(result, title="Logo Enhanced")
        click.echo(to_json(result.to_dict()))

    run_with_error_handling(do_enhance, quiet=quiet)


@cli.command()
@click.option(
    "--description", "-d", required=True, help="Text description of the logo to generate."
)
@click.option("--style", default=DEFAULT_STYLE, show_default=True, help="Visual style.")
@click.option(
    "--color",
    "colors",
    multiple=True,
    help="Brand color (hex or CSS name). Repeat for several; the first is primary.",
)
@click.option("--business-type", default=None, help="Industry, e.g. tech or bakery.")
@_common_options
def generate(
    description: str,
    style: str,
    colors: tuple[str, ...],
    business_type: str | None,
    quiet: bool,
    verbose_count: int,
    output_dir: Path | None,
    debug_api: bool,
) -> None:
    """Generate a logo from a text description. Always produces an artifact."""

    def do_generate() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        options = TextOptions(style=style, colors=list(colors), business_type=business_type)
        if quiet:
            result = orchestrator.generate_from_text(description, options)
        else:
            with progress.operation_progress("Generating logo", _remote_model(orchestrator)):
                result = orchestrator.generate_from_text(description, options)
            progress.print_success_result(result, title="Logo Generated")
        click.echo(to_json(result.to_dict()))

    run_with_error_handling(do_generate, quiet=quiet)


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--business-name", default=None, help="Business name to put on the logo.")
@click.option(
    "--style",
    default=REFERENCE_STYLE_SIMILAR,
    show_default=True,
    help="Target style; 'similar' keeps the reference's style.",
)
@click.option(
    "--modification",
    "modifications",
    multiple=True,
    help="Change to apply to the reference. Repeat for several.",
)
@_common_options
def reference(
    image: Path,
    business_name: str | None,
    style: str,
    modifications: tuple[str, ...],
    quiet: bool,
    verbose_count: int,
    output_dir: Path | None,
    debug_api: bool,
) -> None:
    """Generate a logo from a reference image. The input file is left untouched."""

    def do_reference() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        options = ReferenceOptions(
            business_name=business_name, style=style, modifications=list(modifications)
        )
        data = image.read_bytes()
        if quiet:
            result = orchestrator.generate_from_reference(data, options)
        else:
            with progress.operation_progress(
                "Creating logo from reference", _remote_model(orchestrator)
            ):
                result = orchestrator.generate_from_reference(data, options)
            progress.print_success_result(result, title="Logo Created")
        click.echo(to_json(result.to_dict()))

    run_with_error_handling(do_reference, quiet=quiet)


@cli.command()
@click.argument("filename")
@click.option(
    "--out",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the artifact (default: FILENAME in the current directory).",
)
@_common_options
def download(
    filename: str,
    out: Path | None,
    quiet: bool,
    verbose_count: int,
    output_dir: Path | None,
    debug_api: bool,
) -> None:
    """Copy a stored artifact out of the artifact store."""

    def do_download() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        target = out if out is not None else Path(filename)
        chunks = orchestrator.open_artifact(filename)
        if target.resolve() == orchestrator.store.path_for(filename).resolve():
            # opening the stored file for writing would truncate it
            if not quiet:
                progress.print_info(f"{filename} is already at {target}")
            click.echo(str(target))
            return
        written = 0
        with target.open("wb") as f:
            for chunk in chunks:
                f.write(chunk)
                written += len(chunk)
        if not quiet:
            progress.print_success(f"Saved {filename} to {target} ({written} bytes)")
        click.echo(str(target))

    run_with_error_handling(do_download, quiet=quiet)


@cli.command()
@_common_options
def status(quiet: bool, verbose_count: int, output_dir: Path | None, debug_api: bool) -> None:
    """Show which tiers and backends are available."""

    def do_status() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        click.echo(to_json(orchestrator.status()))

    run_with_error_handling(do_status, quiet=quiet)


@cli.command()
@click.option("--name", required=True, help="Business name.")
@click.option("--type", "business_type", required=True, help="Business type, e.g. tech.")
@click.option("--description", default="", help="What the business does.")
@click.option("--audience", default="", help="Target audience.")
@click.option(
    "--describe",
    is_flag=True,
    help="Also write a creative logo description usable with 'generate'.",
)
@_common_options
def analyze(
    name: str,
    business_type: str,
    description: str,
    audience: str,
    describe: bool,
    quiet: bool,
    verbose_count: int,
    output_dir: Path | None,
    debug_api: bool,
) -> None:
    """Brand insights for a business: personality, colors, styles, symbols, typography."""

    def do_analyze() -> None:
        orchestrator = _setup(quiet, verbose_count, output_dir, debug_api)
        profile = BusinessProfile(
            name=name, type=business_type, description=description, target_audience=audience
        )
        analysis = orchestrator.analyze_business(profile)
        if describe:
            analysis["description"] = orchestrator.describe_business(
                profile, styles=analysis.get("style_suggestions") or []
            )
        click.echo(to_json(analysis))

    run_with_error_handling(do_analyze, quiet=quiet)


def main() -> None:
    """Entry point for the logosmith console script."""
    cli()


__all__ = ["cli", "main", "enhance", "generate", "reference", "download", "status", "analyze"]
