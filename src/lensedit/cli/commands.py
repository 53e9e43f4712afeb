"""
Click command definitions for the lensedit CLI.

This module contains the Click command group and all CLI commands
(edit, presets, ui).
"""

import asyncio
import os
import time
from pathlib import Path

import click

from lensedit import (
    Config,
    GeminiClient,
    GenerationError,
    ImageFile,
    SessionController,
    SessionPhase,
    ValidationError,
    __version__,
    decode_data_url,
    get_preset,
    is_image_media_type,
    list_presets,
)
from lensedit.cli import progress
from lensedit.cli.handlers import run_with_error_handling
from lensedit.cli.utils import default_output_path
from lensedit.logging_config import configure_logging, get_verbosity_from_env


def _resolve_instruction(prompt: str | None, preset: str | None) -> str:
    """Return the instruction from --prompt or --preset (exactly one must be given)."""
    if prompt is not None and preset is not None:
        raise ValidationError("Use either --prompt or --preset, not both.", field="prompt")
    if preset is not None:
        return get_preset(preset).text
    if prompt is None or not prompt.strip():
        raise ValidationError("Instruction cannot be empty", field="prompt")
    return prompt


@click.group(
    help=f"""AI image editing with Gemini (gemini-2.5-flash-image).

\b
Version: {__version__}
"""
)
@click.version_option(version=__version__, package_name="lensedit")
@click.pass_context
def cli(ctx: click.Context) -> None:
    ctx.color = True


@cli.command()
@click.option(
    "--image",
    "-i",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to the image to edit.",
)
@click.option("--prompt", "-p", help="Edit instruction, e.g. 'make it look like a watercolor'.")
@click.option("--preset", help="Use a bundled preset instruction (see `lensedit presets`).")
@click.option("--out", "-o", type=click.Path(path_type=Path), help="Output file path.")
@click.option(
    "--api-key",
    envvar="GEMINI_API_KEY",
    help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Minimize progress messages; only print result path or errors.",
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase verbosity: -v also show the instruction, -vv show API detail.",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log raw API request payload and response (image data truncated) for debugging.",
)
def edit(
    image: Path,
    prompt: str | None,
    preset: str | None,
    out: Path | None,
    api_key: str | None,
    quiet: bool,
    verbose_count: int,
    debug_api: bool,
) -> None:
    """Edit an image with a natural-language instruction."""
    verbose_level = min(verbose_count, 2) if verbose_count > 0 else get_verbosity_from_env()
    configure_logging(verbose_level=verbose_level, quiet=quiet)

    def do_edit() -> None:
        # 1. Load and validate config
        config = Config.from_env()
        if api_key is not None:
            config.set_api_key(api_key)
        if debug_api:
            config.debug_api = True
        config.validate()

        # 2. Instruction and input image
        instruction = _resolve_instruction(prompt, preset)
        resource = ImageFile(image)
        if not is_image_media_type(resource.media_type):
            raise ValidationError(
                f"Not an image file: {image.name} ({resource.media_type or 'unknown type'})",
                field="image",
            )

        # 3. Run one attempt through a session
        start_time = time.time()
        with SessionController(client=GeminiClient(config)) as session:
            session.select_image(resource)
            session.set_instruction(instruction)
            if quiet:
                asyncio.run(session.submit())
            else:
                with progress.edit_progress(
                    model=config.image_model, media_type=resource.media_type
                ):
                    asyncio.run(session.submit())
            state = session.state
        elapsed = time.time() - start_time

        if state.phase is SessionPhase.ERROR or state.result_image is None:
            raise GenerationError(state.error_message or "Failed to generate image.")

        # 4. Save
        data, mime_type = decode_data_url(state.result_image)
        out_path = out if out is not None else Path(default_output_path(mime_type))
        out_path.write_bytes(data)

        # 5. Print result
        if not quiet:
            progress.print_success_result(
                output_path=out_path,
                elapsed=elapsed,
                model_used=config.image_model,
                instruction=instruction,
                source=image,
            )
        click.echo(str(out_path))

    run_with_error_handling(do_edit, quiet=quiet)


@cli.command()
def presets() -> None:
    """List the bundled preset instructions."""

    def do_list() -> None:
        progress.print_presets(list_presets())

    run_with_error_handling(do_list)


@cli.command()
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    envvar="LENSEDIT_UI_PORT",
    help="Port for the Gradio server (default: 7860 or LENSEDIT_UI_PORT).",
)
@click.option(
    "--host",
    "host",
    type=str,
    default=None,
    envvar="LENSEDIT_UI_HOST",
    help="Host to bind (default: 127.0.0.1 or LENSEDIT_UI_HOST). Use 0.0.0.0 for LAN.",
)
@click.option("--share", is_flag=True, help="Create a public share link (e.g. gradio.live).")
@click.option(
    "--api-key",
    envvar="GEMINI_API_KEY",
    help="Gemini API key (overrides GEMINI_API_KEY environment variable).",
)
@click.option(
    "--debug-api",
    is_flag=True,
    help="Log raw API request/response (image data truncated) when editing from the UI.",
)
def ui(
    port: int | None,
    host: str | None,
    share: bool,
    api_key: str | None,
    debug_api: bool,
) -> None:
    """Launch the Gradio web UI for image editing."""
    from lensedit.ui.gradio_app import launch as launch_ui

    configure_logging(verbose_level=get_verbosity_from_env(), quiet=False)

    # The UI builds its config from the environment
    if api_key is not None:
        os.environ["GEMINI_API_KEY"] = api_key
    if debug_api:
        os.environ["LENSEDIT_DEBUG_API"] = "1"

    launch_ui(server_name=host, server_port=port, share=share)


def main() -> None:
    """Entry point for the lensedit console script."""
    cli()


__all__ = ["cli", "edit", "main", "presets", "ui"]
