"""
Gradio web UI for lensedit.

Single-page UI: upload an image, describe the edit (or pick a preset), generate,
view/download the result. Each browser session gets its own SessionController
kept in gr.State; every handler renders from the controller's SessionState.
Uploads reach the session as the original file (image_mode=None); removing
the upload clears the session's input image.
Uses only the public API: from lensedit import ...
"""

import argparse
import asyncio
import atexit
import hashlib
import html
import os
import shutil
import tempfile
from collections import OrderedDict
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

import gradio as gr

from lensedit import (
    IMAGE_EDIT_MODEL,
    Config,
    GeminiClient,
    ImageFile,
    LensEditError,
    SessionController,
    SessionPhase,
    SessionState,
    __version__,
    decode_data_url,
    download_filename,
    is_image_media_type,
    list_presets,
)
from lensedit.logging_config import configure_logging, get_logger, get_verbosity_from_env

logger = get_logger(__name__)

# Default server port; overridable via LENSEDIT_UI_PORT
DEFAULT_UI_PORT = 7860
DEFAULT_UI_HOST = "127.0.0.1"

PAGE_TITLE = "lensedit – AI image editing"

# Results written for display/download, oldest first; the directory is removed on exit
_RESULT_CACHE_MAX = 32
_result_files: OrderedDict[str, str] = OrderedDict()
_result_root: Path | None = None


def _result_dir() -> Path:
    global _result_root
    if _result_root is None or not _result_root.is_dir():
        _result_root = Path(tempfile.mkdtemp(prefix="lensedit_results_"))
    return _result_root


def _cleanup_result_files() -> None:
    global _result_root
    if _result_root is not None:
        shutil.rmtree(_result_root, ignore_errors=True)
        _result_root = None
    _result_files.clear()


atexit.register(_cleanup_result_files)


def _new_session() -> SessionController:
    return SessionController(client=GeminiClient(Config.from_env()))


def _close_session(session: SessionController | None) -> None:
    """Release the session's preview when Gradio drops the browser session."""
    if session is not None:
        session.close()


def _format_status(message: str, status_type: str = "info") -> str:
    """
    Format a status message as a colored HTML panel.

    Args:
        message: The status message text; HTML-escaped before rendering.
        status_type: One of "info", "success", "error", "idle".

    Returns:
        HTML string; empty for "idle".
    """
    if status_type == "success":
        icon, color, bg_color = "✅", "#10b981", "#d1fae5"
    elif status_type == "error":
        icon, color, bg_color = "❌", "#ef4444", "#fee2e2"
    elif status_type == "info":
        icon, color, bg_color = "ℹ️", "#3b82f6", "#dbeafe"
    else:
        return ""
    return f"""<div style="padding: 12px 16px; border-radius: 8px; background-color: {bg_color}; border-left: 4px solid {color}; margin: 8px 0;">
    <span style="font-size: 16px; margin-right: 8px;">{icon}</span>
    <span style="color: {color}; font-weight: 500;">{html.escape(message)}</span>
</div>"""


def _status_for(state: SessionState) -> str:
    if state.phase is SessionPhase.PROCESSING:
        return _format_status("Editing image…", "info")
    if state.phase is SessionPhase.SUCCESS:
        return _format_status("Done.", "success")
    if state.phase is SessionPhase.ERROR:
        return _format_status(f"Generation failed: {state.error_message}", "error")
    return ""


def _result_path(result_image: str | None) -> str | None:
    """Write a result data URL to a file named for download; cached per result."""
    if not result_image:
        return None
    key = hashlib.sha256(result_image.encode("ascii", errors="replace")).hexdigest()
    cached = _result_files.get(key)
    if cached and Path(cached).is_file():
        _result_files.move_to_end(key)
        return cached
    data, mime_type = decode_data_url(result_image)
    # One subdirectory per result so same-millisecond download names never collide
    out_dir = _result_dir() / key[:16]
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / download_filename(mime_type)
    path.write_bytes(data)
    _result_files[key] = str(path)
    while len(_result_files) > _RESULT_CACHE_MAX:
        _, evicted = _result_files.popitem(last=False)
        shutil.rmtree(Path(evicted).parent, ignore_errors=True)
    return str(path)


def _render(session: SessionController | None) -> tuple[Any, ...]:
    """Return (session, result image, status html, generate button, clear button)."""
    if session is None:
        return (None, None, "", gr.update(interactive=False), gr.update(visible=False))
    state = session.state
    return (
        session,
        _result_path(state.result_image),
        _status_for(state),
        gr.update(interactive=state.can_submit),
        gr.update(visible=state.result_image is not None),
    )


# Handlers that touch a session are coroutines so Gradio runs them on the event
# loop, the same thread that runs submit() inside _generate_handler.


async def _image_handler(path: str | None, session: SessionController | None) -> tuple[Any, ...]:
    """Select the uploaded file as the session's input image; an emptied input clears it."""
    if not path:
        if session is not None:
            session.clear_image()
        return _render(session)
    resource = ImageFile(Path(path))
    if not is_image_media_type(resource.media_type):
        rendered = list(_render(session))
        rendered[2] = _format_status("Please upload an image file.", "error")
        return tuple(rendered)
    session = session or _new_session()
    try:
        session.select_image(resource)
    except LensEditError as e:
        rendered = list(_render(session))
        rendered[2] = _format_status(str(e), "error")
        return tuple(rendered)
    return _render(session)


async def _instruction_handler(text: str, session: SessionController | None) -> tuple[Any, ...]:
    session = session or _new_session()
    session.set_instruction(text or "")
    return _render(session)


def _make_preset_handler(
    text: str,
) -> Callable[[SessionController | None], Awaitable[tuple[Any, ...]]]:
    """Return a click handler that puts a preset instruction into the session."""

    async def handler(session: SessionController | None) -> tuple[Any, ...]:
        session = session or _new_session()
        session.set_instruction(text)
        return (text, *_render(session))

    return handler


async def _clear_handler(session: SessionController | None) -> tuple[Any, ...]:
    if session is not None:
        session.reset()
    return ("", *_render(session))


async def _generate_handler(
    session: SessionController | None,
) -> AsyncGenerator[tuple[Any, ...], None]:
    """Submit and yield the processing render, then the final render."""
    if session is None or not session.state.can_submit:
        yield _render(session)
        return
    queue: asyncio.Queue[SessionState] = asyncio.Queue()
    unsubscribe = session.subscribe(queue.put_nowait)
    try:
        task = asyncio.create_task(session.submit())
        processing = await queue.get()
        yield (
            session,
            None,
            _status_for(processing),
            gr.update(interactive=False),
            gr.update(visible=False),
        )
        await task
    finally:
        unsubscribe()
    yield _render(session)


def _build_blocks() -> gr.Blocks:
    """Build the Blocks layout and wire events."""
    presets = list_presets()
    with gr.Blocks(title=PAGE_TITLE) as app:
        gr.Markdown(f"# lensedit\nPowered by `{IMAGE_EDIT_MODEL}` · v{__version__}")
        session_state = gr.State(value=None, delete_callback=_close_session)
        with gr.Row():
            with gr.Column():
                input_image = gr.Image(
                    label="Upload Source",
                    type="filepath",
                    image_mode=None,
                    sources=["upload", "clipboard"],
                )
                instruction_tb = gr.Textbox(
                    label="Describe Edits",
                    lines=4,
                    placeholder=(
                        "e.g., 'Make it look like a Van Gogh painting' or "
                        "'Remove the person in the background'"
                    ),
                )
                with gr.Row():
                    preset_buttons = [
                        (gr.Button(p.label, size="sm"), p.text) for p in presets
                    ]
                with gr.Row():
                    generate_btn = gr.Button("Generate Edit", variant="primary", interactive=False)
                    clear_btn = gr.Button("Clear", visible=False)
                status_html = gr.HTML(value="")
            with gr.Column():
                output_image = gr.Image(label="Result", type="filepath", interactive=False)

        render_outputs = [session_state, output_image, status_html, generate_btn, clear_btn]

        input_image.change(
            _image_handler, inputs=[input_image, session_state], outputs=render_outputs
        )
        instruction_tb.input(
            _instruction_handler, inputs=[instruction_tb, session_state], outputs=render_outputs
        )
        for button, text in preset_buttons:
            button.click(
                _make_preset_handler(text),
                inputs=[session_state],
                outputs=[instruction_tb, *render_outputs],
            )
        generate_btn.click(_generate_handler, inputs=[session_state], outputs=render_outputs)
        clear_btn.click(
            _clear_handler, inputs=[session_state], outputs=[instruction_tb, *render_outputs]
        )
    return app


def launch(
    server_name: str | None = None,
    server_port: int | None = None,
    share: bool = False,
) -> None:
    """
    Build the Gradio app and launch the server.

    Args:
        server_name: Host to bind (default: LENSEDIT_UI_HOST or 127.0.0.1).
        server_port: Port (default: LENSEDIT_UI_PORT or 7860).
        share: If True, create a public share link (e.g. gradio.live).
    """
    host = server_name or os.getenv("LENSEDIT_UI_HOST", DEFAULT_UI_HOST)
    port = server_port
    if port is None:
        try:
            port = int(os.getenv("LENSEDIT_UI_PORT", str(DEFAULT_UI_PORT)))
        except ValueError:
            port = DEFAULT_UI_PORT
    logger.info("lensedit ui starting (v%s) on http://%s:%s", __version__, host, port)
    app = _build_blocks()
    app.queue().launch(server_name=host, server_port=port, share=share, inbrowser=True)


def main() -> None:
    """Entry point for the lensedit-ui console script. Parses --port, --host, --share."""
    parser = argparse.ArgumentParser(
        description="Launch the lensedit Gradio web UI for image editing.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        metavar="PORT",
        help=f"Port to bind (default: LENSEDIT_UI_PORT or {DEFAULT_UI_PORT}).",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        metavar="HOST",
        help=f"Host to bind (default: LENSEDIT_UI_HOST or {DEFAULT_UI_HOST}).",
    )
    parser.add_argument("--share", action="store_true", help="Create a public share link.")
    args = parser.parse_args()
    configure_logging(verbose_level=get_verbosity_from_env())
    launch(server_name=args.host, server_port=args.port, share=args.share)
