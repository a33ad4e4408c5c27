"""Gradio web interface for imagepad."""

from __future__ import annotations

import logging
import os
import sys
import traceback
from pathlib import Path

from .archive import collect_downloads
from .constants import SUPPORTED_EXTENSIONS
from .enums import NotificationLevel, ProcessingMode
from .logging_config import setup_logging
from .models import BatchState, SourceImage
from .previews import PreviewStore
from .session import BatchSession, log_notifier

logger = logging.getLogger("imagepad.main")

# Optional Gradio import
try:
    import gradio as gr

    HAS_GRADIO = True
except ImportError:
    HAS_GRADIO = False
    logger.error("Gradio not installed. Run: pip install gradio")

MODE_CHOICES = {
    "Normalize (white canvas, JPEG)": ProcessingMode.NORMALIZE,
    "Remove background (PNG)": ProcessingMode.REMOVE_BACKGROUND,
}

_LEVEL_PREFIX = {
    NotificationLevel.INFO: "",
    NotificationLevel.SUCCESS: "✅ ",
    NotificationLevel.ERROR: "⚠️ ",
}


class StatusFeed:
    """Notifier that buffers messages until the next UI refresh."""

    def __init__(self) -> None:
        self._messages: list[tuple[NotificationLevel, str]] = []

    def __call__(self, level: NotificationLevel, message: str) -> None:
        log_notifier(level, message)
        self._messages.append((level, message))

    def drain(self, state: BatchState) -> str:
        lines = [f"{_LEVEL_PREFIX[level]}{message}" for level, message in self._messages]
        self._messages.clear()
        lines.append(format_status(state))
        return "  \n".join(lines)


def _mode_label(mode: ProcessingMode) -> str:
    return next(label for label, value in MODE_CHOICES.items() if value == mode)


def format_status(state: BatchState) -> str:
    if state.is_processing:
        return f"**Status:** Processing... {state.progress}%"
    if state.is_zipping:
        return f"**Status:** Creating zip... {state.progress}%"
    if state.results:
        return f"**Status:** {len(state.results)} results ready"
    if state.selection:
        return f"**Status:** {len(state.selection)} images selected"
    return "**Status:** Ready"


class ClientSession:
    """Per-browser state: one BatchSession, its status feed and shown previews."""

    def __init__(self, previews: PreviewStore) -> None:
        self.previews = previews
        self.feed = StatusFeed()
        self.session = BatchSession(notifier=self.feed)
        self.shown: list[Path] = []

    def status(self) -> str:
        return self.feed.drain(self.session.state)

    def release_shown(self, delay: float | None = None) -> None:
        for path in self.shown:
            self.previews.release(path, delay=delay)
        self.shown.clear()

    def publish_results(self) -> list[tuple[str, str]]:
        # Old previews stay on disk for a grace period while the page swaps them out
        self.release_shown()
        state = self.session.state

        items = []
        for index, item in enumerate(
            collect_downloads(state.results, state.rename_files, state.base_name)
        ):
            path = self.previews.publish(f"{index}-{item.name}", item.data)
            self.shown.append(path)
            items.append((str(path), item.name))
        return items


def create_interface() -> object:
    """Create the Gradio interface. Each browser session gets its own BatchSession."""
    previews = PreviewStore()

    with gr.Blocks(title="imagepad - Batch Image Normalizer", theme=gr.themes.Soft()) as interface:
        client_state = gr.State(lambda: ClientSession(previews))

        gr.Markdown(
            """
        # imagepad - Batch Image Normalizer

        Trim the white margin, fit the product onto a white canvas and
        export web-ready files, or cut the background out entirely.
        """
        )

        with gr.Row():
            with gr.Column(scale=1):
                mode_input = gr.Radio(
                    choices=list(MODE_CHOICES.keys()),
                    value=_mode_label(ProcessingMode.NORMALIZE),
                    label="Mode",
                )
                files_input = gr.File(
                    label="Images",
                    file_count="multiple",
                    file_types=list(SUPPORTED_EXTENSIONS),
                    type="filepath",
                )
                rename_input = gr.Checkbox(value=True, label="Rename files")
                base_name_input = gr.Textbox(label="Base name", placeholder="e.g. red-sofa")

                with gr.Row():
                    process_btn = gr.Button("Process", variant="primary")
                    clear_btn = gr.Button("Clear")

            with gr.Column(scale=1):
                status = gr.Markdown("**Status:** Ready")
                gallery = gr.Gallery(
                    label="Results", columns=3, height=400, object_fit="contain"
                )
                with gr.Row():
                    download_all_btn = gr.Button("Download All")
                    download_zip_btn = gr.Button("Download ZIP")
                download_files = gr.File(label="Downloads", file_count="multiple")

        # Event handlers
        def select_files(client: ClientSession, paths: list[str] | None, mode_label: str) -> tuple:
            if not paths:
                return gr.update(), client.status()
            try:
                images = [SourceImage.from_path(p) for p in paths]
            except OSError as e:
                logger.error("Could not read upload: %s", e)
                client.feed(NotificationLevel.ERROR, "Could not read the selected files")
                return gr.update(), client.status()
            state = client.session.select(images, MODE_CHOICES[mode_label])
            return state.base_name, client.status()

        files_input.change(
            select_files,
            inputs=[client_state, files_input, mode_input],
            outputs=[base_name_input, status],
        )

        def set_mode(client: ClientSession, mode_label: str) -> tuple:
            requested = MODE_CHOICES[mode_label]
            had_results = bool(client.session.state.results)
            state = client.session.set_mode(requested)
            if state.mode != requested:
                # Refused: put the radio back
                return gr.update(value=_mode_label(state.mode)), gr.update(), client.status()
            if had_results and not state.results:
                client.release_shown()
                return gr.update(), [], client.status()
            return gr.update(), gr.update(), client.status()

        mode_input.change(
            set_mode,
            inputs=[client_state, mode_input],
            outputs=[mode_input, gallery, status],
        )

        def set_rename(client: ClientSession, enabled: bool) -> str:
            client.session.set_rename_files(enabled)
            return client.status()

        rename_input.change(set_rename, inputs=[client_state, rename_input], outputs=[status])

        def set_base_name(client: ClientSession, name: str) -> str:
            return client.session.set_base_name(name).base_name

        base_name_input.blur(
            set_base_name, inputs=[client_state, base_name_input], outputs=[base_name_input]
        )

        async def process(client: ClientSession) -> tuple:
            try:
                await client.session.process()
            except Exception as e:
                traceback.print_exc()
                return [], gr.update(), f"Unexpected error: {e}"
            gallery_items = client.publish_results()
            return gallery_items, _mode_label(client.session.state.mode), client.status()

        process_btn.click(
            process, inputs=[client_state], outputs=[gallery, mode_input, status]
        )

        def download_all(client: ClientSession) -> tuple:
            items = client.session.downloads()
            paths = [str(previews.publish(item.name, item.data)) for item in items]
            return paths or None, client.status()

        download_all_btn.click(download_all, inputs=[client_state], outputs=[download_files, status])

        async def download_zip(client: ClientSession) -> tuple:
            archive = await client.session.download_zip()
            if archive is None:
                return None, client.status()
            path = previews.publish(archive.name, archive.data)
            return [str(path)], client.status()

        download_zip_btn.click(download_zip, inputs=[client_state], outputs=[download_files, status])

        def clear(client: ClientSession) -> tuple:
            state = client.session.clear()
            client.release_shown(delay=0)
            return None, [], None, _mode_label(state.mode), client.status()

        clear_btn.click(
            clear,
            inputs=[client_state],
            outputs=[files_input, gallery, download_files, mode_input, status],
        )

    return interface


def main() -> None:
    """Main entry point."""
    setup_logging(os.environ.get("IMAGEPAD_LOG_LEVEL", "INFO"))

    logger.info("=" * 70)
    logger.info("IMAGEPAD - Batch Image Normalizer")
    logger.info("=" * 70)

    if not HAS_GRADIO:
        logger.error("Gradio is required. Run: pip install gradio")
        sys.exit(1)

    logger.info("Starting web interface...")

    try:
        interface = create_interface()
        interface.launch(
            server_name=os.environ.get("IMAGEPAD_SERVER_NAME", "0.0.0.0"),
            server_port=int(os.environ.get("IMAGEPAD_SERVER_PORT", "7860")),
            share=False,
            show_error=True,
        )
    except Exception as e:
        logger.error("Failed to start: %s", e)
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
