"""Tests for the web front-end helpers."""

from backend.imagepad.constants import SUPPORTED_EXTENSIONS
from backend.imagepad.enums import NotificationLevel, ProcessingMode
from backend.imagepad.main import ClientSession, StatusFeed, format_status
from backend.imagepad.models import BatchState, ProcessedResult
from backend.imagepad.previews import PreviewStore
from backend.tests.helpers import make_source


class TestFormatStatus:
    def test_ready(self):
        assert format_status(BatchState()) == "**Status:** Ready"

    def test_processing_shows_progress(self):
        assert "42%" in format_status(BatchState(is_processing=True, progress=42))

    def test_selection_count(self):
        state = BatchState(selection=(make_source(), make_source()))
        assert format_status(state) == "**Status:** 2 images selected"


class TestStatusFeed:
    def test_drain_empties_buffer(self):
        feed = StatusFeed()
        feed(NotificationLevel.ERROR, "Cannot load image: a.png")
        first = feed.drain(BatchState())
        second = feed.drain(BatchState())
        assert "Cannot load image: a.png" in first
        assert "Cannot load image" not in second


class TestClientSession:
    def test_clients_are_independent(self, tmp_path):
        previews = PreviewStore(root=tmp_path)
        first, second = ClientSession(previews), ClientSession(previews)
        first.session.select([make_source("a.png")], ProcessingMode.REMOVE_BACKGROUND)
        assert second.session.state.selection == ()
        assert second.session.state.mode == ProcessingMode.NORMALIZE
        assert first.session is not second.session

    def test_messages_reach_own_feed_only(self, tmp_path):
        previews = PreviewStore(root=tmp_path)
        first, second = ClientSession(previews), ClientSession(previews)
        first.session.downloads()
        assert "No processed images to download" in first.status()
        assert "No processed images" not in second.status()

    def test_publish_results_replaces_shown(self, tmp_path):
        previews = PreviewStore(root=tmp_path, release_delay=0)
        client = ClientSession(previews)
        source = make_source("a.png")
        client.session._state = client.session.state.update(
            results=(
                ProcessedResult(original=source, processed=b"jpeg", media_type="image/jpeg"),
                ProcessedResult.unchanged(make_source("b.png")),
            ),
            base_name="sofa",
        )

        first = client.publish_results()
        assert [name for _, name in first] == ["sofa-1.jpg"]
        second = client.publish_results()
        assert previews.active == frozenset(client.shown)
        assert first[0][0] != second[0][0]

    def test_release_shown_clears(self, tmp_path):
        previews = PreviewStore(root=tmp_path)
        client = ClientSession(previews)
        client.shown.append(previews.publish("x.jpg", b"data"))
        client.release_shown(delay=0)
        assert client.shown == []
        assert previews.active == frozenset()


def test_file_picker_accepts_supported_extensions():
    assert {".png", ".jpg", ".jpeg", ".webp"} <= set(SUPPORTED_EXTENSIONS)
