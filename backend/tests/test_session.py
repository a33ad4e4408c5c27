"""Tests for the batch session that owns UI-facing state."""

import asyncio
import io
import zipfile

import pytest

from backend.imagepad.batch import BatchRunner
from backend.imagepad.config import Config
from backend.imagepad.enums import NotificationLevel, ProcessingMode
from backend.imagepad.models import ProcessedResult
from backend.imagepad.session import BatchSession
from backend.tests.helpers import FailingArchiveBuilder, make_source


class _FakeRunnerPipeline:
    def __init__(self, fail=()):
        self.fail = set(fail)

    async def run(self, source, mode):
        if source.name in self.fail:
            return ProcessedResult.unchanged(source, error=f"Cannot load image: {source.name}")
        media = "image/png" if mode == ProcessingMode.REMOVE_BACKGROUND else "image/jpeg"
        return ProcessedResult(original=source, processed=b"out-" + source.data[:4], media_type=media)


def _session(fail=(), **kwargs):
    messages = []
    session = BatchSession(
        runner=BatchRunner(_FakeRunnerPipeline(fail)),
        notifier=lambda level, msg: messages.append((level, msg)),
        **kwargs,
    )
    return session, messages


class TestSelection:
    def test_select_suggests_base_name(self):
        session, _ = _session()
        state = session.select([make_source("Red Sofa.png"), make_source("b.png")])
        assert state.base_name == "red-sofa"
        assert len(state.selection) == 2

    def test_select_without_rename_keeps_base_name(self):
        session, _ = _session()
        session.set_rename_files(False)
        session.set_base_name("keep")
        state = session.select([make_source("other.png")])
        assert state.base_name == "keep"

    def test_empty_select_ignored(self):
        session, _ = _session()
        before = session.state
        assert session.select([]) is before

    def test_set_base_name_sanitizes(self):
        session, _ = _session()
        assert session.set_base_name("Żółta Łódź").base_name == "zolta-lodz"

    def test_listeners_receive_snapshots(self):
        session, _ = _session()
        seen = []
        unsubscribe = session.subscribe(seen.append)
        session.set_rename_files(False)
        unsubscribe()
        session.set_rename_files(True)
        assert len(seen) == 1
        assert seen[0].rename_files is False

    def test_clear_keeps_naming_options(self):
        session, _ = _session()
        session.select([make_source("a.png")], ProcessingMode.REMOVE_BACKGROUND)
        session.set_base_name("sofa")
        state = session.clear()
        assert state.selection == ()
        assert state.results == ()
        assert state.base_name == "sofa"
        assert state.rename_files is True


class TestModeSwitch:
    @pytest.mark.asyncio
    async def test_switch_drops_results(self):
        session, _ = _session()
        session.select([make_source("a.png")])
        await session.process()
        state = session.set_mode(ProcessingMode.REMOVE_BACKGROUND)
        assert state.mode == ProcessingMode.REMOVE_BACKGROUND
        assert state.results == ()
        assert state.progress == 0
        assert len(state.selection) == 1

    def test_same_mode_is_noop(self):
        session, messages = _session()
        before = session.state
        assert session.set_mode(ProcessingMode.NORMALIZE) is before
        assert messages == []

    def test_refused_while_processing(self):
        session, messages = _session()
        session._state = session.state.update(is_processing=True)
        state = session.set_mode(ProcessingMode.REMOVE_BACKGROUND)
        assert state.mode == ProcessingMode.NORMALIZE
        assert messages == [(NotificationLevel.ERROR, "Images are still being processed")]

    @pytest.mark.asyncio
    async def test_next_run_uses_new_mode(self):
        session, messages = _session()
        session.select([make_source("a.png")])
        session.set_mode(ProcessingMode.REMOVE_BACKGROUND)
        state = await session.process()
        assert state.results[0].media_type == "image/png"
        assert messages[-1] == (NotificationLevel.SUCCESS, "Done! Background removed from 1 images.")

    @pytest.mark.asyncio
    async def test_run_switches_back_to_normalize(self):
        session, _ = _session()
        session.select([make_source("a.png")], ProcessingMode.REMOVE_BACKGROUND)
        state = await session.process()
        assert state.mode == ProcessingMode.NORMALIZE
        assert state.results[0].media_type == "image/png"


class TestProcess:
    @pytest.mark.asyncio
    async def test_empty_selection_reports_and_changes_nothing(self):
        session, messages = _session()
        progress = []
        session.subscribe(lambda s: progress.append(s.progress))
        before = session.state
        state = await session.process()
        assert state is before
        assert progress == []
        assert messages == [(NotificationLevel.ERROR, "Please select some images first")]

    @pytest.mark.asyncio
    async def test_summary_message(self):
        session, messages = _session(fail={"b.png"})
        session.select([make_source("a.png"), make_source("b.png")])
        state = await session.process()
        assert len(state.results) == 2
        assert state.progress == 100
        assert not state.is_processing
        assert (NotificationLevel.ERROR, "Cannot load image: b.png") in messages
        assert messages[-1] == (
            NotificationLevel.SUCCESS, "Done! 1 images processed, 1 were unchanged."
        )

    @pytest.mark.asyncio
    async def test_background_summary_message(self):
        session, messages = _session()
        session.select([make_source("a.png")], ProcessingMode.REMOVE_BACKGROUND)
        await session.process()
        assert messages[-1] == (NotificationLevel.SUCCESS, "Done! Background removed from 1 images.")

    @pytest.mark.asyncio
    async def test_processing_flag_set_during_run(self):
        session, _ = _session()
        flags = []
        session.subscribe(lambda s: flags.append(s.is_processing))
        session.select([make_source("a.png")])
        await session.process()
        assert True in flags
        assert flags[-1] is False

    @pytest.mark.asyncio
    async def test_clear_during_run_discards_results(self):
        session, _ = _session()
        session.select([make_source("a.png"), make_source("b.png")])
        task = asyncio.create_task(session.process())
        await asyncio.sleep(0)
        session.clear()
        state = await task
        assert state.results == ()
        assert not state.is_processing


class TestDownloads:
    @pytest.mark.asyncio
    async def test_downloads_named_from_base(self):
        session, messages = _session(fail={"b.png"})
        session.select([make_source("a1.png"), make_source("b.png")])
        session.set_base_name("cat")
        await session.process()
        items = session.downloads()
        assert [i.name for i in items] == ["cat-1.jpg"]
        assert messages[-1] == (NotificationLevel.SUCCESS, "Download started!")

    def test_downloads_without_results(self):
        session, messages = _session()
        assert session.downloads() == []
        assert messages[-1] == (NotificationLevel.ERROR, "No processed images to download")

    @pytest.mark.asyncio
    async def test_download_zip(self, monkeypatch):
        monkeypatch.setattr(Config, "PROGRESS_RESET_DELAY", 0.01)
        session, _ = _session()
        session.select([make_source("a.png"), make_source("b.png")])
        await session.process()

        archive = await session.download_zip()
        assert archive.name == "processed-images.zip"
        assert archive.media_type == "application/zip"
        with zipfile.ZipFile(io.BytesIO(archive.data)) as zf:
            assert len(zf.namelist()) == 2
        assert session.state.progress == 100
        assert not session.state.is_zipping

        await asyncio.sleep(0.05)
        assert session.state.progress == 0

    @pytest.mark.asyncio
    async def test_download_zip_failure(self, monkeypatch):
        monkeypatch.setattr(Config, "PROGRESS_RESET_DELAY", 0.01)
        session, messages = _session(archive_builder_factory=FailingArchiveBuilder)
        session.select([make_source("a.png")])
        await session.process()
        assert await session.download_zip() is None
        assert (NotificationLevel.ERROR, "Failed to create zip file") in messages
        assert not session.state.is_zipping

    @pytest.mark.asyncio
    async def test_download_zip_without_results(self):
        session, messages = _session()
        assert await session.download_zip() is None
        assert messages[-1] == (NotificationLevel.ERROR, "No processed images to download")
