"""Tests for the batch upload orchestrator."""

import struct
import zlib
from dataclasses import replace
from unittest.mock import patch

import pytest
import requests
from PIL import Image

from imgurup.metadata.journal import Journal
from imgurup.models.image import DELETED_MARKER
from imgurup.processors.exif import strip_exif
from imgurup.processors.upload_processor import UploadProcessor
from imgurup.progress.tracker import UploadProgressContext
from imgurup.uploaders.imgur import ImgurAPIError


def history_lines(config):
    if not config.journal_path.exists():
        return []
    return [
        line
        for line in config.journal_path.read_text(encoding="utf-8").splitlines()
        if line.startswith("type=")
    ]


def png_chunk(chunk_type, data):
    return struct.pack(">I", len(data)) + chunk_type + data + struct.pack(">I", zlib.crc32(chunk_type + data))


@pytest.fixture
def run_batch(config, tracker):
    """Run a batch through the processor with a fake uploader."""

    def _run(paths, uploader, delete_after_upload=False, strip_metadata=lambda path: None):
        with Journal(config.journal_path) as journal:
            processor = UploadProcessor(
                config,
                journal,
                uploader=uploader,
                progress_tracker=tracker,
                strip_metadata=strip_metadata,
            )
            images = processor.create_entities(paths, delete_after_upload=delete_after_upload)
            return processor.run(images)

    return _run


class TestUploadProcessor:
    """Test suite for UploadProcessor."""

    def test_two_uploads_create_album(self, config, make_image, run_batch, fake_uploader, response_for):
        """Scenario A: both uploads succeed, one album with both hashes."""
        paths = [make_image("a.jpg"), make_image("b.png")]
        uploader = fake_uploader(
            [response_for("img1", "h-1"), response_for("img2", "h;2")],
            album_result={"id": "alb", "deletehash": "ad'1"},
        )

        result = run_batch(paths, uploader)

        assert [image.uploaded for image in result.images] == [True, True]
        assert uploader.album_calls == [(["h1", "h2"], "vertical")]
        assert result.album is not None and result.album.created
        assert result.album.deletehash == "ad1"
        assert result.exit_code == 0

        lines = history_lines(config)
        assert len(lines) == 3
        assert lines[0].startswith("type=image file=[a.jpg] id=[img1]")
        assert lines[1].startswith("type=image file=[b.png] id=[img2]")
        assert lines[2].startswith("type=album id=[alb]")

    def test_single_failure_reports_server_message(self, config, make_image, run_batch, fake_uploader, output):
        """Scenario B: the JSON error message is reported and the run fails."""
        path = make_image("a.jpg")
        uploader = fake_uploader([ImgurAPIError("rate limited", status_code=429)])

        result = run_batch([path], uploader)

        assert result.errors[0] == "Error while uploading a.jpg: rate limited"
        assert "Error while uploading a.jpg: rate limited" in output()
        assert result.uploaded_count == 0
        assert result.exit_code == 1
        assert uploader.album_calls == []
        assert history_lines(config) == []
        assert path.exists()

    def test_single_success_creates_no_album(self, config, make_image, run_batch, fake_uploader, response_for):
        uploader = fake_uploader([response_for("img1", "h1")])

        result = run_batch([make_image("a.jpg")], uploader)

        assert result.uploaded_count == 1
        assert result.album is None
        assert uploader.album_calls == []
        assert result.errors == []
        assert result.exit_code == 0
        assert len(history_lines(config)) == 1

    def test_empty_batch_fails_without_calls(self, config, run_batch, fake_uploader, output):
        uploader = fake_uploader()

        result = run_batch([], uploader)

        assert result.exit_code == 1
        assert uploader.uploaded_paths == []
        assert uploader.album_calls == []
        assert "No images uploaded" in output()
        assert not config.journal_path.exists()

    def test_partial_success_continues_batch(self, config, make_image, run_batch, fake_uploader, response_for):
        """A failed item does not stop the remaining uploads."""
        paths = [make_image("a.jpg"), make_image("b.jpg"), make_image("c.png")]
        uploader = fake_uploader(
            [
                response_for("img1", "h1"),
                requests.ConnectionError("connection reset"),
                response_for("img3", "h3"),
            ],
            album_result={"id": "alb", "deletehash": "ad1"},
        )

        result = run_batch(paths, uploader)

        assert [image.uploaded for image in result.images] == [True, False, True]
        assert result.images[1].id is None
        assert uploader.album_calls == [(["h1", "h3"], "vertical")]
        assert result.errors == ["Error while uploading b.jpg: connection reset"]
        assert len(history_lines(config)) == 3

    def test_album_failure_keeps_image_lines(self, config, make_image, run_batch, fake_uploader, response_for, output):
        paths = [make_image("a.jpg"), make_image("b.jpg")]
        uploader = fake_uploader(
            [response_for("img1", "h1"), response_for("img2", "h2")],
            album_result=ImgurAPIError("500", status_code=500),
        )

        result = run_batch(paths, uploader)

        assert result.album is not None
        assert result.album.id is None
        assert result.exit_code == 0
        assert "Error while creating album: 500" in output()
        assert [line.split()[0] for line in history_lines(config)] == ["type=image", "type=image"]

    def test_unsanitizable_deletehash_is_an_item_failure(self, make_image, run_batch, fake_uploader, response_for):
        uploader = fake_uploader([response_for("img1", "!!!")])

        result = run_batch([make_image("a.jpg")], uploader)

        assert result.images[0].uploaded is False
        assert result.images[0].id is None
        assert result.exit_code == 1

    def test_uploads_in_input_order(self, make_image, run_batch, fake_uploader, response_for):
        paths = [make_image("z.png"), make_image("a.png"), make_image("m.png")]
        uploader = fake_uploader(
            [response_for("1", "h1"), response_for("2", "h2"), response_for("3", "h3")],
            album_result={"id": "alb", "deletehash": "ad1"},
        )

        result = run_batch(paths, uploader)

        assert [path.name for path in uploader.uploaded_paths] == ["z.png", "a.png", "m.png"]
        assert [image.id for image in result.images] == ["1", "2", "3"]

    def test_uploads_a_temporary_copy(self, make_image, run_batch, fake_uploader, response_for):
        """The original is never handed to the uploader and the copy is cleaned up."""
        path = make_image("a.jpg")
        uploader = fake_uploader([response_for("img1", "h1")])

        run_batch([path], uploader)

        uploaded = uploader.uploaded_paths[0]
        assert uploaded != path
        assert uploaded.name == "a.jpg"
        assert not uploaded.exists()
        assert not uploaded.parent.exists()

    def test_temporary_copy_removed_on_failure(self, make_image, run_batch, fake_uploader):
        uploader = fake_uploader([ImgurAPIError("400", status_code=400)])

        run_batch([make_image("a.jpg")], uploader)

        assert not uploader.uploaded_paths[0].parent.exists()

    def test_metadata_stripped_from_copy_only(self, make_image, run_batch, fake_uploader, response_for, tmp_path):
        exif = Image.Exif()
        exif[0x010F] = "SecretCam"
        path = make_image("a.jpg", exif=exif)
        original_bytes = path.read_bytes()
        uploader = fake_uploader([response_for("img1", "h1")])

        run_batch([path], uploader, strip_metadata=strip_exif)

        assert path.read_bytes() == original_bytes
        assert b"SecretCam" in original_bytes
        assert b"SecretCam" not in uploader.uploaded_bytes[0]

    def test_unreadable_image_is_an_item_failure(self, tmp_path, run_batch, fake_uploader, output):
        broken = tmp_path / "broken.png"
        broken.write_text("not an image")
        uploader = fake_uploader()

        result = run_batch([broken], uploader, strip_metadata=strip_exif)

        assert result.exit_code == 1
        assert uploader.uploaded_paths == []
        assert "Error while uploading broken.png" in output()

    def test_delete_after_upload(self, config, make_image, run_batch, fake_uploader, response_for):
        path = make_image("shot.png")
        uploader = fake_uploader([response_for("img1", "h1")])

        result = run_batch([path], uploader, delete_after_upload=True)

        image = result.images[0]
        assert not path.exists()
        assert image.file == DELETED_MARKER
        assert image.path == path
        assert "file=[<deleted>]" in history_lines(config)[0]

    def test_failed_upload_never_deletes_original(self, make_image, run_batch, fake_uploader):
        path = make_image("shot.png")
        uploader = fake_uploader([ImgurAPIError("400", status_code=400)])

        result = run_batch([path], uploader, delete_after_upload=True)

        assert path.exists()
        assert result.images[0].file == "shot.png"

    def test_journal_failure_does_not_affect_uploads(self, config, tmp_path, make_image, tracker, fake_uploader, response_for):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        blocked_config = replace(config, config_dir=blocker)
        uploader = fake_uploader([response_for("img1", "h1")])

        with Journal(blocked_config.journal_path) as journal:
            processor = UploadProcessor(
                blocked_config,
                journal,
                uploader=uploader,
                progress_tracker=tracker,
                strip_metadata=lambda path: None,
            )
            result = processor.run(processor.create_entities([make_image("a.jpg")]))

        assert result.exit_code == 0
        assert result.images[0].uploaded
        assert journal.error is not None

    def test_oversized_image_is_an_item_failure(self, tmp_path, make_image, run_batch, fake_uploader, response_for, output):
        """A decompression-bomb sized header fails that item only."""
        huge = tmp_path / "huge.png"
        huge.write_bytes(
            b"\x89PNG\r\n\x1a\n"
            + png_chunk(b"IHDR", struct.pack(">IIBBBBB", 20000, 20000, 8, 2, 0, 0, 0))
            + png_chunk(b"IDAT", b"")
            + png_chunk(b"IEND", b"")
        )
        uploader = fake_uploader([response_for("img2", "h2")])

        result = run_batch([huge, make_image("good.png")], uploader, strip_metadata=strip_exif)

        assert [image.uploaded for image in result.images] == [False, True]
        assert [path.name for path in uploader.uploaded_paths] == ["good.png"]
        assert result.errors[0].startswith("Error while uploading huge.png: ")
        assert "Error while uploading huge.png" in output()
        assert result.exit_code == 0

    def test_file_name_with_newline_stays_on_one_journal_line(self, config, tmp_path, run_batch, fake_uploader, response_for):
        source = tmp_path / "a.png\ntype=image id=[forged].png"
        source.write_bytes(b"\x89PNG fake")
        uploader = fake_uploader([response_for("img1", "h1")])

        result = run_batch([source], uploader)

        assert result.exit_code == 0
        lines = history_lines(config)
        assert len(lines) == 1
        assert "id=[forged]" in lines[0]
        assert lines[0].endswith("https://api.imgur.com/3/image/h1]")

    def test_bytes_sent_reach_the_progress_bar(self, make_image, run_batch, fake_uploader, response_for):
        path = make_image("a.png")
        uploader = fake_uploader([response_for("img1", "h1")])

        with patch.object(UploadProgressContext, "update_transfer", autospec=True) as update_transfer:
            run_batch([path], uploader)

        assert uploader.progress_callbacks[0] is not None
        (_, bytes_sent), _ = update_transfer.call_args
        assert bytes_sent == len(uploader.uploaded_bytes[0])
