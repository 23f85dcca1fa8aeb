"""Tests for the attachment ledger and image compression."""

import io
import json
import pytest

from PIL import Image

from timesheet_tool.attachments import AttachmentLedger
from timesheet_tool.imaging import (
    MAX_UPLOAD_BYTES,
    compress_image_if_needed,
    fit_dimensions,
    jpeg_name,
)
from timesheet_tool.models import Attachment, AttachmentRejected


def _make_png(width: int = 64, height: int = 48) -> bytes:
    out = io.BytesIO()
    Image.new("RGBA", (width, height), (200, 30, 30, 255)).save(out, "PNG")
    return out.getvalue()


def _make_ledger() -> AttachmentLedger:
    return AttachmentLedger([
        Attachment(id="a1", file_name="pump.jpg", file_type="image/jpeg", description="Pump"),
        Attachment(id="a2", file_name="panel.jpg", file_type="image/jpeg", description="Panel"),
    ])


class TestImaging:
    def test_fit_dimensions_landscape(self):
        assert fit_dimensions(3840, 2160) == (1920, 1080)

    def test_fit_dimensions_portrait(self):
        assert fit_dimensions(1000, 4000) == (480, 1920)

    def test_fit_dimensions_small_unchanged(self):
        assert fit_dimensions(800, 600) == (800, 600)

    def test_jpeg_name(self):
        assert jpeg_name("photo.png") == "photo.jpg"
        assert jpeg_name("scan.final.webp") == "scan.final.jpg"
        assert jpeg_name("noext") == "noext.jpg"

    def test_below_threshold_unchanged(self):
        content = _make_png()
        assert compress_image_if_needed(content, "a.png", "image/png") == (content, "a.png", "image/png")

    def test_compresses_above_threshold(self):
        content = _make_png(2400, 1200)
        data, name, content_type = compress_image_if_needed(content, "big.png", "image/png", threshold=0)
        assert name == "big.jpg"
        assert content_type == "image/jpeg"
        with Image.open(io.BytesIO(data)) as img:
            assert img.format == "JPEG"
            assert img.size == (1920, 960)

    def test_undecodable_keeps_original(self):
        content = b"not really an image"
        result = compress_image_if_needed(content, "x.png", "image/png", threshold=0)
        assert result == (content, "x.png", "image/png")


class TestLedger:
    def test_starts_clean(self):
        ledger = _make_ledger()
        assert not ledger.is_dirty
        assert [a.id for a in ledger.existing_attachments] == ["a1", "a2"]

    def test_existing_copied(self):
        original = [Attachment(id="a1", description="Pump")]
        ledger = AttachmentLedger(original)
        ledger.set_existing_caption("a1", "Pump nameplate")
        assert original[0].description == "Pump"

    def test_mark_for_deletion(self):
        ledger = _make_ledger()
        ledger.mark_for_deletion("a1")
        assert [a.id for a in ledger.existing_attachments] == ["a2"]
        assert ledger.attachments_to_delete == ["a1"]
        assert ledger.is_dirty

    def test_mark_for_deletion_idempotent(self):
        ledger = _make_ledger()
        ledger.mark_for_deletion("a1")
        ledger.mark_for_deletion("a1")
        assert ledger.attachments_to_delete == ["a1"]

    def test_mark_unknown(self):
        with pytest.raises(KeyError):
            _make_ledger().mark_for_deletion("zzz")

    def test_caption_edit_is_dirty(self):
        ledger = _make_ledger()
        ledger.set_existing_caption("a2", "Control panel")
        assert ledger.is_dirty

    def test_add_new_image(self):
        ledger = _make_ledger()
        attachment = ledger.add_new("site.png", _make_png(), "image/png", "Site")
        assert attachment.file_name == "site.png"
        assert ledger.new_attachments == [attachment]

    def test_rejects_non_image(self):
        with pytest.raises(AttachmentRejected, match="only image files"):
            _make_ledger().add_new("report.pdf", b"%PDF-1.4", "application/pdf")

    def test_rejects_oversized(self):
        with pytest.raises(AttachmentRejected, match="10MB"):
            _make_ledger().add_new("huge.png", b"\0" * (MAX_UPLOAD_BYTES + 1), "image/png")

    def test_new_caption_and_remove(self):
        ledger = AttachmentLedger()
        ledger.add_new("a.png", _make_png(), "image/png")
        ledger.add_new("b.png", _make_png(), "image/png")
        ledger.set_new_caption(1, "Second")
        removed = ledger.remove_new(0)
        assert removed.file_name == "a.png"
        assert ledger.new_attachments[0].description == "Second"


class TestBuildPayload:
    def test_payload_fields(self):
        ledger = _make_ledger()
        ledger.mark_for_deletion("a1")
        ledger.set_existing_caption("a2", "Control panel")
        png = _make_png()
        ledger.add_new("site.png", png, "image/png", "Site")

        payload = ledger.build_payload("77")
        data = dict(payload.data)
        assert data["daily_time_sheet_id"] == "77"
        assert json.loads(data["attachments_to_delete"]) == ["a1"]
        existing = json.loads(data["existing_attachments"])
        assert [a["id"] for a in existing] == ["a2"]
        assert existing[0]["description"] == "Control panel"
        assert data["attachment_descriptions"] == "Site"
        assert payload.files == [("attachment_files", ("site.png", png, "image/png"))]

    def test_descriptions_follow_file_order(self):
        ledger = AttachmentLedger()
        ledger.add_new("a.png", _make_png(), "image/png", "First")
        ledger.add_new("b.png", _make_png(), "image/png", "")
        payload = ledger.build_payload("1")
        descriptions = [v for k, v in payload.data if k == "attachment_descriptions"]
        assert descriptions == ["First", ""]
        assert [f[1][0] for f in payload.files] == ["a.png", "b.png"]

    def test_does_not_mutate(self):
        ledger = _make_ledger()
        ledger.mark_for_deletion("a1")
        ledger.add_new("site.png", _make_png(), "image/png")
        ledger.build_payload("77")
        assert ledger.attachments_to_delete == ["a1"]
        assert len(ledger.new_attachments) == 1

    def test_clear_pending(self):
        ledger = _make_ledger()
        ledger.mark_for_deletion("a1")
        ledger.set_existing_caption("a2", "Control panel")
        ledger.add_new("site.png", _make_png(), "image/png")
        ledger.clear_pending()
        assert ledger.attachments_to_delete == []
        assert ledger.new_attachments == []
        assert not ledger.is_dirty
        assert ledger.existing_attachments[0].description == "Control panel"
