"""Tests for the import/export gateway."""

import json
from datetime import date
from pathlib import Path

import pytest
from vitrine.content.defaults import DEFAULT_CONTENT, DEFAULT_DOCUMENT
from vitrine.content.models import MutationResult
from vitrine.content.transfer import (
    ContentTransfer,
    content_from_document,
    export_document,
    export_filename,
    parse_document,
    repair_document,
)
from vitrine.shared.errors import ImportDocumentError


def _doc(**changes: object) -> dict:
    doc = json.loads(json.dumps(DEFAULT_DOCUMENT))
    doc.update(changes)
    return doc


class TestParseDocument:
    def test_valid_document(self):
        assert parse_document(json.dumps(DEFAULT_DOCUMENT)) == DEFAULT_CONTENT

    def test_malformed_json(self):
        with pytest.raises(ImportDocumentError, match="Malformed JSON"):
            parse_document("{")

    def test_non_object_root(self):
        with pytest.raises(ImportDocumentError, match="JSON object"):
            parse_document("[1, 2]")

    def test_wrong_section_shape(self):
        with pytest.raises(ImportDocumentError, match="Invalid site content"):
            parse_document(json.dumps(_doc(story={"items": "nope"})))

    def test_missing_theme_backfilled(self):
        doc = _doc()
        del doc["theme"]
        assert parse_document(json.dumps(doc)).theme == DEFAULT_CONTENT.theme

    def test_lenient_fills_missing_sections(self):
        content = content_from_document({"hero": {"title": "Only hero"}})
        assert content.hero.title == "Only hero"
        assert content.lookbook == DEFAULT_CONTENT.lookbook

    def test_strict_rejects_missing_sections(self):
        doc = _doc()
        del doc["rsvp"]
        del doc["marquee"]
        with pytest.raises(ImportDocumentError, match="marquee, rsvp"):
            content_from_document(doc, strict=True)

    def test_strict_still_backfills_theme(self):
        doc = _doc()
        del doc["theme"]
        assert content_from_document(doc, strict=True).theme == DEFAULT_CONTENT.theme

    def test_null_theme_backfilled(self):
        assert content_from_document(_doc(theme=None)).theme == DEFAULT_CONTENT.theme

    def test_strict_treats_null_section_as_missing(self):
        with pytest.raises(ImportDocumentError, match="hero"):
            content_from_document(_doc(hero=None), strict=True)


class TestRepairDocument:
    def test_clean_document_untouched(self):
        content, replaced = repair_document(_doc())
        assert content == DEFAULT_CONTENT
        assert replaced == []

    def test_replaces_only_broken_sections(self):
        doc = _doc(theme=None, lookbook={"items": "nope"})
        doc["hero"]["title"] = "Mine"
        content, replaced = repair_document(doc)
        assert sorted(replaced) == ["lookbook", "theme"]
        assert content.hero.title == "Mine"
        assert content.lookbook == DEFAULT_CONTENT.lookbook

    def test_keeps_unknown_top_level_keys(self):
        content, _ = repair_document(_doc(footer={"text": "x"}))
        assert content.to_document()["footer"] == {"text": "x"}

    def test_non_object_root(self):
        with pytest.raises(ImportDocumentError):
            repair_document(["not", "a", "document"])


class TestExport:
    def test_export_is_verbatim(self):
        assert json.loads(export_document(DEFAULT_CONTENT)) == DEFAULT_DOCUMENT

    def test_filename(self):
        assert export_filename(date(2025, 3, 1)) == "site-content-2025-03-01.json"

    def test_write_export_to_directory(self, store, tmp_path: Path):
        path = ContentTransfer(store).write_export(tmp_path)
        assert path.parent == tmp_path
        assert path.name.startswith("site-content-")
        assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_DOCUMENT


class TestImport:
    def test_round_trip_leaves_content_unchanged(self, admin_store):
        admin_store.update_field("hero", "title", "Edited")
        admin_store.add_item("lookbook", {"id": "p", "title": "Priced", "price": "R$ 5"})
        transfer = ContentTransfer(admin_store)
        before = admin_store.content

        report = transfer.import_json(transfer.export_json())

        assert report.result is MutationResult.UNCHANGED
        assert admin_store.content == before

    def test_import_replaces_content(self, admin_store):
        doc = _doc(hero={"title": "Restored"})
        report = ContentTransfer(admin_store).import_json(json.dumps(doc))
        assert report.result is MutationResult.APPLIED
        assert admin_store.content.hero.title == "Restored"

    def test_malformed_import_keeps_content(self, admin_store):
        admin_store.update_field("hero", "title", "Keep me")
        report = ContentTransfer(admin_store).import_json("not json")
        assert report.result is MutationResult.INVALID
        assert "Malformed JSON" in report.error
        assert admin_store.content.hero.title == "Keep me"

    def test_strict_import_reports_missing_sections(self, admin_store):
        report = ContentTransfer(admin_store, strict=True).import_json(json.dumps({"hero": {}}))
        assert report.result is MutationResult.INVALID
        assert admin_store.content == DEFAULT_CONTENT

    def test_anonymous_import_denied(self, store):
        report = ContentTransfer(store).import_json(json.dumps(_doc(hero={"title": "x"})))
        assert report.result is MutationResult.DENIED
        assert store.content == DEFAULT_CONTENT

    def test_read_import_missing_file(self, admin_store, tmp_path: Path):
        report = ContentTransfer(admin_store).read_import(tmp_path / "missing.json")
        assert report.result is MutationResult.INVALID
        assert report.error

    def test_read_import_file(self, admin_store, tmp_path: Path):
        source = tmp_path / "backup.json"
        source.write_text(json.dumps(_doc(hero={"title": "From file"})), encoding="utf-8")
        assert ContentTransfer(admin_store).read_import(source).result is MutationResult.APPLIED
        assert admin_store.content.hero.title == "From file"
