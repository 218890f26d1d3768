#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/integration/test_convert_eml_file.py
"""Integration tests for converting .eml files into notes on disk.

Tests cover:
- Note and attachment output next to the source or in an output folder
- Source handling (keep, delete, move to the attachments folder)
- Skipping of existing notes and of sources in the attachments folder
- Attachment size limits and name collisions
- Folder discovery and batch conversion

"""

from pathlib import Path

import pytest
import yaml
from utils import MINIMAL_PNG_BYTES, build_mixed_email, build_nested_email, build_simple_email, write_eml

from eml2md import convert_eml_file, convert_eml_to_markdown, convert_paths, find_eml_files
from eml2md.api import read_email
from eml2md.exceptions import FileNotFoundError, MalformedFileError, OutputWriteError
from eml2md.options import EmlOptions, NoteOptions


@pytest.mark.integration
class TestConvertEmlFile:
    """Tests for convert_eml_file."""

    def test_default_moves_source(self, eml_file) -> None:
        folder = eml_file.parent
        result = convert_eml_file(eml_file)

        assert result.note_path == folder / "message.md"
        assert result.attachments == (folder / "attachments" / "message_logo.png",)
        assert result.moved_eml_path == folder / "attachments" / "message.eml"
        assert not result.skipped
        assert result.email.subject == "Hello world"

        assert not eml_file.exists()
        assert result.moved_eml_path.exists()
        assert result.attachments[0].read_bytes() == MINIMAL_PNG_BYTES

        note = result.note_path.read_text(encoding="utf-8")
        assert "# Hello world" in note
        assert "**From:** Doe, John <john@example.com>" in note
        assert "**Original:** [message.eml](attachments/message.eml)" in note
        assert "- ![message_logo.png](attachments/message_logo.png)" in note
        assert "Café menu is attached." in note

    def test_frontmatter(self, eml_file) -> None:
        note = convert_eml_file(eml_file).note_path.read_text(encoding="utf-8")
        data = yaml.safe_load(note.split("---\n")[1])
        assert data["subject"] == "Hello world"
        assert data["date"] == "2024-01-16T13:00:00+00:00"
        assert data["message_id"] == "abc@example.com"
        assert data["to"] == "jane@example.com, Smith, Bob <bob@example.com>"
        assert data["type"] == "email"

    def test_prefer_html_embeds_inline_image(self, eml_file) -> None:
        result = convert_eml_file(eml_file, options=NoteOptions(prefer_html_body=True))
        note = result.note_path.read_text(encoding="utf-8")
        assert "Café menu is **attached**." in note
        assert "![Logo](attachments/message_logo.png)" in note
        assert "cid:" not in note

    def test_keep_source(self, eml_file) -> None:
        result = convert_eml_file(eml_file, options=NoteOptions(eml_handling="keep"))
        assert eml_file.exists()
        assert result.moved_eml_path is None
        assert "**Original:**" not in result.note_path.read_text(encoding="utf-8")

    def test_delete_source(self, eml_file) -> None:
        result = convert_eml_file(eml_file, options=NoteOptions(eml_handling="delete"))
        assert not eml_file.exists()
        assert result.note_path.exists()
        assert not (eml_file.parent / "attachments" / "message.eml").exists()

    def test_output_dir(self, eml_file, tmp_path) -> None:
        out = tmp_path / "vault"
        result = convert_eml_file(eml_file, output_dir=out, options=NoteOptions(eml_handling="keep"))
        assert result.note_path == out / "message.md"
        assert (out / "attachments" / "message_logo.png").exists()
        assert "(attachments/message_logo.png)" in result.note_path.read_text(encoding="utf-8")

    def test_custom_attachment_dir_and_wikilinks(self, eml_file) -> None:
        options = NoteOptions(attachment_dir="assets/mail", link_style="wikilink")
        result = convert_eml_file(eml_file, options=options)
        note = result.note_path.read_text(encoding="utf-8")
        assert result.moved_eml_path == eml_file.parent / "assets" / "mail" / "message.eml"
        assert "![[assets/mail/message_logo.png]]" in note
        assert "**Original:** [[assets/mail/message.eml]]" in note

    def test_existing_note_is_skipped(self, eml_file) -> None:
        note_path = eml_file.parent / "message.md"
        note_path.write_text("existing", encoding="utf-8")
        result = convert_eml_file(eml_file)
        assert result.skipped
        assert note_path.read_text(encoding="utf-8") == "existing"
        assert eml_file.exists()

    def test_source_in_attachment_dir_is_skipped(self, tmp_path) -> None:
        folder = tmp_path / "attachments"
        folder.mkdir()
        source = write_eml(folder, "old.eml", build_simple_email())
        result = convert_eml_file(source)
        assert result.skipped
        assert not (tmp_path / "attachments" / "old.md").exists()

    def test_moved_source_gets_unique_name(self, eml_file) -> None:
        attachments = eml_file.parent / "attachments"
        attachments.mkdir()
        (attachments / "message.eml").write_text("older message", encoding="utf-8")
        result = convert_eml_file(eml_file)
        assert result.moved_eml_path == attachments / "message_1.eml"
        assert (attachments / "message.eml").read_text(encoding="utf-8") == "older message"

    def test_existing_attachment_is_reused(self, eml_file) -> None:
        attachments = eml_file.parent / "attachments"
        attachments.mkdir()
        (attachments / "message_logo.png").write_bytes(b"already here")
        result = convert_eml_file(eml_file)
        assert result.attachments[0].read_bytes() == b"already here"

    def test_failed_note_write_leaves_source_in_place(self, eml_file, monkeypatch) -> None:
        original_write_text = Path.write_text

        def failing_write_text(self, *args, **kwargs):
            if self.suffix == ".md":
                raise PermissionError("read-only folder")
            return original_write_text(self, *args, **kwargs)

        monkeypatch.setattr(Path, "write_text", failing_write_text)
        with pytest.raises(OutputWriteError):
            convert_eml_file(eml_file)
        monkeypatch.undo()

        assert eml_file.exists()
        assert not (eml_file.parent / "attachments" / "message.eml").exists()
        retry = convert_eml_file(eml_file)
        assert not retry.skipped
        assert retry.moved_eml_path == eml_file.parent / "attachments" / "message.eml"

    def test_failed_move_removes_note(self, eml_file, monkeypatch) -> None:
        def failing_move(src, dst):
            raise PermissionError("locked")

        monkeypatch.setattr("eml2md.api.shutil.move", failing_move)
        with pytest.raises(OutputWriteError):
            convert_eml_file(eml_file)

        assert eml_file.exists()
        assert not (eml_file.parent / "message.md").exists()

    def test_oversized_attachment_is_skipped(self, eml_file) -> None:
        result = convert_eml_file(eml_file, options=NoteOptions(max_attachment_size_bytes=10, eml_handling="keep"))
        assert result.attachments == ()
        assert "### Attachments" not in result.note_path.read_text(encoding="utf-8")

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            convert_eml_file(tmp_path / "missing.eml")

    def test_malformed_file_reports_path(self, tmp_path) -> None:
        source = write_eml(tmp_path, "deep.eml", build_nested_email(4))
        with pytest.raises(MalformedFileError) as exc_info:
            read_email(source, EmlOptions(max_multipart_depth=2))
        assert exc_info.value.file_path == str(source)


@pytest.mark.integration
class TestConvertEmlToMarkdown:
    """Tests for in-memory conversion."""

    def test_bytes(self) -> None:
        note = convert_eml_to_markdown(build_mixed_email().encode("utf-8"), NoteOptions(use_frontmatter=False))
        assert note.startswith("# Hello world\n")
        assert "Café menu is attached." in note
        assert "### Attachments" not in note


@pytest.mark.integration
class TestBatchConversion:
    """Tests for find_eml_files and convert_paths."""

    @pytest.fixture
    def mail_folder(self, tmp_path):
        write_eml(tmp_path, "a.eml", build_simple_email(subject="A"))
        write_eml(tmp_path, "B.EML", build_simple_email(subject="B"))
        (tmp_path / "notes.txt").write_text("not an email", encoding="utf-8")
        (tmp_path / "sub").mkdir()
        write_eml(tmp_path / "sub", "c.eml", build_simple_email(subject="C"))
        return tmp_path

    def test_find_non_recursive(self, mail_folder) -> None:
        names = sorted(path.name for path in find_eml_files([mail_folder]))
        assert names == ["B.EML", "a.eml"]

    def test_find_recursive(self, mail_folder) -> None:
        names = sorted(path.name for path in find_eml_files([mail_folder], recursive=True))
        assert names == ["B.EML", "a.eml", "c.eml"]

    def test_find_deduplicates(self, mail_folder) -> None:
        found = find_eml_files([mail_folder / "a.eml", mail_folder])
        assert [path.name for path in found].count("a.eml") == 1

    def test_find_missing_path(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            find_eml_files([tmp_path / "nope"])

    def test_convert_paths(self, mail_folder) -> None:
        write_eml(mail_folder, "deep.eml", build_nested_email(4))
        results, failures = convert_paths(
            [mail_folder],
            options=NoteOptions(eml_handling="keep"),
            parse_options=EmlOptions(max_multipart_depth=2),
        )
        assert sorted(result.note_path.name for result in results) == ["B.md", "a.md"]
        assert [(path.name, type(error)) for path, error in failures] == [("deep.eml", MalformedFileError)]

    def test_recursive_run_skips_moved_sources(self, mail_folder) -> None:
        convert_paths([mail_folder], recursive=True)
        results, failures = convert_paths([mail_folder], recursive=True)
        assert failures == []
        assert results
        assert all(result.skipped for result in results)
        assert not (mail_folder / "attachments" / "a.md").exists()
