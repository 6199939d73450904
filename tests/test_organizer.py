"""Tests for the organizer engine."""

from pathlib import Path
from unittest.mock import patch

import pytest

from smart_organizer.core.classifier import FileClassifier, UNCATEGORIZED_FOLDER
from smart_organizer.core.events import (
    FileFailed,
    FileMoved,
    FilePreviewed,
    OrganizationSummary,
)
from smart_organizer.core.move_log import LOG_FILE_NAME, MoveLog
from smart_organizer.core.organizer import FileOrganizer, organize
from smart_organizer.exceptions import ConfigurationError, DirectoryError, PersistenceError
from smart_organizer.models.config import CustomRuleSet, OrganizerConfig, SortMode


class TestPreconditions:
    """Test source directory validation."""

    def test_missing_directory(self, tmp_path):
        with pytest.raises(DirectoryError, match="Invalid directory"):
            organize(tmp_path / "nope", SortMode.EXTENSION)

    def test_file_instead_of_directory(self, tmp_path):
        file_path = tmp_path / "file.txt"
        file_path.write_text("x")

        with pytest.raises(ConfigurationError):
            organize(file_path, SortMode.EXTENSION)


class TestPreview:
    """Test preview mode."""

    @pytest.mark.parametrize("mode", list(SortMode))
    def test_preview_never_mutates(self, source_dir, tree_snapshot, mode):
        before = tree_snapshot(source_dir)
        dirs_before = sorted(p for p in source_dir.rglob('*') if p.is_dir())

        report = organize(source_dir, mode, CustomRuleSet({"pdf": "Docs"}), preview_only=True)

        assert tree_snapshot(source_dir) == before
        assert sorted(p for p in source_dir.rglob('*') if p.is_dir()) == dirs_before
        assert not (source_dir / LOG_FILE_NAME).exists()
        assert report.preview is True
        assert report.previewed == 7
        assert report.moved == 0
        assert report.log_path is None
        assert len(report.move_log) == 0

    def test_preview_events(self, source_dir):
        events = []

        organize(source_dir, SortMode.EXTENSION, preview_only=True, on_event=events.append)

        previewed = {(e.file_name, e.folder) for e in events if isinstance(e, FilePreviewed)}
        assert ("report.PDF", "PDF") in previewed
        assert ("README", "NO_EXTENSION") in previewed
        assert ("data.csv", "CSV") in previewed
        assert isinstance(events[-1], OrganizationSummary)
        assert events[-1].preview is True
        assert events[-1].previewed == 7


class TestOrganize:
    """Test real organize runs."""

    def test_moves_files_by_extension(self, source_dir):
        report = organize(source_dir, SortMode.EXTENSION)

        assert (source_dir / "PDF" / "report.PDF").read_bytes() == b"pdf data"
        assert (source_dir / "JPG" / "photo.jpg").exists()
        assert (source_dir / "NO_EXTENSION" / "README").exists()
        assert (source_dir / "NO_EXTENSION" / ".gitignore").exists()
        assert (source_dir / "CSV" / "data.csv").exists()
        assert not (source_dir / "projects" / "2023" / "data.csv").exists()
        assert report.moved == 7
        assert report.failed == 0
        assert report.complete is True
        assert report.by_folder["NO_EXTENSION"] == 2

    def test_custom_rules(self, source_dir):
        rules = CustomRuleSet({"jpg": "Images", "png": "Images", "pdf": "Documents"})

        organize(source_dir, SortMode.CUSTOM, rules)

        assert sorted(p.name for p in (source_dir / "Images").iterdir()) == ["diagram.png", "photo.jpg"]
        assert (source_dir / "Documents" / "report.PDF").exists()
        assert (source_dir / "OTHER" / "notes.txt").exists()

    def test_log_records_every_move(self, source_dir):
        report = organize(source_dir, SortMode.EXTENSION)

        log_path = source_dir / LOG_FILE_NAME
        assert report.log_path == log_path
        records = MoveLog.load(log_path).records
        assert records == report.move_log.records
        assert len(records) == 7
        for record in records:
            assert record.destination.exists()
            assert not record.source.exists()
            assert record.destination.parent.parent == source_dir

    def test_log_file_is_never_organized(self, source_dir):
        (source_dir / LOG_FILE_NAME).write_text("stale → entry\n", encoding="utf-8")

        report = organize(source_dir, SortMode.EXTENSION)

        assert (source_dir / LOG_FILE_NAME).exists()
        assert not (source_dir / "TXT" / LOG_FILE_NAME).exists()
        assert all(r.source.name != LOG_FILE_NAME for r in report.move_log)
        assert "stale" not in (source_dir / LOG_FILE_NAME).read_text(encoding="utf-8")

    def test_rerun_replaces_previous_log(self, source_dir):
        organize(source_dir, SortMode.EXTENSION)
        (source_dir / "late.md").write_text("# late")

        report = organize(source_dir, SortMode.EXTENSION)

        records = MoveLog.load(source_dir / LOG_FILE_NAME).records
        assert len(records) == report.moved
        assert any(r.source.name == "late.md" for r in records)

    def test_moved_events(self, source_dir):
        events = []

        organize(source_dir, SortMode.EXTENSION, on_event=events.append)

        moved = [e for e in events if isinstance(e, FileMoved)]
        assert len(moved) == 7
        assert events[-1].moved == 7
        assert events[-1].log_path == str(source_dir / LOG_FILE_NAME)

    def test_relative_source_directory(self, source_dir, monkeypatch):
        monkeypatch.chdir(source_dir.parent)

        report = organize(Path(source_dir.name), SortMode.EXTENSION)

        assert report.source_directory.resolve() == source_dir.resolve()
        assert all(r.source.is_absolute() for r in report.move_log)

    def test_from_config(self, source_dir):
        config = OrganizerConfig(source_directory=source_dir, sort_mode="custom",
                                 custom_rules={"txt": "Text"})

        FileOrganizer.from_config(config).organize()

        assert (source_dir / "Text" / "notes.txt").exists()

    def test_empty_directory(self, tmp_path):
        report = organize(tmp_path, SortMode.EXTENSION)

        assert report.moved == 0
        assert (tmp_path / LOG_FILE_NAME).read_text(encoding="utf-8") == ""


class TestCollisions:
    """Test the last-writer-wins overwrite policy."""

    def test_same_name_same_folder_overwrites(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        (tmp_path / "a" / "x.txt").write_text("first")
        (tmp_path / "b" / "x.txt").write_text("second")
        events = []

        report = organize(tmp_path, SortMode.EXTENSION, on_event=events.append)

        assert (tmp_path / "TXT" / "x.txt").read_text() == "second"
        assert list((tmp_path / "TXT").iterdir()) == [tmp_path / "TXT" / "x.txt"]
        assert report.moved == 2
        assert report.overwritten == 1
        moved = [e for e in events if isinstance(e, FileMoved)]
        assert [e.overwrote for e in moved] == [False, True]

    def test_file_already_in_place(self, tmp_path):
        (tmp_path / "TXT").mkdir()
        (tmp_path / "TXT" / "kept.txt").write_text("kept")

        report = organize(tmp_path, SortMode.EXTENSION)

        assert (tmp_path / "TXT" / "kept.txt").read_text() == "kept"
        assert report.overwritten == 0
        assert report.moved == 1


class TestFailures:
    """Test per-file failures and log persistence failures."""

    def test_failed_move_does_not_abort_walk(self, source_dir):
        real_replace = Path.replace

        def flaky_replace(self, target):
            if self.name == "notes.txt":
                raise PermissionError("permission denied")
            return real_replace(self, target)

        events = []
        with patch.object(Path, "replace", flaky_replace):
            report = organize(source_dir, SortMode.EXTENSION, on_event=events.append)

        assert report.failed == 1
        assert report.moved == 6
        assert "notes.txt" in report.errors[0]
        assert (source_dir / "notes.txt").exists()
        failed = [e for e in events if isinstance(e, FileFailed)]
        assert failed[0].file_name == "notes.txt"
        assert "permission denied" in failed[0].reason
        assert all(r.source.name != "notes.txt" for r in MoveLog.load(source_dir / LOG_FILE_NAME))

    def test_folder_name_taken_by_a_file(self, tmp_path):
        (tmp_path / "a.txt").write_text("notes")
        (tmp_path / "zz.md").write_text("blocks the folder name")
        rules = CustomRuleSet({"txt": "zz.md"})

        report = organize(tmp_path, SortMode.CUSTOM, rules)

        assert report.failed == 1
        assert report.moved == 1
        assert (tmp_path / "a.txt").exists()
        assert (tmp_path / "OTHER" / "zz.md").exists()

    def test_vanished_file(self, source_dir):
        organizer = FileOrganizer(source_dir, SortMode.EXTENSION)
        files = organizer.scan_directory()
        (source_dir / "README").unlink()

        with patch.object(FileOrganizer, "scan_directory", return_value=files):
            report = organizer.organize()

        assert report.failed == 1
        assert report.moved == 6

    def test_log_write_failure_is_raised_with_report(self, source_dir):
        with patch.object(MoveLog, "save", side_effect=PersistenceError("disk full")):
            with pytest.raises(PersistenceError, match="disk full") as exc_info:
                organize(source_dir, SortMode.EXTENSION)

        report = exc_info.value.report
        assert report.moved == 7
        assert report.complete is False
        assert len(report.move_log) == 7

    def test_bad_classification_falls_back(self, tmp_path):
        (tmp_path / "weird.bin").write_bytes(b"x")
        organizer = FileOrganizer(tmp_path, SortMode.TYPE,
                                  classifier=FileClassifier(probe=lambda path: ".."))

        report = organizer.organize()

        assert (tmp_path / UNCATEGORIZED_FOLDER / "weird.bin").exists()
        assert report.by_folder == {UNCATEGORIZED_FOLDER: 1}
