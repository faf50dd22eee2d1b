"""Tests for retention policies, the resolver and the file deleter."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from image_dedupe.core.deleter import MISSING, PROTECTED, FileDeleter
from image_dedupe.core.models import DeletionResult, DuplicateGroup
from image_dedupe.core.resolver import DuplicateResolver, RetentionPolicy


def make_group(tmp_path: Path, *names: str) -> DuplicateGroup:
    paths = []
    for name in names:
        path = tmp_path / name
        path.write_bytes(b"image")
        paths.append(path)
    return DuplicateGroup(paths)


class TestRetentionPolicy:
    """Test RetentionPolicy parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("no", RetentionPolicy.LIST_ONLY),
            ("list-only", RetentionPolicy.LIST_ONLY),
            ("YES", RetentionPolicy.INTERACTIVE),
            ("interactive", RetentionPolicy.INTERACTIVE),
            ("all", RetentionPolicy.AUTO_KEEP_FIRST),
            (" auto-keep-first ", RetentionPolicy.AUTO_KEEP_FIRST),
        ],
    )
    def test_parse(self, value, expected):
        assert RetentionPolicy.parse(value) is expected

    def test_parse_invalid(self):
        with pytest.raises(ValueError, match="Invalid delete option"):
            RetentionPolicy.parse("maybe")


class TestDuplicateResolver:
    """Test DuplicateResolver class."""

    def test_list_only_never_deletes(self, tmp_path):
        groups = [make_group(tmp_path, "a.png", "b.png", "c.png"), make_group(tmp_path, "d.png", "e.png")]
        resolver = DuplicateResolver(FileDeleter())

        outcomes = resolver.resolve(groups, RetentionPolicy.LIST_ONLY)

        assert len(outcomes) == 2
        assert all(o.keep is None and not o.delete and not o.results for o in outcomes)
        assert all(p.exists() for g in groups for p in g)

    def test_auto_keep_first_deletes_all_but_first(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png", "c.png")
        resolver = DuplicateResolver(FileDeleter())

        [outcome] = resolver.resolve([group], RetentionPolicy.AUTO_KEEP_FIRST)

        assert outcome.keep == group[0]
        assert outcome.deleted_paths == [group[1], group[2]]
        assert group[0].exists()
        assert not group[1].exists()
        assert not group[2].exists()

    def test_interactive_keeps_chosen_file(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png", "c.png")
        chooser = Mock(return_value=group[1])
        resolver = DuplicateResolver(FileDeleter())

        [outcome] = resolver.resolve([group], RetentionPolicy.INTERACTIVE, chooser)

        chooser.assert_called_once_with(group)
        assert outcome.keep == group[1]
        assert outcome.deleted_paths == [group[0], group[2]]
        assert group[1].exists()

    def test_interactive_keep_all(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png")
        resolver = DuplicateResolver(FileDeleter())

        [outcome] = resolver.resolve([group], RetentionPolicy.INTERACTIVE, lambda g: None)

        assert outcome.keep is None
        assert outcome.deleted_paths == []
        assert all(p.exists() for p in group)

    def test_interactive_choice_outside_group_keeps_all(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png")
        resolver = DuplicateResolver(FileDeleter())

        [outcome] = resolver.resolve(
            [group], RetentionPolicy.INTERACTIVE, lambda g: tmp_path / "other.png"
        )

        assert outcome.keep is None
        assert all(p.exists() for p in group)

    def test_interactive_asks_once_per_group_in_order(self, tmp_path):
        first = make_group(tmp_path, "a.png", "b.png")
        second = make_group(tmp_path, "c.png", "d.png")
        seen = []

        def chooser(group):
            seen.append(group)
            return None

        DuplicateResolver(FileDeleter()).resolve([first, second], RetentionPolicy.INTERACTIVE, chooser)

        assert seen == [first, second]

    def test_interactive_requires_chooser(self, tmp_path):
        resolver = DuplicateResolver(FileDeleter())

        with pytest.raises(ValueError):
            resolver.resolve([make_group(tmp_path, "a.png", "b.png")], RetentionPolicy.INTERACTIVE)

    def test_deletion_failure_does_not_stop_siblings(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png", "c.png", "d.png")
        real = FileDeleter()
        deleter = Mock()

        def delete(path):
            if path.name == "b.png":
                return DeletionResult.failure(path, "Permission denied")
            return real.delete(path)

        deleter.delete.side_effect = delete
        resolver = DuplicateResolver(deleter)

        [outcome] = resolver.resolve([group], RetentionPolicy.AUTO_KEEP_FIRST)

        assert deleter.delete.call_count == 3
        assert outcome.deleted_paths == [group[2], group[3]]
        assert [r.path for r in outcome.failed] == [group[1]]
        assert outcome.failed[0].error == "Permission denied"
        assert group[1].exists()

    def test_missing_member_is_reported_not_raised(self, tmp_path):
        group = make_group(tmp_path, "a.png", "b.png", "c.png")
        group[1].unlink()

        [outcome] = DuplicateResolver(FileDeleter()).resolve([group], RetentionPolicy.AUTO_KEEP_FIRST)

        assert outcome.deleted_paths == [group[2]]
        assert outcome.failed == [DeletionResult.failure(group[1], MISSING)]


class TestFileDeleter:
    """Test FileDeleter class."""

    def test_permanent_delete(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(b"x")

        result = FileDeleter().delete(path)

        assert result == DeletionResult.success(path)
        assert not path.exists()

    def test_dangling_symlink_is_deleted(self, tmp_path):
        link = tmp_path / "a.png"
        link.symlink_to(tmp_path / "gone.png")

        result = FileDeleter().delete(link)

        assert result == DeletionResult.success(link)
        assert not link.is_symlink()

    def test_missing_file(self, tmp_path):
        path = tmp_path / "a.png"

        assert FileDeleter().delete(path) == DeletionResult.failure(path, MISSING)

    def test_os_error_becomes_failure(self, tmp_path):
        path = tmp_path / "a.png"
        path.write_bytes(b"x")

        with patch.object(Path, "unlink", side_effect=PermissionError("Permission denied")):
            result = FileDeleter().delete(path)

        assert not result.deleted
        assert "Permission denied" in result.error
        assert path.exists()

    def test_protected_folder_is_refused(self, tmp_path, config):
        folder = tmp_path / "Wedding"
        folder.mkdir()
        path = folder / "a.png"
        path.write_bytes(b"x")
        config.set("protected_folders", ["wedding"], persist=False)

        result = FileDeleter(config).delete(path)

        assert result == DeletionResult.failure(path, PROTECTED)
        assert path.exists()

    def test_recycle_bin(self, tmp_path, config):
        path = tmp_path / "a.png"
        path.write_bytes(b"x")
        config.set("safety.use_recycle_bin", True, persist=False)

        with patch("image_dedupe.core.deleter.send2trash") as mock_send2trash:
            result = FileDeleter(config).delete(path)

        mock_send2trash.assert_called_once_with(str(path))
        assert result.deleted

    def test_explicit_override_beats_config(self, config):
        config.set("safety.use_recycle_bin", True, persist=False)

        assert FileDeleter(config, use_recycle_bin=False).use_recycle_bin is False
