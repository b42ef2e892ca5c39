"""Tests for the pattern resolver: resolve_files() and GlobPattern."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from modloader.errors import ResolutionError
from modloader.resolver import UNBOUNDED_DEPTH, GlobPattern, resolve_files


def _names(paths: list[Path], root: Path) -> list[str]:
    return [p.relative_to(root.resolve()).as_posix() for p in paths]


# === resolve_files() basic matching ===


class TestResolveBasic:
    def test_empty_directory(self, tmp_path: Path) -> None:
        """Empty directory returns an empty list, not an error."""
        assert resolve_files(tmp_path, ["*.py"]) == []

    def test_no_match(self, tmp_path: Path) -> None:
        (tmp_path / "notes.txt").write_text("")
        assert resolve_files(tmp_path, ["*.py"]) == []

    def test_single_match_is_absolute(self, tmp_path: Path) -> None:
        (tmp_path / "hello_module.py").write_text("")
        result = resolve_files(tmp_path, ["*_module.py"])
        assert result == [tmp_path.resolve() / "hello_module.py"]
        assert result[0].is_absolute()

    def test_single_string_spec(self, tmp_path: Path) -> None:
        (tmp_path / "a.unit").write_text("")
        assert _names(resolve_files(tmp_path, "*.unit"), tmp_path) == ["a.unit"]

    def test_name_order(self, tmp_path: Path) -> None:
        for name in ("c.unit", "a.unit", "b.unit"):
            (tmp_path / name).write_text("")
        assert _names(resolve_files(tmp_path, ["*.unit"]), tmp_path) == ["a.unit", "b.unit", "c.unit"]

    def test_overlapping_specs_deduplicated(self, tmp_path: Path) -> None:
        """A file matched by two patterns appears once."""
        (tmp_path / "a.unit").write_text("")
        (tmp_path / "b.unit").write_text("")
        result = resolve_files(tmp_path, ["*.unit", "a.*", "**/*.unit"])
        assert _names(result, tmp_path) == ["a.unit", "b.unit"]

    def test_question_mark_and_class(self, tmp_path: Path) -> None:
        for name in ("a1.unit", "a2.unit", "ab.unit"):
            (tmp_path / name).write_text("")
        assert _names(resolve_files(tmp_path, ["a[0-9].unit"]), tmp_path) == ["a1.unit", "a2.unit"]
        assert _names(resolve_files(tmp_path, ["a?.unit"]), tmp_path) == ["a1.unit", "a2.unit", "ab.unit"]

    def test_base_path_with_glob_characters(self, tmp_path: Path) -> None:
        """Brackets and stars in the base directory name are not wildcards."""
        for dirname in ("plugins[v1]", "star*dir", "what?"):
            base = tmp_path / dirname
            base.mkdir()
            (base / "a.unit").write_text("")
            assert _names(resolve_files(base, ["**/*.unit"], depth=UNBOUNDED_DEPTH), base) == ["a.unit"]

    def test_absolute_pattern(self, tmp_path: Path) -> None:
        (tmp_path / "a.unit").write_text("")
        spec = str(tmp_path.resolve() / "*.unit")
        assert _names(resolve_files(tmp_path, [spec]), tmp_path) == ["a.unit"]

    def test_patterns_anchored_at_base_not_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        base = tmp_path / "base"
        base.mkdir()
        (base / "a.unit").write_text("")
        other = tmp_path / "other"
        other.mkdir()
        (other / "z.unit").write_text("")
        monkeypatch.chdir(other)
        assert _names(resolve_files(base, ["*.unit"]), base) == ["a.unit"]


# === Only regular files ===


class TestResolveFileKinds:
    def test_directories_excluded(self, tmp_path: Path) -> None:
        (tmp_path / "dir.unit").mkdir()
        (tmp_path / "file.unit").write_text("")
        assert _names(resolve_files(tmp_path, ["*.unit"]), tmp_path) == ["file.unit"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directory_not_traversed(self, tmp_path: Path) -> None:
        real = tmp_path / "real"
        real.mkdir()
        (real / "a.unit").write_text("")
        base = tmp_path / "base"
        base.mkdir()
        os.symlink(real, base / "link.unit", target_is_directory=True)
        assert resolve_files(base, ["**/*.unit"], depth=UNBOUNDED_DEPTH) == []

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_included(self, tmp_path: Path) -> None:
        target = tmp_path / "target.txt"
        target.write_text("")
        base = tmp_path / "base"
        base.mkdir()
        os.symlink(target, base / "link.unit")
        assert _names(resolve_files(base, ["*.unit"]), base) == ["link.unit"]

    def test_hidden_files_need_explicit_dot(self, tmp_path: Path) -> None:
        (tmp_path / ".hidden.unit").write_text("")
        assert resolve_files(tmp_path, ["*.unit"]) == []
        assert _names(resolve_files(tmp_path, [".*.unit"]), tmp_path) == [".hidden.unit"]

    def test_pycache_not_traversed(self, tmp_path: Path) -> None:
        (tmp_path / "__pycache__").mkdir()
        (tmp_path / "__pycache__" / "cached_module.py").write_text("")
        assert resolve_files(tmp_path, ["**/*.py"], depth=UNBOUNDED_DEPTH) == []


# === Depth ===


class TestResolveDepth:
    @pytest.fixture
    def tree(self, tmp_path: Path) -> Path:
        (tmp_path / "root.unit").write_text("")
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "one.unit").write_text("")
        (tmp_path / "a" / "b").mkdir()
        (tmp_path / "a" / "b" / "two.unit").write_text("")
        return tmp_path

    def test_default_depth_is_root_only(self, tree: Path) -> None:
        assert _names(resolve_files(tree, ["**/*.unit"]), tree) == ["root.unit"]

    def test_depth_one(self, tree: Path) -> None:
        assert _names(resolve_files(tree, ["**/*.unit"], depth=1), tree) == ["a/one.unit", "root.unit"]

    def test_unbounded(self, tree: Path) -> None:
        result = _names(resolve_files(tree, ["**/*.unit"], depth=UNBOUNDED_DEPTH), tree)
        assert result == ["a/b/two.unit", "a/one.unit", "root.unit"]

    def test_single_star_does_not_cross_directories(self, tree: Path) -> None:
        assert _names(resolve_files(tree, ["*.unit"], depth=UNBOUNDED_DEPTH), tree) == ["root.unit"]

    def test_explicit_subdirectory_pattern(self, tree: Path) -> None:
        assert _names(resolve_files(tree, ["a/*.unit"], depth=1), tree) == ["a/one.unit"]

    def test_invalid_negative_depth(self, tree: Path) -> None:
        with pytest.raises(ResolutionError):
            resolve_files(tree, ["*.unit"], depth=-2)


# === Ignore patterns ===


class TestResolveIgnore:
    def test_ignore_wins_over_include(self, tmp_path: Path) -> None:
        (tmp_path / "keep.unit").write_text("")
        (tmp_path / "skip.unit").write_text("")
        result = resolve_files(tmp_path, ["*.unit"], ignore_specs=["skip.*"])
        assert _names(result, tmp_path) == ["keep.unit"]

    def test_ignore_single_string(self, tmp_path: Path) -> None:
        (tmp_path / "a.unit").write_text("")
        assert resolve_files(tmp_path, ["*.unit"], ignore_specs="a.unit") == []

    def test_ignore_nested_with_globstar(self, tmp_path: Path) -> None:
        (tmp_path / "a.unit").write_text("")
        (tmp_path / "tests").mkdir()
        (tmp_path / "tests" / "t.unit").write_text("")
        result = resolve_files(tmp_path, ["**/*.unit"], ignore_specs=["tests/**"], depth=UNBOUNDED_DEPTH)
        assert _names(result, tmp_path) == ["a.unit"]


# === Errors ===


class TestResolveErrors:
    def test_missing_base_path(self, tmp_path: Path) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            resolve_files(tmp_path / "nonexistent", ["*.unit"])
        assert exc_info.value.code == "RESOLUTION_ERROR"

    def test_base_path_is_file(self, tmp_path: Path) -> None:
        f = tmp_path / "file.txt"
        f.write_text("")
        with pytest.raises(ResolutionError):
            resolve_files(f, ["*.unit"])

    def test_empty_pattern(self, tmp_path: Path) -> None:
        with pytest.raises(ResolutionError):
            resolve_files(tmp_path, [""])

    def test_no_patterns(self, tmp_path: Path) -> None:
        with pytest.raises(ResolutionError):
            resolve_files(tmp_path, [])

    def test_unreadable_root_raises(self, tmp_path: Path) -> None:
        with patch("os.scandir", side_effect=PermissionError("Access denied")):
            with pytest.raises(ResolutionError):
                resolve_files(tmp_path, ["*.unit"])

    def test_unreadable_subdirectory_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "good.unit").write_text("")
        (tmp_path / "forbidden").mkdir()
        (tmp_path / "forbidden" / "secret.unit").write_text("")

        original_scandir = os.scandir

        def mock_scandir(path):
            if str(path).endswith("forbidden"):
                raise PermissionError("Access denied")
            return original_scandir(path)

        with patch("os.scandir", side_effect=mock_scandir):
            result = resolve_files(tmp_path, ["**/*.unit"], depth=UNBOUNDED_DEPTH)

        assert _names(result, tmp_path) == ["good.unit"]


# === GlobPattern ===


class TestGlobPattern:
    def test_globstar_matches_zero_levels(self, tmp_path: Path) -> None:
        pattern = GlobPattern(tmp_path, "**/*.unit")
        assert pattern.matches(tmp_path / "a.unit")

    def test_globstar_matches_many_levels(self, tmp_path: Path) -> None:
        pattern = GlobPattern(tmp_path, "**/*.unit")
        assert pattern.matches(tmp_path / "x" / "y" / "a.unit")

    def test_globstar_skips_hidden_directories(self, tmp_path: Path) -> None:
        pattern = GlobPattern(tmp_path, "**/*.unit")
        assert not pattern.matches(tmp_path / ".git" / "a.unit")

    def test_outside_base_never_matches(self, tmp_path: Path) -> None:
        pattern = GlobPattern(tmp_path / "base", "*.unit")
        assert not pattern.matches(tmp_path / "a.unit")

    def test_base_with_glob_characters_is_literal(self, tmp_path: Path) -> None:
        base = tmp_path / "plugins[v1]"
        pattern = GlobPattern(base, "*.unit")
        assert pattern.matches(base / "a.unit")
        assert not pattern.matches(tmp_path / "pluginsv" / "a.unit")

    def test_repr_shows_anchored_pattern(self, tmp_path: Path) -> None:
        assert "*.unit" in repr(GlobPattern(tmp_path, "*.unit"))
