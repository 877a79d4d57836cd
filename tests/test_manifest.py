"""Tests for the distribution.toml manifest model."""

import pytest

from pydotfiles.exceptions import DotfilesManifestError, DotfilesNotFoundError
from pydotfiles.manifest import (
    Manifest,
    TrackedEntry,
    dump_manifest,
    load_manifest,
    parse_manifest,
    precheck_manifest,
    read_manifest_text,
    save_manifest,
)

SAMPLE = """\
[zsh]
files = [".zshrc", ".zprofile"]

[nvim]
files = ["init.lua", "lua/plugins.lua"]

[alacritty]
files = ["alacritty.toml"]
"""


class TestTrackedEntry:
    """Tests for TrackedEntry paths."""

    def test_logical_and_display_paths(self):
        entry = TrackedEntry("nvim", "lua/plugins.lua")
        assert entry.logical_path == "config/nvim/lua/plugins.lua"
        assert entry.display_path == "nvim/lua/plugins.lua"

    def test_entries_are_hashable_and_comparable(self):
        assert TrackedEntry("a", "b") == TrackedEntry("a", "b")
        assert len({TrackedEntry("a", "b"), TrackedEntry("a", "b")}) == 1


class TestParseManifest:
    """Tests for parse_manifest."""

    def test_preserves_declaration_order(self):
        manifest = parse_manifest(SAMPLE)

        assert list(manifest.tools) == ["zsh", "nvim", "alacritty"]
        assert [e.display_path for e in manifest.entries] == [
            "zsh/.zshrc",
            "zsh/.zprofile",
            "nvim/init.lua",
            "nvim/lua/plugins.lua",
            "alacritty/alacritty.toml",
        ]
        assert len(manifest) == 5

    def test_invalid_toml(self):
        with pytest.raises(DotfilesManifestError, match="Failed to parse"):
            parse_manifest("[nvim\nfiles = [")

    def test_section_without_files(self):
        with pytest.raises(DotfilesManifestError, match="no 'files' array"):
            parse_manifest("[nvim]\npaths = ['init.lua']\n")

    def test_files_must_be_strings(self):
        with pytest.raises(DotfilesManifestError, match="non-string"):
            parse_manifest("[nvim]\nfiles = [1, 2]\n")

    def test_top_level_value_rejected(self):
        with pytest.raises(DotfilesManifestError, match="must be a table"):
            parse_manifest('name = "dotfiles"\n')

    def test_paths_must_stay_inside_tool_directory(self):
        with pytest.raises(DotfilesManifestError, match="Invalid file path"):
            parse_manifest("[ssh]\nfiles = ['../../.bashrc']\n")
        with pytest.raises(DotfilesManifestError, match="Invalid file path"):
            parse_manifest("[ssh]\nfiles = ['/etc/passwd']\n")

    def test_underscore_sections_are_metadata(self):
        content = "[_meta]\nowner = 'me'\n\n[git]\nfiles = ['config']\n"
        manifest = parse_manifest(content)

        assert list(manifest.tools) == ["git"]
        assert manifest.metadata == {"_meta": {"owner": "me"}}

    def test_duplicates_collapsed(self):
        manifest = parse_manifest("[git]\nfiles = ['config', 'ignore', 'config']\n")
        assert manifest.tools["git"] == ["config", "ignore"]

    def test_empty_document(self):
        manifest = parse_manifest("")
        assert len(manifest) == 0
        assert manifest.entries == []


class TestManifestEditing:
    """Tests for Manifest.add and Manifest.remove."""

    def test_add_to_existing_tool_appends(self):
        manifest = parse_manifest(SAMPLE)

        assert manifest.add("nvim", "after/ftplugin.lua") is True
        assert manifest.tools["nvim"][-1] == "after/ftplugin.lua"

    def test_add_new_tool_goes_last(self):
        manifest = parse_manifest(SAMPLE)

        manifest.add("git", "config")

        assert list(manifest.tools)[-1] == "git"
        assert TrackedEntry("git", "config") in manifest

    def test_add_existing_entry_is_noop(self):
        manifest = parse_manifest(SAMPLE)

        assert manifest.add("zsh", ".zshrc") is False
        assert manifest.tools["zsh"] == [".zshrc", ".zprofile"]

    def test_remove(self):
        manifest = parse_manifest(SAMPLE)

        manifest.remove("zsh", ".zshrc")

        assert TrackedEntry("zsh", ".zshrc") not in manifest
        assert manifest.tools["zsh"] == [".zprofile"]

    def test_remove_last_file_keeps_section(self):
        manifest = parse_manifest(SAMPLE)

        manifest.remove("alacritty", "alacritty.toml")

        assert manifest.tools["alacritty"] == []

    def test_remove_unknown_tool(self):
        manifest = parse_manifest(SAMPLE)

        with pytest.raises(DotfilesManifestError, match="Tool 'tmux' not found"):
            manifest.remove("tmux", "tmux.conf")

    def test_remove_untracked_file(self):
        manifest = parse_manifest(SAMPLE)

        with pytest.raises(DotfilesNotFoundError, match="not tracked"):
            manifest.remove("zsh", ".bashrc")


class TestManifestFiles:
    """Tests for loading and saving manifest files."""

    def test_save_and_load_preserves_order(self, tmp_path):
        path = tmp_path / "distribution.toml"
        manifest = parse_manifest(SAMPLE)
        manifest.add("git", "config")

        save_manifest(manifest, path)
        loaded = load_manifest(path)

        assert loaded.tools == manifest.tools

    def test_dump_keeps_metadata(self):
        manifest = Manifest(tools={"git": ["config"]}, metadata={"_meta": {"v": 1}})

        reparsed = parse_manifest(dump_manifest(manifest))

        assert reparsed.metadata == {"_meta": {"v": 1}}
        assert reparsed.tools == {"git": ["config"]}

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(DotfilesManifestError, match="Failed to read"):
            load_manifest(tmp_path / "missing.toml")

    def test_load_non_utf8_file(self, tmp_path):
        path = tmp_path / "distribution.toml"
        path.write_bytes(b'[nvim]\nfiles = ["\xff"]\n')

        with pytest.raises(DotfilesManifestError, match="not valid UTF-8"):
            load_manifest(path)
        with pytest.raises(DotfilesManifestError, match="not valid UTF-8"):
            read_manifest_text(path)


class TestPrecheck:
    """Tests for precheck_manifest."""

    def test_counts(self):
        result = precheck_manifest(SAMPLE)

        assert result.line_count == 8
        assert result.tool_count == 3
        assert result.entry_count == 5

    def test_does_not_check_file_existence(self):
        result = precheck_manifest("[ghost]\nfiles = ['does-not-exist']\n")
        assert result.entry_count == 1

    def test_invalid_shape(self):
        with pytest.raises(DotfilesManifestError):
            precheck_manifest("[nvim]\n")
