"""Tests for link scanning, link target parsing and vault link lookup."""

from pathlib import Path

from conftest import write_notes

from chatlink.io.vault import FileHandle
from chatlink.io.vault import LocalVault
from chatlink.links.parser import LinkTarget
from chatlink.links.parser import extract_section
from chatlink.links.parser import parse_link_target
from chatlink.links.parser import scan_links
from chatlink.links.resolver import VaultLinkResolver


class TestScanLinks:
    """Tests for scan_links function."""

    def test_no_links(self) -> None:
        assert scan_links("Hello world") == []

    def test_whole_line_link(self) -> None:
        links = scan_links("before\n[[Note]]\nafter")
        assert len(links) == 1
        assert links[0].target == "Note"
        assert links[0].original == "[[Note]]"
        assert links[0].embedded is False

    def test_embed_prefix(self) -> None:
        links = scan_links("![[cat.png]]")
        assert links[0].target == "cat.png"
        assert links[0].original == "![[cat.png]]"
        assert links[0].embedded is True

    def test_inline_link_is_ignored(self) -> None:
        """Links that share their line with other text are not embeds."""
        assert scan_links("See [[Note]] for details") == []
        assert scan_links("[[Note]] trailing") == []

    def test_offsets_point_at_match(self) -> None:
        text = "A\n[[X]]\nB\n[[Y]]\nC"
        links = scan_links(text)
        assert [text[link.start : link.end] for link in links] == ["[[X]]", "[[Y]]"]

    def test_crlf_line_endings(self) -> None:
        """Windows line endings still give whole-line links, minus the \\r."""
        text = "A\r\n[[X]]\r\n![[cat.png]]\r\nB"
        links = scan_links(text)
        assert [link.target for link in links] == ["X", "cat.png"]
        assert [text[link.start : link.end] for link in links] == ["[[X]]", "![[cat.png]]"]
        assert text[links[0].end : links[0].end + 2] == "\r\n"

    def test_crlf_link_on_last_line(self) -> None:
        links = scan_links("A\r\n[[X]]")
        assert links[0].original == "[[X]]"

    def test_source_order(self) -> None:
        links = scan_links("[[b]]\n[[a]]\n[[c]]")
        assert [link.target for link in links] == ["b", "a", "c"]

    def test_target_keeps_subpath_and_alias(self) -> None:
        links = scan_links("[[Folder/Note#Heading|Shown]]")
        assert links[0].target == "Folder/Note#Heading|Shown"


class TestParseLinkTarget:
    """Tests for parse_link_target function."""

    def test_plain_path(self) -> None:
        assert parse_link_target("Note") == LinkTarget("Note")

    def test_subpath(self) -> None:
        assert parse_link_target("Note#Intro") == LinkTarget("Note", "Intro")

    def test_alias(self) -> None:
        assert parse_link_target("Note|Other name") == LinkTarget("Note", None, "Other name")

    def test_subpath_and_alias(self) -> None:
        assert parse_link_target("a/Note#Sec|x") == LinkTarget("a/Note", "Sec", "x")

    def test_empty_subpath_is_none(self) -> None:
        assert parse_link_target("Note#").subpath is None


class TestExtractSection:
    """Tests for extract_section function."""

    TEXT = "# Top\nintro\n## Part A\na text\n### Deep\nd\n## Part B\nb text\n# Next\nn"

    def test_section_runs_to_next_same_level_heading(self) -> None:
        assert extract_section(self.TEXT, "Part A") == "## Part A\na text\n### Deep\nd"

    def test_top_level_section_includes_subsections(self) -> None:
        section = extract_section(self.TEXT, "Top")
        assert section is not None
        assert section.startswith("# Top")
        assert section.endswith("b text")

    def test_last_section_runs_to_end(self) -> None:
        assert extract_section(self.TEXT, "Next") == "# Next\nn"

    def test_case_insensitive(self) -> None:
        assert extract_section(self.TEXT, "part b") == "## Part B\nb text"

    def test_nested_subpath_matches_last_heading(self) -> None:
        assert extract_section(self.TEXT, "Top#Part B") == "## Part B\nb text"

    def test_missing_heading(self) -> None:
        assert extract_section(self.TEXT, "Nope") is None


class TestVaultLinkResolver:
    """Tests for VaultLinkResolver."""

    def test_resolves_relative_to_source_folder(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {"projects/Task.md": "p", "Task.md": "root"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("Task", "projects/Main.md") == FileHandle("projects/Task.md")

    def test_falls_back_to_vault_root(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {"Task.md": "root"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("Task", "projects/Main.md") == FileHandle("Task.md")

    def test_explicit_extension(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {"img/cat.png": b"\x89PNG"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("img/cat.png", "Main.md") == FileHandle("img/cat.png")

    def test_name_match_anywhere_prefers_shortest_path(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {"a/b/Deep.md": "deep", "c/Deep.md": "shallow"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("Deep", "Main.md") == FileHandle("c/Deep.md")

    def test_partial_path_match(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {"x/b/Deep.md": "one", "y/c/Deep.md": "two"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("c/Deep", "Main.md") == FileHandle("y/c/Deep.md")

    def test_missing_target(self, tmp_path: Path) -> None:
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("doesnotexist", "Main.md") is None

    def test_empty_target(self, tmp_path: Path) -> None:
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("", "Main.md") is None

    def test_hidden_folders_are_not_searched(self, tmp_path: Path) -> None:
        write_notes(tmp_path, {".trash/Old.md": "gone"})
        resolver = VaultLinkResolver(LocalVault(tmp_path))
        assert resolver.resolve("Old", "Main.md") is None
