"""Tests for file discovery, content sampling, and the ingestion pipeline."""

from __future__ import annotations

from pathlib import Path

import pytest

from maid.classification import Category
from maid.config import MaidConfig
from maid.errors import RootInaccessibleError
from maid.ingestion import ContentSampler, DirectoryScanner, ensure_root
from maid.ingestion.pipeline import IngestionPipeline


def _scanner(**overrides) -> DirectoryScanner:
    options = {
        "recursive": False,
        "include_hidden": False,
        "follow_symlinks": False,
        "extensions": [".md", ".sh"],
        "excluded_dirnames": [".maid-trash"],
    }
    options.update(overrides)
    return DirectoryScanner(**options)


@pytest.fixture()
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "tree"
    (root / "nested").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / ".maid-trash" / "20260101T000000Z").mkdir(parents=True)
    for relative in [
        "b_guide.md",
        "a_report.md",
        "deploy.sh",
        "image.png",
        ".secret.md",
        "nested/inner_summary.md",
        ".hidden/status.md",
        ".maid-trash/20260101T000000Z/old.md",
    ]:
        (root / relative).write_text("text", encoding="utf-8")
    return root


def test_scan_skips_hidden_trash_and_other_extensions(tree: Path) -> None:
    """Ensure the default scan skips hidden, trashed and unsupported files."""
    names = [record.path.relative_to(tree.resolve()).as_posix() for record in _scanner().scan(tree)]

    assert names == ["a_report.md", "b_guide.md", "deploy.sh"]


def test_recursive_scan_includes_subdirectories(tree: Path) -> None:
    """Ensure a recursive scan returns nested files with size and UTC timestamps."""
    records = list(_scanner(recursive=True).scan(tree))
    names = [record.path.relative_to(tree.resolve()).as_posix() for record in records]

    assert names == ["a_report.md", "b_guide.md", "deploy.sh", "nested/inner_summary.md"]
    assert all(record.size_bytes == 4 for record in records)
    assert all(record.modified_at.tzinfo is not None for record in records)


def test_hidden_files_can_be_included_but_trash_never_is(tree: Path) -> None:
    """Ensure `include_hidden` never exposes the trash directory."""
    records = _scanner(recursive=True, include_hidden=True).scan(tree)
    names = {record.path.relative_to(tree.resolve()).as_posix() for record in records}

    assert ".secret.md" in names
    assert ".hidden/status.md" in names
    assert not any(name.startswith(".maid-trash") for name in names)


def test_symlinks_are_skipped_unless_followed(tree: Path) -> None:
    """Ensure symlinks are only scanned with `follow_symlinks`."""
    (tree / "link_guide.md").symlink_to(tree / "b_guide.md")

    default = {record.path.name for record in _scanner().scan(tree)}
    followed = {record.path.name for record in _scanner(follow_symlinks=True).scan(tree)}

    assert "link_guide.md" not in default
    assert "link_guide.md" in followed


def test_ensure_root_rejects_missing_and_non_directories(tmp_path: Path) -> None:
    """Ensure root validation rejects missing paths and regular files."""
    file_path = tmp_path / "file.md"
    file_path.write_text("x", encoding="utf-8")

    with pytest.raises(RootInaccessibleError, match="does not exist"):
        ensure_root(tmp_path / "missing")
    with pytest.raises(RootInaccessibleError, match="not a directory"):
        ensure_root(file_path)
    assert ensure_root(tmp_path) == tmp_path.resolve()


def test_scan_of_missing_root_raises(tmp_path: Path) -> None:
    """Ensure scanning a missing root raises RootInaccessibleError."""
    with pytest.raises(RootInaccessibleError):
        list(_scanner().scan(tmp_path / "missing"))


def test_excerpt_reads_leading_lines(tmp_path: Path) -> None:
    """Ensure excerpts read the first lines and replace undecodable bytes."""
    path = tmp_path / "notes.md"
    path.write_bytes(b"line one\nline two\n\xffline three\nline four\n")
    sampler = ContentSampler()

    assert sampler.excerpt(path, 2) == "line one\nline two"
    assert "\ufffd" in (sampler.excerpt(path, 3) or "")
    assert sampler.excerpt(path, 0) is None
    assert sampler.excerpt(tmp_path / "missing.md", 5) is None


def test_excerpt_of_blank_file_is_none(tmp_path: Path) -> None:
    """Ensure whitespace-only files yield no excerpt."""
    path = tmp_path / "blank.md"
    path.write_text("\n\n", encoding="utf-8")

    assert ContentSampler().excerpt(path, 10) is None


def test_pipeline_classifies_and_names_records(tree: Path) -> None:
    """Ensure the pipeline attaches categories, excerpts and canonical names."""
    (tree / "meeting.md").write_text("Quarterly progress recap", encoding="utf-8")
    pipeline = IngestionPipeline.from_config(MaidConfig())

    result = pipeline.run(tree)

    by_name = {record.base_name: record for record in result.records}
    assert by_name["a_report.md"].category == Category.REPORT
    assert by_name["a_report.md"].canonical_name == "report-a.md"
    assert by_name["deploy.sh"].category == Category.SCRIPT
    assert by_name["deploy.sh"].canonical_name == "script-deploy.sh"
    assert by_name["meeting.md"].category == Category.SUMMARY
    assert by_name["meeting.md"].excerpt == "Quarterly progress recap"
    assert result.errors == []


def test_pipeline_respects_configured_extensions(tree: Path) -> None:
    """Ensure `processing.extensions` controls which files are scanned."""
    config = MaidConfig.model_validate({"processing": {"extensions": ["png"]}})

    result = IngestionPipeline.from_config(config).run(tree)

    assert [record.base_name for record in result.records] == ["image.png"]


def test_accepts_matches_scan_filters_for_event_paths(tree: Path) -> None:
    """Ensure path filtering mirrors the scan, including for paths that no longer exist."""
    root = tree.resolve()
    scanner = _scanner()
    deep = _scanner(recursive=True, include_hidden=True)

    assert scanner.accepts(root, root / "a_report.md")
    assert scanner.accepts(root, root / "deleted_guide.md")
    assert not scanner.accepts(root, root / "image.png")
    assert not scanner.accepts(root, root / ".secret.md")
    assert not scanner.accepts(root, root / "nested" / "inner_summary.md")
    assert not scanner.accepts(root, tree.parent / "outside.md")
    assert deep.accepts(root, root / "nested" / "inner_summary.md")
    assert not deep.accepts(root, root / ".maid-trash" / "20260101T000000Z" / "old.md")
