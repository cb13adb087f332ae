"""Tests for reading, writing and touching stamped views files."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from edmviews.core.artifact import (
    DEFAULT_MARKER,
    ArtifactStore,
    views_file_name,
    views_path_for_edmx,
)
from edmviews.core.errors import ArtifactIOError
from edmviews.core.models import Diagnostic, LanguageOption, StampState


@pytest.fixture
def store():
    return ArtifactStore()


# ---------------------------------------------------------------------------
# read_fingerprint
# ---------------------------------------------------------------------------

class TestReadFingerprint:
    def test_missing_file(self, store, tmp_path):
        stamp = store.read_fingerprint(tmp_path / "Nope.Views.cs")
        assert stamp.state == StampState.NOT_FOUND
        assert not stamp.matches("")

    def test_stamped_file(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text(f"{DEFAULT_MARKER}abc=\nclass X {{}}\n", encoding="utf-8")
        stamp = store.read_fingerprint(path)
        assert stamp.state == StampState.FOUND
        assert stamp.fingerprint == "abc="

    def test_crlf_line_ending(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_bytes(f"{DEFAULT_MARKER}abc=\r\nbody\r\n".encode("utf-8"))
        assert store.read_fingerprint(path).fingerprint == "abc="

    def test_unstamped_file_is_empty(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text("namespace Foo {}\n", encoding="utf-8")
        stamp = store.read_fingerprint(path)
        assert stamp.state == StampState.EMPTY
        assert stamp.fingerprint == ""

    def test_zero_byte_file_is_empty(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.touch()
        assert store.read_fingerprint(path).state == StampState.EMPTY

    def test_marker_not_on_first_line(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text(f"\n{DEFAULT_MARKER}abc=\n", encoding="utf-8")
        assert store.read_fingerprint(path).state == StampState.EMPTY

    def test_custom_marker(self, tmp_path):
        store = ArtifactStore("' ViewGenHash=")
        path = tmp_path / "A.Views.vb"
        store.write(path, "xyz", "Module M\nEnd Module\n")
        assert store.read_fingerprint(path).fingerprint == "xyz"
        assert ArtifactStore().read_fingerprint(path).state == StampState.EMPTY

    def test_non_utf8_first_line_is_empty(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_bytes(b"// caf\xe9 views\nclass X {}\n")
        assert store.read_fingerprint(path).state == StampState.EMPTY

    def test_non_utf8_body_does_not_hide_stamp(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_bytes(f"{DEFAULT_MARKER}abc=\n".encode("utf-8") + b"// caf\xe9\n")
        stamp = store.read_fingerprint(path)
        assert stamp.state == StampState.FOUND
        assert stamp.fingerprint == "abc="

    def test_byte_order_mark_is_ignored(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_bytes(b"\xef\xbb\xbf" + f"{DEFAULT_MARKER}abc=\n".encode("utf-8"))
        assert store.read_fingerprint(path).fingerprint == "abc="

    def test_unreadable_file_raises(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text("x", encoding="utf-8")
        with patch.object(Path, "open", side_effect=PermissionError("denied")):
            with pytest.raises(ArtifactIOError, match="denied"):
                store.read_fingerprint(path)

    def test_bad_marker(self):
        with pytest.raises(ValueError):
            ArtifactStore("")


# ---------------------------------------------------------------------------
# write
# ---------------------------------------------------------------------------

class TestWrite:
    def test_round_trip(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        store.write(path, "F1==", "X")
        assert store.read_fingerprint(path).fingerprint == "F1=="

    def test_layout(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        store.write(path, "F1==", "line1\nline2\n")
        assert path.read_text(encoding="utf-8") == f"{DEFAULT_MARKER}F1==\nline1\nline2\n"

    def test_overwrites_and_leaves_no_temp_file(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text("old content\n", encoding="utf-8")
        store.write(path, "F2==", "new\n")
        assert "old content" not in path.read_text(encoding="utf-8")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["A.Views.cs"]

    def test_creates_parent_directories(self, store, tmp_path):
        path = tmp_path / "gen" / "views" / "A.Views.cs"
        store.write(path, "F", "")
        assert path.exists()

    def test_returns_diagnostics(self, store, tmp_path):
        diags = [Diagnostic.warning("w"), Diagnostic.error("e")]
        assert store.write(tmp_path / "A.Views.cs", "F", "", diags) == diags

    def test_failed_replace_keeps_old_file(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        path.write_text(f"{DEFAULT_MARKER}OLD\nold\n", encoding="utf-8")
        with patch("edmviews.core.artifact.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(ArtifactIOError, match="disk full"):
                store.write(path, "NEW", "new\n")
        assert store.read_fingerprint(path).fingerprint == "OLD"
        assert not (tmp_path / "A.Views.cs.tmp").exists()

    def test_syncs_before_replace(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        calls = []
        with patch("edmviews.core.artifact.os.fsync", side_effect=lambda fd: calls.append("fsync")), \
                patch("edmviews.core.artifact.os.replace",
                      side_effect=lambda src, dst: calls.append("replace")):
            store.write(path, "F", "body\n")
        assert calls == ["fsync", "replace"]

    def test_write_text_syncs_before_replace(self, store, tmp_path):
        calls = []
        with patch("edmviews.core.artifact.os.fsync", side_effect=lambda fd: calls.append("fsync")), \
                patch("edmviews.core.artifact.os.replace",
                      side_effect=lambda src, dst: calls.append("replace")):
            store.write_text(tmp_path / "Model.edmx", "<Edmx/>")
        assert calls == ["fsync", "replace"]

    def test_multiline_fingerprint_rejected(self, store, tmp_path):
        with pytest.raises(ValueError):
            store.write(tmp_path / "A.Views.cs", "a\nb", "")


# ---------------------------------------------------------------------------
# touch
# ---------------------------------------------------------------------------

class TestTouch:
    def test_updates_mtime_not_content(self, store, tmp_path):
        path = tmp_path / "A.Views.cs"
        store.write(path, "F", "body\n")
        os.utime(path, (1_000_000, 1_000_000))
        before = path.read_bytes()

        store.touch(path)

        assert path.stat().st_mtime > 1_000_000
        assert path.read_bytes() == before

    def test_missing_file_raises(self, store, tmp_path):
        with pytest.raises(ArtifactIOError):
            store.touch(tmp_path / "missing.cs")


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

class TestNaming:
    def test_views_file_name(self):
        assert views_file_name("BloggingContext", LanguageOption.CSHARP) == "BloggingContext.Views.cs"
        assert views_file_name("BloggingContext", LanguageOption.VB) == "BloggingContext.Views.vb"

    def test_views_path_for_edmx(self, tmp_path):
        path = views_path_for_edmx(tmp_path / "Model.edmx", LanguageOption.CSHARP)
        assert path == tmp_path / "Model.Views.cs"
