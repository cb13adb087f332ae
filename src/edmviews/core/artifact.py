"""Reading, writing and touching stamped views files.

A views file carries the fingerprint of the document that produced it on
its first line::

    // ViewGenHash=<fingerprint>
    <generated source ...>

Only that first line is read when checking whether the file is current.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from .errors import ArtifactIOError
from .models import Diagnostic, LanguageOption, StampRead, StampState

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "// ViewGenHash="


def views_file_name(model_name: str, language: LanguageOption) -> str:
    """``BloggingContext`` + C# → ``BloggingContext.Views.cs``."""
    return f"{model_name}.Views{language.extension}"


def views_path_for_edmx(edmx_path: Path, language: LanguageOption) -> Path:
    """``Model.edmx`` → ``Model.Views.cs`` in the same directory."""
    return edmx_path.with_name(views_file_name(edmx_path.stem, language))


class ArtifactStore:
    """Point reads and writes against views files on disk."""

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        if not marker or "\n" in marker:
            raise ValueError("Stamp marker must be a non-empty single line")
        self.marker = marker

    # -- Reading ----------------------------------------------------------

    def read_fingerprint(self, path: Path) -> StampRead:
        """Return the stamp on *path*'s first line.

        ``NOT_FOUND`` when the file does not exist, ``EMPTY`` when it exists
        but its first line carries no marker or is not valid UTF-8.  The
        rest of the file is never decoded.
        """
        path = Path(path)
        if not path.exists():
            logger.info("Views file %s does not exist.", path)
            return StampRead(state=StampState.NOT_FOUND)

        try:
            with path.open("rb") as handle:
                raw = handle.readline()
        except OSError as exc:
            raise ArtifactIOError(path, str(exc)) from exc

        try:
            line = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.warning("First line of %s is not UTF-8; treating it as unstamped", path)
            return StampRead(state=StampState.EMPTY)

        line = line.rstrip("\r\n")
        if line.startswith(self.marker):
            stamp = StampRead(state=StampState.FOUND, fingerprint=line[len(self.marker):])
        else:
            stamp = StampRead(state=StampState.EMPTY)
        logger.info("Views file %s has hash '%s'.", path, stamp.fingerprint)
        return stamp

    # -- Writing ----------------------------------------------------------

    def write(
        self,
        path: Path,
        fingerprint: str,
        body: str,
        diagnostics: Sequence[Diagnostic] = (),
    ) -> list[Diagnostic]:
        """Atomically replace *path* with the stamp line followed by *body*.

        The content goes to a sibling ``.tmp`` file which is then renamed
        over the target, so a crash never leaves a stamp without its body.
        """
        path = Path(path)
        if "\n" in fingerprint or "\r" in fingerprint:
            raise ValueError("Fingerprint must be a single line")

        tmp_path = path.with_name(path.name + ".tmp")
        content = f"{self.marker}{fingerprint}\n{body}"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise ArtifactIOError(path, str(exc)) from exc

        logger.info("Wrote views file %s (%d characters)", path, len(content))
        return list(diagnostics)

    def write_text(self, path: Path, text: str) -> None:
        """Atomically write unstamped *text* (used for composite documents)."""
        path = Path(path)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            if tmp_path.exists():
                tmp_path.unlink()
            raise ArtifactIOError(path, str(exc)) from exc

    def touch(self, path: Path) -> None:
        """Bump the modification time of *path* without changing its content."""
        path = Path(path)
        try:
            os.utime(path, None)
        except OSError as exc:
            raise ArtifactIOError(path, str(exc)) from exc
        logger.info("Touched views file %s", path)
