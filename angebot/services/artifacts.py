"""
angebot/services/artifacts.py
Lokale Vorschau-Dateien. Pro Slot existiert hoechstens ein lebender Handle;
ein ersetzter oder verworfener Handle wird sofort freigegeben (Datei geloescht).
"""
from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from angebot.contracts import RenderedDocument

logger = logging.getLogger("angebot.artifacts")


@dataclass
class ArtifactHandle:
    path: Path
    filename: str | None = None
    media_type: str = "application/pdf"
    size: int = 0
    released: bool = False

    def read_bytes(self) -> bytes:
        if self.released:
            raise RuntimeError(f"Artefakt bereits freigegeben: {self.path}")
        return self.path.read_bytes()

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self.path.unlink(missing_ok=True)
        logger.debug(f"Artefakt freigegeben: {self.path.name}")


class ArtifactSlot:
    def __init__(self, directory: Path | str):
        self.directory = Path(directory)
        self._current: ArtifactHandle | None = None
        self._disposed = False

    @property
    def current(self) -> ArtifactHandle | None:
        return self._current

    @property
    def disposed(self) -> bool:
        return self._disposed

    def materialize(self, doc: RenderedDocument) -> ArtifactHandle:
        """Schreibt das Dokument in eine eigene Datei; der Slot wird dabei nicht veraendert."""
        self.directory.mkdir(parents=True, exist_ok=True)
        suffix = ".pdf" if doc.media_type == "application/pdf" else ""
        fh = tempfile.NamedTemporaryFile(
            dir=self.directory, prefix="angebot-preview-", suffix=suffix, delete=False
        )
        path = Path(fh.name)
        try:
            with fh:
                fh.write(doc.content)
        except BaseException:
            # halb geschriebene Datei gehoert keinem Handle
            path.unlink(missing_ok=True)
            raise
        handle = ArtifactHandle(
            path=path,
            filename=doc.filename,
            media_type=doc.media_type,
            size=len(doc.content),
        )
        logger.debug(f"Artefakt angelegt: {handle.path.name} ({handle.size} Bytes)")
        return handle

    def replace(self, handle: ArtifactHandle) -> None:
        if self._disposed:
            handle.release()
            return
        previous, self._current = self._current, handle
        if previous is not None and previous is not handle:
            previous.release()

    def clear(self) -> None:
        previous, self._current = self._current, None
        if previous is not None:
            previous.release()

    def dispose(self) -> None:
        self.clear()
        self._disposed = True

    def __enter__(self) -> "ArtifactSlot":
        return self

    def __exit__(self, *exc: object) -> None:
        self.dispose()
