"""
angebot/services/preview.py
Live-Vorschau: haelt das gerenderte Dokument synchron zum Entwurf.

Jede Aenderung des Entwurfsschluessels startet eine neue Generation. Ergebnisse
aelterer Generationen werden verworfen (last key wins); die HTTP-Anfrage selbst
laeuft dabei weiter und wird nicht abgebrochen.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from angebot.contracts import build_render_payload
from angebot.domain.fingerprint import draft_key
from angebot.domain.formatting import fallback_filename
from angebot.errors import RenderError
from angebot.services.artifacts import ArtifactHandle, ArtifactSlot
from angebot.services.render_client import RenderClient

if TYPE_CHECKING:
    from angebot.config import AppConfig
    from angebot.domain.draft import Draft

logger = logging.getLogger("angebot.preview")

Listener = Callable[["PreviewState"], Any]


class PreviewState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PreviewController:
    def __init__(
        self,
        client: RenderClient,
        slot: ArtifactSlot,
        *,
        debounce: float = 0.0,
        owns_client: bool = False,
    ):
        self._client = client
        self._slot = slot
        self._debounce = max(0.0, float(debounce or 0.0))
        self._owns_client = owns_client
        self._generation = 0
        self._last_key: str | None = None
        self._state = PreviewState.IDLE
        self._filename: str | None = None
        self._fallback_name: str | None = None
        self._error: str | None = None
        self._closed = False
        self._tasks: set[asyncio.Task] = set()
        self._listeners: list[Listener] = []

    @classmethod
    def from_config(cls, config: "AppConfig") -> "PreviewController":
        client = RenderClient(config.render_url, timeout=config.render_timeout)
        return cls(
            client,
            ArtifactSlot(config.preview_dir),
            debounce=config.debounce_seconds,
            owns_client=True,
        )

    # --- Zustand ---------------------------------------------------------

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def artifact(self) -> ArtifactHandle | None:
        return self._slot.current

    @property
    def loading(self) -> bool:
        return self._state is PreviewState.REQUESTING

    @property
    def filename(self) -> str | None:
        """Vom Render-Dienst vorgeschlagener Dateiname der aktuellen Vorschau."""
        return self._filename

    @property
    def download_name(self) -> str | None:
        if self._slot.current is None:
            return None
        return self._filename or self._fallback_name

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Listener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # --- Ablauf ----------------------------------------------------------

    def observe(self, draft: "Draft") -> asyncio.Task | None:
        """
        Nach jeder Bearbeitung aufrufen. Startet nur dann eine neue Anfrage,
        wenn sich der Entwurfsschluessel geaendert hat. Muss innerhalb eines
        laufenden Event-Loops aufgerufen werden.
        """
        if self._closed:
            return None
        key = draft_key(draft)
        if key == self._last_key:
            return None
        self._last_key = key
        return self._schedule(draft)

    def refresh(self, draft: "Draft") -> asyncio.Task | None:
        """Erneuter Versuch fuer denselben Schluessel, z.B. nach einem Fehler."""
        if self._closed:
            return None
        self._last_key = draft_key(draft)
        return self._schedule(draft)

    def _schedule(self, draft: "Draft") -> asyncio.Task | None:
        self._generation += 1
        token = self._generation

        if draft.customer is None or not (draft.offer_number or "").strip():
            self._slot.clear()
            self._filename = None
            self._error = None
            self._set_state(PreviewState.IDLE)
            return None

        # Snapshot: spaetere Bearbeitungen am Entwurf aendern diese Anfrage nicht mehr
        payload = build_render_payload(draft, commit=False)
        fallback = fallback_filename(draft.customer, draft.offer_number)
        self._error = None
        self._set_state(PreviewState.REQUESTING)

        task = asyncio.get_running_loop().create_task(self._run(token, payload, fallback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _is_stale(self, token: int) -> bool:
        return self._closed or token != self._generation

    async def _run(self, token: int, payload: dict[str, Any], fallback: str) -> None:
        if self._debounce:
            await asyncio.sleep(self._debounce)
            if self._is_stale(token):
                logger.debug(f"Generation {token} vor dem Senden ueberholt")
                return

        try:
            doc = await self._client.render(payload)
        except RenderError as e:
            if self._is_stale(token):
                logger.debug(f"Fehler aus ueberholter Generation {token} ignoriert: {e.message}")
                return
            logger.error(f"Vorschau fehlgeschlagen (HTTP {e.upstream_status}): {e.body or e.message}")
            self._fail(e.message)
            return
        except Exception as e:
            if self._is_stale(token):
                logger.debug(f"Fehler aus ueberholter Generation {token} ignoriert: {e}")
                return
            logger.exception(f"Vorschau fehlgeschlagen: {e}")
            self._fail(str(e))
            return

        if self._is_stale(token):
            logger.debug(f"Ergebnis der Generation {token} verworfen (aktuell {self._generation})")
            return

        try:
            handle = self._slot.materialize(doc)
        except OSError as e:
            logger.error(f"Vorschau konnte nicht gespeichert werden: {e}")
            self._fail(str(e))
            return

        self._slot.replace(handle)
        self._filename = doc.filename
        self._fallback_name = fallback
        self._set_state(PreviewState.SUCCEEDED)

    def _fail(self, message: str) -> None:
        self._slot.clear()
        self._filename = None
        self._error = message
        self._set_state(PreviewState.FAILED)

    def _set_state(self, state: PreviewState) -> None:
        self._state = state
        for callback in list(self._listeners):
            try:
                callback(state)
            except Exception:
                logger.exception("Vorschau-Listener fehlgeschlagen")

    # --- Teardown --------------------------------------------------------

    def close(self) -> None:
        """Alle Generationen ueberholen und die gehaltene Vorschau freigeben."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._slot.dispose()
        self._filename = None
        self._set_state(PreviewState.IDLE)
        self._listeners.clear()

    async def settle(self) -> None:
        """Wartet, bis alle laufenden Generationen abgeschlossen sind."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        self.close()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if self._owns_client:
            await self._client.aclose()
