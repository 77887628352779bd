"""
angebot/services/render_client.py
Async HTTP-Client fuer den Dokument-Render-Dienst (POST JSON -> PDF).
"""
from __future__ import annotations

import logging
from typing import Any

import httpx

from angebot.contracts import RenderedDocument, parse_content_disposition
from angebot.errors import RenderError

logger = logging.getLogger("angebot.render")


class RenderClient:
    """
    Sendet Render-Payloads an den konfigurierten Endpunkt.

    Nicht-2xx-Antworten und Transportfehler werden als RenderError gemeldet;
    der Fehler-Body bleibt fuer das Logging erhalten und wird nie als Dokument
    interpretiert. Ohne timeout wartet der Client unbegrenzt.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def render(self, payload: dict[str, Any]) -> RenderedDocument:
        client = self._get_client()
        try:
            resp = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise RenderError(f"Render-Dienst nicht erreichbar: {e}") from e

        if not resp.is_success:
            raise RenderError(
                f"Render-Dienst antwortete mit HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        doc = RenderedDocument(
            content=resp.content,
            filename=parse_content_disposition(resp.headers.get("content-disposition")),
            media_type=resp.headers.get("content-type", "application/pdf").split(";")[0].strip(),
            offer_id=resp.headers.get("x-offer-id", ""),
            offer_number=resp.headers.get("x-offer-number", ""),
        )
        logger.debug(f"Render ok: {len(doc.content)} Bytes, Dateiname={doc.filename!r}")
        return doc

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "RenderClient":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
