import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from gamma_mcp.api.schemas import NormalizedRequestBody
from gamma_mcp.config import Settings
from gamma_mcp.errors import GammaAPIError

logger = logging.getLogger(__name__)
PAYLOAD_LOG_LIMIT = 4000
DOWNLOAD_CHUNK_SIZE = 64 * 1024


def to_json(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(payload)


class GammaAPI:
    """Thin async client for the Gamma generations endpoints."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.generations_url = settings.generations_url
        self.timeout = settings.http_timeout_seconds
        self.transport = transport

    async def create_generation(self, body: NormalizedRequestBody) -> Any:
        payload = body.to_payload()
        logger.info(
            "gamma.create.request format=%s text_mode=%s num_cards=%s export_as=%s input_chars=%d",
            body.format,
            body.text_mode,
            body.num_cards,
            body.export_as,
            len(body.input_text),
        )
        logger.debug("gamma.create.request.payload=%s", self._clip(to_json(payload), PAYLOAD_LOG_LIMIT))

        async with self._client() as client:
            response = await client.post(
                self.generations_url,
                json=payload,
                headers=self._headers(with_body=True),
            )
        if not response.is_success:
            logger.warning("gamma.create.error status=%d", response.status_code)
            raise GammaAPIError(
                f"HTTP error! status: {response.status_code}, body: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        data = response.json()
        logger.info("gamma.create.response.payload=%s", self._clip(to_json(data), PAYLOAD_LOG_LIMIT))
        return data

    async def get_generation(self, generation_id: str) -> Any:
        async with self._client() as client:
            response = await client.get(f"{self.generations_url}/{generation_id}", headers=self._headers())
        if not response.is_success:
            logger.warning("gamma.status.error generation_id=%s status=%d", generation_id, response.status_code)
            raise GammaAPIError(
                f"Status poll error! status: {response.status_code}, body: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        data = response.json()
        logger.debug(
            "gamma.status.response generation_id=%s payload=%s",
            generation_id,
            self._clip(to_json(data), PAYLOAD_LOG_LIMIT),
        )
        return data

    async def download(self, url: str, destination: Path) -> Path:
        """Stream ``url`` into ``destination``. The artifact URL is fetched without API credentials.

        Bytes land in ``<destination>.part`` first, which is renamed only once the stream completes.
        """
        logger.info("gamma.download.request url=%s destination=%s", self._clip(url, 200), destination)
        partial = destination.with_name(f"{destination.name}.part")
        size = 0
        async with self._client() as client:
            async with client.stream("GET", url, follow_redirects=True) as response:
                if not response.is_success:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise GammaAPIError(
                        f"{response.status_code} {body}",
                        status_code=response.status_code,
                        body=body,
                    )
                handle = await asyncio.to_thread(open, partial, "wb")
                try:
                    async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        await asyncio.to_thread(handle.write, chunk)
                        size += len(chunk)
                except BaseException:
                    handle.close()
                    partial.unlink(missing_ok=True)
                    raise
                handle.close()
        await asyncio.to_thread(partial.replace, destination)
        logger.info("gamma.download.done destination=%s bytes=%d", destination, size)
        return destination

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _headers(self, with_body: bool = False) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            self.settings.gamma_api_key_header: self.settings.gamma_api_key,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split()).strip()
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

