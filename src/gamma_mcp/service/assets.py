import logging
from pathlib import Path
from typing import Any

import httpx

from gamma_mcp.api.schemas import AssetBundle, AssetDownloads
from gamma_mcp.config import Settings, get_settings
from gamma_mcp.errors import GammaAPIError, RequestValidationError
from gamma_mcp.pipeline.resolver import entry_url
from gamma_mcp.providers.gamma import GammaAPI

logger = logging.getLogger(__name__)

ARTIFACT_EXTENSIONS = ("pdf", "pptx")
UNSAFE_ID_MARKERS = ("/", "\\", "..")


def find_export_url(payload: Any, extension: str) -> str | None:
    """Resolve the export URL for one file type from a generation status payload.

    Looks at ``exportUrl`` (only when its suffix matches), then the named
    ``pdfUrl``/``pptxUrl`` field, then the first ``exports`` entry whose URL
    ends with the extension.
    """
    if not isinstance(payload, dict):
        return None
    suffix = f".{extension}"

    export_url = entry_url(payload.get("exportUrl"))
    if export_url and export_url.endswith(suffix):
        return export_url

    named = entry_url(payload.get(f"{extension}Url"))
    if named:
        return named

    exports = payload.get("exports")
    if isinstance(exports, list):
        for entry in exports:
            url = entry_url(entry)
            if url and url.endswith(suffix):
                return url
    return None


def check_generation_id(generation_id: str) -> None:
    # the id ends up in both the status URL path and the local file name
    if not generation_id.strip() or any(marker in generation_id for marker in UNSAFE_ID_MARKERS):
        raise RequestValidationError(f"Invalid generation id: {generation_id!r}")


class AssetService:
    def __init__(self, settings: Settings | None = None, api: GammaAPI | None = None) -> None:
        self.settings = settings or get_settings()
        self.api = api or GammaAPI(self.settings)
        self.download_dir = Path(self.settings.download_dir)

    async def get_assets(self, generation_id: str, download: bool = False) -> AssetBundle:
        """Look up the PDF/PPTX exports of a generation, optionally saving them locally.

        A failed status fetch raises; a missing or failed artifact does not.
        """
        check_generation_id(generation_id)
        try:
            data = await self.api.get_generation(generation_id)
        except GammaAPIError as exc:
            raise GammaAPIError(
                f"Failed to fetch generation {generation_id}: {exc.status_code} {exc.body}",
                status_code=exc.status_code,
                body=exc.body,
            ) from exc

        urls = {extension: find_export_url(data, extension) for extension in ARTIFACT_EXTENSIONS}
        logger.info(
            "assets.resolved generation_id=%s pdf=%s pptx=%s",
            generation_id,
            bool(urls["pdf"]),
            bool(urls["pptx"]),
        )
        bundle = AssetBundle(generation_id=generation_id, pdf=urls["pdf"], pptx=urls["pptx"])
        if download:
            bundle.downloads = await self._download_all(generation_id, urls)
        return bundle

    async def _download_all(self, generation_id: str, urls: dict[str, str | None]) -> AssetDownloads:
        downloads = AssetDownloads()
        for extension, url in urls.items():
            if not url:
                continue
            destination = self.download_dir / f"{generation_id}.{extension}"
            try:
                self.download_dir.mkdir(parents=True, exist_ok=True)
                await self.api.download(url, destination)
                setattr(downloads, extension, str(destination))
            except (GammaAPIError, httpx.HTTPError, OSError) as exc:
                logger.warning(
                    "assets.download_failed generation_id=%s type=%s detail=%s",
                    generation_id,
                    extension,
                    exc,
                )
                setattr(downloads, f"{extension}_error", str(exc) or exc.__class__.__name__)
        return downloads
