import asyncio
import json
from pathlib import Path

import httpx
import pytest

from gamma_mcp.errors import GammaAPIError, RequestValidationError
from gamma_mcp.service.assets import AssetService, find_export_url


def test_find_export_url_prefers_matching_export_url() -> None:
    payload = {
        "exportUrl": "https://x/deck.pdf",
        "pdfUrl": "https://x/named.pdf",
        "pptxUrl": "https://x/named.pptx",
    }

    assert find_export_url(payload, "pdf") == "https://x/deck.pdf"
    assert find_export_url(payload, "pptx") == "https://x/named.pptx"


def test_find_export_url_searches_exports_array() -> None:
    payload = {
        "exports": [
            "https://x/deck.pptx",
            {"url": "https://x/report.pdf"},
            {"format": "png"},
        ]
    }

    assert find_export_url(payload, "pdf") == "https://x/report.pdf"
    assert find_export_url(payload, "pptx") == "https://x/deck.pptx"


def test_find_export_url_is_total() -> None:
    assert find_export_url({}, "pdf") is None
    assert find_export_url(None, "pdf") is None
    assert find_export_url({"exports": "not-a-list"}, "pptx") is None


def test_get_assets_without_download(settings, make_api) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"status": "completed", "exportUrl": "https://cdn.test/deck.pptx"})

    api, handler = make_api(respond)
    bundle = asyncio.run(AssetService(settings, api).get_assets("gen-1"))

    assert bundle.pptx == "https://cdn.test/deck.pptx"
    assert bundle.pdf is None
    assert bundle.downloads is None
    assert len(handler.requests) == 1
    assert not Path(settings.download_dir).exists()
    assert json.loads(bundle.model_dump_json(by_alias=True, exclude_none=True)) == {
        "generationId": "gen-1",
        "pptx": "https://cdn.test/deck.pptx",
    }


def test_get_assets_with_neither_artifact_is_valid(settings, make_api) -> None:
    api, _ = make_api(lambda request: httpx.Response(200, json={"status": "completed"}))

    bundle = asyncio.run(AssetService(settings, api).get_assets("gen-2", download=True))

    assert bundle.pdf is None
    assert bundle.pptx is None
    assert bundle.downloads is not None
    assert bundle.downloads.model_dump(exclude_none=True) == {}


def test_partial_download_failure_is_reported_per_artifact(settings, make_api) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url.endswith("/generations/gen-3"):
            return httpx.Response(
                200,
                json={"pdfUrl": "https://cdn.test/gen-3.pdf", "pptxUrl": "https://cdn.test/gen-3.pptx"},
            )
        if url.endswith(".pdf"):
            return httpx.Response(500, text="boom")
        return httpx.Response(200, content=b"PPTX-BYTES")

    api, handler = make_api(respond)
    bundle = asyncio.run(AssetService(settings, api).get_assets("gen-3", download=True))

    downloads = bundle.downloads
    assert downloads is not None
    assert downloads.pdf is None
    assert downloads.pdf_error == "500 boom"
    assert downloads.pptx == str(Path(settings.download_dir) / "gen-3.pptx")
    assert downloads.pptx_error is None
    assert Path(downloads.pptx).read_bytes() == b"PPTX-BYTES"
    assert not (Path(settings.download_dir) / "gen-3.pptx.part").exists()

    artifact_requests = [request for request in handler.requests if "cdn.test" in str(request.url)]
    assert len(artifact_requests) == 2
    assert all("X-API-KEY" not in request.headers for request in artifact_requests)


def test_status_fetch_failure_raises(settings, make_api) -> None:
    api, _ = make_api(lambda request: httpx.Response(404, text="not found"))

    with pytest.raises(GammaAPIError, match="Failed to fetch generation gen-4: 404 not found"):
        asyncio.run(AssetService(settings, api).get_assets("gen-4"))


class BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"%PDF-1.7 partial"
        raise httpx.ReadError("connection reset")


def test_interrupted_download_leaves_no_file_behind(settings, make_api) -> None:
    def respond(request: httpx.Request) -> httpx.Response:
        if str(request.url).endswith("/generations/gen-5"):
            return httpx.Response(200, json={"exportUrl": "https://cdn.test/gen-5.pdf"})
        return httpx.Response(200, stream=BrokenStream())

    api, _ = make_api(respond)
    bundle = asyncio.run(AssetService(settings, api).get_assets("gen-5", download=True))

    assert bundle.downloads is not None
    assert bundle.downloads.pdf is None
    assert bundle.downloads.pdf_error == "connection reset"
    assert list(Path(settings.download_dir).iterdir()) == []


@pytest.mark.parametrize("generation_id", ["../escape", "nested/id", "back\\slash", "a..b", "   "])
def test_unsafe_generation_ids_are_rejected(settings, make_api, generation_id: str) -> None:
    api, handler = make_api(lambda request: httpx.Response(200, json={"pdfUrl": "https://cdn.test/x.pdf"}))

    with pytest.raises(RequestValidationError, match="Invalid generation id"):
        asyncio.run(AssetService(settings, api).get_assets(generation_id, download=True))

    assert handler.requests == []
    assert not Path(settings.download_dir).exists()
