import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from gamma_mcp.api.schemas import GenerationRequest, GenerationResult
from gamma_mcp.config import Settings, get_settings
from gamma_mcp.errors import GammaAPIError, RequestValidationError
from gamma_mcp.pipeline.normalizer import normalize_request, parse_request
from gamma_mcp.pipeline.resolver import (
    GenerationState,
    classify_status,
    extract_job_id,
    extract_result_url,
    status_of,
)
from gamma_mcp.providers.gamma import GammaAPI, to_json

logger = logging.getLogger(__name__)


class GenerateService:
    """Create a Gamma generation and wait for it within a fixed time budget.

    Every failure is folded into the returned GenerationResult; callers check
    ``url`` first, then ``generation_id`` (job exists, result not ready), then
    ``error``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        api: GammaAPI | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or get_settings()
        self.api = api or GammaAPI(self.settings)
        self.timeout_seconds = self.settings.generation_timeout_seconds
        self.poll_interval_seconds = self.settings.poll_interval_seconds
        self._sleep = sleep
        self._clock = clock

    async def generate(
        self,
        request: GenerationRequest | Mapping[str, Any],
        cancel: asyncio.Event | None = None,
    ) -> GenerationResult:
        try:
            parsed = parse_request(request)
            if not parsed.input_text.strip():
                raise RequestValidationError("inputText is required and must not be empty")
            body = normalize_request(parsed)
        except RequestValidationError as exc:
            logger.warning("generate.invalid_request detail=%s", exc)
            return GenerationResult(error=str(exc))

        generation_id: str | None = None
        try:
            created = await self.api.create_generation(body)

            direct_url = extract_result_url(created)
            if direct_url:
                logger.info("generate.completed_on_create url=%s", direct_url)
                return GenerationResult(url=direct_url, generation_id=extract_job_id(created))

            generation_id = extract_job_id(created)
            if not generation_id:
                logger.warning("generate.unexpected_shape payload=%s", to_json(created))
                return GenerationResult(error=f"Unexpected response shape: {to_json(created)}")

            logger.info("generate.created generation_id=%s", generation_id)
            return await self._poll(generation_id, cancel)
        except GammaAPIError as exc:
            logger.warning(
                "generate.http_error generation_id=%s status=%d",
                generation_id,
                exc.status_code,
            )
            return GenerationResult(generation_id=generation_id, error=str(exc))
        except Exception as exc:
            logger.exception("generate.failed generation_id=%s", generation_id)
            return GenerationResult(generation_id=generation_id, error=str(exc) or exc.__class__.__name__)

    async def _poll(self, generation_id: str, cancel: asyncio.Event | None = None) -> GenerationResult:
        started = self._clock()
        polls = 0
        while self._clock() - started < self.timeout_seconds:
            if cancel is not None and cancel.is_set():
                logger.info("generate.cancelled generation_id=%s polls=%d", generation_id, polls)
                return GenerationResult(
                    generation_id=generation_id,
                    error=f"Generation {generation_id} was cancelled before completion",
                )

            data = await self.api.get_generation(generation_id)
            polls += 1
            status = status_of(data)
            state = classify_status(status)
            logger.info(
                "generate.poll generation_id=%s poll=%d status=%s",
                generation_id,
                polls,
                status or "unknown",
            )

            if state is GenerationState.COMPLETED:
                url = extract_result_url(data)
                if url:
                    return GenerationResult(url=url, generation_id=generation_id)
                return GenerationResult(
                    generation_id=generation_id,
                    error=f"Generation completed but no export URL found: {to_json(data)}",
                )

            if state is GenerationState.FAILED:
                return GenerationResult(
                    generation_id=generation_id,
                    error=f"Generation failed: {to_json(data)}",
                )

            await self._sleep(self.poll_interval_seconds)

        logger.warning(
            "generate.timeout generation_id=%s polls=%d budget=%.1fs",
            generation_id,
            polls,
            self.timeout_seconds,
        )
        return GenerationResult(
            generation_id=generation_id,
            error=f"Timed out waiting for generation {generation_id}",
        )
