import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from gamma_mcp.api.schemas import (
    GenerationRequest,
    ImageOptions,
    NormalizedRequestBody,
    TextOptions,
)
from gamma_mcp.constants import DEFAULT_FORMAT, DEFAULT_TEXT_MODE, LEGACY_TEXT_AMOUNTS
from gamma_mcp.errors import RequestValidationError

logger = logging.getLogger(__name__)

PASS_THROUGH_FIELDS = (
    "export_as",
    "num_cards",
    "additional_instructions",
    "card_options",
    "folder_ids",
    "card_split",
    "theme_id",
)


def parse_request(request: GenerationRequest | Mapping[str, Any]) -> GenerationRequest:
    """Validate a raw parameter mapping into a GenerationRequest.

    Enumerated fields (format, textMode, exportAs, amounts) and the card
    count bounds are checked here, so an invalid value never reaches the API.
    """
    if isinstance(request, GenerationRequest):
        return request
    try:
        return GenerationRequest.model_validate(dict(request))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'request'}: {error['msg']}"
            for error in exc.errors()
        )
        raise RequestValidationError(f"Invalid generation request: {problems}") from exc


def normalize_request(request: GenerationRequest) -> NormalizedRequestBody:
    """Project a GenerationRequest onto the body the Gamma API expects.

    Nested ``textOptions``/``imageOptions`` win over the legacy flat fields
    for the same slot. Absent values stay unset so they are left out of the
    serialized payload.
    """
    body: dict[str, Any] = {
        "input_text": request.input_text,
        "format": request.format or DEFAULT_FORMAT,
        "text_mode": request.text_mode or DEFAULT_TEXT_MODE,
    }

    for field in PASS_THROUGH_FIELDS:
        value = getattr(request, field)
        if value is None or value == "" or value == []:
            continue
        body[field] = value

    text_options = _merge_text_options(request)
    if text_options is not None:
        body["text_options"] = text_options

    image_options = _merge_image_options(request)
    if image_options is not None:
        body["image_options"] = image_options

    normalized = NormalizedRequestBody(**body)
    logger.debug(
        "normalize.done format=%s text_mode=%s fields=%s",
        normalized.format,
        normalized.text_mode,
        sorted(normalized.to_payload()),
    )
    return normalized


def _merge_text_options(request: GenerationRequest) -> TextOptions | None:
    merged: dict[str, Any] = {}
    if request.text_amount:
        merged["amount"] = LEGACY_TEXT_AMOUNTS.get(request.text_amount, request.text_amount)
    if request.tone:
        merged["tone"] = request.tone
    if request.audience:
        merged["audience"] = request.audience
    if request.text_options is not None:
        merged.update(_present(request.text_options))
    return TextOptions(**merged) if merged else None


def _merge_image_options(request: GenerationRequest) -> ImageOptions | None:
    merged: dict[str, Any] = {}
    if request.image_model:
        merged["model"] = request.image_model
    if request.image_style:
        merged["style"] = request.image_style
    if request.image_options is not None:
        merged.update(_present(request.image_options))
    return ImageOptions(**merged) if merged else None


def _present(options: TextOptions | ImageOptions) -> dict[str, Any]:
    return {key: value for key, value in options.model_dump().items() if value}
