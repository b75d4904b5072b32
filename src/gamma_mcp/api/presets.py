import math
from pathlib import Path
from typing import Any

from gamma_mcp.api.schemas import GenerationRequest

REPORT_CHARS_PER_CARD = 1000
REPORT_MAX_CARDS = 60

EXECUTIVE_TEXT_OPTIONS = {
    "tone": "professional and confident",
    "audience": "executives and senior leadership",
}
EXECUTIVE_IMAGE_OPTIONS = {"source": "aiGenerated", "style": "photorealistic"}


def executive_presentation_request(
    input_text: str,
    theme_id: str | None = None,
    num_cards: int | None = None,
) -> GenerationRequest:
    """16x9 PPTX deck with condensed text and an executive tone."""
    params: dict[str, Any] = {
        "input_text": input_text,
        "format": "presentation",
        "text_mode": "condense",
        "export_as": "pptx",
        "card_split": "inputTextBreaks",
        "text_options": {"amount": "medium", **EXECUTIVE_TEXT_OPTIONS},
        "image_options": dict(EXECUTIVE_IMAGE_OPTIONS),
        "card_options": {
            "dimensions": "16x9",
            "header_footer": {
                "bottom_left": {"type": "image", "source": "themeLogo", "size": "sm"},
                "bottom_right": {"type": "cardNumber"},
                "hide_from_first_card": True,
                "hide_from_last_card": False,
            },
        },
    }
    if theme_id:
        params["theme_id"] = theme_id
    if num_cards is not None:
        params["num_cards"] = num_cards
    return GenerationRequest.model_validate(params)


def executive_report_request(input_text: str, theme_id: str | None = None) -> GenerationRequest:
    """A4 PDF document that keeps the supplied text as written."""
    params: dict[str, Any] = {
        "input_text": input_text,
        "format": "document",
        "text_mode": "preserve",
        "num_cards": estimate_report_cards(input_text),
        "card_split": "auto",
        "export_as": "pdf",
        "text_options": {"amount": "detailed", **EXECUTIVE_TEXT_OPTIONS},
        "image_options": dict(EXECUTIVE_IMAGE_OPTIONS),
        "card_options": {
            "dimensions": "a4",
            "header_footer": {
                "top_left": {"type": "image", "source": "themeLogo", "size": "sm"},
                "bottom_right": {"type": "cardNumber"},
                "hide_from_first_card": True,
                "hide_from_last_card": False,
            },
        },
    }
    if theme_id:
        params["theme_id"] = theme_id
    return GenerationRequest.model_validate(params)


def estimate_report_cards(text: str) -> int:
    # roughly one A4 card per 1000 characters of detailed text
    estimated = math.ceil(len(text.strip()) / REPORT_CHARS_PER_CARD)
    return max(1, min(REPORT_MAX_CARDS, estimated))


def read_report_content(input_text: str | None = None, file_path: str | None = None) -> str:
    """Content for a report: the file at ``file_path`` when given, otherwise ``input_text``."""
    if file_path:
        return Path(file_path).expanduser().read_text(encoding="utf-8")
    return input_text or ""
