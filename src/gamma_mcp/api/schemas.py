from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gamma_mcp.constants import (
    DEFAULT_FORMAT,
    DEFAULT_TEXT_MODE,
    MAX_CARDS,
    MIN_CARDS,
    ExportFormat,
    Format,
    HeaderFooterImageSource,
    HeaderFooterSize,
    HeaderFooterType,
    ImageSource,
    LegacyTextAmount,
    TextAmount,
    TextMode,
)


class GammaModel(BaseModel):
    """Wire model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TextOptions(GammaModel):
    amount: TextAmount | None = Field(default=None, description="Text amount per card.")
    tone: str | None = Field(default=None, description="Tone/voice, e.g. 'professional and confident'.")
    audience: str | None = Field(default=None, description="Target audience, e.g. 'investors'.")
    language: str | None = Field(default=None, description="Output language code, e.g. 'en'.")


class ImageOptions(GammaModel):
    source: ImageSource | None = None
    model: str | None = Field(default=None, description="Image model, e.g. 'dall-e-3'.")
    style: str | None = Field(default=None, description="Visual style, e.g. 'photorealistic'.")


class HeaderFooterElement(GammaModel):
    type: HeaderFooterType
    value: str | None = Field(default=None, description="Text content when type is 'text'.")
    source: HeaderFooterImageSource | None = None
    src: str | None = Field(default=None, description="Image URL when source is 'custom'.")
    size: HeaderFooterSize | None = None


class HeaderFooter(GammaModel):
    top_left: HeaderFooterElement | None = None
    top_right: HeaderFooterElement | None = None
    top_center: HeaderFooterElement | None = None
    bottom_left: HeaderFooterElement | None = None
    bottom_right: HeaderFooterElement | None = None
    bottom_center: HeaderFooterElement | None = None
    hide_from_first_card: bool | None = None
    hide_from_last_card: bool | None = None


class CardOptions(GammaModel):
    dimensions: str | None = Field(
        default=None,
        description="presentation: fluid/16x9/4x3, document: fluid/pageless/letter/a4, social: 1x1/4x5/9x16.",
    )
    header_footer: HeaderFooter | None = None


class GenerationRequest(GammaModel):
    """Caller-facing request; accepts both the legacy flat and the nested option shapes."""

    input_text: str = ""
    format: Format | None = None
    text_mode: TextMode | None = None
    num_cards: int | None = Field(default=None, ge=MIN_CARDS, le=MAX_CARDS)
    export_as: ExportFormat | None = None
    additional_instructions: str | None = None
    text_options: TextOptions | None = None
    image_options: ImageOptions | None = None
    card_options: CardOptions | None = None
    folder_ids: list[str] | None = None
    card_split: str | None = None
    theme_id: str | None = None

    text_amount: LegacyTextAmount | TextAmount | None = None
    tone: str | None = None
    audience: str | None = None
    image_model: str | None = None
    image_style: str | None = None


class NormalizedRequestBody(GammaModel):
    input_text: str
    format: Format = DEFAULT_FORMAT
    text_mode: TextMode = DEFAULT_TEXT_MODE
    export_as: ExportFormat | None = None
    num_cards: int | None = Field(default=None, ge=MIN_CARDS, le=MAX_CARDS)
    additional_instructions: str | None = None
    text_options: TextOptions | None = None
    image_options: ImageOptions | None = None
    card_options: CardOptions | None = None
    folder_ids: list[str] | None = None
    card_split: str | None = None
    theme_id: str | None = None


@dataclass
class GenerationResult:
    url: str | None = None
    generation_id: str | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return bool(self.url)

    @property
    def pending(self) -> bool:
        return not self.url and bool(self.generation_id)


class AssetDownloads(BaseModel):
    pdf: str | None = None
    pdf_error: str | None = None
    pptx: str | None = None
    pptx_error: str | None = None


class AssetBundle(GammaModel):
    generation_id: str
    pdf: str | None = None
    pptx: str | None = None
    downloads: AssetDownloads | None = None
