import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.types import (
    EmbeddedResource,
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    TextContent,
    TextResourceContents,
)
from pydantic import Field

from gamma_mcp.api.presets import (
    executive_presentation_request,
    executive_report_request,
    read_report_content,
)
from gamma_mcp.api.schemas import CardOptions, GenerationResult, ImageOptions, TextOptions
from gamma_mcp.config import get_settings
from gamma_mcp.constants import ExportFormat, Format, LegacyTextAmount, TextAmount, TextMode
from gamma_mcp.errors import PromptArgumentError, PromptNotFoundError
from gamma_mcp.prompts.registry import PromptRegistry
from gamma_mcp.prompts.watcher import watch_prompt_dirs
from gamma_mcp.service.assets import AssetService
from gamma_mcp.service.generator import GenerateService

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

service = GenerateService(settings)
assets = AssetService(settings)
registry = PromptRegistry.from_settings(settings)

ASSETS_HINT = "Use the get-presentation-assets tool with generationId to fetch exports."


class GammaMCP(FastMCP):
    """FastMCP server whose prompts come from a PromptRegistry instead of decorated functions."""

    def __init__(self, prompt_registry: PromptRegistry, *args: Any, **kwargs: Any) -> None:
        self.prompt_registry = prompt_registry
        super().__init__(*args, **kwargs)

    async def list_prompts(self) -> list[Prompt]:
        return [
            Prompt(
                name=definition.name,
                description=definition.description,
                arguments=[
                    PromptArgument(
                        name=key,
                        description=parameter.description,
                        required=parameter.required and parameter.default is None,
                    )
                    for key, parameter in definition.parameters.items()
                ],
            )
            for definition in self.prompt_registry.list_prompts()
        ]

    async def get_prompt(self, name: str, arguments: dict[str, Any] | None = None) -> GetPromptResult:
        try:
            text = self.prompt_registry.render(name, arguments)
        except (PromptNotFoundError, PromptArgumentError) as exc:
            raise ValueError(str(exc)) from exc
        definition = self.prompt_registry.lookup(name)
        return GetPromptResult(
            description=definition.description if definition else None,
            messages=[PromptMessage(role="user", content=TextContent(type="text", text=text))],
        )


@contextlib.asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    registry.reload()
    watcher: asyncio.Task[None] | None = None
    if settings.prompts_hot_reload:
        watcher = asyncio.create_task(watch_prompt_dirs(registry, settings.prompts_reload_debounce_ms))
    else:
        logger.info("prompts.watch.disabled")
    try:
        yield
    finally:
        if watcher is not None:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher


mcp = GammaMCP(registry, "gamma-presentation", lifespan=lifespan)


def format_generation_result(
    result: GenerationResult,
    subject: str = "Presentation",
    failure: str = "Failed to generate presentation using Gamma API.",
    created: str = "Generation created",
    details: str = "",
) -> str:
    if result.url:
        message = f"{subject} generated! View it here: {result.url}"
        return f"{message}\n\n{details}" if details else message
    if result.generation_id:
        return (
            f"{created} (id={result.generation_id}). No final URL available yet. {ASSETS_HINT} "
            f"Polling error / status: {result.error or 'unknown'}"
        )
    return f"{failure} Error: {result.error or 'Unknown error.'}"


@mcp.tool(
    name="generate-presentation",
    description=(
        "Generate a presentation using the Gamma API. The response will include a link to the "
        "generated presentation when available."
    ),
)
async def generate_presentation(
    input_text: Annotated[str, Field(description="The topic or prompt for the presentation.")],
    text_mode: Annotated[TextMode | None, Field(description="generate | condense | preserve")] = None,
    format: Annotated[Format | None, Field(description="presentation | document | social | webpage")] = None,
    num_cards: Annotated[int | None, Field(ge=1, le=75, description="Number of slides/cards.")] = None,
    export_as: Annotated[ExportFormat | None, Field(description="Request a direct export: pdf or pptx.")] = None,
    text_options: TextOptions | None = None,
    image_options: ImageOptions | None = None,
    card_options: Annotated[
        CardOptions | None,
        Field(description="Card dimensions and header/footer layout."),
    ] = None,
    additional_instructions: str | None = None,
    folder_ids: list[str] | None = None,
    card_split: str | None = None,
    theme_id: str | None = None,
    text_amount: Annotated[
        LegacyTextAmount | TextAmount | None,
        Field(description="Shorthand for textOptions.amount; short and long map to brief and detailed."),
    ] = None,
    tone: Annotated[str | None, Field(description="Legacy shorthand for textOptions.tone.")] = None,
    audience: Annotated[str | None, Field(description="Legacy shorthand for textOptions.audience.")] = None,
    image_model: Annotated[str | None, Field(description="Legacy shorthand for imageOptions.model.")] = None,
    image_style: Annotated[str | None, Field(description="Legacy shorthand for imageOptions.style.")] = None,
) -> str:
    result = await service.generate(
        {
            "input_text": input_text,
            "text_mode": text_mode,
            "format": format,
            "num_cards": num_cards,
            "export_as": export_as,
            "text_options": text_options,
            "image_options": image_options,
            "card_options": card_options,
            "additional_instructions": additional_instructions,
            "folder_ids": folder_ids,
            "card_split": card_split,
            "theme_id": theme_id,
            "text_amount": text_amount,
            "tone": tone,
            "audience": audience,
            "image_model": image_model,
            "image_style": image_style,
        }
    )
    return format_generation_result(result)


@mcp.tool(
    name="generate-executive-presentation",
    description=(
        "Generate an executive presentation: 16x9 PPTX, condensed text, professional tone for "
        "senior leadership, photorealistic AI images, theme logo and card numbers in the footer."
    ),
)
async def generate_executive_presentation(
    input_text: Annotated[str, Field(description="The content or topic for the executive presentation.")],
    theme_id: Annotated[
        str | None,
        Field(description="Optional theme ID. The workspace default theme is used when omitted."),
    ] = None,
    num_cards: Annotated[int | None, Field(ge=1, le=75, description="Number of slides.")] = None,
) -> str:
    result = await service.generate(executive_presentation_request(input_text, theme_id, num_cards))
    return format_generation_result(
        result,
        subject="Executive presentation",
        failure="Failed to generate executive presentation.",
        created="Executive presentation created",
        details="Format: Professional PPTX with condensed text, photorealistic images, and executive-focused tone.",
    )


@mcp.tool(
    name="generate-executive-report",
    description=(
        "Generate a detailed executive report as an A4 PDF: preserves the supplied text, detailed "
        "amount, professional tone, photorealistic AI images. Provide either input_text or file_path."
    ),
)
async def generate_executive_report(
    input_text: Annotated[str | None, Field(description="Report content; Markdown is supported.")] = None,
    file_path: Annotated[str | None, Field(description="Path to a file holding the report content.")] = None,
    theme_id: Annotated[
        str | None,
        Field(description="Optional theme ID. The workspace default theme is used when omitted."),
    ] = None,
) -> str:
    try:
        content = await asyncio.to_thread(read_report_content, input_text, file_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("report.read_failed path=%s detail=%s", file_path, exc)
        return f"Failed to read file at {file_path}: {exc}"

    if not content.strip():
        return "Error: Either input_text or file_path must be provided with non-empty content."

    result = await service.generate(executive_report_request(content, theme_id))
    return format_generation_result(
        result,
        subject="Executive report",
        failure="Failed to generate executive report.",
        created="Executive report created",
        details=(
            "Format: A4 PDF with preserved text content, detailed formatting, photorealistic images, "
            "and executive-focused professional tone."
        ),
    )


@mcp.tool(
    name="get-presentation-assets",
    description=(
        "Given a generationId return downloadable URLs for pdf and pptx if available, and optionally "
        "download them into the server's download directory and return local paths."
    ),
    structured_output=False,
)
async def get_presentation_assets(
    generation_id: Annotated[str, Field(description="The generationId returned by the Gamma generate API.")],
    download: Annotated[bool, Field(description="Download the assets and return local file paths.")] = False,
) -> list[TextContent | EmbeddedResource]:
    try:
        bundle = await assets.get_assets(generation_id, download=download)
    except Exception as exc:
        logger.warning("assets.failed generation_id=%s detail=%s", generation_id, exc)
        return [TextContent(type="text", text=f"Error fetching generation: {exc}")]

    return [
        EmbeddedResource(
            type="resource",
            resource=TextResourceContents(
                uri=f"gamma://generations/{generation_id}/assets",
                mimeType="application/json",
                text=bundle.model_dump_json(by_alias=True, exclude_none=True),
            ),
        )
    ]


def main() -> None:
    logger.info("server.start name=gamma-presentation transport=stdio")
    mcp.run()


if __name__ == "__main__":
    main()
