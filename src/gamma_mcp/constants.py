from typing import Literal

DEFAULT_FORMAT = "presentation"
DEFAULT_TEXT_MODE = "generate"

Format = Literal["presentation", "document", "social", "webpage"]
TextMode = Literal["generate", "condense", "preserve"]
TextAmount = Literal["brief", "medium", "detailed", "extensive"]
LegacyTextAmount = Literal["short", "medium", "long"]
ExportFormat = Literal["pdf", "pptx"]
ImageSource = Literal[
    "aiGenerated",
    "pictographic",
    "unsplash",
    "giphy",
    "webAllImages",
    "webFreeToUse",
    "webFreeToUseCommercially",
    "placeholder",
    "noImages",
]
HeaderFooterType = Literal["text", "image", "cardNumber"]
HeaderFooterImageSource = Literal["themeLogo", "custom"]
HeaderFooterSize = Literal["sm", "md", "lg", "xl"]

# older clients sent short/medium/long
LEGACY_TEXT_AMOUNTS: dict[str, str] = {
    "short": "brief",
    "medium": "medium",
    "long": "detailed",
}

MIN_CARDS = 1
MAX_CARDS = 75

COMPLETED_STATUSES = frozenset({"completed", "succeeded"})
FAILED_STATUSES = frozenset({"failed", "error"})
