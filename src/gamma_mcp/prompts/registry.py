import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ValidationError

from gamma_mcp.config import Settings
from gamma_mcp.errors import PromptArgumentError, PromptNotFoundError
from gamma_mcp.prompts.template import render_template

logger = logging.getLogger(__name__)


class PromptParameter(BaseModel):
    type: Literal["string", "number", "boolean"] = "string"
    description: str | None = None
    required: bool = False
    default: Any = None


class PromptDefinition(BaseModel):
    name: str
    description: str
    template: str
    parameters: dict[str, PromptParameter] = {}


def load_prompt_file(path: Path) -> PromptDefinition | None:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        return PromptDefinition.model_validate(raw)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("prompts.invalid_file path=%s detail=%s", path, exc)
        return None


def load_prompts_from_directory(directory: Path) -> list[PromptDefinition]:
    if not directory.is_dir():
        logger.debug("prompts.directory_missing path=%s", directory)
        return []
    prompts: list[PromptDefinition] = []
    for path in sorted(directory.glob("*.json")):
        definition = load_prompt_file(path)
        if definition is not None:
            prompts.append(definition)
    return prompts


class PromptRegistry:
    """Name -> prompt definition lookup backed by the public and private prompt directories.

    Definitions from the private directory replace public ones with the same name.
    """

    def __init__(self, directories: list[Path]) -> None:
        self.directories = directories
        self._prompts: dict[str, PromptDefinition] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "PromptRegistry":
        return cls([Path(settings.prompts_public_dir), Path(settings.prompts_private_dir)])

    def reload(self) -> int:
        prompts: dict[str, PromptDefinition] = {}
        for directory in self.directories:
            for definition in load_prompts_from_directory(directory):
                prompts[definition.name] = definition
        self._prompts = prompts
        logger.info(
            "prompts.loaded count=%d directories=%s",
            len(prompts),
            [str(directory) for directory in self.directories],
        )
        return len(prompts)

    def lookup(self, name: str) -> PromptDefinition | None:
        return self._prompts.get(name)

    def list_prompts(self) -> list[PromptDefinition]:
        return sorted(self._prompts.values(), key=lambda definition: definition.name)

    def render(self, name: str, arguments: Mapping[str, Any] | None = None) -> str:
        definition = self.lookup(name)
        if definition is None:
            raise PromptNotFoundError(f"Unknown prompt: {name}")

        params = dict(arguments or {})
        missing: list[str] = []
        for key, parameter in definition.parameters.items():
            if params.get(key) is not None:
                continue
            if parameter.default is not None:
                params[key] = parameter.default
            elif parameter.required:
                missing.append(key)
        if missing:
            raise PromptArgumentError(f"Missing required argument(s) for prompt {name}: {', '.join(missing)}")
        return render_template(definition.template, params)
