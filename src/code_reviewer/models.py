from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class ModelOption:
    name: str
    model_id: str


MODEL_OPTIONS: Tuple[ModelOption, ...] = (
    ModelOption(name="Mistral 7B", model_id="mistralai/mistral-7b-instruct"),
    ModelOption(name="LLaMA 3 8B", model_id="meta-llama/llama-3-8b-instruct"),
    ModelOption(name="Claude 3 Haiku", model_id="anthropic/claude-3-haiku"),
)


def list_model_options() -> List[Dict[str, str]]:
    return [{"name": option.name, "id": option.model_id} for option in MODEL_OPTIONS]


def default_model_id() -> str:
    return MODEL_OPTIONS[0].model_id


def is_known_model(model_id: str) -> bool:
    return any(option.model_id == model_id for option in MODEL_OPTIONS)

