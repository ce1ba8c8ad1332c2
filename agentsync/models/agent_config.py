"""Local agent configuration models (the agent.json protocol).

These describe OUR file format, not the remote API's. Every model is frozen:
an edit produces a new value through ``model_copy(update=...)``.

Fields that were omitted in the source file stay out of ``model_fields_set``,
so ``model_dump(exclude_unset=True)`` reproduces the file's shape, explicit
nulls included. The hash calculator relies on that.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_serializer, field_validator

# the on-disk marker for "leave this variable for the runtime"
OVERRIDE_SENTINEL = "OVERRIDE"


class LiteralValue(BaseModel):
    """A variable value substituted into the prompt at build time."""

    model_config = {"frozen": True}

    value: str


class DeferToRuntime(BaseModel):
    """A variable intentionally left for the remote runtime to fill per call."""

    model_config = {"frozen": True}


VariableValue = LiteralValue | DeferToRuntime


class DynamicVariableSpec(BaseModel):
    """Type/description contract for a variable supplied at call time."""

    model_config = {"extra": "forbid", "frozen": True}

    type: Literal["string", "number", "boolean", "json"]
    description: str


class PromptConfig(BaseModel):
    """Composable prompt: ordered sections plus variable declarations."""

    model_config = {"extra": "forbid", "frozen": True}

    sections: list[str] = []  # order is meaningful
    overrides: dict[str, str] = {}  # section id -> inline text
    variables: dict[str, VariableValue] = {}
    dynamic_variables: dict[str, DynamicVariableSpec] = {}

    @field_validator("variables", mode="before")
    @classmethod
    def _convert_sentinel(cls, raw: Any) -> Any:
        if not isinstance(raw, dict):
            return raw
        converted = {}
        for name, value in raw.items():
            if isinstance(value, (LiteralValue, DeferToRuntime)):
                converted[name] = value
            elif value == OVERRIDE_SENTINEL:
                converted[name] = DeferToRuntime()
            elif isinstance(value, str):
                converted[name] = LiteralValue(value=value)
            else:
                raise ValueError(f"variable '{name}' must be a string")
        return converted

    @field_serializer("variables")
    def _serialize_variables(self, variables: dict[str, VariableValue]) -> dict[str, str]:
        return {
            name: OVERRIDE_SENTINEL if isinstance(value, DeferToRuntime) else value.value
            for name, value in variables.items()
        }

    def literal_variables(self) -> dict[str, str]:
        """Variables with a build-time value."""
        return {
            name: value.value
            for name, value in self.variables.items()
            if isinstance(value, LiteralValue)
        }


class LlmConfig(BaseModel):
    """Model settings and prompt source for the remote LLM resource."""

    model_config = {"extra": "forbid", "frozen": True, "protected_namespaces": ()}

    model: str
    temperature: float | None = Field(default=None, ge=0, le=2)
    prompt_config: PromptConfig | None = None
    general_prompt: str | None = None  # flat prompt, used when prompt_config is absent
    begin_message: str | None = None
    tools: list[Any] | None = None


class PronunciationEntry(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}

    word: str
    pronunciation: str


class AnalysisField(BaseModel):
    """A post-call analysis field the remote runtime should extract."""

    model_config = {"extra": "forbid", "frozen": True}

    name: str
    type: Literal["string", "number", "boolean"]
    description: str


class AgentConfig(BaseModel):
    """Canonical local description of one voice agent."""

    model_config = {"extra": "forbid", "frozen": True}

    agent_name: str = Field(min_length=1, max_length=100)
    voice_id: str
    voice_speed: float | None = Field(default=None, ge=0.5, le=2.0)
    voice_temperature: float | None = Field(default=None, ge=0, le=2)
    interruption_sensitivity: float | None = Field(default=None, ge=0, le=1)
    responsiveness: float | None = Field(default=None, ge=0, le=1)
    language: str = Field(pattern=r"^[a-z]{2}-[A-Z]{2}$")  # e.g. en-US
    enable_backchannel: bool | None = None
    backchannel_frequency: float | None = Field(default=None, ge=0, le=1)
    ambient_sound: Literal["office", "cafe", "none"] | None = None
    boosted_keywords: list[str] | None = None
    pronunciation_dictionary: list[PronunciationEntry] | None = None
    normalize_for_speech: bool | None = None
    webhook_url: str | None = None
    llm_config: LlmConfig
    post_call_analysis_data: list[AnalysisField] | None = None

    @field_validator("webhook_url")
    @classmethod
    def _check_webhook_url(cls, value: str | None) -> str | None:
        if value is not None and not value.startswith(("http://", "https://")):
            raise ValueError("webhook_url must be an http(s) URL")
        return value

    def to_file_dict(self) -> dict[str, Any]:
        """The JSON-shaped form of this config, omitting fields never set."""
        return self.model_dump(mode="json", exclude_unset=True)
