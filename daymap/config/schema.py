# daymap/config/schema.py
"""
Pydantic configuration models for daymap.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OllamaConfig(BaseModel):
    """Ollama server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:11434", description="Ollama API base URL"
    )
    model: str = Field(
        default="qwen2.5:14b-instruct",
        description="Ollama model used for feasibility checks and roadmaps",
    )
    fallback_model: str | None = Field(
        default="qwen2.5:7b-instruct",
        description="Fallback model on OOM errors (None to disable)",
    )
    timeout: int = Field(
        default=300, description="Request timeout in seconds (generous for model loading)"
    )


class LMStudioConfig(BaseModel):
    """LM Studio server configuration."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:1234/v1", description="LM Studio API base URL"
    )
    model: str = Field(default="local-model", description="LM Studio model to use")
    fallback_model: str | None = Field(
        default=None, description="Fallback model (None = no fallback)"
    )
    timeout: int = Field(default=300, description="Request timeout in seconds")


class StorageConfig(BaseModel):
    """Where projects are stored."""

    model_config = ConfigDict(extra="ignore")

    data_dir: str | None = Field(
        default=None,
        description="Directory for stored projects (None = platform user data dir)",
    )


class CalendarConfig(BaseModel):
    """Defaults for calendar export."""

    model_config = ConfigDict(extra="ignore")

    start_time: str = Field(
        default="14:00", pattern=r"^\d{2}:\d{2}$", description="Default session start (HH:MM)"
    )
    end_time: str = Field(
        default="19:00", pattern=r"^\d{2}:\d{2}$", description="Default session end (HH:MM)"
    )
    base_url: str = Field(
        default="https://www.google.com/calendar/render",
        description="Calendar event-template endpoint",
    )


class OutputConfig(BaseModel):
    """Console output configuration."""

    model_config = ConfigDict(extra="ignore")

    verbosity: Literal["quiet", "normal", "verbose"] = Field(
        default="normal", description="Logging verbosity level"
    )


class DaymapConfig(BaseModel):
    """Root configuration for daymap."""

    model_config = ConfigDict(extra="ignore")

    provider: Literal["ollama", "lm_studio"] = Field(
        default="ollama", description="LLM provider to use"
    )
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)
    lm_studio: LMStudioConfig = Field(default_factory=LMStudioConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    calendar: CalendarConfig = Field(default_factory=CalendarConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def model_name(self) -> str:
        """Primary model of the configured provider."""
        if self.provider == "lm_studio":
            return self.lm_studio.model
        return self.ollama.model
