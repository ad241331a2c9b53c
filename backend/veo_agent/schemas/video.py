"""Pydantic v2 schemas for the video generation pipeline."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

AspectRatio = Literal["16:9"]
PersonGeneration = Literal["allow_all"]


class GenerationRequest(BaseModel):
    """Prompt plus fixed generation parameters, built once per invocation."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    prompt: str = Field(..., min_length=1)
    model: str
    aspect_ratio: AspectRatio = "16:9"
    person_generation: PersonGeneration = "allow_all"

    def to_payload(self) -> dict[str, Any]:
        """Body for the Veo ``predictLongRunning`` call."""
        return {
            "instances": [{"prompt": self.prompt}],
            "parameters": {
                "aspectRatio": self.aspect_ratio,
                "personGeneration": self.person_generation,
            },
        }


class JobHandle(BaseModel):
    """Long-running operation as last reported by the provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    done: bool = False
    raw: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_operation(cls, operation: dict[str, Any]) -> "JobHandle":
        return cls(
            name=operation["name"],
            done=bool(operation.get("done", False)),
            raw=operation,
        )


class UploadedAsset(BaseModel):
    path: str
    url: str


class UsageEvent(BaseModel):
    """Usage record body posted to the ledger."""

    model_config = ConfigDict(populate_by_name=True)

    task_id: int | str = Field(alias="taskId")
    workspace_id: int | str = Field(exclude=True)
    trigger_type: Literal["task"] = Field("task", alias="triggerType")
    service_cost: int = Field(alias="serviceCost")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class VideoResult(BaseModel):
    """Outcome of one pipeline run."""

    url: str
    path: str
    usage_recorded: bool = False
