from __future__ import annotations
"""Pydantic v2 schemas for the host invocation context."""

from pydantic import BaseModel, ConfigDict


class TaskRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str


class WorkspaceRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int | str | None = None


class ActionContext(BaseModel):
    """Action the host attaches to a capability call.

    ``type`` is ``do-task`` for task execution and e.g.
    ``respond-chat-message`` for direct chat invocations.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    task: TaskRef | None = None
    workspace: WorkspaceRef | None = None

    @property
    def workspace_id(self) -> int | str | None:
        return self.workspace.id if self.workspace else None

    @property
    def task_id(self) -> int | str | None:
        return self.task.id if self.task else None
