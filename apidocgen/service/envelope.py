"""Supervisor handshake envelope: request parsing and response builders."""

from __future__ import annotations

import base64
import binascii
import uuid
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import DiscoveryError
from ..models import InlineFile, TaskDescription, TaskResult

AGENT_ID = "documentation_generator_agent"
AGENT_NAME = "Documentation Generator Agent"
SUPERVISOR_ID = "supervisor"
TASK_ASSIGNMENT = "task_assignment"
TASK_RESPONSE = "task_response"
FAILURE_MESSAGE = "An error occurred while processing the task."


class CodeFilePayload(BaseModel):
    file_path: str
    content_base64: str = ""


class TaskPayload(BaseModel):
    """The ``results/task`` section of an assignment."""

    model_config = ConfigDict(extra="ignore")

    language: Optional[str] = None
    git_repo_url: Optional[str] = None
    search_patterns: Optional[List[str]] = None
    zip_file_base64: Optional[str] = None
    code_files_base64: List[CodeFilePayload] = Field(default_factory=list)
    existing_documentation: Any = None

    def to_task(self) -> TaskDescription:
        """Decode the wire payload into a task description."""
        archive = _decode(self.zip_file_base64, "zip_file_base64") if self.zip_file_base64 else None
        files = []
        for item in self.code_files_base64:
            raw = _decode(item.content_base64, item.file_path)
            files.append(
                InlineFile(
                    path=item.file_path,
                    content=raw.decode("utf-8", errors="replace"),
                    raw=raw,
                )
            )
        return TaskDescription(
            files=files,
            archive=archive,
            repository_url=self.git_repo_url or None,
            language=self.language or None,
            search_patterns=self.search_patterns,
            existing_documentation=(
                self.existing_documentation
                if isinstance(self.existing_documentation, dict)
                else None
            ),
        )


class TaskAssignment(BaseModel):
    """Incoming supervisor message."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: Optional[str] = None
    sender: Optional[str] = None
    recipient: Optional[str] = None
    type: Optional[str] = None
    task: TaskPayload = Field(default_factory=TaskPayload, alias="results/task")


class HealthResponse(BaseModel):
    status: str
    agent_name: str


def build_success_response(related_id: Optional[str], result: TaskResult) -> Dict[str, Any]:
    return _envelope(related_id, "completed", result.to_dict())


def build_error_response(
    related_id: Optional[str], message: str, error: Optional[str]
) -> Dict[str, Any]:
    return _envelope(
        related_id,
        "failed",
        {"status_message": message, "error_details": error},
    )


def _envelope(related_id: Optional[str], status: str, task: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "message_id": f"doc-agent-{uuid.uuid4()}",
        "sender": AGENT_ID,
        "recipient": SUPERVISOR_ID,
        "type": TASK_RESPONSE,
        "related_message_id": related_id,
        "status": status,
        "results/task": task,
        "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
    }


def _decode(value: str, label: str) -> bytes:
    try:
        return base64.b64decode(value)
    except (binascii.Error, ValueError) as exc:
        raise DiscoveryError(f"Invalid base64 content for {label}: {exc}") from exc


__all__ = [
    "AGENT_NAME",
    "CodeFilePayload",
    "FAILURE_MESSAGE",
    "HealthResponse",
    "TASK_ASSIGNMENT",
    "TaskAssignment",
    "TaskPayload",
    "build_error_response",
    "build_success_response",
]
