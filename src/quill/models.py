# quill: Centralized Pydantic v2 models shared by the extractor, resolver, editor, materializer and client. Provider payload models ignore unknown fields; our own value types forbid them.

from __future__ import annotations

from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CustomBaseModel(BaseModel):
    """Pydantic base model configured to forbid unknown fields for strict validation."""
    model_config = ConfigDict(extra="forbid")


class CodeBlock(CustomBaseModel):
    """A fenced code block parsed out of a model response."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    language: str = Field("txt", description="First token of the fence info string")
    code: str = Field(..., description="Trimmed block body, filename comment removed")
    filename: Optional[str] = Field(default=None, description="Explicit or inferred filename")


class SessionSettings(CustomBaseModel):
    """Mutable per-session knobs; assignments are validated so bad input never sticks."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True, protected_namespaces=())

    model: str = Field("", description="Provider model id")
    model_type: Literal["chat", "generate"] = Field("chat", description="Endpoint family for the model")
    temperature: float = Field(0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(1024, gt=0)
    include_history: bool = Field(True, description="Send prior turns with chat requests")


class ChatMessage(CustomBaseModel):
    role: Literal["user", "chatbot"]
    text: str


class EditRequest(CustomBaseModel):
    target_path: str
    original_content: str
    instruction: str


# quill: Provider payloads. These tolerate extra keys since the API adds fields over time.

class TokenCount(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class ResponseMeta(BaseModel):
    token_count: Optional[TokenCount] = None
    model: Optional[str] = None


class Citation(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None
    text: Optional[str] = None


class ProviderResponse(BaseModel):
    """Chat or generate result normalized to a single shape."""
    text: str = ""
    meta: Optional[ResponseMeta] = None
    citations: List[Citation] = Field(default_factory=list)

    # quill: The chat endpoint sends null for citations when there are none.
    @field_validator("citations", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return v or []


class ModelInfo(BaseModel):
    name: str
    endpoints: List[str] = Field(default_factory=list)
    description: Optional[str] = None

    def supports(self, endpoint: str) -> bool:
        return endpoint in self.endpoints


# quill: Outcome types for the core flows.

class TargetKind(str, Enum):
    path = "path"
    ambiguous = "ambiguous"
    not_found = "not_found"


class TargetResolution(CustomBaseModel):
    kind: TargetKind
    path: Optional[str] = None
    candidates: List[str] = Field(default_factory=list)


class EditFailure(str, Enum):
    target_ambiguous = "TargetAmbiguous"
    file_unreadable = "FileUnreadable"
    provider_failure = "ProviderFailure"
    no_edit_produced = "NoEditProduced"
    cancelled = "EditCancelled"
    write_failure = "WriteFailure"


class WriteOutcome(CustomBaseModel):
    index: int = Field(..., description="1-based position of the block in its response")
    path: str
    written: bool
    error: Optional[str] = None


class EditResult(CustomBaseModel):
    written: bool
    path: str
    reason: Optional[EditFailure] = None
    detail: Optional[str] = None
    block: Optional[CodeBlock] = None
