"""Pydantic models for API request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class PreviewResponse(BaseModel):
    """Response for the content-preview endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    is_image: bool = Field(alias="isImage")
    is_binary: bool = Field(alias="isBinary")
    mime_type: str | None = Field(default=None, alias="mimeType")
    sha: str | None = None  # Only for edit=true


class SaveRequest(BaseModel):
    """Request body for committing new file content."""

    path: str = ""
    message: str = ""
    content: str | None = None
    sha: str = ""
    branch: str | None = None


class PathRequest(BaseModel):
    """Request body naming a tree entry."""

    path: str


class DraftRequest(BaseModel):
    """Request body carrying the source editor's text."""

    content: str


class EditorModeRequest(BaseModel):
    """Request body for switching editor sub-mode."""

    rendered_html: str | None = None  # Rendered editor HTML, when leaving it


class CommitRequest(BaseModel):
    """Request body for committing the current draft."""

    message: str = ""
    content: str | None = None  # Latest source text, if not yet sent
