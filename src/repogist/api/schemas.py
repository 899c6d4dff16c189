"""Pydantic models for the /ingest HTTP contract.

The request field names follow the JSON the service has always accepted
(``ignorePatterns`` in camelCase). The request model is lenient in the
same way the service always was: any falsy ``url`` counts as missing, a
non-string ``url`` is treated as its text, and ``ignorePatterns`` may be a
list, a single pattern or null.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator


class IngestRequest(BaseModel):
    url: Optional[str] = Field(None, description="Repository URL (GitHub/GitLab browse URL, .git URL or SSH form)")
    ignorePatterns: List[str] = Field(default_factory=list, description="Extra gitignore-style patterns to exclude")

    @field_validator("url", mode="before")
    @classmethod
    def coerce_url(cls, value: Any) -> Optional[str]:
        if not value:
            return None
        return value if isinstance(value, str) else str(value)

    @field_validator("ignorePatterns", mode="before")
    @classmethod
    def coerce_patterns(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            if not all(isinstance(item, str) for item in value):
                raise ValueError("ignorePatterns must contain only strings")
            return list(value)
        raise ValueError("ignorePatterns must be a string or a list of strings")


class IngestData(BaseModel):
    tree: str = Field(..., description="Indented directory tree")
    content: str = Field(..., description="Concatenated text of every included file")
    normalized: str = Field(..., description="Tree and content combined under fixed headers")


class IngestResponse(BaseModel):
    message: str = "Repository ingested successfully"
    data: IngestData


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
