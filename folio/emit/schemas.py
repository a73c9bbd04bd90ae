"""Pydantic schemas for emitted publication records."""

from datetime import date
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from folio.domain.document import Document
from folio.utils import thaw


class DocumentRecord(BaseModel):
    """Full document as published."""

    id: str = Field(..., min_length=1, description="Document identifier")
    path: str = Field(..., description="Source path")
    title: str = Field(..., min_length=1, description="Document title")
    published_at: date = Field(..., description="Publication date")
    categories: List[str] = Field(default_factory=list, description="Category display labels")
    body: str = Field(default="", description="Raw body text")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Unknown header keys")

    @classmethod
    def from_document(cls, document: Document) -> "DocumentRecord":
        return cls(
            id=document.id,
            path=document.path,
            title=document.title,
            published_at=document.published_at,
            categories=list(document.categories),
            body=document.body,
            extra=thaw(document.extra),
        )


class TimelineEntry(BaseModel):
    """Summary line for listings."""

    id: str
    title: str
    published_at: date
    categories: List[str] = Field(default_factory=list)

    @classmethod
    def from_document(cls, document: Document) -> "TimelineEntry":
        return cls(
            id=document.id,
            title=document.title,
            published_at=document.published_at,
            categories=list(document.categories),
        )


class TimelineFeed(BaseModel):
    """All documents, newest first."""

    count: int = Field(..., ge=0)
    entries: List[TimelineEntry] = Field(default_factory=list)


class CategoryFeed(BaseModel):
    """Documents of one category, newest first."""

    label: str = Field(..., min_length=1, description="Display label")
    key: str = Field(..., min_length=1, description="Normalized label")
    slug: str = Field(..., min_length=1, description="File name stem")
    count: int = Field(..., ge=0)
    entries: List[TimelineEntry] = Field(default_factory=list)
