"""Domain models for short links."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LinkType(str, Enum):
	SHORTENED = "Shortened"
	COMBINED = "Combined"


class CombinedLinkItem(BaseModel):
	title: Optional[str] = None
	id: Optional[str] = None
	url: str


class CombinedLink(BaseModel):
	links: list[CombinedLinkItem] = Field(default_factory=list)
	description: Optional[str] = None
	title: Optional[str] = None


class Link(BaseModel):
	id: UUID
	path: str
	alternators: list[str] = Field(default_factory=list)
	type: LinkType
	link: Optional[str] = None
	combined_link: Optional[CombinedLink] = None
	owner_id: Optional[UUID] = None
	created_at: datetime

	model_config = ConfigDict(from_attributes=True)
