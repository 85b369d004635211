from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class UpstreamModel(BaseModel):
    """Base for records coming from the Akindo API.

    Fields are snake_case in Python and camelCase on the wire. Fields we do
    not model are kept as extras so responses pass them through untouched.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class Token(UpstreamModel):
    name: Optional[str] = None
    address: Optional[str] = None
    decimals: Optional[int] = None


class ActiveWave(UpstreamModel):
    opened_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    submission_deadline: Optional[datetime] = None
    judgement_deadline: Optional[datetime] = None
    grant_amount: Optional[str] = None  # decimal string, e.g. "12500.5"


class WaveHack(UpstreamModel):
    """One listing record."""

    id: str
    title: Optional[str] = None
    is_public: Optional[bool] = None
    building_days: Optional[int] = None
    judging_days: Optional[int] = None
    active_wave: Optional[ActiveWave] = None
    grant_denomination: Optional[Token] = None

    @field_validator("active_wave", mode="before")
    @classmethod
    def _falsy_active_wave(cls, value: Any) -> Any:
        # false, 0 and "" mean no active wave; an empty object is still one
        if isinstance(value, dict):
            return value
        return value or None

    @property
    def is_active(self) -> bool:
        return self.active_wave is not None


class CommunityLinks(UpstreamModel):
    website_url: Optional[str] = None
    discord_url: Optional[str] = None
    twitter_url: Optional[str] = None
    telegram_url: Optional[str] = None


class Criterion(UpstreamModel):
    id: str
    title: str
    sort: int = 0
    is_active: bool = True


class WaveHackDetail(WaveHack):
    """Detail record for a single wave hack (GET /wave-hacks/{id})."""

    description: Optional[str] = None
    community: Optional[CommunityLinks] = None
    criteria: List[Criterion] = Field(default_factory=list)

    @field_validator("criteria", mode="before")
    @classmethod
    def _null_criteria(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def active_criteria(self) -> List[Criterion]:
        """Active judging criteria in display order."""
        return sorted((c for c in self.criteria if c.is_active), key=lambda c: c.sort)


# ──────────────────────────────────────────────
#  Page payloads
# ──────────────────────────────────────────────

class PageMeta(BaseModel):
    """Pagination metadata, normalised across upstream response shapes."""

    total_pages: int = 1
    total_items: int = 0
    page: Optional[int] = None
    page_size: Optional[int] = None


class _ItemsMeta(UpstreamModel):
    total_pages: int = 1
    total_items: Optional[int] = None


class _ItemsPagePayload(UpstreamModel):
    """`{items: [...], meta: {totalPages, totalItems}}`"""

    items: List[WaveHack]
    meta: _ItemsMeta = Field(default_factory=_ItemsMeta)


class _Pagination(UpstreamModel):
    page: Optional[int] = None
    page_size: Optional[int] = None
    page_count: int = 1
    total: Optional[int] = None


class _DataMeta(UpstreamModel):
    pagination: _Pagination = Field(default_factory=_Pagination)


class _DataPagePayload(UpstreamModel):
    """`{data: [...], meta: {pagination: {page, pageSize, pageCount, total}}}`"""

    data: List[WaveHack]
    meta: _DataMeta = Field(default_factory=_DataMeta)


class WaveHackPage(BaseModel):
    items: List[WaveHack]
    meta: PageMeta

    @classmethod
    def from_payload(cls, payload: Any) -> "WaveHackPage":
        """
        Normalise either upstream page shape into a WaveHackPage.
        Raises ValueError (or pydantic's ValidationError) for anything else.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")

        if "items" in payload:
            parsed = _ItemsPagePayload.model_validate(payload)
            total = parsed.meta.total_items
            return cls(
                items=parsed.items,
                meta=PageMeta(
                    total_pages=parsed.meta.total_pages,
                    total_items=total if total is not None else len(parsed.items),
                ),
            )

        if "data" in payload:
            parsed = _DataPagePayload.model_validate(payload)
            pagination = parsed.meta.pagination
            return cls(
                items=parsed.data,
                meta=PageMeta(
                    total_pages=pagination.page_count,
                    total_items=pagination.total if pagination.total is not None else len(parsed.data),
                    page=pagination.page,
                    page_size=pagination.page_size,
                ),
            )

        raise ValueError("Unrecognised page payload: expected 'items' or 'data' key")
