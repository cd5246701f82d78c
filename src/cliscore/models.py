"""Data classes for cliscore requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

MAX_PAGE = 10
MAX_PAGE_SIZE = 10_000


class TypeTag(Enum):
    UUID = "uuid"
    EMAIL = "email"
    URL = "url"
    DOMAIN = "domain"


@dataclass
class SearchRequest:
    terms: list[str]
    types: list[str]
    wildcard: bool = False
    source: str = "xkeyscore"
    operator: str | None = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "terms": list(self.terms),
            "types": list(self.types),
            "wildcard": self.wildcard,
            "source": self.source,
        }
        if self.operator:
            body["operator"] = self.operator
        return body


@dataclass
class CountRequest(SearchRequest):
    """Same wire shape as a search request, sent to the count endpoint."""


@dataclass
class PaginationParams:
    page: int | None = None
    pages: list[int] = field(default_factory=list)
    page_size: int | None = None

    def __post_init__(self) -> None:
        if self.page is not None:
            self.page = min(self.page, MAX_PAGE)
        if self.page_size is not None:
            self.page_size = min(self.page_size, MAX_PAGE_SIZE)

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.page is not None:
            body["page"] = self.page
        if self.pages:
            body["pages"] = list(self.pages)
        if self.page_size is not None:
            body["pageSize"] = self.page_size
        return body


@dataclass
class SearchResponse:
    results: dict[str, Any] = field(default_factory=dict)
    pages: dict[str, Any] = field(default_factory=dict)
    size: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_paginated(self) -> bool:
        return bool(self.pages)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SearchResponse:
        known = {"results", "pages", "size"}
        return cls(
            results=data.get("results") or {},
            pages=data.get("pages") or {},
            size=int(data.get("size") or 0),
            extra={k: v for k, v in data.items() if k not in known},
        )

    def to_json(self) -> dict[str, Any]:
        if not self.is_paginated:
            return dict(self.results)
        return {**self.extra, "pages": self.pages, "size": self.size}


@dataclass
class DetailedCountResponse:
    counts: dict[str, Any] = field(default_factory=dict)
    total_count: int = 0
    took: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> DetailedCountResponse:
        return cls(
            counts=data.get("counts") or {},
            total_count=int(data.get("total_count") or 0),
            took=int(data.get("took") or 0),
        )


@dataclass
class CreditsResponse:
    credits: int = 0
    message: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> CreditsResponse:
        return cls(
            credits=int(data.get("credits") or 0),
            message=data.get("message") or "",
        )


@dataclass
class MachineInfoRecord:
    """Machine information from a log, with its flat file listing split out."""

    fields: dict[str, Any] = field(default_factory=dict)
    file_tree: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        data = dict(self.fields)
        if self.file_tree:
            data["fileTree"] = list(self.file_tree)
        return data


@dataclass
class GenericRecord:
    data: Any = None

    def to_json(self) -> Any:
        return self.data


Payload = Union[MachineInfoRecord, GenericRecord]


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def parse_machine_info(data: Any) -> Payload:
    """Decide the payload variant for the `data` member of a /machineinfo response."""
    if not isinstance(data, dict):
        return GenericRecord(data)

    file_tree = data.get("fileTree") or []
    fields = {
        key: value
        for key, value in data.items()
        if key != "fileTree" and not _is_empty(value)
    }
    return MachineInfoRecord(
        fields=fields,
        file_tree=[str(p) for p in file_tree],
    )
