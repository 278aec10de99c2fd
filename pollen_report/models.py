"""Data models for the pollen forecast view-model.

The view-model is produced by the model, not by us, so every constructor here
is tolerant: missing keys, ``None`` lists, non-dict entries and non-string
text all degrade to empty values instead of raising.

    - ViewModel
    - Header / QualityBadge
    - KpiCard
    - Chart / Axis / Series
    - Table / Column
    - Summaries
    - RecommendationBlock / RecommendationItem
    - GroundingSource
"""

import math
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

MAX_LEVEL = 4


def safe_text(value: Any) -> str:
    """Coerce whatever the model put into a text slot into a display string."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and "text" in value:
        return str(value["text"])
    if value is None:
        return ""
    return str(value)


def is_blank(value: Any) -> bool:
    """True for JSON values that mean "nothing here": null, "", 0 and false.

    Empty objects and arrays count as present.
    """
    if isinstance(value, (dict, list)):
        return False
    return not value


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _number(value: Any, default: float | None = None) -> float | None:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Severity(str, Enum):
    GOOD = "good"
    WARN = "warn"
    BAD = "bad"

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Unknown severities render as ``warn``."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.WARN


class Priority(str, Enum):
    HIGH = "hoch"
    MEDIUM = "mittel"
    LOW = "niedrig"

    @classmethod
    def parse(cls, value: Any) -> "Priority":
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.LOW

    @property
    def marker(self) -> str:
        return "!!" if self is Priority.HIGH else "!"


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QualityBadge:
    label: str
    severity: Severity

    @classmethod
    def from_dict(cls, raw: Any) -> "QualityBadge":
        if not isinstance(raw, dict):
            return cls(label=safe_text(raw), severity=Severity.WARN)
        return cls(label=safe_text(raw.get("label")), severity=Severity.parse(raw.get("severity")))


@dataclass(frozen=True)
class Header:
    title: str = ""
    subtitle: str = ""
    timestamp_label: str = ""
    quality_badges: tuple[QualityBadge, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "Header":
        raw = _dict(raw)
        return cls(
            title=safe_text(raw.get("title")),
            subtitle=safe_text(raw.get("subtitle")),
            timestamp_label=safe_text(raw.get("timestamp_label")),
            quality_badges=tuple(QualityBadge.from_dict(b) for b in _list(raw.get("quality_badges"))),
        )

    @property
    def location(self) -> str:
        """Subtitle without the "Standort: " prefix."""
        return self.subtitle.replace("Standort: ", "", 1)


# ---------------------------------------------------------------------------
# KPI cards
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class KpiCard:
    id: str
    title: str
    value_label: str
    value_level: float
    severity: Severity
    hint: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "KpiCard":
        raw = _dict(raw)
        return cls(
            id=safe_text(raw.get("id")),
            title=safe_text(raw.get("title")),
            value_label=safe_text(raw.get("value_label")),
            value_level=_number(raw.get("value_level"), 0),
            severity=Severity.parse(raw.get("severity")),
            hint=safe_text(raw.get("hint")),
        )

    @property
    def level_percent(self) -> float:
        """Fill of the level bar, 0–100."""
        return max(0.0, min(100.0, self.value_level / MAX_LEVEL * 100))


# ---------------------------------------------------------------------------
# Charts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Axis:
    type: str = ""
    label: str = ""
    values: tuple[str, ...] = ()
    min: float | None = None
    max: float | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Axis":
        raw = _dict(raw)
        return cls(
            type=safe_text(raw.get("type")),
            label=safe_text(raw.get("label")),
            values=tuple(safe_text(v) for v in _list(raw.get("values"))),
            min=_number(raw.get("min")),
            max=_number(raw.get("max")),
        )


@dataclass(frozen=True)
class Series:
    name: str
    values: tuple[float | None, ...] = ()
    tooltip_format: str | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> "Series":
        raw = _dict(raw)
        fmt = raw.get("tooltip_format")
        return cls(
            name=safe_text(raw.get("name")),
            values=tuple(_number(v) for v in _list(raw.get("values"))),
            tooltip_format=safe_text(fmt) if fmt is not None else None,
        )


@dataclass(frozen=True)
class Annotation:
    text: str
    type: str = "note"

    @classmethod
    def from_dict(cls, raw: Any) -> "Annotation":
        if not isinstance(raw, dict):
            return cls(text=safe_text(raw))
        return cls(text=safe_text(raw.get("text")), type=safe_text(raw.get("type")) or "note")


@dataclass(frozen=True)
class Chart:
    id: str
    title: str
    x: Axis
    y: Axis
    series: tuple[Series, ...] = ()
    annotations: tuple[Annotation, ...] = ()
    type: str = "line"

    @classmethod
    def from_dict(cls, raw: Any) -> "Chart":
        raw = _dict(raw)
        return cls(
            id=safe_text(raw.get("id")),
            title=safe_text(raw.get("title")),
            x=Axis.from_dict(raw.get("x")),
            y=Axis.from_dict(raw.get("y")),
            series=tuple(Series.from_dict(s) for s in _list(raw.get("series"))),
            annotations=tuple(Annotation.from_dict(a) for a in _list(raw.get("annotations"))),
            type=safe_text(raw.get("type")) or "line",
        )


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Column:
    key: str
    label: str


@dataclass(frozen=True)
class Table:
    id: str
    title: str
    columns: tuple[Column, ...] = ()
    rows: tuple[dict, ...] = ()
    notes: tuple[str, ...] = ()
    group_by: str | None = None
    default_collapsed_categories: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "Table":
        raw = _dict(raw)
        columns = tuple(
            Column(key=safe_text(c.get("key")), label=safe_text(c.get("label")))
            for c in _list(raw.get("columns"))
            if isinstance(c, dict)
        )
        return cls(
            id=safe_text(raw.get("id")),
            title=safe_text(raw.get("title")),
            columns=columns,
            rows=tuple(r for r in _list(raw.get("rows")) if isinstance(r, dict)),
            notes=tuple(safe_text(n) for n in _list(raw.get("notes"))),
            group_by=safe_text(raw.get("group_by")) or None,
            default_collapsed_categories=tuple(
                safe_text(c) for c in _list(raw.get("default_collapsed_categories"))
            ),
        )


# ---------------------------------------------------------------------------
# Text blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Summaries:
    today_one_liner: str = ""
    next_days_one_liner: str = ""
    midterm_one_liner: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "Summaries":
        raw = _dict(raw)
        return cls(
            today_one_liner=safe_text(raw.get("today_one_liner")),
            next_days_one_liner=safe_text(raw.get("next_days_one_liner")),
            midterm_one_liner=safe_text(raw.get("midterm_one_liner")),
        )


@dataclass(frozen=True)
class RecommendationItem:
    title: str
    detail: str
    priority: Priority

    @classmethod
    def from_dict(cls, raw: Any) -> "RecommendationItem":
        raw = _dict(raw)
        return cls(
            title=safe_text(raw.get("title")),
            detail=safe_text(raw.get("detail")),
            priority=Priority.parse(raw.get("priority")),
        )


@dataclass(frozen=True)
class RecommendationBlock:
    id: str
    title: str
    items: tuple[RecommendationItem, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "RecommendationBlock":
        raw = _dict(raw)
        return cls(
            id=safe_text(raw.get("id")),
            title=safe_text(raw.get("title")),
            items=tuple(RecommendationItem.from_dict(i) for i in _list(raw.get("items"))),
        )

    @property
    def is_medical(self) -> bool:
        return self.id == "medical_help"


@dataclass(frozen=True)
class GroundingSource:
    uri: str
    title: str = ""

    @classmethod
    def from_dict(cls, raw: Any) -> "GroundingSource":
        raw = _dict(raw)
        return cls(uri=safe_text(raw.get("uri")), title=safe_text(raw.get("title")))


# ---------------------------------------------------------------------------
# View-model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ViewModel:
    ui_version: str = ""
    header: Header = field(default_factory=Header)
    kpi_cards: tuple[KpiCard, ...] = ()
    charts: tuple[Chart, ...] = ()
    tables: tuple[Table, ...] = ()
    summaries: Summaries = field(default_factory=Summaries)
    recommendation_blocks: tuple[RecommendationBlock, ...] = ()
    footnotes: tuple[str, ...] = ()
    disclaimer: str = ""
    grounding_sources: tuple[GroundingSource, ...] = ()

    @classmethod
    def from_dict(cls, raw: Any) -> "ViewModel":
        raw = _dict(raw)
        # camelCase is what the front-end used for citations
        sources = raw.get("grounding_sources") or raw.get("groundingSources")
        return cls(
            ui_version=safe_text(raw.get("ui_version")),
            header=Header.from_dict(raw.get("header")),
            kpi_cards=tuple(KpiCard.from_dict(c) for c in _list(raw.get("kpi_cards"))),
            charts=tuple(Chart.from_dict(c) for c in _list(raw.get("charts"))),
            tables=tuple(Table.from_dict(t) for t in _list(raw.get("tables"))),
            summaries=Summaries.from_dict(raw.get("summaries")),
            recommendation_blocks=tuple(
                RecommendationBlock.from_dict(b) for b in _list(raw.get("recommendation_blocks"))
            ),
            footnotes=tuple(safe_text(f) for f in _list(raw.get("footnotes"))),
            disclaimer=safe_text(raw.get("disclaimer")),
            grounding_sources=tuple(
                s for s in (GroundingSource.from_dict(s) for s in _list(sources)) if s.uri
            ),
        )

    def to_dict(self) -> dict:
        """Serialize back to the view-model JSON shape (enums as plain strings)."""
        return _plain(asdict(self))


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
