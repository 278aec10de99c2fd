"""Table helpers: fallback columns, category grouping and collapse state.

Usage:
    view = TableView(table)
    for category, rows in view.groups().items(): ...
    view.toggle("Bäume")
    view.visible_rows()
"""

from pollen_report.models import Column, Table, is_blank, safe_text

DEFAULT_COLUMNS: tuple[Column, ...] = (
    Column(key="pollen_type", label="Pollenart"),
    Column(key="label", label="Belastung"),
    Column(key="inferred", label="Tendenz"),
)

FALLBACK_CATEGORY = "Sonstige"

# Checked in order; first substring hit wins
_TONES: tuple[tuple[str, str], ...] = (
    ("keine", "none"),
    ("gering", "low"),
    ("mittel", "medium"),
    ("hoch", "high"),
    ("sehr hoch", "very_high"),
)


def columns_for(table: Table) -> tuple[Column, ...]:
    return table.columns or DEFAULT_COLUMNS


def label_tone(label) -> str:
    """Map a load label like "Mittel" to a tone key used for coloring."""
    text = safe_text(label).lower()
    for needle, tone in _TONES:
        if needle in text:
            return tone
    return "neutral"


def is_grouped(table: Table) -> bool:
    return bool(table.group_by) or any(not is_blank(row.get("category")) for row in table.rows)


def group_rows(table: Table) -> dict[str, list[dict]]:
    """Group rows by ``group_by`` (or ``category``), in order of first appearance.

    Returns an empty dict when the table is not grouped.
    """
    if not is_grouped(table):
        return {}
    key = table.group_by or "category"
    groups: dict[str, list[dict]] = {}
    for row in table.rows:
        value = row.get(key)
        category = "" if is_blank(value) else safe_text(value)
        groups.setdefault(category or FALLBACK_CATEGORY, []).append(row)
    return groups


class TableView:
    """Per-table UI state: which categories are collapsed."""

    def __init__(self, table: Table, collapsed: list[str] | None = None) -> None:
        self.table = table
        if collapsed is None:
            collapsed = list(table.default_collapsed_categories)
        self._collapsed: list[str] = list(collapsed)

    @property
    def columns(self) -> tuple[Column, ...]:
        return columns_for(self.table)

    @property
    def collapsed(self) -> list[str]:
        return list(self._collapsed)

    def groups(self) -> dict[str, list[dict]]:
        return group_rows(self.table)

    def is_collapsed(self, category: str) -> bool:
        return category in self._collapsed

    def toggle(self, category: str) -> None:
        if category in self._collapsed:
            self._collapsed.remove(category)
        else:
            self._collapsed.append(category)

    def expand_all(self) -> None:
        self._collapsed.clear()

    def visible_rows(self) -> list[dict]:
        groups = self.groups()
        if not groups:
            return list(self.table.rows)
        rows: list[dict] = []
        for category, members in groups.items():
            if not self.is_collapsed(category):
                rows.extend(members)
        return rows

    def cell(self, row: dict, column: Column) -> str:
        return safe_text(row.get(column.key))
