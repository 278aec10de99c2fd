"""Chart helpers: turn a view-model chart into plottable rows.

Functions:
    chart_rows(chart)      -> list[dict]   one row per x value
    y_domain(chart)        -> (min, max)
    series_colors(chart)   -> {series_name: color}
"""

from pollen_report.models import MAX_LEVEL, Chart

PALETTE = ("#3b82f6", "#10b981", "#f59e0b", "#ef4444")

#: Fixed ticks for the pollen scale axis
Y_TICKS = tuple(range(MAX_LEVEL + 1))


def chart_rows(chart: Chart) -> list[dict]:
    """Return ``[{"date": x, <series name>: value, ...}, ...]``.

    Series shorter than the x axis yield ``None`` for the missing points;
    extra values beyond the x axis are dropped.
    """
    rows: list[dict] = []
    for index, date in enumerate(chart.x.values):
        row: dict = {"date": date}
        for series in chart.series:
            row[series.name] = series.values[index] if index < len(series.values) else None
        rows.append(row)
    return rows


def y_domain(chart: Chart) -> tuple[float, float]:
    low = chart.y.min if chart.y.min is not None else 0
    high = chart.y.max if chart.y.max is not None else MAX_LEVEL
    return low, high


def series_colors(chart: Chart) -> dict[str, str]:
    return {s.name: PALETTE[i % len(PALETTE)] for i, s in enumerate(chart.series)}
