"""Renderers for a forecast view-model.

Functions:
    render_text(view_model, *, color=True, expand_all=False)  -> str
    render_html(view_model, *, expand_all=False)              -> str

Both accept a ``ViewModel`` or the raw dict and render whatever is present;
missing sections are skipped and missing text renders empty.
"""

import html
from datetime import datetime

import click

from pollen_report.models import Chart, Severity, ViewModel
from pollen_report.reports.charts import Y_TICKS, chart_rows, series_colors, y_domain
from pollen_report.reports.tables import TableView, label_tone

BRAND = "Polleninformation Dr. Schätz"
TAGLINE = "Ihre dermatologische Praxis in Österreich"

#: (level, title, description) for the 0–4 scale legend
SCALE_LEGEND: tuple[tuple[int, str, str], ...] = (
    (0, "Keine", "Keine Pollen"),
    (1, "Gering", "Kaum Reizung"),
    (2, "Mittel", "Symptome möglich"),
    (3, "Hoch", "Deutliche Last"),
    (4, "Sehr Hoch", "Starke Belastung"),
)

#: Static explanation of how weather moves pollen counts
WEATHER_INFLUENCE: tuple[tuple[str, str], ...] = (
    ("Regen", "Wäscht Pollen aus der Luft. Balken sinken oft zeitversetzt."),
    ("Wind", "Verteilt Pollen über weite Strecken. Sprunghafte Anstiege möglich."),
    ("Sonne", "Öffnet Blüten. Hohe Werte an sonnigen Vormittagen typisch."),
)

PRIORITY_LEGEND = "Info: !! = Hohe Relevanz heute | ! = Allgemeine Empfehlung"

_SEVERITY_COLORS = {Severity.GOOD: "green", Severity.WARN: "yellow", Severity.BAD: "red"}
_LEVEL_COLORS = ("green", "green", "yellow", "bright_red", "red")
_TONE_COLORS = {
    "none": "green",
    "low": "green",
    "medium": "yellow",
    "high": "bright_red",
    "very_high": "red",
}

_BAR_WIDTH = 20


def _coerce(view_model) -> ViewModel:
    return view_model if isinstance(view_model, ViewModel) else ViewModel.from_dict(view_model)


def _fmt_value(value) -> str:
    if value is None:
        return "–"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


# ---------------------------------------------------------------------------
# Terminal text
# ---------------------------------------------------------------------------

def render_text(view_model, *, color: bool = True, expand_all: bool = False) -> str:
    vm = _coerce(view_model)

    def style(text: str, **kwargs) -> str:
        return click.style(text, **kwargs) if color else text

    def heading(text: str) -> str:
        return style(text.upper(), bold=True)

    out: list[str] = []

    # Location card
    out.append(style(vm.header.title or BRAND, bold=True))
    out.append(f"Gewählter Standort: {vm.header.location}")
    if vm.header.timestamp_label:
        out.append(vm.header.timestamp_label)
    for badge in vm.header.quality_badges:
        out.append("  Datenqualität: " + style(badge.label, fg=_SEVERITY_COLORS[badge.severity]))
    out.append("")

    # KPI cards
    for card in vm.kpi_cards:
        filled = round(card.level_percent / 100 * _BAR_WIDTH)
        bar = "█" * filled + "░" * (_BAR_WIDTH - filled)
        fg = _SEVERITY_COLORS[card.severity]
        out.append(f"{card.title:<16} {style(card.value_label, fg=fg, bold=True)}")
        out.append(f"{'':<16} {style(bar, fg=fg)}")
        if card.hint:
            out.append(f"{'':<16} {card.hint}")
    if vm.kpi_cards:
        out.append("")
        out.extend(_legend_lines(style))
        out.append("")

    # Weather and summaries
    out.append(heading("Wetter-Einfluss"))
    for name, text in WEATHER_INFLUENCE:
        out.append(f"  {name}: {text}")
    out.append("")
    out.append(heading("Wochen-Trend"))
    out.append(f'  "{vm.summaries.midterm_one_liner}"')
    out.append(heading("Die Lage heute"))
    out.append(f"  {vm.summaries.today_one_liner}")
    out.append(heading("Nächste Tage"))
    out.append(f"  {vm.summaries.next_days_one_liner}")
    out.append("")

    for chart in vm.charts:
        out.extend(_chart_lines(chart, heading))
        out.append("")

    # Recommendations
    for block in vm.recommendation_blocks:
        out.append(heading(block.title if block.is_medical else "Allergiker-Tipp"))
        for item in block.items:
            marker = item.priority.marker
            fg = {"hoch": "red", "mittel": "yellow"}.get(item.priority.value)
            out.append(f"  {style(f'{marker:>2}', fg=fg, bold=True)} {item.title}")
            if item.detail:
                out.append(f"     {item.detail}")
        if not block.is_medical:
            out.append(style(PRIORITY_LEGEND, dim=True))
        out.append("")

    for table in vm.tables:
        view = TableView(table)
        if expand_all:
            view.expand_all()
        out.extend(_table_lines(view, heading, style))
        out.append("")

    # Footer
    out.append(style("Wichtige Hinweise:", bold=True))
    if vm.disclaimer:
        out.append(vm.disclaimer)
    for note in vm.footnotes:
        out.append(f"* {note}")
    if vm.grounding_sources:
        out.append("")
        out.append(heading("Recherchierte Quellen"))
        for source in vm.grounding_sources:
            out.append(f"  - {source.title or 'Quelle'}: {source.uri}")

    return "\n".join(out).rstrip() + "\n"


def render_legend(*, color: bool = True) -> str:
    def style(text: str, **kwargs) -> str:
        return click.style(text, **kwargs) if color else text

    return "\n".join(_legend_lines(style)) + "\n"


def _legend_lines(style) -> list[str]:
    lines = [style("Bedeutung der Belastungsstufen", bold=True)]
    for level, title, description in SCALE_LEGEND:
        lines.append(f"  {style(str(level), fg=_LEVEL_COLORS[level], bold=True)} {title:<10} {description}")
    return lines


def _chart_lines(chart: Chart, heading) -> list[str]:
    lines = [heading(chart.title or chart.id)]
    rows = chart_rows(chart)
    names = [s.name for s in chart.series]
    if not rows or not names:
        lines.append("  (keine Daten)")
    else:
        date_width = max(len(chart.x.label or "Datum"), *(len(r["date"]) for r in rows))
        widths = [max(len(n), 3) for n in names]
        header = f"  {(chart.x.label or 'Datum'):<{date_width}}  " + "  ".join(
            f"{n:>{w}}" for n, w in zip(names, widths)
        )
        lines.append(header)
        for row in rows:
            cells = "  ".join(f"{_fmt_value(row[n]):>{w}}" for n, w in zip(names, widths))
            lines.append(f"  {row['date']:<{date_width}}  {cells}")
    for note in chart.annotations:
        lines.append(f"  * {note.text}")
    return lines


def _table_lines(view: TableView, heading, style) -> list[str]:
    columns = view.columns
    lines = [heading(view.table.title or view.table.id)]
    all_rows = list(view.table.rows)
    widths = [
        max([len(c.label)] + [len(view.cell(r, c)) for r in all_rows])
        for c in columns
    ]

    def fmt_row(row: dict) -> str:
        cells = []
        for column, width in zip(columns, widths):
            value = view.cell(row, column)
            padded = f"{value:<{width}}"
            if column.key == "label":
                padded = style(padded, fg=_TONE_COLORS.get(label_tone(value)), bold=True)
            cells.append(padded)
        return "  " + "  ".join(cells)

    lines.append("  " + "  ".join(f"{c.label:<{w}}" for c, w in zip(columns, widths)))
    groups = view.groups()
    if groups:
        for category, members in groups.items():
            arrow = "▶" if view.is_collapsed(category) else "▼"
            lines.append(style(f"  {arrow} {category}", bold=True))
            if not view.is_collapsed(category):
                lines.extend(fmt_row(r) for r in members)
    else:
        lines.extend(fmt_row(r) for r in all_rows)
    for note in view.table.notes:
        lines.append(f"  * {note}")
    return lines


# ---------------------------------------------------------------------------
# HTML
# ---------------------------------------------------------------------------

_CSS = """
body { font-family: -apple-system, 'Segoe UI', Roboto, sans-serif; background: #f8fafc; color: #0f172a; margin: 0; }
.container { max-width: 1024px; margin: 0 auto; padding: 24px; }
header.brand { background: #fff; border-bottom: 1px solid #e2e8f0; padding: 16px 24px; }
header.brand h1 { font-size: 20px; margin: 0; }
header.brand p { font-size: 12px; color: #64748b; font-style: italic; margin: 2px 0 0; }
.card { background: #fff; border: 1px solid #f1f5f9; border-radius: 16px; padding: 20px; margin-bottom: 16px; box-shadow: 0 1px 2px rgb(0 0 0 / 0.05); }
.label { font-size: 10px; font-weight: 700; color: #94a3b8; text-transform: uppercase; letter-spacing: 1px; }
.grid { display: grid; gap: 16px; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr)); }
.kpi { text-align: center; }
.kpi .value { font-size: 20px; font-weight: 700; margin: 4px 0 8px; }
.bar { height: 6px; background: #f1f5f9; border-radius: 3px; overflow: hidden; }
.bar > div { height: 100%; border-radius: 3px; }
.hint { font-size: 11px; color: #64748b; font-style: italic; }
.sev-good { color: #059669; } .bar .sev-good { background: #10b981; }
.sev-warn { color: #d97706; } .bar .sev-warn { background: #f59e0b; }
.sev-bad { color: #e11d48; } .bar .sev-bad { background: #f43f5e; }
.badge { display: inline-block; border: 1px solid; border-radius: 12px; padding: 4px 10px; margin: 2px; font-size: 12px; font-weight: 700; }
.legend { display: grid; grid-template-columns: repeat(5, 1fr); gap: 4px; font-size: 11px; text-align: center; }
.legend .swatch { height: 6px; border-radius: 3px; margin-bottom: 4px; }
.tip { display: flex; gap: 12px; margin-bottom: 12px; }
.marker { flex: none; width: 32px; height: 32px; border-radius: 16px; display: flex; align-items: center; justify-content: center; font-weight: 700; font-size: 12px; background: #e2e8f0; color: #475569; }
.marker.hoch { background: #e11d48; color: #fff; } .marker.mittel { background: #f59e0b; color: #fff; }
.medical { background: #fff1f2; border-color: #ffe4e6; }
table { width: 100%; border-collapse: collapse; }
th { font-size: 10px; color: #94a3b8; text-transform: uppercase; text-align: left; padding: 8px; }
td { font-size: 14px; padding: 8px; border-bottom: 1px solid #f8fafc; }
tr.group td { background: #f8fafc; font-size: 12px; font-weight: 700; color: #64748b; }
details summary { cursor: pointer; }
.tone { padding: 2px 8px; border-radius: 10px; font-size: 10px; font-weight: 700; text-transform: uppercase; }
.tone-none { background: #d1fae5; color: #047857; } .tone-low { background: #dcfce7; color: #15803d; }
.tone-medium { background: #fef3c7; color: #b45309; } .tone-high { background: #ffedd5; color: #c2410c; }
.tone-very_high { background: #fee2e2; color: #b91c1c; } .tone-neutral { background: #f1f5f9; color: #334155; }
.note { font-size: 11px; color: #94a3b8; font-style: italic; }
footer { text-align: center; font-size: 12px; color: #94a3b8; padding: 32px 0; }
"""

_LEGEND_SWATCHES = ("#10b981", "#34d399", "#f59e0b", "#f97316", "#e11d48")


def render_html(view_model, *, expand_all: bool = False) -> str:
    vm = _coerce(view_model)
    e = html.escape
    parts: list[str] = []

    # Location card
    badges = "".join(
        f'<span class="badge sev-{b.severity.value}">{e(b.label)}</span>'
        for b in vm.header.quality_badges
    )
    parts.append(
        '<section class="card">'
        '<div class="label">Gewählter Standort</div>'
        f"<h2>{e(vm.header.location)}</h2>"
        f'<div class="note">{e(vm.header.timestamp_label)}</div>'
        f"<div>{badges}</div></section>"
    )

    # KPI cards + legend
    if vm.kpi_cards:
        cards = "".join(
            '<div class="card kpi">'
            f'<div class="label">{e(c.title)}</div>'
            f'<div class="value sev-{c.severity.value}">{e(c.value_label)}</div>'
            f'<div class="bar"><div class="sev-{c.severity.value}" style="width: {c.level_percent:.0f}%"></div></div>'
            f'<p class="hint">{e(c.hint)}</p></div>'
            for c in vm.kpi_cards
        )
        legend = "".join(
            f'<div><div class="swatch" style="background: {_LEGEND_SWATCHES[level]}"></div>'
            f"<strong>{e(title)}</strong><br>{e(description)}</div>"
            for level, title, description in SCALE_LEGEND
        )
        parts.append(f'<section class="grid">{cards}</section>')
        parts.append(
            '<section class="card"><div class="label">Bedeutung der Belastungsstufen</div>'
            f'<div class="legend">{legend}</div></section>'
        )

    # Weather and summaries
    weather = "".join(f"<div><strong>{e(n)}</strong><p>{e(t)}</p></div>" for n, t in WEATHER_INFLUENCE)
    parts.append(f'<section class="card"><h3>Wetter-Einfluss</h3><div class="grid">{weather}</div></section>')
    parts.append(
        '<section class="grid">'
        f'<div class="card"><div class="label">Wochen-Trend</div><p><em>"{e(vm.summaries.midterm_one_liner)}"</em></p></div>'
        f'<div class="card"><div class="label">Die Lage heute</div><p>{e(vm.summaries.today_one_liner)}</p></div>'
        f'<div class="card"><div class="label">Nächste Tage</div><p>{e(vm.summaries.next_days_one_liner)}</p></div>'
        "</section>"
    )

    for chart in vm.charts:
        parts.append(_chart_html(chart))

    # Recommendations
    blocks = []
    for block in vm.recommendation_blocks:
        items = "".join(
            f'<div class="tip"><span class="marker {i.priority.value}">{i.priority.marker}</span>'
            f"<div><strong>{e(i.title)}</strong><p class=\"hint\">{e(i.detail)}</p></div></div>"
            for i in block.items
        )
        title = block.title if block.is_medical else "Allergiker-Tipp"
        legend = "" if block.is_medical else f'<p class="note">{e(PRIORITY_LEGEND)}</p>'
        css = "card medical" if block.is_medical else "card"
        blocks.append(f'<div class="{css}"><h3>{e(title)}</h3>{items}{legend}</div>')
    if blocks:
        parts.append(f'<section class="grid">{"".join(blocks)}</section>')

    for table in vm.tables:
        view = TableView(table)
        if expand_all:
            view.expand_all()
        parts.append(_table_html(view))

    # Footer
    footnotes = "".join(f'<p class="note">* {e(f)}</p>' for f in vm.footnotes)
    sources = ""
    if vm.grounding_sources:
        links = " ".join(
            f'<a href="{e(s.uri)}" target="_blank" rel="noopener noreferrer">{e(s.title or "Quelle")}</a>'
            for s in vm.grounding_sources
        )
        sources = f'<div class="label">Recherchierte Quellen:</div><p class="note">{links}</p>'
    parts.append(
        '<section class="card"><strong>Wichtige Hinweise:</strong>'
        f'<p class="hint">{e(vm.disclaimer)}</p>{footnotes}{sources}</section>'
    )

    title = e(vm.header.title or "Polleninformation")
    return (
        "<!DOCTYPE html>\n"
        '<html lang="de">\n<head>\n<meta charset="UTF-8">\n'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"<title>{title}</title>\n<style>{_CSS}</style>\n</head>\n<body>\n"
        f'<header class="brand"><h1>{e(BRAND)}</h1><p>{e(TAGLINE)}</p></header>\n'
        f'<main class="container">\n{chr(10).join(parts)}\n</main>\n'
        f"<footer>&copy; {datetime.now().year} Dr. Schätz Dermatologie. "
        "Daten dienen der gesundheitlichen Orientierung.</footer>\n"
        "</body>\n</html>\n"
    )


def _chart_html(chart: Chart) -> str:
    """Inline SVG line chart on the fixed 0–4 grid."""
    e = html.escape
    width, height, pad = 480, 220, 32
    rows = chart_rows(chart)
    low, high = y_domain(chart)
    span = (high - low) or 1
    step = (width - 2 * pad) / max(len(rows) - 1, 1)

    def y_pos(value) -> float:
        return height - pad - (value - low) / span * (height - 2 * pad)

    svg = [f'<svg viewBox="0 0 {width} {height}" width="100%" role="img" aria-label="{e(chart.title)}">']
    for tick in Y_TICKS:
        if low <= tick <= high:
            y = y_pos(tick)
            svg.append(f'<line x1="{pad}" x2="{width - pad}" y1="{y:.1f}" y2="{y:.1f}" stroke="#f1f5f9"/>')
            svg.append(f'<text x="{pad - 8}" y="{y + 4:.1f}" font-size="11" text-anchor="end">{tick}</text>')
    for i, row in enumerate(rows):
        svg.append(
            f'<text x="{pad + i * step:.1f}" y="{height - 8}" font-size="11" text-anchor="middle">{e(row["date"])}</text>'
        )
    for name, color in series_colors(chart).items():
        points = [
            (pad + i * step, y_pos(row[name]))
            for i, row in enumerate(rows)
            if row.get(name) is not None
        ]
        if points:
            path = " ".join(f"{x:.1f},{y:.1f}" for x, y in points)
            svg.append(f'<polyline fill="none" stroke="{color}" stroke-width="3" points="{path}"/>')
            svg.extend(f'<circle cx="{x:.1f}" cy="{y:.1f}" r="4" fill="{color}"/>' for x, y in points)
    svg.append("</svg>")

    legend = " ".join(
        f'<span style="color: {color}">&#9679; {e(name)}</span>'
        for name, color in series_colors(chart).items()
    )
    notes = "".join(f'<p class="note">* {e(a.text)}</p>' for a in chart.annotations)
    return f'<section class="card"><h3>{e(chart.title)}</h3>{"".join(svg)}<div>{legend}</div>{notes}</section>'


def _table_html(view: TableView) -> str:
    e = html.escape
    columns = view.columns

    def row_html(row: dict) -> str:
        cells = []
        for column in columns:
            value = view.cell(row, column)
            if column.key == "label":
                cells.append(f'<td><span class="tone tone-{label_tone(value)}">{e(value)}</span></td>')
            elif column.key == "inferred":
                cells.append(f'<td class="hint">{e(value)}</td>')
            else:
                cells.append(f"<td><strong>{e(value)}</strong></td>")
        return f"<tr>{''.join(cells)}</tr>"

    head = "".join(f"<th>{e(c.label)}</th>" for c in columns)
    groups = view.groups()
    if groups:
        bodies = []
        for category, members in groups.items():
            arrow = "&#9654;" if view.is_collapsed(category) else "&#9660;"
            body = [f'<tr class="group"><td colspan="{len(columns)}">{arrow} {e(category)}</td></tr>']
            if not view.is_collapsed(category):
                body.extend(row_html(r) for r in members)
            bodies.append(f"<tbody>{''.join(body)}</tbody>")
        body_html = "".join(bodies)
    else:
        body_html = f"<tbody>{''.join(row_html(r) for r in view.table.rows)}</tbody>"

    notes = "".join(f'<p class="note">* {e(n)}</p>' for n in view.table.notes)
    return (
        f'<section class="card"><h3>{e(view.table.title)}</h3>'
        f"<table><thead><tr>{head}</tr></thead>{body_html}</table>{notes}</section>"
    )
