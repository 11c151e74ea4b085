"""
Rendering of aggregated reports into a renderer-agnostic display tree.

render() is pure: the same view always yields an identical tree. The tree can
then be materialized as an HTML fragment (static freeze, host UI) or as plain
text (command line).
"""

import html
from dataclasses import asdict, dataclass, field

from core.config import CHART_PALETTE, LIST_HEADERS, NO_ENTRIES_MESSAGE, SUMMARY_HEADING
from core.time_range import format_iso_date
from services.reports import ListView, NoEntries, ReportView, SummaryView

# =============================================================================
# DISPLAY TREE
# =============================================================================


@dataclass(frozen=True)
class Heading:
    text: str
    level: int = 3
    kind: str = field(default="heading", init=False)


@dataclass(frozen=True)
class Paragraph:
    text: str
    strong: bool = False
    css_class: str | None = None
    kind: str = field(default="paragraph", init=False)


@dataclass(frozen=True)
class Table:
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    css_class: str = "harvest-table"
    kind: str = field(default="table", init=False)


@dataclass(frozen=True)
class BarSegment:
    label: str
    hours: float
    percentage: float
    color: str
    title: str


@dataclass(frozen=True)
class BarChart:
    segments: tuple[BarSegment, ...]
    kind: str = field(default="bar_chart", init=False)


@dataclass(frozen=True)
class LegendItem:
    label: str
    color: str


@dataclass(frozen=True)
class Legend:
    items: tuple[LegendItem, ...]
    kind: str = field(default="legend", init=False)


DisplayNode = Heading | Paragraph | Table | BarChart | Legend


@dataclass(frozen=True)
class DisplayTree:
    children: tuple[DisplayNode, ...]
    css_class: str = "harvest-report"

    def to_dict(self) -> dict:
        return asdict(self)


def format_hours(hours: float) -> str:
    """Format hours with exactly two decimals."""
    return f"{hours:.2f}"


def color_for_rank(index: int) -> str:
    """Palette colour for the project at the given rank."""
    return CHART_PALETTE[index % len(CHART_PALETTE)]


def message_tree(text: str, css_class: str = "harvest-message") -> DisplayTree:
    """One-line display state (loading, no data, failures)."""
    return DisplayTree(children=(Paragraph(text=text, css_class=css_class),))


# =============================================================================
# RENDERING
# =============================================================================


def render_list(view: ListView) -> DisplayTree:
    rows = tuple(
        (row.project_name, row.task_name, format_iso_date(row.date), format_hours(row.hours))
        for row in view.rows
    )
    return DisplayTree(children=(Table(headers=tuple(LIST_HEADERS), rows=rows),))


def render_summary(view: SummaryView) -> DisplayTree:
    segments = []
    legend_items = []
    for index, project_total in enumerate(view.project_totals):
        color = color_for_rank(index)
        name = project_total.project_name
        hours = format_hours(project_total.hours)
        segments.append(
            BarSegment(
                label=name,
                hours=project_total.hours,
                percentage=view.share(project_total),
                color=color,
                title=f"{name}: {hours} hours",
            )
        )
        legend_items.append(LegendItem(label=f"{name}: {hours}h", color=color))

    return DisplayTree(
        children=(
            Heading(text=SUMMARY_HEADING),
            Paragraph(text=f"Total Hours: {format_hours(view.total_hours)}", strong=True),
            BarChart(segments=tuple(segments)),
            Legend(items=tuple(legend_items)),
        )
    )


def render(view: ReportView) -> DisplayTree:
    """Project an aggregated view into a display tree."""
    if isinstance(view, NoEntries):
        return message_tree(NO_ENTRIES_MESSAGE, css_class="harvest-empty")
    if isinstance(view, ListView):
        return render_list(view)
    if isinstance(view, SummaryView):
        return render_summary(view)
    raise TypeError(f"Unsupported report view: {type(view).__name__}")


# =============================================================================
# HTML MARKUP
# =============================================================================

_CELL_STYLE = "padding: 8px; border: 1px solid var(--background-modifier-border); text-align: left;"
_BAR_CONTAINER_STYLE = (
    "display: flex; width: 100%; height: 20px; border-radius: 3px; "
    "overflow: hidden; margin-bottom: 1em;"
)
_SWATCH_STYLE = "width: 12px; height: 12px; margin-right: 8px; border-radius: 2px;"


def _markup_node(node: DisplayNode) -> list[str]:
    esc = html.escape
    if isinstance(node, Heading):
        return [f"<h{node.level}>{esc(node.text)}</h{node.level}>"]

    if isinstance(node, Paragraph):
        cls = f' class="{esc(node.css_class)}"' if node.css_class else ""
        text = f"<strong>{esc(node.text)}</strong>" if node.strong else esc(node.text)
        return [f"<p{cls}>{text}</p>"]

    if isinstance(node, Table):
        lines = [f'<table class="{esc(node.css_class)}" style="width: 100%; border-collapse: collapse;">']
        header_cells = "".join(f'<th style="{_CELL_STYLE}">{esc(h)}</th>' for h in node.headers)
        lines.append(f"<thead><tr>{header_cells}</tr></thead>")
        lines.append("<tbody>")
        for row in node.rows:
            cells = []
            for col_idx, value in enumerate(row):
                if col_idx == len(row) - 1:
                    style = _CELL_STYLE.replace("text-align: left;", "text-align: right;")
                    cells.append(f'<td class="harvest-hours" style="{style}">{esc(value)}</td>')
                else:
                    cells.append(f'<td style="{_CELL_STYLE}">{esc(value)}</td>')
            lines.append(f"<tr>{''.join(cells)}</tr>")
        lines.append("</tbody>")
        lines.append("</table>")
        return lines

    if isinstance(node, BarChart):
        lines = [f'<div class="harvest-barchart-container" style="{_BAR_CONTAINER_STYLE}">']
        for segment in node.segments:
            lines.append(
                f'<div class="harvest-barchart-bar" '
                f'style="height: 100%; width: {segment.percentage:g}%; background-color: {segment.color};" '
                f'title="{esc(segment.title)}"></div>'
            )
        lines.append("</div>")
        return lines

    if isinstance(node, Legend):
        lines = ['<div class="harvest-barchart-legend" style="display: flex; flex-direction: column; gap: 0.5em;">']
        for item in node.items:
            lines.append(
                '<div class="harvest-legend-item" style="display: flex; align-items: center;">'
                f'<div class="harvest-legend-swatch" style="{_SWATCH_STYLE} background-color: {item.color};"></div>'
                f"<span>{esc(item.label)}</span></div>"
            )
        lines.append("</div>")
        return lines

    raise TypeError(f"Unsupported display node: {type(node).__name__}")


def to_markup(tree: DisplayTree) -> str:
    """Materialize a display tree as a self-contained HTML fragment."""
    lines = [f'<div class="{html.escape(tree.css_class)}">']
    for node in tree.children:
        lines.extend(_markup_node(node))
    lines.append("</div>")
    return "\n".join(lines)


# =============================================================================
# PLAIN TEXT
# =============================================================================

TEXT_BAR_WIDTH = 40


def _text_table(table: Table) -> list[str]:
    widths = [len(h) for h in table.headers]
    for row in table.rows:
        for col_idx, value in enumerate(row):
            widths[col_idx] = max(widths[col_idx], len(value))

    def fmt(values: tuple[str, ...]) -> str:
        cells = []
        for col_idx, value in enumerate(values):
            if col_idx == len(values) - 1:
                cells.append(value.rjust(widths[col_idx]))
            else:
                cells.append(value.ljust(widths[col_idx]))
        return "  ".join(cells).rstrip()

    lines = [fmt(table.headers), "  ".join("-" * w for w in widths)]
    lines.extend(fmt(row) for row in table.rows)
    return lines


def to_text(tree: DisplayTree) -> str:
    """Materialize a display tree as plain text for terminals."""
    lines: list[str] = []
    for node in tree.children:
        if isinstance(node, Heading):
            lines.extend([node.text, "=" * len(node.text)])
        elif isinstance(node, Paragraph):
            lines.append(node.text)
        elif isinstance(node, Table):
            lines.extend(_text_table(node))
        elif isinstance(node, BarChart):
            label_width = max((len(s.label) for s in node.segments), default=0)
            for segment in node.segments:
                bar = "#" * round(segment.percentage / 100 * TEXT_BAR_WIDTH)
                lines.append(
                    f"{segment.label.ljust(label_width)}  {bar.ljust(TEXT_BAR_WIDTH)}  {segment.percentage:5.1f}%"
                )
        elif isinstance(node, Legend):
            lines.extend(f"* {item.label}" for item in node.items)
        else:
            raise TypeError(f"Unsupported display node: {type(node).__name__}")
    return "\n".join(lines)
