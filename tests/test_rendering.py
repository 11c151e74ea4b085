"""Tests for the report renderer and its materializers."""

from conftest import make_entry
from core.config import CHART_PALETTE, NO_ENTRIES_MESSAGE
from core.query import ReportType, parse_query
from services.rendering import (
    BarChart,
    Heading,
    Legend,
    Paragraph,
    Table,
    color_for_rank,
    render,
    to_markup,
    to_text,
)
from services.reports import NoEntries, aggregate


def test_list_round_trip():
    query = parse_query("LIST FROM 2025-01-01 TO 2025-01-02")
    entries = [
        make_entry(1, "Proj A", "Task X", "2025-01-01", 2.5),
        make_entry(2, "Proj A", "Task Y", "2025-01-02", 1.0),
    ]
    tree = render(aggregate(entries, query.type))

    (table,) = tree.children
    assert isinstance(table, Table)
    assert table.headers == ("Project", "Task", "Date", "Hours")
    assert table.rows == (
        ("Proj A", "Task X", "2025-01-01", "2.50"),
        ("Proj A", "Task Y", "2025-01-02", "1.00"),
    )


def test_summary_tree_structure():
    entries = [
        make_entry(1, "Proj A", hours=1.0, project_id=1),
        make_entry(2, "Proj B", hours=3.0, project_id=2),
    ]
    tree = render(aggregate(entries, ReportType.SUMMARY))

    heading, total, chart, legend = tree.children
    assert heading == Heading("Time Summary")
    assert total == Paragraph("Total Hours: 4.00", strong=True)
    assert isinstance(chart, BarChart)
    assert [(s.label, s.percentage, s.color) for s in chart.segments] == [
        ("Proj B", 75.0, CHART_PALETTE[0]),
        ("Proj A", 25.0, CHART_PALETTE[1]),
    ]
    assert isinstance(legend, Legend)
    assert [item.label for item in legend.items] == ["Proj B: 3.00h", "Proj A: 1.00h"]
    assert [item.color for item in legend.items] == [s.color for s in chart.segments]


def test_palette_cycles_by_rank():
    entries = [
        make_entry(i, f"Proj {i}", hours=20.0 - i, project_id=i) for i in range(9)
    ]
    chart = render(aggregate(entries, ReportType.SUMMARY)).children[2]
    colors = [segment.color for segment in chart.segments]
    assert colors[:7] == CHART_PALETTE
    assert colors[7] == CHART_PALETTE[0]
    assert colors[8] == CHART_PALETTE[1]
    assert color_for_rank(14) == CHART_PALETTE[0]


def test_no_entries_renders_fixed_message():
    tree = render(NoEntries())
    assert tree.children == (Paragraph(NO_ENTRIES_MESSAGE, css_class="harvest-empty"),)


def test_render_is_deterministic(sample_entries):
    view = aggregate(sample_entries, ReportType.SUMMARY)
    assert render(view) == render(view)
    assert to_markup(render(view)) == to_markup(render(view))


def test_markup_contains_table_and_escapes_text():
    entries = [make_entry(1, "R&D <core>", "Task X", "2025-01-01", 2.5)]
    markup = to_markup(render(aggregate(entries, ReportType.LIST)))
    assert markup.startswith('<div class="harvest-report">')
    assert "R&amp;D &lt;core&gt;" in markup
    assert "<th" in markup and ">Hours</th>" in markup
    assert 'class="harvest-hours"' in markup and ">2.50</td>" in markup


def test_markup_bar_widths(sample_entries):
    markup = to_markup(render(aggregate(sample_entries, ReportType.SUMMARY)))
    assert "harvest-barchart-container" in markup
    assert f"background-color: {CHART_PALETTE[0]}" in markup
    assert 'title="Proj A: 3.50 hours"' in markup
    assert "<span>Proj B: 3.00h</span>" in markup


def test_text_rendering_of_list():
    entries = [make_entry(1, "Proj A", "Task X", "2025-01-01", 2.5)]
    text = to_text(render(aggregate(entries, ReportType.LIST)))
    lines = text.splitlines()
    assert lines[0].split() == ["Project", "Task", "Date", "Hours"]
    assert lines[2].split() == ["Proj", "A", "Task", "X", "2025-01-01", "2.50"]


def test_display_tree_to_dict_tags_node_kinds(sample_entries):
    data = render(aggregate(sample_entries, ReportType.SUMMARY)).to_dict()
    assert data["css_class"] == "harvest-report"
    assert [child["kind"] for child in data["children"]] == [
        "heading",
        "paragraph",
        "bar_chart",
        "legend",
    ]
