"""HTML renderer - produces a self-contained sprint summary document.

The output has inline CSS and an inline SVG burndown chart and references no
external resources, so it renders the same in a browser and in a headless
PDF exporter. Only the footer timestamp varies between identical inputs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sprintlens.reports.models import SprintSummaryConfig

PRODUCT_NAME = "SprintLens"

STYLE = """
:root{--bg:#f6f7fb;--fg:#0f172a;--muted:#5b6477;--card:#ffffff;--line:#e6e8ef;
--good:#16a34a;--warn:#d97706;--bad:#ef4444;--chip:#eef1f7}
*{box-sizing:border-box}
body{margin:0;background:var(--bg);color:var(--fg);font:14px/1.5 system-ui,-apple-system,"Segoe UI",Roboto,sans-serif}
.wrap{max-width:980px;margin:0 auto;padding:28px}
h1{margin:0 0 6px;font-size:28px}
.muted{color:var(--muted)}
.card{background:var(--card);border:1px solid var(--line);border-radius:12px}
.header{padding:18px 20px;margin-bottom:14px}
.grid{display:grid;gap:12px;grid-template-columns:repeat(3,minmax(0,1fr));margin-bottom:12px}
.metric{padding:14px 16px}
.metric .label{font-size:12px;color:var(--muted)}
.metric .value{font-size:28px;font-weight:700;margin-top:2px}
.metric .sub{font-size:12px;color:var(--muted)}
.good .value{color:var(--good)}
.warn .value{color:var(--warn)}
.bad .value{color:var(--bad)}
.section{padding:16px 18px;margin-bottom:12px}
.section h2{margin:0 0 10px;font-size:16px}
.table{width:100%;border-collapse:collapse}
.table th,.table td{padding:8px 6px;border-bottom:1px solid var(--line);text-align:left}
.chip{display:inline-block;background:var(--chip);border:1px solid var(--line);border-radius:999px;font-size:12px;padding:2px 8px;margin-left:6px}
.chip.risk{background:#fde8e8;color:var(--bad)}
.lists{display:grid;gap:12px;grid-template-columns:repeat(3,minmax(0,1fr))}
.list ul{padding-left:16px;margin:8px 0 0}
.footer{margin-top:20px;color:var(--muted);font-size:12px;text-align:center}
svg{display:block;width:100%;height:120px}
""".strip()


def escape_html(value: Any) -> str:
    """Escape text for safe interpolation into HTML (``& < > " '``)."""
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#039;")
    )


def completion_class(pct: int) -> str:
    """CSS class for the completion card."""
    if pct >= 80:
        return "good"
    if pct >= 50:
        return "warn"
    return "bad"


def svg_burndown(points: Sequence[Mapping[str, Any]]) -> str:
    """Inline SVG polyline of remaining points on a 100x100 viewport.

    Values are scaled against the series maximum (1 when every value is 0).
    A dashed diagonal shows the ideal linear burn.
    """
    if not points:
        return ""

    top = max(p["remaining"] for p in points) or 1
    step_x = 100 / (len(points) - 1 or 1)
    coords = " ".join(
        f"{i * step_x:.2f},{100 - (p['remaining'] / top) * 100:.2f}"
        for i, p in enumerate(points)
    )
    return (
        '<svg viewBox="0 0 100 100" preserveAspectRatio="none">'
        '<line x1="0" y1="0" x2="100" y2="100" stroke="#cbd0dc" stroke-dasharray="2,2" '
        'vector-effect="non-scaling-stroke"/>'
        f'<polyline fill="none" stroke="#16a34a" stroke-width="2" points="{coords}" '
        'vector-effect="non-scaling-stroke"/>'
        "</svg>"
    )


def task_list(tasks: Sequence[Mapping[str, Any]]) -> str:
    """Bullet list of tasks with type and priority chips."""
    if not tasks:
        return '<div class="muted">No items.</div>'
    items = "".join(
        f"<li>{escape_html(t['title'])}"
        f'<span class="chip">{escape_html(t["type"])}</span>'
        f'<span class="chip">{escape_html(t["priority"])}</span></li>'
        for t in tasks
    )
    return f"<ul>{items}</ul>"


def _format_day(value: str | None) -> str | None:
    if not value:
        return None
    day = datetime.fromisoformat(value)
    return f"{day:%b} {day.day}"


def _format_generated_at(value: datetime) -> str:
    value = value.astimezone(UTC) if value.tzinfo else value
    return f"{value:%a}, {value.day} {value:%b %Y %H:%M:%S} GMT"


def _header(sprint: Mapping[str, Any], metrics: Mapping[str, Any]) -> str:
    dates = ""
    start = _format_day(sprint.get("start_date"))
    if start:
        end = _format_day(sprint.get("end_date")) or "&mdash;"
        dates = f" &middot; {start} &rarr; {end}"
    risk = '<span class="chip risk">at risk</span>' if metrics.get("at_risk") else ""
    goal = (
        f'<div class="muted" style="margin-top:6px">{escape_html(sprint["goal"])}</div>'
        if sprint.get("goal")
        else ""
    )
    return (
        '<div class="card header">'
        f"<h1>{escape_html(sprint['name'])} &mdash; Sprint summary</h1>"
        f'<div class="muted">Status: <span class="chip">{escape_html(sprint["status"])}</span>'
        f"{risk}{dates}</div>"
        f"{goal}"
        "</div>"
    )


def _metric_cards(metrics: Mapping[str, Any], show_velocity: bool) -> str:
    pct = metrics["completion_pct"]
    throughput = metrics["throughput"]
    last_day = throughput[-1]["points"] if throughput else 0
    cards = [
        f'<div class="card metric {completion_class(pct)}">'
        '<div class="label">Completion</div>'
        f'<div class="value">{pct}%</div>'
        f'<div class="sub">{metrics["points_done"]}/{metrics["points_total"]} pts</div>'
        "</div>"
    ]
    if show_velocity:
        cards.append(
            '<div class="card metric">'
            '<div class="label">Velocity</div>'
            f'<div class="value">{metrics["points_done"]} pts</div>'
            f'<div class="sub">Throughput last day: {last_day} pts</div>'
            "</div>"
        )
    cards.append(
        '<div class="card metric">'
        '<div class="label">Scope &amp; Quality</div>'
        f'<div class="value">{metrics["scoped_in"]} <span class="sub">added</span></div>'
        f'<div class="sub">{metrics["carried_over"]} carried &middot; '
        f'{metrics["reopened"]} reopened</div>'
        "</div>"
    )
    return f'<div class="grid">{"".join(cards)}</div>'


def _burndown_section(burndown: Sequence[Mapping[str, Any]]) -> str:
    rows = "".join(
        f'<tr><td class="muted">{escape_html(b["day"])}</td><td>{b["remaining"]}</td></tr>'
        for b in burndown
    )
    return (
        '<div class="card section">'
        "<h2>Burndown (points remaining)</h2>"
        f"{svg_burndown(burndown)}"
        '<table class="table"><thead><tr><th>Day</th><th>Remaining</th></tr></thead>'
        f"<tbody>{rows}</tbody></table>"
        "</div>"
    )


def _assignee_section(by_assignee: Sequence[Mapping[str, Any]]) -> str:
    rows = "".join(
        f"<tr><td>{escape_html(a['name'])}</td><td>{a['tasks_done']}</td>"
        f"<td>{a['points_done']}</td></tr>"
        for a in by_assignee
    )
    return (
        '<div class="card section">'
        "<h2>By assignee</h2>"
        '<table class="table"><thead><tr><th>Member</th><th>Tasks</th><th>Points</th></tr>'
        f"</thead><tbody>{rows}</tbody></table>"
        "</div>"
    )


def render_html(
    config: SprintSummaryConfig,
    data: Mapping[str, Any],
    generated_at: datetime,
) -> str:
    """Render the report payload as a complete HTML document.

    Args:
        config: Template configuration (which sections to include).
        data: JSON payload built by the generator.
        generated_at: Timestamp printed in the footer.

    Returns:
        The HTML document.
    """
    sections = config.sections
    sprint = data["sprint"]
    metrics = data["metrics"]
    lists = data["lists"]

    body: list[str] = []
    if sections.overview:
        body.append(_header(sprint, metrics))
        body.append(_metric_cards(metrics, show_velocity=sections.velocity))
    if sections.burndown:
        body.append(_burndown_section(data["burndown"]))

    columns = [
        (sections.completed, "&#9989; Completed", lists["completed"]),
        (sections.in_progress, "&#128679; In progress", lists["in_progress"]),
        (sections.blockers, "&#9940; Not finished", lists["not_done"]),
    ]
    list_cards = "".join(
        f'<div class="card section list"><h2>{title}</h2>{task_list(items)}</div>'
        for enabled, title, items in columns
        if enabled
    )
    if list_cards:
        body.append(f'<div class="lists">{list_cards}</div>')

    if sections.assignees:
        body.append(_assignee_section(data["by_assignee"]))

    footer = (
        f'<div class="footer">Generated by <strong>{PRODUCT_NAME}</strong> &middot; '
        f"{_format_generated_at(generated_at)}</div>"
    )

    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '<meta charset="utf-8"/>\n'
        f"<title>{escape_html(sprint['name'])} &mdash; Sprint report</title>\n"
        f"<style>\n{STYLE}\n</style>\n"
        "</head>\n"
        "<body>\n"
        '<div class="wrap">\n'
        + "\n".join(body)
        + f"\n{footer}\n"
        "</div>\n"
        "</body>\n"
        "</html>\n"
    )
