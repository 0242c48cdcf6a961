from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

import jinja2

from eda_engine.models.results import RecipeResult

REPORT_TEMPLATE = """\
# {{ title }}

_Generated {{ generated_at }} from {{ results | length }} queries._
{% for section, items in sections %}

## {{ section }}
{% for r in items %}

### {{ r.title }}

{{ r.description }}
{% for stmt in r.sql %}

```sql
{{ stmt }}
```
{% endfor %}

{{ r.rows | md_table }}
{% for name, rows in r.tables.items() %}

**{{ name }}**

{{ rows | md_table }}
{% endfor %}
{% for note in r.notes %}

> {{ note }}
{% endfor %}
{% endfor %}
{% endfor %}
"""


def format_cell(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.4f}".rstrip("0").rstrip(".")
    return str(value).replace("|", "\\|")


def md_table(rows: Sequence[Dict[str, Any]]) -> str:
    """Render records as a GitHub-flavoured Markdown table."""
    if not rows:
        return "_(no rows)_"
    headers: List[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        lines.append("| " + " | ".join(format_cell(row.get(h)) for h in headers) + " |")
    return "\n".join(lines)


def _group_sections(results: Sequence[RecipeResult]) -> List[tuple]:
    # Keep first-seen section order; the walkthrough is already ordered
    sections: Dict[str, List[RecipeResult]] = {}
    for r in results:
        sections.setdefault(r.section, []).append(r)
    return list(sections.items())


def render_markdown(
    results: Sequence[RecipeResult],
    title: str = "Exploratory Data Analysis: Diabetes Health Indicators",
    generated_at: Optional[datetime] = None,
) -> str:
    env = jinja2.Environment(autoescape=False, keep_trailing_newline=True, trim_blocks=True)
    env.filters["md_table"] = md_table
    template = env.from_string(REPORT_TEMPLATE)
    stamp = (generated_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M UTC")
    return template.render(
        title=title,
        generated_at=stamp,
        results=results,
        sections=_group_sections(results),
    )


def render_json(results: Sequence[RecipeResult]) -> str:
    payload = [r.model_dump(mode="json") for r in results]
    return json.dumps(payload, ensure_ascii=False, indent=2, default=str) + "\n"
