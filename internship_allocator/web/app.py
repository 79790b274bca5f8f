"""Minimal Flask application exposing the allocator via a web form."""
from __future__ import annotations

from pathlib import Path

import yaml
from flask import Flask, render_template_string, request

from ..engine.allocator import Allocator
from ..io.memory_store import InMemoryPlanStore
from ..io.parameters_loader import parse_parameters
from ..io.snapshot_loader import SnapshotDataLoader, parse_snapshot

app = Flask(__name__)

EXAMPLE_DIR = Path(__file__).resolve().parents[2] / "examples"


def _example_text(name: str) -> str:
    path = EXAMPLE_DIR / name
    return path.read_text(encoding="utf8") if path.exists() else ""


FORM_TEMPLATE = """
<!doctype html>
<title>Internship Allocation</title>
<style>
  textarea { width: 100%; font-family: monospace; }
</style>
<h1>Internship Allocation</h1>
{% if error %}<p style="color: red">{{ error }}</p>{% endif %}
<form method=post>
  <p>Academic year id: <input type=number name="year" value="{{ year }}"></p>
  <h2>Snapshot</h2>
  <textarea name="snapshot" rows="30">{{ snapshot }}</textarea>
  <h2>Parameters</h2>
  <textarea name="params" rows="10">{{ params }}</textarea>
  <p><input type=submit value="Allocate"></p>
</form>
"""

RESULT_TEMPLATE = """
<!doctype html>
<title>Allocation Result</title>
<h1>{{ result.plan.name }} (version {{ result.plan.version }})</h1>
<table border="1">
  <tr><th>Type</th><th>Subject</th><th>Teacher</th><th>Note</th></tr>
  {% for a in result.assignments %}
    <tr>
      <td>{{ a.internship_type_code }}</td>
      <td>{{ a.subject_code }}</td>
      <td>{{ a.teacher_name }}</td>
      <td>{{ a.note }}</td>
    </tr>
  {% endfor %}
</table>

<h1>Shortages</h1>
<table border="1">
  <tr><th>Type</th><th>Subject</th><th>Required</th><th>Assigned</th></tr>
  {% for s in result.shortages %}
    <tr>
      <td>{{ s.internship_type_code }}</td>
      <td>{{ s.subject_code }}</td>
      <td>{{ s.required }}</td>
      <td>{{ s.assigned }}</td>
    </tr>
  {% endfor %}
</table>

<h1>Utilization</h1>
<table border="1">
  <tr><th>Teacher</th><th>Zone</th><th>Assignments</th><th>Target</th></tr>
  {% for u in result.utilization %}
    <tr>
      <td>{{ u['name'] }}</td>
      <td>{{ u['zone'] }}</td>
      <td>{{ u['assignments'] }}</td>
      <td>{{ u['target'] }}</td>
    </tr>
  {% endfor %}
</table>

<p><a href="/">Back</a></p>
"""


@app.route("/", methods=["GET", "POST"])
def allocate() -> tuple[str, int] | str:
    """Render the input form or run an allocation on the posted snapshot."""
    if request.method == "POST":
        snapshot_text = request.form.get("snapshot", "")
        params_text = request.form.get("params", "")
        year_text = request.form.get("year", "")
        try:
            snapshot = parse_snapshot(yaml.safe_load(snapshot_text))
            params = parse_parameters(yaml.safe_load(params_text) if params_text.strip() else None)
            year = int(year_text)
            allocator = Allocator(SnapshotDataLoader(snapshot), InMemoryPlanStore(), params)
            result = allocator.run(year)
        except (ValueError, yaml.YAMLError) as exc:
            page = render_template_string(
                FORM_TEMPLATE,
                error=str(exc),
                year=year_text,
                snapshot=snapshot_text,
                params=params_text,
            )
            return page, 400
        return render_template_string(RESULT_TEMPLATE, result=result)

    return render_template_string(
        FORM_TEMPLATE,
        error=None,
        year=1,
        snapshot=_example_text("snapshot.yaml"),
        params=_example_text("parameters.yaml"),
    )


def create_app() -> Flask:
    """Return the Flask application instance."""
    return app


if __name__ == "__main__":
    app.run(debug=True)
