from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from internship_allocator.web import create_app

ROOT = Path(__file__).resolve().parents[1]


def test_web_allocation():
    app = create_app()
    client = app.test_client()

    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Internship Allocation" in resp.data
    assert b"internship_types" in resp.data

    resp = client.post(
        "/",
        data={
            "year": "1",
            "snapshot": (ROOT / "examples/snapshot.yaml").read_text(encoding="utf8"),
            "params": (ROOT / "examples/parameters.yaml").read_text(encoding="utf8"),
        },
    )
    assert resp.status_code == 200
    assert b"Allocation Plan for 2025/26" in resp.data
    assert b"Anna Berger" in resp.data
    assert b"Shortages" in resp.data


def test_web_rejects_bad_input():
    client = create_app().test_client()

    resp = client.post("/", data={"year": "9", "snapshot": "academic_years: []\n", "params": ""})
    assert resp.status_code == 400
    assert b"Academic year with ID 9 not found" in resp.data

    resp = client.post("/", data={"year": "1", "snapshot": "teachers: {broken", "params": ""})
    assert resp.status_code == 400
