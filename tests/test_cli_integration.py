import sys
from pathlib import Path
import argparse

import pytest
import yaml

sys.path.append(str(Path(__file__).resolve().parents[1]))

from internship_allocator.cli.main import cmd_allocate, main
from internship_allocator.errors import AcademicYearLockedError
from internship_allocator.io import load_parameters, load_store

ROOT = Path(__file__).resolve().parents[1]


def _allocate_args(output_dir, **overrides):
    values = dict(
        snapshot=str(ROOT / "examples/snapshot.yaml"),
        year=1,
        params=str(ROOT / "examples/parameters.yaml"),
        store=None,
        plan_id=None,
        plan_version=None,
        output=str(output_dir),
        format="yaml",
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_allocate_examples(tmp_path):
    output_dir = tmp_path / "out"
    cmd_allocate(_allocate_args(output_dir))
    assert (output_dir / "assignments.yaml").exists()
    assert (output_dir / "summary.yaml").exists()

    csv_dir = tmp_path / "csv"
    cmd_allocate(_allocate_args(csv_dir, format="csv"))
    assert (csv_dir / "assignments.csv").exists()
    assert (csv_dir / "summary.csv").exists()


def test_locked_year_is_rejected(tmp_path):
    with pytest.raises(AcademicYearLockedError):
        cmd_allocate(_allocate_args(tmp_path / "out", year=2))


def test_store_activate_and_list(tmp_path, capsys):
    store_path = tmp_path / "store.yaml"
    main(
        [
            "allocate",
            "--snapshot", str(ROOT / "examples/snapshot.yaml"),
            "--year", "1",
            "--store", str(store_path),
            "--output", str(tmp_path / "run1"),
        ]
    )
    main(
        [
            "allocate",
            "--snapshot", str(ROOT / "examples/snapshot.yaml"),
            "--year", "1",
            "--store", str(store_path),
            "--output", str(tmp_path / "run2"),
        ]
    )
    store = load_store(str(store_path))
    assert sorted(p.version for p in store.plans.values()) == ["1.0", "2.0"]

    main(["activate", "--store", str(store_path), "--plan-id", "2"])
    store = load_store(str(store_path))
    assert [p.id for p in store.plans.values() if p.is_current] == [2]
    assert store.credit_rows_for_year(1)
    assert all(r.notes == "Plan 2.0 Activated" for r in store.credit_rows_for_year(1))

    capsys.readouterr()
    main(["plans", "--store", str(store_path), "--year", "1"])
    listing = capsys.readouterr().out.splitlines()
    assert len(listing) == 2
    assert listing[1].startswith("* 2")
    assert "ARCHIVED" in listing[0]


def test_set_param(tmp_path):
    params_path = tmp_path / "params.yaml"
    main(["set-param", str(params_path), "max_assignments_per_teacher", "4"])
    main(["set-param", str(params_path), "prioritize_scarcity", "false"])
    main(["set-param", str(params_path), "fallback_subjects.middle", "BIO"])

    params = load_parameters(str(params_path))
    assert params.max_assignments_per_teacher == 4
    assert params.prioritize_scarcity is False
    assert params.fallback_subjects == {"MIDDLE": "BIO"}

    with pytest.raises(ValueError):
        main(["set-param", str(params_path), "standard_assignments_per_teacher", "9"])
    assert yaml.safe_load(params_path.read_text())["max_assignments_per_teacher"] == 4
    with pytest.raises(ValueError):
        main(["set-param", str(params_path), "bogus", "1"])


def test_compare(tmp_path, capsys):
    dir1 = tmp_path / "a"
    dir2 = tmp_path / "b"
    dir1.mkdir()
    dir2.mkdir()
    (dir1 / "assignments.yaml").write_text(
        yaml.safe_dump({"SFP": {"MATH": ["Anna Berger", "Bernd Huber"]}})
    )
    (dir2 / "assignments.yaml").write_text(
        yaml.safe_dump({"SFP": {"MATH": ["Anna Berger"]}, "ZSP": {"ENG": ["Dieter Maier"]}})
    )

    main(["compare", str(dir1), str(dir2)])
    out = capsys.readouterr().out
    assert "SFP/MATH:\n  - Bernd Huber" in out
    assert "ZSP/ENG:\n  + Dieter Maier" in out
