from __future__ import annotations

import json
from pathlib import Path

import tools.validate_catalog as validate_catalog
from power3_core.types import Domain
from tests.conftest import build_synthetic_catalog


def _write(tmp_path, questions) -> Path:
    path = tmp_path / "questions.json"
    path.write_text(json.dumps([q.to_dict() for q in questions]), encoding="utf-8")
    return path


def test_packaged_catalog_is_clean(capsys):
    assert validate_catalog.main([]) == 0
    assert "No warnings." in capsys.readouterr().out
    assert Path("/tmp/catalog_audit.json").exists()


def test_main_returns_warning_exit(tmp_path, capsys):
    questions = build_synthetic_catalog(domains=[Domain.VISION], questions_per_component=1)
    exit_code = validate_catalog.main([str(_write(tmp_path, questions))])
    captured = capsys.readouterr()

    assert exit_code == 2
    assert "People has no questions" in captured.out


def test_main_rejects_inconsistent_catalog(tmp_path):
    questions = build_synthetic_catalog(components_per_domain=1)
    raw = [q.to_dict() for q in questions]
    raw[0]["component"] = "People C0"
    path = tmp_path / "questions.json"
    path.write_text(json.dumps(raw), encoding="utf-8")

    assert validate_catalog.main([str(path)]) == 1
