from __future__ import annotations

import json

from assess_core import smoke
from tools import assemble_paper, validate_bank

from tests.conftest import raw_record


def _write(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_assemble_paper_from_bundled_bank(tmp_path, capsys):
    cfg = _write(
        tmp_path / "paper.json",
        {
            "total_items": 6,
            "item_distribution": {"mcq": 4, "cloze": 2},
            "difficulty_distribution": {"easy": 0.33, "medium": 0.34, "hard": 0.33},
            "level": "A2",
        },
    )
    assert assemble_paper.main([str(cfg), "--seed", "5"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["success"] is True
    assert out["fallbacks_applied"] == []
    assert len(out["selected_items"]) == 6
    assert all(it["level"] == "A2" for it in out["selected_items"])


def test_assemble_paper_falls_back_on_tiny_bank(tmp_path, capsys):
    bank = _write(tmp_path / "bank.json", [raw_record()])
    cfg = _write(
        tmp_path / "paper.json",
        {
            "total_items": 5,
            "item_distribution": {"writing_task": 5},
            "difficulty_distribution": {"easy": 0.3, "medium": 0.4, "hard": 0.3},
        },
    )
    assert assemble_paper.main([str(cfg), "--bank", str(bank), "--seed", "1"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["fallbacks_applied"][-1] == "emergency_fallback"
    assert [it["id"] for it in out["selected_items"]] == ["item_123"]
    assert out["adjusted_config"]["total_items"] == 1


def test_assemble_paper_rejects_bad_config(tmp_path, capsys):
    cfg = _write(tmp_path / "paper.json", {"total_items": -3, "difficulty_distribution": {}})
    assert assemble_paper.main([str(cfg)]) == 1
    assert "invalid config" in capsys.readouterr().err


def test_assemble_paper_reports_empty_pool(tmp_path, capsys):
    cfg = _write(
        tmp_path / "paper.json",
        {
            "total_items": 3,
            "item_distribution": {"mcq": 3},
            "difficulty_distribution": {"easy": 0.3, "medium": 0.4, "hard": 0.3},
        },
    )
    assert assemble_paper.main([str(cfg), "--level", "C2"]) == 2
    assert json.loads(capsys.readouterr().out)["success"] is False


def test_validate_bank_bundled(capsys):
    assert validate_bank.main([]) == 0
    out = capsys.readouterr().out
    assert "30 records: 30 usable, 0 rejected" in out
    assert "All records usable" in out


def test_validate_bank_lists_rejects(tmp_path, capsys):
    bank = _write(
        tmp_path / "bank.json",
        {"items": [raw_record(), raw_record(id="bad_1", level="Z9"), "junk"]},
    )
    normalized = tmp_path / "normalized.json"
    assert validate_bank.main([str(bank), "--out", str(normalized)]) == 2

    out = capsys.readouterr().out
    assert "3 records: 1 usable, 2 rejected" in out
    assert "✗ bad_1" in out
    assert [r["id"] for r in json.loads(normalized.read_text(encoding="utf-8"))] == ["item_123"]


def test_validate_bank_flags_shaky_items(tmp_path, capsys):
    bank = _write(
        tmp_path / "bank.json",
        [raw_record(id="cz1", type="cloze", stem="No blank", answer="x", options=None)],
    )
    assert validate_bank.main([str(bank)]) == 2
    assert "! cz1 (cloze)" in capsys.readouterr().out


def test_validate_bank_rejects_non_list(tmp_path):
    bank = _write(tmp_path / "bank.json", "nope")
    assert validate_bank.main([str(bank)]) == 1


def test_smoke_runs():
    smoke.run_smoke()
    assert len(smoke.SMOKE_CONFIGS) == 3
