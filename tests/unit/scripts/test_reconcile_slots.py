from datetime import datetime, timezone
import importlib.util
import sys
from pathlib import Path

from src.slotmarket.reconciler.reconciler_service import ReconcileFailure, ReconcileReport


PROJECT_ROOT = Path(__file__).resolve().parents[3]
MODULE_PATH = PROJECT_ROOT / "scripts" / "reconcile_slots.py"
SPEC = importlib.util.spec_from_file_location("reconcile_slots_module", MODULE_PATH)
reconcile_slots = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules["reconcile_slots_module"] = reconcile_slots
SPEC.loader.exec_module(reconcile_slots)


class DummyReconciler:
    def __init__(self, failures=()):
        self.preview_at = None
        self.run_at = None
        self.failures = list(failures)

    def preview(self, *, now=None):
        self.preview_at = now
        return [7, 9]

    def run(self, *, now=None):
        self.run_at = now
        return ReconcileReport(
            processed=4,
            updated=2,
            failures=self.failures,
        )


class DummyServices:
    def __init__(self, reconciler):
        self.reconciler = reconciler


STORAGE_FAILURE = ReconcileFailure(slot_id=3, failure_reason="storage_error", details="timeout")


def install_fakes(monkeypatch, failures=()):
    reconciler = DummyReconciler(failures)
    monkeypatch.setattr(reconcile_slots, "load_config", lambda: object())
    monkeypatch.setattr(reconcile_slots, "build_services", lambda config: DummyServices(reconciler))
    return reconciler


def test_perform_reconcile_dry_run(monkeypatch):
    reconciler = install_fakes(monkeypatch)
    reference_time = datetime(2026, 3, 1, tzinfo=timezone.utc)

    summary = reconcile_slots.perform_reconcile(dry_run=True, reference_time=reference_time)

    assert summary.dry_run is True
    assert summary.processed == 2
    assert summary.updated == 0
    assert reconciler.preview_at == reference_time
    assert reconciler.run_at is None


def test_perform_reconcile_runs_reconciler(monkeypatch):
    reconciler = install_fakes(monkeypatch, failures=[STORAGE_FAILURE])
    reference_time = datetime(2026, 3, 1, tzinfo=timezone.utc)

    summary = reconcile_slots.perform_reconcile(dry_run=False, reference_time=reference_time)

    assert summary.processed == 4
    assert summary.updated == 2
    assert summary.failed == 1
    assert reconciler.run_at == reference_time


def test_main_prints_summary(monkeypatch, capsys):
    install_fakes(monkeypatch)
    monkeypatch.setattr(reconcile_slots, "configure_logging", lambda: None)

    exit_code = reconcile_slots.main([])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "processed=4" in captured.out
    assert "updated=2" in captured.out


def test_main_exits_non_zero_when_a_slot_failed(monkeypatch, capsys):
    install_fakes(monkeypatch, failures=[STORAGE_FAILURE])
    monkeypatch.setattr(reconcile_slots, "configure_logging", lambda: None)

    exit_code = reconcile_slots.main([])

    captured = capsys.readouterr()
    assert exit_code == 2
    assert "failed=1" in captured.out
    assert "reconcile failed for 1 slot(s)" in captured.err


def test_main_reports_failure(monkeypatch, capsys):
    monkeypatch.setattr(reconcile_slots, "configure_logging", lambda: None)

    def boom(*, dry_run, reference_time=None):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(reconcile_slots, "perform_reconcile", boom)

    exit_code = reconcile_slots.main(["--dry-run"])

    captured = capsys.readouterr()
    assert exit_code == 2
    assert "reconcile failed: database unavailable" in captured.err


def test_init_db_script_seeds_pool(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'init.db'}")
    monkeypatch.setenv("SLOT_COUNT", "4")
    spec = importlib.util.spec_from_file_location("init_db_module", PROJECT_ROOT / "scripts" / "init_db.py")
    init_db = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(init_db)

    assert init_db.main() == 0
    assert "empty=4" in capsys.readouterr().out
