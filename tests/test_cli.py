"""Tests for the rfp-quest CLI."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from rfp_quest.cli.main import main
from rfp_quest.connectors.findatender import FindATenderConnector
from rfp_quest.models.raw import RawRelease
from rfp_quest.models.sync import SyncCounts, SyncSummary, UpsertOutcome
from rfp_quest.store import SyncLedger, TenderStore
from tests.conftest import _make_release


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("RFP_QUEST_DB", "RFP_QUEST_SOURCE", "RFP_QUEST_API_URL", "RFP_QUEST_WINDOW_DAYS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def populated_db(temp_db: Path, sample_release: dict) -> Path:
    """Database holding one tender-stage and one award-stage record."""
    normalizer = FindATenderConnector(client=MagicMock())
    store = TenderStore(temp_db)
    store.upsert(normalizer.normalize(RawRelease(data=sample_release)))
    store.upsert(normalizer.normalize(RawRelease(data=_make_release("ocds-award-1", tag=["award"]))))
    return temp_db


class TestSyncCommand:
    """Tests for `rfp-quest sync`."""

    def test_passes_options_and_prints_summary(self, temp_db: Path, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.run.return_value = SyncSummary(
            run_id="abc123", fetched=3, inserted=2, updated=1, skipped=0, duration_seconds=1.3
        )
        with patch("rfp_quest.sync.build_orchestrator", return_value=orchestrator) as build:
            main(["--db", str(temp_db), "sync", "--days", "14", "--limit", "50", "--max-retries", "2"])

        settings = build.call_args.args[0]
        assert settings.db_path == temp_db
        assert settings.max_retries == 2
        options = orchestrator.run.call_args.args[0]
        assert options.window_days == 14
        assert options.limit == 50
        assert options.full_sync is False
        out = capsys.readouterr().out
        assert "Sync complete: 3 fetched, 2 inserted, 1 updated, 0 skipped in 1.3s (run abc123)" in out

    def test_source_override(self, temp_db: Path) -> None:
        orchestrator = MagicMock()
        orchestrator.run.return_value = SyncSummary.from_counts("r", SyncCounts(), 0.0)
        with patch("rfp_quest.sync.build_orchestrator", return_value=orchestrator) as build:
            main(["--db", str(temp_db), "sync", "--source", "contracts-finder", "--full"])

        assert build.call_args.args[0].source == "contracts-finder"
        assert orchestrator.run.call_args.args[0].full_sync is True

    def test_unknown_source_exits(self, temp_db: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(temp_db), "sync", "--source", "nowhere"])
        assert "Unknown source: nowhere" in str(exc_info.value.code)

    def test_invalid_limit_exits(self, temp_db: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(temp_db), "sync", "--limit", "0"])
        assert "Invalid sync options" in str(exc_info.value.code)

    def test_run_failure_exits_one(self, temp_db: Path, capsys) -> None:
        orchestrator = MagicMock()
        orchestrator.run.side_effect = RuntimeError("connection reset")
        with patch("rfp_quest.sync.build_orchestrator", return_value=orchestrator):
            with pytest.raises(SystemExit) as exc_info:
                main(["--db", str(temp_db), "sync"])

        assert exc_info.value.code == 1
        assert "Sync failed: connection reset" in capsys.readouterr().err


class TestTendersCommand:
    """Tests for `rfp-quest tenders`."""

    def test_count(self, populated_db: Path, capsys) -> None:
        main(["--db", str(populated_db), "tenders", "count"])
        assert capsys.readouterr().out.strip() == "2"

    def test_count_by_stage(self, populated_db: Path, capsys) -> None:
        main(["--db", str(populated_db), "tenders", "count", "--stage", "award"])
        assert capsys.readouterr().out.strip() == "1"

    def test_list_omits_raw(self, populated_db: Path, capsys) -> None:
        main(["--db", str(populated_db), "tenders", "list", "--stage", "tender"])
        tenders = json.loads(capsys.readouterr().out)
        assert [t["external_id"] for t in tenders] == ["ocds-h6vhtk-064991"]
        assert "raw" not in tenders[0]
        assert tenders[0]["slug"] == "roof-repair-maintenance-framework-064991"

    def test_show(self, populated_db: Path, capsys) -> None:
        main(["--db", str(populated_db), "tenders", "show", "--id", "ocds-award-1"])
        tender = json.loads(capsys.readouterr().out)
        assert tender["stage"] == "award"
        assert tender["raw"]["ocid"] == "ocds-award-1"

    def test_show_requires_id(self, populated_db: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(populated_db), "tenders", "show"])
        assert exc_info.value.code == "tenders show requires --id"

    def test_show_missing(self, populated_db: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(populated_db), "tenders", "show", "--id", "ocds-none"])
        assert exc_info.value.code == "Tender not found: ocds-none"


class TestRunsCommand:
    """Tests for `rfp-quest runs`."""

    def test_list(self, temp_db: Path, capsys) -> None:
        ledger = SyncLedger(temp_db)
        run = ledger.begin({"days": 7})
        ledger.complete(run.id, SyncCounts().record(UpsertOutcome.INSERTED))

        main(["--db", str(temp_db), "runs", "list"])

        out = capsys.readouterr().out
        assert run.id in out
        assert "completed" in out
        assert "fetched=1 inserted=1 updated=0 skipped=0" in out

    def test_show(self, temp_db: Path, capsys) -> None:
        ledger = SyncLedger(temp_db)
        run = ledger.begin({"days": 7})
        ledger.fail(run.id, SyncCounts(), "API error: 500 - boom")

        main(["--db", str(temp_db), "runs", "show", "--id", run.id])

        shown = json.loads(capsys.readouterr().out)
        assert shown["status"] == "error"
        assert shown["error_message"] == "API error: 500 - boom"
        assert shown["params"] == {"days": 7}

    def test_show_missing(self, temp_db: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--db", str(temp_db), "runs", "show", "--id", "nope"])
        assert exc_info.value.code == "Sync run not found: nope"
