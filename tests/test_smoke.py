"""Smoke tests for the end-to-end planner flow."""

import json
from datetime import date

import pytest

from schoolstaffing.cli import create_sample_roster, demo_mutations, main
from schoolstaffing.domain.calendar import week_window
from schoolstaffing.resolution.aggregation import StaffingReporter
from schoolstaffing.store import InMemoryBackend, RosterStore, roster_to_dict
from schoolstaffing.validation.validator import RosterValidator

MONDAY = date(2024, 1, 15)


class TestSmoke:
    """End-to-end smoke tests for the planner."""

    @pytest.fixture
    def roster_file(self, tmp_path):
        path = tmp_path / "school.json"
        path.write_text(json.dumps(roster_to_dict(create_sample_roster())), encoding="utf-8")
        return path

    def test_demo_week_through_store(self):
        backend = InMemoryBackend()
        store = RosterStore(create_sample_roster(), backend=backend, organization_id="demo")
        try:
            for mutation in demo_mutations(MONDAY):
                result = store.dispatch(mutation)
                assert result.is_valid
            store.flush()

            assert len(backend.records_for("demo")) == 6
            assert RosterValidator().validate_roster(store.roster).is_valid

            reporter = StaffingReporter(store.resolver)
            unmanned = [reporter.day_stats(d).unmanned_count for d in week_window(MONDAY)]
            # Tuesday loses Groep 6; Emma's Monday gap is partly covered
            assert unmanned == [0, 1, 1, 1, 0]
        finally:
            store.close()

    def test_cli_demo(self, capsys):
        assert main(["demo", "--date", "2024-01-15"]) == 0
        out = capsys.readouterr().out
        assert "Sample school, week of 2024-01-15" in out
        assert "Synced 6 change(s)" in out
        assert "WEEKOVERZICHT - WEEK 3" in out

    def test_cli_demo_weekend_moves_forward(self, capsys):
        assert main(["demo", "--date", "2024-01-20"]) == 0
        assert "week of 2024-01-22" in capsys.readouterr().out

    def test_cli_day(self, roster_file, capsys):
        assert main(["day", "--roster", str(roster_file), "--date", "2024-01-17"]) == 0
        out = capsys.readouterr().out
        assert "Groep 2: ONBEMAND" in out
        assert "Onbemand: 1, afwezig: 0" in out

    def test_cli_day_weekend_is_error(self, roster_file, capsys):
        assert main(["day", "--roster", str(roster_file), "--date", "2024-01-20"]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_cli_week_to_file(self, roster_file, tmp_path):
        output = tmp_path / "week.txt"
        code = main(
            ["week", "--roster", str(roster_file), "--date", "2024-01-17", "--weeks", "2",
             "--output", str(output)]
        )
        assert code == 0
        text = output.read_text(encoding="utf-8")
        assert "WEEK 3" in text
        assert "WEEK 4" in text

    def test_cli_candidates(self, roster_file, capsys):
        code = main(
            ["candidates", "--roster", str(roster_file), "--group", "g2",
             "--date", "2024-01-17", "--start", "09:00", "--end", "10:00"]
        )
        assert code == 0
        out = capsys.readouterr().out
        assert "Vervangers voor g2 op 2024-01-17 (09:00-10:00):" in out
        assert "  - Jan Koopmans" in out
        assert "  - Bert Smit" in out

    def test_cli_missing_roster(self, capsys, monkeypatch):
        monkeypatch.delenv("SCHOOLSTAFFING_CACHE_PATH", raising=False)
        assert main(["day", "--date", "2024-01-15"]) == 2
        assert "No --roster given" in capsys.readouterr().err

    def test_cli_missing_config_file(self, roster_file, tmp_path, capsys):
        missing = tmp_path / "nope.json"
        code = main(["--config", str(missing), "day", "--roster", str(roster_file), "--date", "2024-01-15"])
        assert code == 2
        assert "Error:" in capsys.readouterr().err

    def test_cli_config_with_unknown_key(self, roster_file, tmp_path, capsys):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
        code = main(["--config", str(config), "day", "--roster", str(roster_file), "--date", "2024-01-15"])
        assert code == 2
        assert "Error:" in capsys.readouterr().err

    def test_cli_no_command(self, capsys):
        assert main([]) == 1
