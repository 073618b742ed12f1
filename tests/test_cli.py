"""Tests for the tmsync command line."""

import json

import pytest

from tmsync import cli
from tmsync.errors import ApiUnavailable
from tmsync.models.catalog import EntityKind
from tmsync.sync import CatalogSync


@pytest.fixture
def run(sync, monkeypatch):
    """Run ``tmsync`` against the fake-client sync; returns (exit code, captured settings)."""
    captured = {}

    def fake_from_settings(settings):
        captured["settings"] = settings
        return sync

    monkeypatch.setattr(CatalogSync, "from_settings", fake_from_settings)

    def _run(*argv):
        return cli.main(list(argv)), captured.get("settings")

    return _run


class TestImportCommands:
    def test_import_team(self, run, sync, capsys):
        code, _ = run("import-team", "69261", "--no-squad")

        assert code == 0
        team = sync.catalog.find_by_external_id(EntityKind.TEAM, "69261")
        assert capsys.readouterr().out.strip() == (
            f"Successfully imported team with ID 69261 (catalog id: {team.id})"
        )
        assert sync.catalog.count(EntityKind.PLAYER) == 0

    def test_import_player_failure(self, run, capsys):
        code, _ = run("import-player", "424242")
        assert code == 1
        assert "Failed to import player with ID 424242." in capsys.readouterr().err

    def test_import_competition_with_standings(self, run, sync):
        code, _ = run("import-competition", "GB1", "--standings")
        assert code == 0
        competition = sync.catalog.find_by_external_id(EntityKind.COMPETITION, "GB1")
        assert competition.attributes["clubs"] == 3

    def test_overrides_reach_settings(self, run, tmp_path):
        db_path = str(tmp_path / "other.db")
        _, settings = run("--db-path", db_path, "--base-url", "https://mirror.test/", "import-player", "28003")
        assert settings.database_path == db_path
        assert settings.api_base_url == "https://mirror.test"


class TestUpdateAll:
    def test_single_kind(self, run, sync, capsys):
        sync.import_player("28003")
        capsys.readouterr()

        code, _ = run("update-all", "--kind", "player")

        assert code == 0
        assert capsys.readouterr().out.strip() == "Updated 1 players"

    def test_enabled_kinds(self, run, capsys):
        code, _ = run("update-all")
        out = capsys.readouterr().out
        assert code == 0
        assert "Updated 0 players" in out
        assert "Updated 0 competitions" in out


class TestSquad:
    def test_shows_import_state(self, run, sync, capsys):
        team_id = sync.import_team("69261", import_squad=False)
        sync.import_squad_player(team_id, "1001")
        capsys.readouterr()

        code, _ = run("squad", str(team_id))

        out = capsys.readouterr().out
        assert code == 0
        assert "Squad Players for Inter Miami CF" in out
        assert out.count("not imported") == 2
        assert "imported as" in out

    def test_unknown_team(self, run, capsys):
        code, _ = run("squad", "999")
        assert code == 1
        assert "No team with id 999" in capsys.readouterr().err

    def test_api_unavailable(self, run, sync, fake_client, capsys):
        team_id = sync.import_team("69261", import_squad=False)
        fake_client.responses["/clubs/69261/players"] = ApiUnavailable("down")

        code, _ = run("squad", str(team_id))

        assert code == 1
        assert "try again" in capsys.readouterr().err


class TestOtherCommands:
    def test_search_prints_json(self, run, fake_client, capsys):
        fake_client.responses["/clubs/search/Inter%20Miami"] = {"results": [{"id": "69261"}]}

        code, _ = run("search", "clubs", "Inter Miami")

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"results": [{"id": "69261"}]}

    def test_search_failure(self, run, capsys):
        code, _ = run("search", "players", "Nobody")
        assert code == 1

    def test_snapshot(self, run, sync, tmp_path):
        sync.import_player("28003")
        path = tmp_path / "snapshot.json"

        code, _ = run("snapshot", str(path))

        assert code == 0
        with open(path) as f:
            assert json.load(f)["meta"]["player_count"] == 1

    def test_runtime_check_failure(self, run, monkeypatch):
        def broken():
            raise RuntimeError("Missing required packages: requests")

        monkeypatch.setattr(cli, "validate_runtime", broken)
        code, settings = run("import-player", "28003")
        assert code == 1
        assert settings is None

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])
