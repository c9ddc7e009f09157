"""
Tests for the grafctl dash commands.
"""

import json
from unittest.mock import MagicMock

import pytest
from conftest import make_dashboard, make_panel, write_query
from typer.testing import CliRunner

from grafctl import __version__
from grafctl.cli import app
from grafctl.core.errors import GrafanaAPIError
from grafctl.core.grafana import SearchResult

runner = CliRunner()

SERVER = ["--url", "https://grafana.example.com", "--key", "secret"]


@pytest.fixture
def client_factory(monkeypatch):
    """Replace the GrafanaClient class used by commands."""
    factory = MagicMock()
    monkeypatch.setattr("grafctl.cli.context.GrafanaClient", factory)
    return factory


@pytest.fixture
def client(client_factory):
    """Mock client handed to commands by the patched factory."""
    client = MagicMock()
    client.__enter__.return_value = client
    client.url = "https://grafana.example.com"
    client_factory.from_config.return_value = client
    return client


class TestRoot:
    """Test the root command."""

    def test_version(self):
        """Test version prints the package version."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_server(self):
        """Test commands needing the server fail without url and key."""
        result = runner.invoke(app, ["dash", "ls"])
        assert result.exit_code == 2
        assert "missing url" in result.output

    def test_env_server_settings(self, client, client_factory, monkeypatch):
        """Test url and key can come from the environment."""
        monkeypatch.setenv("GRAFCTL_URL", "https://env.example.com")
        monkeypatch.setenv("GRAFCTL_API_KEY", "env-key")
        client.search.return_value = []

        result = runner.invoke(app, ["dash", "ls"])

        assert result.exit_code == 0
        config = client_factory.from_config.call_args.args[0]
        assert config.url == "https://env.example.com"
        assert config.api_key == "env-key"


class TestLsAndInspect:
    """Test listing and inspecting dashboards."""

    def test_ls(self, client):
        """Test dashboards are listed in a table."""
        client.search.return_value = [
            SearchResult(uid="abc123", title="Sales", folderTitle="Biz", url="/d/abc123/sales")
        ]

        result = runner.invoke(app, [*SERVER, "dash", "ls"])

        assert result.exit_code == 0
        assert "abc123" in result.output
        assert "Sales" in result.output

    def test_inspect(self, client):
        """Test the dashboard document is printed as JSON."""
        client.get_dashboard.return_value = make_dashboard([make_panel("[A] panel")])

        result = runner.invoke(app, [*SERVER, "dash", "inspect", "--uid", "abc123"])

        assert result.exit_code == 0
        document = json.loads(result.output)
        assert document["uid"] == "abc123"
        assert document["panels"][0]["title"] == "[A] panel"

    def test_api_error(self, client):
        """Test API failures exit with a general error."""
        client.get_dashboard.side_effect = GrafanaAPIError(
            "GET x: status code: 404", status_code=404
        )

        result = runner.invoke(app, [*SERVER, "dash", "inspect", "--uid", "nope"])

        assert result.exit_code == 1
        assert "status code: 404" in result.output


class TestSync:
    """Test dash sync."""

    def test_sync(self, client, queries_root):
        """Test query files are pushed and the dashboard saved."""
        write_query(queries_root, "a.sql", "SELECT 42")
        panel = make_panel("A", description="query=a", targets=[{"refId": "A"}])
        client.get_dashboard.return_value = make_dashboard([panel])

        result = runner.invoke(
            app, [*SERVER, "dash", "sync", "--uid", "abc123", "--queries", str(queries_root)]
        )

        assert result.exit_code == 0, result.output
        assert "1 targets updated" in result.output
        assert panel["targets"][0]["rawSql"] == "SELECT 42"
        client.save_dashboard.assert_called_once()

    def test_sync_dry_run(self, client, queries_root):
        """Test --dry-run skips the save."""
        client.get_dashboard.return_value = make_dashboard([])

        result = runner.invoke(
            app,
            [*SERVER, "dash", "sync", "--uid", "abc123", "-q", str(queries_root), "--dry-run"],
        )

        assert result.exit_code == 0
        client.save_dashboard.assert_not_called()

    def test_sync_queries_from_env(self, client, queries_root, monkeypatch):
        """Test the query root defaults to GRAFCTL_QUERIES_DIR."""
        monkeypatch.setenv("GRAFCTL_QUERIES_DIR", str(queries_root))
        client.get_dashboard.return_value = make_dashboard([])

        result = runner.invoke(app, [*SERVER, "dash", "sync", "--uid", "abc123"])

        assert result.exit_code == 0

    def test_sync_without_queries(self, client):
        """Test sync without a query root is a user error."""
        result = runner.invoke(app, [*SERVER, "dash", "sync", "--uid", "abc123"])
        assert result.exit_code == 2
        assert "No query directory" in result.output

    def test_sync_missing_directory(self, client, tmp_path):
        """Test a missing query root is a user error."""
        result = runner.invoke(
            app, [*SERVER, "dash", "sync", "--uid", "abc123", "--queries", str(tmp_path / "nope")]
        )
        assert result.exit_code == 2


class TestExport:
    """Test dash export and its legacy alias."""

    @pytest.mark.parametrize("command", ["export", "export-queries"])
    def test_export(self, client, tmp_path, command):
        """Test query files are written under <out>/queries."""
        target = {"refId": "A", "rawSql": "SELECT 1"}
        panel = make_panel("A", description="query=biz/a", targets=[target])
        client.get_dashboard.return_value = make_dashboard([panel])

        result = runner.invoke(
            app, [*SERVER, "dash", command, "--uid", "abc123", "--out", str(tmp_path / "out")]
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "queries" / "biz" / "a.sql").read_text() == "SELECT 1"

    def test_export_default_directory(self, client, tmp_path):
        """Test the default output directory is ./queries."""
        target = {"refId": "A", "rawSql": "SELECT 1"}
        panel = make_panel("A", description="query=a", targets=[target])
        client.get_dashboard.return_value = make_dashboard([panel])

        result = runner.invoke(app, [*SERVER, "dash", "export", "--uid", "abc123"])

        assert result.exit_code == 0
        assert (tmp_path / "queries" / "queries" / "a.sql").exists()

    def test_export_duplicates(self, client, tmp_path):
        """Test clashing query paths fail the export."""
        panels = [
            make_panel("One", description="query=x", targets=[{"refId": "A", "rawSql": "1"}]),
            make_panel("Two", description="query=x", targets=[{"refId": "A", "rawSql": "2"}]),
        ]
        client.get_dashboard.return_value = make_dashboard(panels)

        result = runner.invoke(
            app, [*SERVER, "dash", "export", "--uid", "abc123", "--out", str(tmp_path / "out")]
        )

        assert result.exit_code == 1
        assert "nothing exported" in result.output
        assert not (tmp_path / "out").exists()


class TestUpdateDescriptions:
    """Test dash update-descriptions and its legacy alias."""

    @pytest.mark.parametrize("command", ["update-descriptions", "update-panels-descriptions"])
    def test_update(self, client, command):
        """Test descriptions are generated and saved."""
        panel = make_panel("CPU")
        client.get_dashboard.return_value = make_dashboard([panel])

        result = runner.invoke(app, [*SERVER, "dash", command, "--uid", "abc123"])

        assert result.exit_code == 0, result.output
        assert panel["description"] == "query=business-metrics/my-dashboard/table-cpu"
        client.save_dashboard.assert_called_once()

    def test_dry_run(self, client):
        """Test --dry-run leaves the dashboard alone."""
        panel = make_panel("CPU")
        client.get_dashboard.return_value = make_dashboard([panel])

        result = runner.invoke(
            app, [*SERVER, "dash", "update-descriptions", "--uid", "abc123", "--dry-run"]
        )

        assert result.exit_code == 0
        assert "dry run" in result.output
        assert panel["description"] == ""
        client.save_dashboard.assert_not_called()

    def test_untitled_dashboard(self, client):
        """Test a dashboard without a title fails."""
        client.get_dashboard.return_value = make_dashboard([], title="")

        result = runner.invoke(app, [*SERVER, "dash", "update-descriptions", "--uid", "abc123"])

        assert result.exit_code == 1
        assert "has no title" in result.output
