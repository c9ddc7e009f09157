"""
Tests for exporting dashboard targets to query files.
"""

import pytest
from conftest import make_dashboard, make_panel, make_row

from grafctl.core.errors import DuplicateQueryPathError
from grafctl.core.reconcile import ReconcileService


@pytest.fixture
def service(mock_client):
    return ReconcileService(mock_client)


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "export"


def sql_target(sql="SELECT 1", ref_id="A"):
    return {"refId": ref_id, "rawSql": sql}


def cpu_panel():
    targets = [
        {"refId": "F", "expr": "rate(cpu_f[5m])"},
        {"refId": "B", "expr": "rate(cpu_b[5m])"},
        {"refId": "A", "expr": "rate(cpu_a[5m])"},
    ]
    return make_panel(
        "CPU", panel_type="timeseries", description="query=cpu_usage",
        datasource="prometheus", targets=targets,
    )


class TestExportDashboardQueries:
    """Test export_dashboard_queries against a mock client."""

    def test_multi_target_files(self, service, mock_client, out_dir):
        """Test each target of a multi-target panel gets its own file."""
        mock_client.get_dashboard.return_value = make_dashboard([cpu_panel()])

        result = service.export_dashboard_queries("abc123", out_dir, overwrite=True)

        queries = out_dir / "queries"
        assert sorted(p.name for p in queries.iterdir()) == [
            "cpu_usage_a.promql",
            "cpu_usage_b.promql",
            "cpu_usage_f.promql",
        ]
        assert (queries / "cpu_usage_f.promql").read_text() == "rate(cpu_f[5m])"
        assert len(result.files_written) == 3

    def test_single_target_no_suffix(self, service, mock_client, out_dir):
        """Test a lone target is written without a refId suffix."""
        panel = make_panel("Users", description="query=biz/dash/table-users", targets=[sql_target()])
        mock_client.get_dashboard.return_value = make_dashboard([panel])

        service.export_dashboard_queries("abc123", out_dir)

        written = out_dir / "queries" / "biz" / "dash" / "table-users.sql"
        assert written.read_text() == "SELECT 1"

    def test_overwrite_false_keeps_existing(self, service, mock_client, out_dir):
        """Test existing files are kept when overwrite is off."""
        existing = out_dir / "queries" / "users.sql"
        existing.parent.mkdir(parents=True)
        existing.write_text("EXISTING CONTENT")
        panel = make_panel("Users", description="query=users", targets=[sql_target()])
        mock_client.get_dashboard.return_value = make_dashboard([panel])

        result = service.export_dashboard_queries("abc123", out_dir, overwrite=False)

        assert existing.read_text() == "EXISTING CONTENT"
        assert result.files_existing == 1
        assert result.files_written == []

    def test_overwrite_true_replaces_existing(self, service, mock_client, out_dir):
        """Test existing files are replaced when overwrite is on."""
        existing = out_dir / "queries" / "users.sql"
        existing.parent.mkdir(parents=True)
        existing.write_text("EXISTING CONTENT")
        panel = make_panel("Users", description="query=users", targets=[sql_target()])
        mock_client.get_dashboard.return_value = make_dashboard([panel])

        service.export_dashboard_queries("abc123", out_dir, overwrite=True)

        assert existing.read_text() == "SELECT 1"

    def test_duplicate_paths_abort(self, service, mock_client, out_dir):
        """Test two panels claiming one path abort with nothing written."""
        panels = [
            make_panel("First", description="query=shared", targets=[sql_target()]),
            make_panel(
                "Second", panel_type="stat", description="query=shared", targets=[sql_target("SELECT 2")]
            ),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        with pytest.raises(DuplicateQueryPathError) as exc_info:
            service.export_dashboard_queries("abc123", out_dir)

        assert exc_info.value.duplicates == {"shared": ["table:First", "stat:Second"]}
        assert "found 2 panels with same description 'shared'" in str(exc_info.value)
        assert not out_dir.exists()

    def test_duplicates_across_nested_rows(self, service, mock_client, out_dir):
        """Test the duplicate check sees panels inside rows."""
        inner = make_panel("Inner", description="query=shared", targets=[sql_target("x")])
        outer = make_panel("Outer", description="query=shared", targets=[sql_target("y")])
        panels = [make_row("R", panels=[inner]), outer]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        with pytest.raises(DuplicateQueryPathError):
            service.export_dashboard_queries("abc123", out_dir)

    def test_shared_second_reference_aborts(self, service, mock_client, out_dir):
        """Test panels whose later query= references match abort the export."""
        panels = [
            make_panel(
                "First", description="query=a\nquery=shared",
                targets=[sql_target("SELECT 1", "A"), sql_target("SELECT 2", "B")],
            ),
            make_panel(
                "Second", panel_type="stat", description="query=b\nquery=shared",
                targets=[sql_target("SELECT 3", "A"), sql_target("SELECT 4", "B")],
            ),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        with pytest.raises(DuplicateQueryPathError) as exc_info:
            service.export_dashboard_queries("abc123", out_dir)

        assert exc_info.value.duplicates == {"shared": ["table:First", "stat:Second"]}
        assert not out_dir.exists()

    def test_repeated_ref_id_in_one_panel_aborts(self, service, mock_client, out_dir):
        """Test two targets of one panel with the same refId abort the export."""
        panels = [
            make_panel(
                "Orders", description="query=orders",
                targets=[sql_target("SELECT 1", "A"), sql_target("SELECT 2", "A")],
            ),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        with pytest.raises(DuplicateQueryPathError) as exc_info:
            service.export_dashboard_queries("abc123", out_dir)

        assert exc_info.value.duplicates == {
            "orders_a": ["table:Orders refId A", "table:Orders refId A"],
        }
        assert not out_dir.exists()

    def test_missing_ref_ids_in_one_panel_abort(self, service, mock_client, out_dir):
        """Test two targets without a refId collide on the same file."""
        panels = [
            make_panel(
                "Orders", description="query=orders",
                targets=[{"rawSql": "SELECT 1"}, {"rawSql": "SELECT 2"}],
            ),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        with pytest.raises(DuplicateQueryPathError) as exc_info:
            service.export_dashboard_queries("abc123", out_dir)

        assert list(exc_info.value.duplicates) == ["orders_"]

    def test_distinct_references_export(self, service, mock_client, out_dir):
        """Test panels with disjoint multi-reference descriptions export cleanly."""
        panels = [
            make_panel(
                "First", description="query=a\nquery=a2",
                targets=[sql_target("SELECT 1", "A"), sql_target("SELECT 2", "B")],
            ),
            make_panel(
                "Second", description="query=b\nquery=b2",
                targets=[sql_target("SELECT 3", "A"), sql_target("SELECT 4", "B")],
            ),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        service.export_dashboard_queries("abc123", out_dir)

        queries = out_dir / "queries"
        assert sorted(p.name for p in queries.iterdir()) == ["a.sql", "a2.sql", "b.sql", "b2.sql"]

    def test_skips_structural_and_empty(self, service, mock_client, out_dir):
        """Test rows, text panels, undescribed panels and empty targets are skipped."""
        panels = [
            make_row("Row"),
            make_panel("Notes", panel_type="text", description="query=notes"),
            make_panel("Undescribed", targets=[sql_target()]),
            make_panel("Empty", description="query=empty", targets=[sql_target("")]),
        ]
        mock_client.get_dashboard.return_value = make_dashboard(panels)

        result = service.export_dashboard_queries("abc123", out_dir)

        assert result.files_written == []
        assert result.targets_empty == 1
        assert result.panels_skipped == 1
        assert list((out_dir / "queries").iterdir()) == []

    def test_dry_run_writes_nothing(self, service, mock_client, out_dir):
        """Test a dry run lists files without creating them."""
        mock_client.get_dashboard.return_value = make_dashboard([cpu_panel()])

        result = service.export_dashboard_queries("abc123", out_dir, dry_run=True)

        assert len(result.files_written) == 3
        assert not out_dir.exists()


class TestExportSyncRoundTrip:
    """Test exported files sync back into the same targets."""

    def test_round_trip(self, service, mock_client, out_dir):
        """Test sync restores each target from the file export wrote for it."""
        panel = cpu_panel()
        mock_client.get_dashboard.return_value = make_dashboard([panel])
        service.export_dashboard_queries("abc123", out_dir, overwrite=True)

        for target in panel["targets"]:
            target["expr"] = "stale"
        result = service.sync_dashboard("abc123", out_dir)

        assert [t["expr"] for t in panel["targets"]] == [
            "rate(cpu_f[5m])",
            "rate(cpu_b[5m])",
            "rate(cpu_a[5m])",
        ]
        assert result.targets_updated == 3
