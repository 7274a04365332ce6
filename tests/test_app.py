import json

import pytest

from fdbexplorer.app import Explorer, manage_processes
from fdbexplorer.components import Color
from fdbexplorer.process import Health
from fdbexplorer.process_views import match_all
from fdbexplorer.sources import StatusSourceError

DOCUMENT = {
    "cluster": {
        "processes": {
            "p1": {"address": "10.0.0.1:4500:tls", "roles": [{"role": "storage"}]},
            "p2": {"address": "10.0.0.2:4500", "roles": [{"role": "log"}]},
        },
        "data": {"state": {"healthy": True, "name": "healthy"}},
    }
}
RAW = json.dumps(DOCUMENT).encode()


class FakeProvider:
    def __init__(self, raw=RAW, error=None):
        self.raw = raw
        self.error = error

    def status(self):
        if self.error is not None:
            raise self.error
        return self.raw


class FakeManager(FakeProvider):
    def __init__(self, raw=RAW, excluded=(), in_progress=(), fail=None):
        super().__init__(raw)
        self.excluded = list(excluded)
        self.in_progress = list(in_progress)
        self.fail = fail
        self.included_calls = []
        self.excluded_calls = []

    def include_process(self, include_key):
        if self.fail:
            raise RuntimeError(self.fail)
        self.included_calls.append(include_key)

    def exclude_process(self, exclude_key):
        if self.fail:
            raise RuntimeError(self.fail)
        self.excluded_calls.append(exclude_key)

    def excluded_processes(self):
        return self.excluded

    def exclusion_in_progress_processes(self):
        return self.in_progress


def addresses(explorer):
    return {p.fdb_data.address for p in explorer.store.filter_fetch(match_all)}


def test_update_strips_tls_suffix():
    explorer = Explorer(FakeProvider())
    update = explorer.update_from_source()
    procs = update.root.cluster.processes
    assert procs["p1"].address == "10.0.0.1:4500"
    assert procs["p1"].tls is True
    assert procs["p2"].tls is False
    assert addresses(explorer) == {"10.0.0.1:4500", "10.0.0.2:4500"}


def test_update_success_sets_status_and_raw():
    explorer = Explorer(FakeProvider())
    explorer.update_from_source()
    assert explorer.raw_json == RAW
    assert explorer.status_colour is Color.GREEN
    assert "Updated in" in explorer.status_text
    assert explorer.status_text.endswith("next in 5s.")


def test_update_fills_tables():
    explorer = Explorer(FakeProvider())
    explorer.update_from_source()
    assert explorer.locality_table.row_count() == 3
    assert explorer.storage_table.row_count() == 2
    assert explorer.log_table.row_count() == 2
    assert explorer.locality_table.get_cell(1, 1).text == "10.0.0.1:4500"
    assert explorer.cluster_health_grid.get_cell(0, 1).text == "Healthy"


def test_provider_failure_reports_status():
    explorer = Explorer(FakeProvider(error=StatusSourceError("boom")))
    assert explorer.update_from_source() is None
    assert explorer.status_colour is Color.RED
    assert explorer.status_text.endswith("Failed to query Root data source: boom")
    assert explorer.raw_json == b""


def test_bad_json_reports_status():
    explorer = Explorer(FakeProvider(raw=b"{not json"))
    assert explorer.update_from_source() is None
    assert "Failed to unmarshal data" in explorer.status_text
    assert explorer.locality_table.row_count() == 1


def test_excluded_only_process_is_tracked():
    explorer = Explorer(FakeManager(excluded=["10.0.0.9:4500"]))
    explorer.update_from_source()
    found = {p.fdb_data.address: p for p in explorer.store.filter_fetch(match_all)}
    assert found["10.0.0.9:4500"].metadata.health is Health.EXCLUDED_ONLY
    assert found["10.0.0.9:4500"].fdb_data.excluded is True


def test_exclusion_in_progress_marked():
    explorer = Explorer(FakeManager(in_progress=["10.0.0.2:4500"]))
    explorer.update_from_source()
    found = {p.fdb_data.address: p for p in explorer.store.filter_fetch(match_all)}
    assert found["10.0.0.2:4500"].metadata.exclusion_in_progress is True
    assert found["10.0.0.1:4500"].metadata.exclusion_in_progress is False


def test_exclusion_query_failure_reports_status():
    manager = FakeManager()

    def broken():
        raise RuntimeError("down")

    manager.excluded_processes = broken
    explorer = Explorer(manager)
    assert explorer.update_from_source() is None
    assert "Failed to query excluded processes data source: down" in explorer.status_text


def test_manage_processes_include_and_exclude():
    manager = FakeManager()
    explorer = Explorer(manager)
    explorer.update_from_source()
    explorer.locality_table.get(1).metadata.toggle_selected()
    manage_processes(manager, explorer.store, True)
    manage_processes(manager, explorer.store, False)
    assert manager.included_calls == ["10.0.0.1:4500"]
    assert manager.excluded_calls == ["10.0.0.1:4500"]


def test_manage_processes_propagates_error():
    manager = FakeManager(fail="refused")
    explorer = Explorer(manager)
    explorer.update_from_source()
    explorer.locality_table.get(1).metadata.toggle_selected()
    with pytest.raises(RuntimeError, match="refused"):
        manage_processes(manager, explorer.store, False)


def test_slide_navigation_wraps():
    explorer = Explorer(FakeProvider())
    assert explorer.handle_key("left") is None
    assert explorer.slides.current == len(explorer.slides.titles) - 1
    explorer.handle_key("right")
    assert explorer.slides.current == 0


def test_sort_and_interval_keys():
    explorer = Explorer(FakeProvider())
    explorer.handle_key("f1")
    explorer.handle_key("f3")
    assert explorer.sorter.sort_name() == "Role"
    assert explorer.interval.duration().total_seconds() == 3


def test_unknown_key_passes_through():
    explorer = Explorer(FakeProvider())
    assert explorer.handle_key("x") == "x"


def test_space_toggles_and_backslash_clears():
    explorer = Explorer(FakeProvider())
    explorer.update_from_source()
    explorer.handle_key(" ")
    assert [p.fdb_data.address for p in explorer.store.filter_fetch(
        lambda p: p.metadata.selected)] == ["10.0.0.1:4500"]
    explorer.handle_key("\\")
    assert explorer.store.filter_fetch(lambda p: p.metadata.selected) == []


def test_exclude_key_uses_manager():
    manager = FakeManager()
    explorer = Explorer(manager)
    explorer.update_from_source()
    explorer.handle_key(" ")
    explorer.handle_key("f8")
    assert manager.excluded_calls == ["10.0.0.1:4500"]


def test_include_key_failure_reports_status():
    manager = FakeManager(fail="refused")
    explorer = Explorer(manager)
    explorer.update_from_source()
    explorer.handle_key(" ")
    explorer.handle_key("f7")
    assert explorer.status_text.endswith("Failed to include processes: refused")
    assert explorer.status_colour is Color.RED


def test_snapshot_writes_raw_json(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    explorer = Explorer(FakeProvider())
    explorer.update_from_source()
    name = explorer.snapshot_data()
    assert name.startswith("fdbexplorer-status-snapshot-")
    assert (tmp_path / name).read_bytes() == RAW


def test_snapshot_key_reports_success(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    explorer = Explorer(FakeProvider())
    explorer.update_from_source()
    explorer.handle_key("f2")
    assert "Snapshot written: fdbexplorer-status-snapshot-" in explorer.status_text
    assert len(list(tmp_path.glob("fdbexplorer-status-snapshot-*.json"))) == 1