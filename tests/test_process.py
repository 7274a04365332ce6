import pytest

from fdbexplorer import models
from fdbexplorer.process import (
    Health,
    Metadata,
    SortControl,
    SortMode,
    Store,
    TrackedProcess,
    Update,
)


def _tracked(address, **kwargs):
    return TrackedProcess(fdb_data=models.Process(address=address, **kwargs))


def _update(*procs, excluded=(), in_progress=()):
    cluster = models.Cluster(processes={f"id{n}": p for n, p in enumerate(procs)})
    return Update(
        root=models.Root(cluster=cluster),
        excluded_processes=list(excluded),
        exclusion_in_progress=list(in_progress),
    )


class _Sink:
    def __init__(self):
        self.received = []

    def __call__(self, processes):
        self.received.append(processes)

    @property
    def addresses(self):
        return [p.fdb_data.address for p in self.received[-1]]


@pytest.mark.parametrize(
    "kwargs, expected",
    [
        ({}, Health.NORMAL),
        ({"excluded": True}, Health.EXCLUDED),
        ({"under_maintenance": True}, Health.EXCLUDED),
        ({"excluded": True, "messages": [models.Message()]}, Health.WARNING),
        ({"messages": [models.Message()], "degraded": True}, Health.CRITICAL),
        ({"excluded": True, "degraded": True}, Health.CRITICAL),
    ],
)
def test_metadata_update_health(kwargs, expected):
    meta = Metadata()
    meta.update(models.Process(**kwargs))
    assert meta.health is expected


def test_metadata_default_health_is_critical():
    assert Metadata().health is Health.CRITICAL


def test_toggle_selected():
    meta = Metadata()
    meta.toggle_selected()
    assert meta.selected is True
    meta.toggle_selected()
    assert meta.selected is False


def test_sort_names_cycle():
    control = SortControl()
    names = [control.sort_name()]
    for _ in range(len(SortMode)):
        control.next()
        names.append(control.sort_name())
    assert names == ["Address", "Role", "Class", "Uptime", "Selected", "Excluded", "Address"]


def test_address_sort_is_numeric_with_invalid_first():
    control = SortControl()
    addresses = ["[::1]:4500", "10.0.0.10:4500", "garbage", "10.0.0.2:4501", "10.0.0.2:4500"]
    ordered = sorted((_tracked(a) for a in addresses), key=control.sort_key)
    assert [p.fdb_data.address for p in ordered] == [
        "garbage",
        "10.0.0.2:4500",
        "10.0.0.2:4501",
        "10.0.0.10:4500",
        "[::1]:4500",
    ]


def test_role_sort_uses_first_role_then_address():
    control = SortControl()
    control.next()
    assert control.mode is SortMode.ROLE
    procs = [
        _tracked("10.0.0.1:1", roles=[models.Role(role="storage")]),
        _tracked("10.0.0.2:1", roles=[models.Role(role="log")]),
        _tracked("10.0.0.3:1"),
        _tracked("10.0.0.0:1", roles=[models.Role(role="log")]),
    ]
    ordered = sorted(procs, key=control.sort_key)
    assert [p.fdb_data.address for p in ordered] == [
        "10.0.0.3:1",
        "10.0.0.0:1",
        "10.0.0.2:1",
        "10.0.0.1:1",
    ]


def test_uptime_sort():
    control = SortControl()
    control.mode = SortMode.UPTIME
    procs = [_tracked("10.0.0.1:1", uptime=30.0), _tracked("10.0.0.2:1", uptime=10.0)]
    ordered = sorted(procs, key=control.sort_key)
    assert [p.fdb_data.uptime for p in ordered] == [10.0, 30.0]


def test_selected_sort_puts_selected_first():
    control = SortControl()
    control.mode = SortMode.SELECTED
    first, second = _tracked("10.0.0.1:1"), _tracked("10.0.0.2:1")
    second.metadata.selected = True
    assert sorted([first, second], key=control.sort_key) == [second, first]


def test_excluded_sort_puts_excluded_first():
    control = SortControl()
    control.mode = SortMode.EXCLUDED
    first, second = _tracked("10.0.0.1:1"), _tracked("10.0.0.2:1", excluded=True)
    assert sorted([first, second], key=control.sort_key) == [second, first]


def test_store_notifies_sorted_and_filtered():
    store = Store(SortControl().sort_key)
    everything, storage_only = _Sink(), _Sink()
    store.add_notifiable(everything, lambda p: True)
    store.add_notifiable(
        storage_only, lambda p: any(r.role == "storage" for r in p.fdb_data.roles)
    )
    store.update(
        _update(
            models.Process(address="10.0.0.9:1", roles=[models.Role(role="storage")]),
            models.Process(address="10.0.0.1:1"),
        )
    )
    assert everything.addresses == ["10.0.0.1:1", "10.0.0.9:1"]
    assert storage_only.addresses == ["10.0.0.9:1"]


def test_store_copies_process_data():
    store = Store(SortControl().sort_key)
    proc = models.Process(address="10.0.0.1:1")
    store.update(_update(proc))
    proc.version = "changed"
    (tracked,) = store.filter_fetch(lambda p: True)
    assert tracked.fdb_data.version == ""
    assert tracked.metadata.health is Health.NORMAL


def test_excluded_only_processes_are_created():
    store = Store(SortControl().sort_key)
    sink = _Sink()
    store.add_notifiable(sink, lambda p: True)
    store.update(_update(models.Process(address="10.0.0.1:1"), excluded=["10.0.0.5:1"]))
    assert sink.addresses == ["10.0.0.1:1", "10.0.0.5:1"]
    created = sink.received[-1][1]
    assert created.fdb_data.excluded is True
    assert created.metadata.health is Health.EXCLUDED_ONLY


def test_excluded_existing_process_is_not_overridden():
    store = Store(SortControl().sort_key)
    store.update(
        _update(models.Process(address="10.0.0.1:1", excluded=True), excluded=["10.0.0.1:1"])
    )
    (tracked,) = store.filter_fetch(lambda p: True)
    assert tracked.metadata.health is Health.EXCLUDED


def test_exclusion_in_progress_flag_is_refreshed():
    store = Store(SortControl().sort_key)
    proc = models.Process(address="10.0.0.1:1")
    store.update(_update(proc, in_progress=["10.0.0.1:1"]))
    assert store.filter_fetch(lambda p: True)[0].metadata.exclusion_in_progress is True
    store.update(_update(proc))
    assert store.filter_fetch(lambda p: True)[0].metadata.exclusion_in_progress is False


def test_selection_survives_updates_and_clear_selected():
    store = Store(SortControl().sort_key)
    store.update(_update(models.Process(address="10.0.0.1:1"), models.Process(address="10.0.0.2:1")))
    store.filter_fetch(lambda p: p.fdb_data.address == "10.0.0.2:1")[0].metadata.toggle_selected()
    store.update(_update(models.Process(address="10.0.0.1:1"), models.Process(address="10.0.0.2:1")))
    chosen = store.filter_fetch(lambda p: p.metadata.selected)
    assert [p.fdb_data.address for p in chosen] == ["10.0.0.2:1"]
    store.clear_selected()
    assert store.filter_fetch(lambda p: p.metadata.selected) == []


def test_stale_processes_are_kept_but_not_notified():
    store = Store(SortControl().sort_key)
    sink = _Sink()
    store.add_notifiable(sink, lambda p: True)
    store.update(_update(models.Process(address="10.0.0.1:1"), models.Process(address="10.0.0.2:1")))
    store.update(_update(models.Process(address="10.0.0.2:1")))
    assert sink.addresses == ["10.0.0.2:1"]
    assert len(store.filter_fetch(lambda p: True)) == 2


def test_sort_renotifies_with_new_order():
    control = SortControl()
    store = Store(control.sort_key)
    sink = _Sink()
    store.add_notifiable(sink, lambda p: True)
    store.update(
        _update(
            models.Process(address="10.0.0.1:1", uptime=50.0),
            models.Process(address="10.0.0.2:1", uptime=5.0),
        )
    )
    assert sink.addresses == ["10.0.0.1:1", "10.0.0.2:1"]
    control.mode = SortMode.UPTIME
    store.sort()
    assert len(sink.received) == 2
    assert sink.addresses == ["10.0.0.2:1", "10.0.0.1:1"]


def test_empty_notification_is_empty_list():
    store = Store(SortControl().sort_key)
    sink = _Sink()
    store.add_notifiable(sink, lambda p: False)
    store.update(_update(models.Process(address="10.0.0.1:1")))
    assert sink.received == [[]]