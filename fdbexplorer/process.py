"""Tracking, health, sorting and fan-out of cluster processes."""

import ipaddress
from dataclasses import dataclass, field, replace
from enum import IntEnum

from fdbexplorer import models


@dataclass
class Update:
    """One refresh of cluster data together with exclusion state."""

    root: models.Root = field(default_factory=models.Root)
    excluded_processes: list[str] = field(default_factory=list)
    exclusion_in_progress: list[str] = field(default_factory=list)


class Health(IntEnum):
    CRITICAL = 0
    WARNING = 1
    NORMAL = 2
    EXCLUDED = 3
    EXCLUDED_ONLY = 4


@dataclass
class Metadata:
    """Explorer-side state kept for a process between refreshes."""

    health: Health = Health.CRITICAL
    selected: bool = False
    exclusion_in_progress: bool = False

    def toggle_selected(self):
        self.selected = not self.selected

    def update(self, proc):
        """Derive health from the process as reported by the cluster."""
        self.health = Health.NORMAL
        if proc.excluded or proc.under_maintenance:
            self.health = Health.EXCLUDED
        if proc.messages:
            self.health = Health.WARNING
        if proc.degraded:
            self.health = Health.CRITICAL


@dataclass
class TrackedProcess:
    """A cluster process together with its explorer metadata."""

    fdb_data: models.Process = field(default_factory=models.Process)
    metadata: Metadata = field(default_factory=Metadata)


class SortMode(IntEnum):
    ADDRESS = 0
    ROLE = 1
    CLASS = 2
    UPTIME = 3
    SELECTED = 4
    EXCLUDED = 5


_NO_ADDRESS = (0, 0, "", 0)


def _address_key(address):
    """Order like an IP address and port; unparsable addresses sort first."""
    host, sep, port = address.rpartition(":")
    if not sep or not port.isascii() or not port.isdigit() or int(port) > 0xFFFF:
        return _NO_ADDRESS
    try:
        if host.startswith("[") and host.endswith("]"):
            ip6 = ipaddress.IPv6Address(host[1:-1])
            return (128, int(ip6), ip6.scope_id or "", int(port))
        ip4 = ipaddress.IPv4Address(host)
    except ValueError:
        return _NO_ADDRESS
    return (32, int(ip4), "", int(port))


class SortControl:
    """Cycles through the process sort orders."""

    def __init__(self):
        self.mode = SortMode.ADDRESS

    def next(self):
        self.mode = SortMode((self.mode + 1) % len(SortMode))

    def sort_name(self):
        return self.mode.name.title()

    def sort_key(self, proc):
        """Key for ordering tracked processes under the current mode."""
        data = proc.fdb_data
        address = _address_key(data.address)

        if self.mode is SortMode.UPTIME:
            return (data.uptime, address)
        if self.mode is SortMode.ROLE:
            key = data.roles[0].role if data.roles else ""
        elif self.mode is SortMode.CLASS:
            key = data.class_type
        elif self.mode is SortMode.SELECTED:
            key = "" if proc.metadata.selected else "_"
        elif self.mode is SortMode.EXCLUDED:
            key = "" if data.excluded else "_"
        else:
            key = ""
        return (key, address)


class Store:
    """Keeps every process seen, keyed by address, and feeds filtered views."""

    def __init__(self, sort_key):
        self._sort_key = sort_key
        self._notifiables = []
        self._store: dict[str, TrackedProcess] = {}
        self._touched: dict[str, None] = {}
        self._data: list[TrackedProcess] = []

    def add_notifiable(self, update_fn, filter_fn):
        """Register a consumer of the processes that ``filter_fn`` accepts."""
        self._notifiables.append((update_fn, filter_fn))

    def update(self, update):
        """Merge a refresh into the store and notify consumers."""
        self._touched = {}

        for proc in update.root.cluster.processes.values():
            tracked, _ = self._find_or_create(proc.address)
            tracked.fdb_data = replace(proc)
            tracked.metadata.update(proc)
            tracked.metadata.exclusion_in_progress = False

        for address in update.exclusion_in_progress:
            tracked, _ = self._find_or_create(address)
            tracked.metadata.exclusion_in_progress = True

        for address in update.excluded_processes:
            tracked, created = self._find_or_create(address)
            if created:
                tracked.fdb_data.excluded = True
                tracked.metadata.health = Health.EXCLUDED_ONLY

        self._data = [self._store[address] for address in self._touched]
        self._notify()

    def sort(self):
        """Re-sort the current processes and notify consumers."""
        self._notify()

    def clear_selected(self):
        for tracked in self._store.values():
            tracked.metadata.selected = False

    def filter_fetch(self, fn):
        """Every stored process that ``fn`` accepts."""
        return [tracked for tracked in self._store.values() if fn(tracked)]

    def _notify(self):
        self._data.sort(key=self._sort_key)
        for update_fn, filter_fn in self._notifiables:
            update_fn([tracked for tracked in self._data if filter_fn(tracked)])

    def _find_or_create(self, address):
        tracked = self._store.get(address)
        created = tracked is None
        if created:
            tracked = TrackedProcess(fdb_data=models.Process(address=address))
            self._store[address] = tracked
        self._touched[address] = None
        return tracked, created