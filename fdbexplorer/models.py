"""Typed model of the cluster ``status json`` document."""

import json
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from functools import cache
from typing import Any, get_args, get_origin

LOCALITY_DATA_HALL = "data_hall"
LOCALITY_DATA_CENTER = "dcid"
LOCALITY_MACHINE_ID = "machineid"
LOCALITY_PROCESS_ID = "processid"


def _key(name, **kwargs):
    """A dataclass field read from the JSON key ``name`` (None: never read)."""
    return field(metadata={"json": name}, **kwargs)


@dataclass
class Hz:
    hz: float = 0.0


@dataclass
class Stats:
    hz: float = 0.0
    counter: float = 0.0
    roughness: float = 0.0


@dataclass
class Lag:
    seconds: float = 0.0
    versions: int = 0


@dataclass
class CPU:
    usage_cores: float = 0.0


@dataclass
class Disk:
    busy: float = 0.0
    free_bytes: int = 0
    total_bytes: int = 0
    reads: Hz = field(default_factory=Hz)
    writes: Hz = field(default_factory=Hz)


@dataclass
class Network:
    megabits_sent: Hz = field(default_factory=Hz)
    megabits_received: Hz = field(default_factory=Hz)


@dataclass
class Memory:
    available_bytes: int = 0
    used_bytes: int = 0
    rss_bytes: int = 0


@dataclass
class Message:
    name: str = ""
    description: str = ""


@dataclass
class Role:
    role: str = ""
    kv_used_bytes: float = _key("kvstore_used_bytes", default=0.0)
    total_queries: Stats = field(default_factory=Stats)
    data_lag: Lag = field(default_factory=Lag)
    durability_lag: Lag = field(default_factory=Lag)
    queue_used_bytes: float = _key("queue_disk_used_bytes", default=0.0)
    input_bytes: Stats = field(default_factory=Stats)
    durable_bytes: Stats = field(default_factory=Stats)


@dataclass
class Process:
    address: str = ""
    tls: bool = _key(None, default=False)
    degraded: bool = False
    excluded: bool = False
    locality: dict[str, str] = field(default_factory=dict)
    class_type: str = ""
    command_line: str = ""
    roles: list[Role] = field(default_factory=list)
    cpu: CPU = field(default_factory=CPU)
    disk: Disk = field(default_factory=Disk)
    memory: Memory = field(default_factory=Memory)
    network: Network = field(default_factory=Network)
    uptime: float = _key("uptime_seconds", default=0.0)
    version: str = ""
    under_maintenance: bool = False
    messages: list[Message] = field(default_factory=list)


@dataclass
class Operations:
    reads: Stats = field(default_factory=Stats)
    writes: Stats = field(default_factory=Stats)


@dataclass
class Transactions:
    committed: Stats = field(default_factory=Stats)
    conflicted: Stats = field(default_factory=Stats)
    rejected_for_queued_too_long: Stats = field(default_factory=Stats)
    started: Stats = field(default_factory=Stats)


@dataclass
class Bytes:
    read: Stats = field(default_factory=Stats)
    written: Stats = field(default_factory=Stats)


@dataclass
class Workload:
    transactions: Transactions = field(default_factory=Transactions)
    operations: Operations = field(default_factory=Operations)
    bytes: Bytes = field(default_factory=Bytes)


@dataclass
class RecoveryState:
    name: str = ""
    description: str = ""


@dataclass
class State:
    healthy: bool = False
    name: str = ""
    min_replicas_remaining: int = 0


@dataclass
class MovingData:
    in_flight_bytes: int = 0
    in_queue_bytes: int = 0


@dataclass
class Data:
    state: State = field(default_factory=State)
    moving_data: MovingData = field(default_factory=MovingData)


@dataclass
class BackupBlobStatsIndividual:
    bytes_per_second: float = 0.0
    bytes_sent: float = 0.0
    requests_failed: float = 0.0
    requests_successful: float = 0.0


@dataclass
class BackupBlobStats:
    recent: BackupBlobStatsIndividual = field(default_factory=BackupBlobStatsIndividual)
    total: BackupBlobStatsIndividual = field(default_factory=BackupBlobStatsIndividual)


@dataclass
class BackupInstance:
    id: str = ""
    blob_stats: BackupBlobStats = field(default_factory=BackupBlobStats)
    rss_bytes: float = _key("resident_size", default=0.0)
    configured_workers: int = 0
    version: str = ""


@dataclass
class BackupTag:
    id: str = _key(None, default="")
    current_container: str = ""
    current_status: str = ""
    last_restorable_seconds_behind: float = 0.0
    last_restorable_version: int = 0
    mutation_log_bytes_written: int = 0
    range_bytes_written: int = 0
    running_backup: bool = False
    running_backup_is_restorable: bool = False


@dataclass
class Backup:
    instances: dict[str, BackupInstance] = field(default_factory=dict)
    tags: dict[str, BackupTag] = field(default_factory=dict)


@dataclass
class DRBackupInstance:
    configured_workers: int = 0
    id: str = ""
    last_updated: float = 0.0
    main_thread_cpu_seconds: float = 0.0
    memory_usage: int = 0
    process_cpu_seconds: float = 0.0
    resident_size: int = 0
    version: str = ""


@dataclass
class DRBackupTag:
    id: str = _key(None, default="")
    backup_state: str = ""
    mutation_stream_id: str = ""
    mutation_log_bytes_written: int = 0
    range_bytes_written: int = 0
    running_backup: bool = False
    backup_restorable: bool = _key("running_backup_is_restorable", default=False)
    seconds_behind: float = 0.0


@dataclass
class DRBackup:
    instances: dict[str, DRBackupInstance] = field(default_factory=dict)
    paused: bool = False
    tags: dict[str, DRBackupTag] = field(default_factory=dict)


@dataclass
class Layers:
    backup: Backup = field(default_factory=Backup)
    dr_backup: DRBackup = field(default_factory=DRBackup)
    dr_backup_dest: DRBackup = field(default_factory=DRBackup)


@dataclass
class DatabaseLockState:
    locked: bool = False


@dataclass
class Cluster:
    processes: dict[str, Process] = field(default_factory=dict)
    database_available: bool = False
    database_lock_state: DatabaseLockState = field(default_factory=DatabaseLockState)
    workload: Workload = field(default_factory=Workload)
    messages: list[Message] = field(default_factory=list)
    recovery_state: RecoveryState = field(default_factory=RecoveryState)
    data: Data = field(default_factory=Data)
    layers: Layers = field(default_factory=Layers)


@dataclass
class Root:
    cluster: Cluster = field(default_factory=Cluster)


@cache
def _json_fields(cls):
    """(attribute, json key, type) for every field of ``cls`` read from JSON."""
    return tuple(
        (f.name, f.metadata.get("json", f.name), f.type)
        for f in fields(cls)
        if f.metadata.get("json", f.name) is not None
    )


def _zero(tp):
    origin = get_origin(tp)
    if origin is not None:
        return origin()
    return tp()


def _decode(tp, value, path):
    if value is None:
        return _zero(tp)

    origin = get_origin(tp)
    if origin is dict:
        _, item_type = get_args(tp)
        if not isinstance(value, dict):
            raise ValueError(f"{path}: expected an object")
        return {k: _decode(item_type, v, f"{path}.{k}") for k, v in value.items()}
    if origin is list:
        (item_type,) = get_args(tp)
        if not isinstance(value, list):
            raise ValueError(f"{path}: expected an array")
        return [_decode(item_type, v, f"{path}[]") for v in value]
    if is_dataclass(tp):
        if not isinstance(value, dict):
            raise ValueError(f"{path}: expected an object")
        kwargs: dict[str, Any] = {
            name: _decode(ftype, value[key], f"{path}.{key}")
            for name, key, ftype in _json_fields(tp)
            if key in value
        }
        return tp(**kwargs)
    if tp is bool:
        if not isinstance(value, bool):
            raise ValueError(f"{path}: expected a boolean")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{path}: expected an integer")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{path}: expected a number")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise ValueError(f"{path}: expected a string")
        return value
    raise TypeError(f"{path}: unsupported field type {tp!r}")


def parse_root(raw):
    """Parse a ``status json`` document (bytes or str) into a Root.

    Raises ValueError when the document is not JSON or a field has the wrong type.
    """
    document = json.loads(raw)
    return _decode(Root, document, "$")


# Keep MISSING imported for dataclass introspection helpers used by callers.
_ = MISSING