"""Filters, colouring and table columns for cluster processes."""

import math

from fdbexplorer import models
from fdbexplorer.components import Color, Column
from fdbexplorer.display import NONE, convert, format_duration
from fdbexplorer.process import Health

_SELECTED_MARKS = {True: "*", False: " "}
_TLS_MARKS = {True: "✓", False: ""}


def match_all(proc):
    """A filter accepting every tracked process."""
    return proc is not None


def selected(proc):
    return proc.metadata.selected


def role_match(role):
    """A filter accepting processes that hold ``role``."""

    def matches(proc):
        return any(r.role == role for r in proc.fdb_data.roles)

    return matches


def process_colour(proc):
    """Colour reflecting a process's health and selection."""
    meta = proc.metadata
    if meta.health is Health.CRITICAL:
        return Color.RED
    if meta.health is Health.WARNING:
        return Color.YELLOW
    if meta.health is Health.EXCLUDED:
        return Color.OLIVE if meta.exclusion_in_progress else Color.BLUE
    if meta.health is Health.EXCLUDED_ONLY:
        return Color.PURPLE
    return Color.GREEN if meta.selected else Color.WHITE


def _find_role(roles, name):
    for role in roles:
        if role.role == name:
            return role
    return roles[0]


def _format_float(value):
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return f"{value:.1f}"


def _percent(numerator, denominator):
    if denominator:
        ratio = numerator / denominator
    elif numerator == 0:
        ratio = math.nan
    else:
        ratio = math.copysign(math.inf, numerator)
    return _format_float(ratio * 100)


def _selected_mark(proc):
    return _SELECTED_MARKS[bool(proc.metadata.selected)]


def _selected_colour(proc):
    return Color.GREEN if proc.metadata.selected else process_colour(proc)


def _tls(proc):
    return _TLS_MARKS[bool(proc.fdb_data.tls)]


def _status(proc):
    data = proc.fdb_data
    flags = (
        (data.excluded, "Excluded"),
        (data.degraded, "Degraded"),
        (data.under_maintenance, "Maintenance"),
        (bool(data.messages), "Message"),
    )
    return " / ".join(label for present, label in flags if present)


def _machine(proc):
    return proc.fdb_data.locality.get(models.LOCALITY_MACHINE_ID, "")


def _locality(proc):
    loc = proc.fdb_data.locality
    hall = loc.get(models.LOCALITY_DATA_HALL, "")
    dc = loc.get(models.LOCALITY_DATA_CENTER, "")
    return f"{hall} / {dc}"


def _roles(proc):
    return ", ".join(role.role for role in proc.fdb_data.roles)


def _ram_usage(proc):
    mem = proc.fdb_data.memory
    usage = _percent(mem.rss_bytes, mem.available_bytes)
    return (
        f"{usage}% ({convert(float(mem.rss_bytes), 1, NONE)} of "
        f"{convert(float(mem.available_bytes), 1, NONE)})"
    )


def _disk_usage(proc):
    disk = proc.fdb_data.disk
    used = disk.total_bytes - disk.free_bytes
    usage = _percent(used, disk.total_bytes)
    return (
        f"{usage}% ({convert(float(used), 1, NONE)} of "
        f"{convert(float(disk.total_bytes), 1, NONE)})"
    )


def _cpu_activity(proc):
    return f"{proc.fdb_data.cpu.usage_cores * 100:.1f}%"


def _disk_activity(proc):
    disk = proc.fdb_data.disk
    return f"{disk.reads.hz:.1f} RPS / {disk.writes.hz:.1f} WPS / {disk.busy * 100:.1f}%"


def _network_activity(proc):
    net = proc.fdb_data.network
    return f"{net.megabits_sent.hz:.1f} Mbps / {net.megabits_received.hz:.1f} Mbps"


def _uptime(proc):
    return format_duration(int(proc.fdb_data.uptime))


def _kv_storage(proc):
    role = _find_role(proc.fdb_data.roles, "storage")
    return convert(role.kv_used_bytes, 1, NONE)


def _log_queue_storage(proc):
    role = _find_role(proc.fdb_data.roles, "log")
    return convert(role.queue_used_bytes, 1, NONE)


def _log_queue_length(proc):
    role = _find_role(proc.fdb_data.roles, "log")
    return convert(role.input_bytes.counter - role.durable_bytes.counter, 1, NONE)


def _durability_rate(role_name):
    def data(proc):
        role = _find_role(proc.fdb_data.roles, role_name)
        return f"{convert(role.input_bytes.hz, 1, 's')} / {convert(role.durable_bytes.hz, 1, 's')}"

    return data


def _storage_lag(proc):
    role = _find_role(proc.fdb_data.roles, "storage")
    return f"{role.data_lag.seconds:.1f}s / {role.durability_lag.seconds:.1f}s"


def _storage_total_queries(proc):
    role = _find_role(proc.fdb_data.roles, "storage")
    return f"{role.total_queries.hz:.1f}/s"


COLUMN_SELECTED = Column(" ", _selected_mark, _selected_colour)
COLUMN_IP_ADDRESS_PORT = Column("IP Address:Port", lambda p: p.fdb_data.address, process_colour)
COLUMN_TLS = Column("TLS", _tls, process_colour)
COLUMN_STATUS = Column("Status", _status, process_colour)
COLUMN_MACHINE = Column("Machine", _machine, process_colour)
COLUMN_LOCALITY = Column("Locality", _locality, process_colour)
COLUMN_CLASS = Column("Class", lambda p: p.fdb_data.class_type, process_colour)
COLUMN_ROLES = Column("Roles", _roles, process_colour)
COLUMN_RAM_USAGE = Column("RAM Usage", _ram_usage, process_colour)
COLUMN_DISK_USAGE = Column("Disk Usage", _disk_usage, process_colour)
COLUMN_CPU_ACTIVITY = Column("CPU Activity", _cpu_activity, process_colour)
COLUMN_DISK_ACTIVITY = Column("Disk Activity", _disk_activity, process_colour)
COLUMN_NETWORK_ACTIVITY = Column("Network Activity", _network_activity, process_colour)
COLUMN_VERSION = Column("Version", lambda p: p.fdb_data.version, process_colour)
COLUMN_UPTIME = Column("Uptime", _uptime, process_colour)
COLUMN_KV_STORAGE = Column("KV Storage", _kv_storage, process_colour)
COLUMN_LOG_QUEUE_STORAGE = Column("Queue Storage", _log_queue_storage, process_colour)
COLUMN_LOG_QUEUE_LENGTH = Column("Queue Length", _log_queue_length, process_colour)
COLUMN_STORAGE_DURABILITY_RATE = Column(
    "Input / Durable Rate", _durability_rate("storage"), process_colour
)
COLUMN_LOG_DURABILITY_RATE = Column("Input / Durable Rate", _durability_rate("log"), process_colour)
COLUMN_STORAGE_LAG = Column("Data / Durability Lag", _storage_lag, process_colour)
COLUMN_STORAGE_TOTAL_QUERIES = Column("Queries", _storage_total_queries, process_colour)