"""Backup and DR backup tables."""

from dataclasses import replace
from datetime import datetime

from fdbexplorer.components import Column
from fdbexplorer.display import NONE, boolify, convert, titlify


def _by_id(items):
    return sorted(items, key=lambda item: item.id)


def _tagged(tags):
    return _by_id(replace(tag, id=tag_id) for tag_id, tag in tags.items())


def update_backup_instances(fn):
    """Wrap ``fn`` so it receives the backup agents, ordered by id."""

    def apply(update):
        fn(_by_id(update.root.cluster.layers.backup.instances.values()))

    return apply


def update_backup_tags(fn):
    """Wrap ``fn`` so it receives the backup tags, named and ordered by id."""

    def apply(update):
        fn(_tagged(update.root.cluster.layers.backup.tags))

    return apply


def update_dr_backup_instances(fn):
    """Wrap ``fn`` so it receives the local DR agents, ordered by id."""

    def apply(update):
        fn(_by_id(update.root.cluster.layers.dr_backup.instances.values()))

    return apply


def update_dr_backup_dest_instances(fn):
    """Wrap ``fn`` so it receives the remote DR agents, ordered by id."""

    def apply(update):
        fn(_by_id(update.root.cluster.layers.dr_backup_dest.instances.values()))

    return apply


def update_dr_backup_tags(fn):
    """Wrap ``fn`` so it receives the local DR tags, named and ordered by id."""

    def apply(update):
        fn(_tagged(update.root.cluster.layers.dr_backup.tags))

    return apply


def update_dr_backup_dest_tags(fn):
    """Wrap ``fn`` so it receives the remote DR tags, named and ordered by id."""

    def apply(update):
        fn(_tagged(update.root.cluster.layers.dr_backup_dest.tags))

    return apply


def _bytes(value):
    return convert(float(value), 1, NONE)


def _recent_transfer(instance):
    recent = instance.blob_stats.recent
    return f"{convert(recent.bytes_per_second, 1, 's')} / {convert(recent.bytes_sent, 1, NONE)}"


def _recent_operations(instance):
    recent = instance.blob_stats.recent
    return f"{int(recent.requests_successful)} Succeeded / {int(recent.requests_failed)} Failed"


def _last_updated(instance):
    moment = datetime.fromtimestamp(int(instance.last_updated)).astimezone()
    return moment.strftime("%Y-%m-%d %H:%M:%S %z %Z")


COLUMN_BACKUP_INSTANCE_ID = Column("Instance Id", lambda i: i.id)
COLUMN_BACKUP_INSTANCE_VERSION = Column("Version", lambda i: i.version)
COLUMN_BACKUP_INSTANCE_CONFIGURED_WORKERS = Column("Workers", lambda i: str(i.configured_workers))
COLUMN_BACKUP_INSTANCE_USED_MEMORY = Column("RAM Usage", lambda i: _bytes(i.rss_bytes))
COLUMN_BACKUP_INSTANCE_RECENT_TRANSFER = Column("Recent Transfer", _recent_transfer)
COLUMN_BACKUP_INSTANCE_RECENT_OPERATIONS = Column("Recent Operations", _recent_operations)

COLUMN_BACKUP_TAG_ID = Column("Tag", lambda t: t.id)
COLUMN_BACKUP_STATUS = Column("Status", lambda t: titlify(t.current_status))
COLUMN_BACKUP_RUNNING = Column("Running?", lambda t: boolify(t.running_backup))
COLUMN_BACKUP_RESTORABLE = Column(
    "Restorable?", lambda t: boolify(t.running_backup_is_restorable)
)
COLUMN_BACKUP_SECONDS_BEHIND = Column(
    "Seconds Behind", lambda t: f"{t.last_restorable_seconds_behind:.1f}"
)
COLUMN_BACKUP_RESTORABLE_VERSION = Column(
    "Restorable Version", lambda t: str(t.last_restorable_version)
)
COLUMN_BACKUP_RANGE_BYTES = Column("Range Bytes", lambda t: _bytes(t.range_bytes_written))
COLUMN_BACKUP_LOG_BYTES = Column("Log Bytes", lambda t: _bytes(t.mutation_log_bytes_written))

COLUMN_DR_BACKUP_INSTANCE_ID = Column("Instance Id", lambda i: i.id)
COLUMN_DR_BACKUP_INSTANCE_VERSION = Column("Version", lambda i: i.version)
COLUMN_DR_BACKUP_INSTANCE_LAST_UPDATED = Column("Last Updated", _last_updated)
COLUMN_DR_BACKUP_INSTANCE_MEMORY_USAGE = Column("Memory Usage", lambda i: _bytes(i.memory_usage))
COLUMN_DR_BACKUP_INSTANCE_RESIDENT_SIZE = Column(
    "Resident Size", lambda i: _bytes(i.resident_size)
)
COLUMN_DR_BACKUP_INSTANCE_MAIN_THREAD_CPU = Column(
    "Main Thread CPU", lambda i: f"{i.main_thread_cpu_seconds:.0f}s"
)
COLUMN_DR_BACKUP_INSTANCE_PROCESS_CPU = Column(
    "Process CPU", lambda i: f"{i.process_cpu_seconds:.0f}s"
)

COLUMN_DR_BACKUP_TAG_ID = Column("Tag", lambda t: t.id)
COLUMN_DR_BACKUP_TAG_STATE = Column("State", lambda t: titlify(t.backup_state))
COLUMN_DR_BACKUP_TAG_RUNNING = Column("Running", lambda t: boolify(t.running_backup))
COLUMN_DR_BACKUP_TAG_RESTORABLE = Column("Restorable", lambda t: boolify(t.backup_restorable))
COLUMN_DR_BACKUP_TAG_SECONDS_BEHIND = Column("Seconds Behind", lambda t: f"{t.seconds_behind:.1f}")
COLUMN_DR_BACKUP_TAG_LOG_BYTES = Column(
    "Log Bytes Written", lambda t: _bytes(t.mutation_log_bytes_written)
)
COLUMN_DR_BACKUP_TAG_RANGE_BYTES = Column(
    "Range Bytes Written", lambda t: _bytes(t.range_bytes_written)
)
COLUMN_DR_BACKUP_TAG_MUTATION_STREAM = Column("Mutation Stream Id", lambda t: t.mutation_stream_id)