"""Cluster health and workload summaries and their statistics."""

from dataclasses import dataclass

from fdbexplorer.components import Color, Column
from fdbexplorer.display import NONE, boolify, convert, titlify


@dataclass(frozen=True)
class ClusterHealth:
    """Health of the cluster as a whole."""

    healthy: bool = False
    health: str = ""
    min_replicas: int = 0
    rebalance_in_flight: int = 0
    rebalance_queued: int = 0
    recovery_state: str = ""
    recovery_description: str = ""
    database_locked: bool = False


@dataclass(frozen=True)
class ClusterStats:
    """Cluster-wide workload rates."""

    tx_started: float = 0.0
    tx_committed: float = 0.0
    tx_conflicted: float = 0.0
    tx_rejected: float = 0.0
    reads: float = 0.0
    writes: float = 0.0
    bytes_read: float = 0.0
    bytes_written: float = 0.0


def update_cluster_health(fn):
    """Wrap ``fn`` so it receives the ClusterHealth of each refresh."""

    def apply(update):
        cluster = update.root.cluster
        state = cluster.data.state
        moving = cluster.data.moving_data
        fn(
            ClusterHealth(
                healthy=state.healthy,
                health=titlify(state.name),
                min_replicas=state.min_replicas_remaining,
                rebalance_queued=moving.in_queue_bytes,
                rebalance_in_flight=moving.in_flight_bytes,
                recovery_state=titlify(cluster.recovery_state.name),
                recovery_description=cluster.recovery_state.description,
                database_locked=cluster.database_lock_state.locked,
            )
        )

    return apply


def update_cluster_stats(fn):
    """Wrap ``fn`` so it receives the ClusterStats of each refresh."""

    def apply(update):
        workload = update.root.cluster.workload
        tx = workload.transactions
        fn(
            ClusterStats(
                tx_started=tx.started.hz,
                tx_committed=tx.committed.hz,
                tx_conflicted=tx.conflicted.hz,
                tx_rejected=tx.rejected_for_queued_too_long.hz,
                reads=workload.operations.reads.hz,
                writes=workload.operations.writes.hz,
                bytes_read=workload.bytes.read.hz,
                bytes_written=workload.bytes.written.hz,
            )
        )

    return apply


def _rate(attr):
    def data(stats):
        return f"{getattr(stats, attr):.1f}/s"

    return data


STAT_CLUSTER_HEALTH = Column(
    "Healthy",
    lambda h: h.health,
    lambda h: Color.GREEN if h.healthy else Color.RED,
)
STAT_REPLICAS_REMAINING = Column("Replicas Remaining", lambda h: str(h.min_replicas))
STAT_RECOVERY_STATE = Column("Recovery State", lambda h: h.recovery_state)
STAT_RECOVERY_DESCRIPTION = Column("Recovery Description", lambda h: h.recovery_description)
STAT_REBALANCE_QUEUED = Column(
    "Rebalance Queued", lambda h: convert(float(h.rebalance_queued), 1, NONE)
)
STAT_REBALANCE_INFLIGHT = Column(
    "Rebalance In-flight", lambda h: convert(float(h.rebalance_in_flight), 1, NONE)
)
STAT_DATABASE_LOCKED = Column(
    "Database Locked",
    lambda h: boolify(h.database_locked),
    lambda h: Color.RED if h.database_locked else Color.WHITE,
)
STAT_EMPTY = Column("", lambda h: "")

STAT_TX_STARTED = Column("Tx Started", _rate("tx_started"))
STAT_TX_COMMITTED = Column("Tx Committed", _rate("tx_committed"))
STAT_TX_CONFLICTED = Column("Tx Conflicted", _rate("tx_conflicted"))
STAT_TX_REJECTED = Column("Tx Rejected", _rate("tx_rejected"))
STAT_READS = Column("Reads", _rate("reads"))
STAT_WRITES = Column("Writes", _rate("writes"))
STAT_BYTES_READ = Column("Bytes Read", lambda s: convert(s.bytes_read, 1, "s"))
STAT_BYTES_WRITTEN = Column("Bytes Written", lambda s: convert(s.bytes_written, 1, "s"))