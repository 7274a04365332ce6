"""Interactive terminal explorer of cluster status."""

import os
import re
import threading
import time
from dataclasses import replace
from datetime import datetime

import urwid

from fdbexplorer import backup_views, cluster_views, process_views
from fdbexplorer.components import Color, DataTable, SlideShow, StatsGrid
from fdbexplorer.display import format_duration
from fdbexplorer.helpkeys import HelpKeys
from fdbexplorer.interval import IntervalControl
from fdbexplorer.models import parse_root
from fdbexplorer.process import SortControl, Store, Update
from fdbexplorer.sources import ExclusionManager

STATUS_IN_PROGRESS = Color.YELLOW
STATUS_SUCCESS = Color.GREEN
STATUS_FAILURE = Color.RED

TLS_SUFFIX = ":tls"

_PALETTE = [
    (Color.WHITE.value, "white", ""),
    (Color.AQUA.value, "light cyan", ""),
    (Color.YELLOW.value, "yellow", ""),
    (Color.GREEN.value, "light green", ""),
    (Color.RED.value, "light red", ""),
    (Color.BLUE.value, "light blue", ""),
    (Color.OLIVE.value, "brown", ""),
    (Color.PURPLE.value, "light magenta", ""),
    ("helpkey", "black", "dark cyan"),
    ("focus", "black", "light gray"),
    ("tab_active", "black", "yellow"),
]

_FOCUS_MAP = {None: "focus", **{colour.value: "focus" for colour in Color}}

_MARKUP = re.compile(r"\[(black:darkcyan|:-)\]")


def manage_processes(em, store, include):
    """Include or exclude every selected process through ``em``."""
    action = em.include_process if include else em.exclude_process
    for proc in store.filter_fetch(process_views.selected):
        action(proc.fdb_data.address)


def _strip_tls(proc):
    if proc.address.endswith(TLS_SUFFIX):
        return replace(proc, address=proc.address[: -len(TLS_SUFFIX)], tls=True)
    return replace(proc, tls=False)


def _tview_markup(text):
    """Turn the help bar's colour tags into urwid markup."""
    markup = []
    attr = None
    for index, part in enumerate(_MARKUP.split(text)):
        if index % 2:
            attr = "helpkey" if part == "black:darkcyan" else None
        elif part:
            markup.append((attr, part) if attr else part)
    return markup or ""


class _Row(urwid.WidgetWrap):
    def __init__(self, widget, selectable):
        super().__init__(widget)
        self._is_selectable = selectable

    def selectable(self):
        return self._is_selectable

    def keypress(self, size, key):
        return key


def _cells_row(cells, widths):
    columns = []
    for cell, (width, expand) in zip(cells, widths):
        text = urwid.Text((cell.color.value, cell.text), wrap="clip")
        columns.append(("weight", max(width, 1), text) if expand else (max(width, 1), text))
    return urwid.Columns(columns, dividechars=1)


class _TableWidget(urwid.WidgetWrap):
    """Shows a DataTable with its header fixed above a scrolling body."""

    def __init__(self, table, selectable):
        self._table = table
        self._selectable = selectable
        self._walker = urwid.SimpleFocusListWalker([])
        self._header = urwid.WidgetPlaceholder(urwid.Text(""))
        super().__init__(urwid.Frame(body=urwid.ListBox(self._walker), header=self._header))

    def refresh(self):
        rows = [
            [self._table.get_cell(r, c) for c in range(self._table.column_count())]
            for r in range(self._table.row_count())
        ]
        widths = [
            (max(len(row[c].text) for row in rows), rows[0][c].expansion > 0)
            for c in range(self._table.column_count())
        ]
        self._header.original_widget = _cells_row(rows[0], widths)
        old_focus = self._walker.focus if len(self._walker) else 0
        self._walker[:] = [
            urwid.AttrMap(_Row(_cells_row(row, widths), self._selectable), None, _FOCUS_MAP)
            for row in rows[1:]
        ]
        if len(self._walker):
            self._walker.set_focus(min(old_focus or 0, len(self._walker) - 1))

    def focused_row(self):
        if not len(self._walker):
            return 0
        return (self._walker.focus or 0) + 1


class _GridWidget(urwid.WidgetWrap):
    """Shows a StatsGrid or the help bar as rows of equal-width cells."""

    def __init__(self, grid, markup=False):
        self._grid = grid
        self._markup = markup
        self._pile = urwid.Pile([])
        super().__init__(self._pile)

    def refresh(self):
        rows = []
        for r in range(self._grid.row_count()):
            texts = []
            for c in range(self._grid.column_count()):
                cell = self._grid.get_cell(r, c)
                content = _tview_markup(cell.text) if self._markup else (cell.color.value, cell.text)
                texts.append(("weight", 1, urwid.Text(content, wrap="clip")))
            rows.append(urwid.Columns(texts, dividechars=1))
        self._pile.contents = [(row, self._pile.options()) for row in rows]


class Explorer:
    """The interactive explorer: data refresh, key actions and the terminal UI."""

    def __init__(self, provider):
        self.provider = provider
        self.em = provider if isinstance(provider, ExclusionManager) else None
        self.raw_json = b""
        self.status_text = ""
        self.status_colour = Color.WHITE

        self.interval = IntervalControl()
        self.sorter = SortControl()
        self.store = Store(self.sorter.sort_key)

        pv = process_views
        self.locality_table = DataTable([
            pv.COLUMN_SELECTED, pv.COLUMN_IP_ADDRESS_PORT, pv.COLUMN_TLS, pv.COLUMN_STATUS,
            pv.COLUMN_MACHINE, pv.COLUMN_LOCALITY, pv.COLUMN_CLASS, pv.COLUMN_ROLES,
            pv.COLUMN_VERSION, pv.COLUMN_UPTIME,
        ])
        self.usage_table = DataTable([
            pv.COLUMN_SELECTED, pv.COLUMN_IP_ADDRESS_PORT, pv.COLUMN_ROLES, pv.COLUMN_CPU_ACTIVITY,
            pv.COLUMN_RAM_USAGE, pv.COLUMN_NETWORK_ACTIVITY, pv.COLUMN_DISK_USAGE,
            pv.COLUMN_DISK_ACTIVITY,
        ])
        self.storage_table = DataTable([
            pv.COLUMN_SELECTED, pv.COLUMN_IP_ADDRESS_PORT, pv.COLUMN_CPU_ACTIVITY,
            pv.COLUMN_RAM_USAGE, pv.COLUMN_DISK_USAGE, pv.COLUMN_DISK_ACTIVITY,
            pv.COLUMN_KV_STORAGE, pv.COLUMN_STORAGE_DURABILITY_RATE, pv.COLUMN_STORAGE_LAG,
            pv.COLUMN_STORAGE_TOTAL_QUERIES,
        ])
        self.log_table = DataTable([
            pv.COLUMN_SELECTED, pv.COLUMN_IP_ADDRESS_PORT, pv.COLUMN_CPU_ACTIVITY,
            pv.COLUMN_RAM_USAGE, pv.COLUMN_DISK_USAGE, pv.COLUMN_DISK_ACTIVITY,
            pv.COLUMN_LOG_QUEUE_LENGTH, pv.COLUMN_LOG_DURABILITY_RATE,
            pv.COLUMN_LOG_QUEUE_STORAGE,
        ])
        self.store.add_notifiable(self.locality_table.update, pv.match_all)
        self.store.add_notifiable(self.usage_table.update, pv.match_all)
        self.store.add_notifiable(self.storage_table.update, pv.role_match("storage"))
        self.store.add_notifiable(self.log_table.update, pv.role_match("log"))
        self._process_tables = (
            self.locality_table, self.usage_table, self.storage_table, self.log_table,
        )

        cv = cluster_views
        self.cluster_health_grid = StatsGrid(
            [
                [cv.STAT_CLUSTER_HEALTH, cv.STAT_REBALANCE_QUEUED],
                [cv.STAT_REPLICAS_REMAINING, cv.STAT_REBALANCE_INFLIGHT],
                [cv.STAT_RECOVERY_STATE, cv.STAT_EMPTY],
                [cv.STAT_RECOVERY_DESCRIPTION, cv.STAT_DATABASE_LOCKED],
            ],
            cv.ClusterHealth(),
        )
        self.cluster_stats_grid = StatsGrid(
            [
                [cv.STAT_TX_STARTED, cv.STAT_READS],
                [cv.STAT_TX_COMMITTED, cv.STAT_WRITES],
                [cv.STAT_TX_CONFLICTED, cv.STAT_BYTES_READ],
                [cv.STAT_TX_REJECTED, cv.STAT_BYTES_WRITTEN],
            ],
            cv.ClusterStats(),
        )

        bv = backup_views
        self.backup_instances_table = DataTable([
            bv.COLUMN_BACKUP_INSTANCE_ID, bv.COLUMN_BACKUP_INSTANCE_VERSION,
            bv.COLUMN_BACKUP_INSTANCE_CONFIGURED_WORKERS, bv.COLUMN_BACKUP_INSTANCE_USED_MEMORY,
            bv.COLUMN_BACKUP_INSTANCE_RECENT_TRANSFER, bv.COLUMN_BACKUP_INSTANCE_RECENT_OPERATIONS,
        ])
        self.backup_tags_table = DataTable([
            bv.COLUMN_BACKUP_TAG_ID, bv.COLUMN_BACKUP_STATUS, bv.COLUMN_BACKUP_RUNNING,
            bv.COLUMN_BACKUP_RESTORABLE, bv.COLUMN_BACKUP_SECONDS_BEHIND,
            bv.COLUMN_BACKUP_RESTORABLE_VERSION, bv.COLUMN_BACKUP_RANGE_BYTES,
            bv.COLUMN_BACKUP_LOG_BYTES,
        ])
        dr_instance_columns = [
            bv.COLUMN_DR_BACKUP_INSTANCE_ID, bv.COLUMN_DR_BACKUP_INSTANCE_LAST_UPDATED,
            bv.COLUMN_DR_BACKUP_INSTANCE_PROCESS_CPU, bv.COLUMN_DR_BACKUP_INSTANCE_MEMORY_USAGE,
            bv.COLUMN_DR_BACKUP_INSTANCE_RESIDENT_SIZE, bv.COLUMN_DR_BACKUP_INSTANCE_VERSION,
        ]
        dr_tag_columns = [
            bv.COLUMN_DR_BACKUP_TAG_ID, bv.COLUMN_DR_BACKUP_TAG_RUNNING,
            bv.COLUMN_DR_BACKUP_TAG_RESTORABLE, bv.COLUMN_DR_BACKUP_TAG_SECONDS_BEHIND,
            bv.COLUMN_DR_BACKUP_TAG_STATE, bv.COLUMN_DR_BACKUP_TAG_RANGE_BYTES,
            bv.COLUMN_DR_BACKUP_TAG_LOG_BYTES, bv.COLUMN_DR_BACKUP_TAG_MUTATION_STREAM,
        ]
        self.dr_instances_table = DataTable(dr_instance_columns)
        self.dr_tags_table = DataTable(dr_tag_columns)
        self.dr_dest_instances_table = DataTable(dr_instance_columns)
        self.dr_dest_tags_table = DataTable(dr_tag_columns)

        self._updatables = [
            self.store.update,
            cv.update_cluster_health(self.cluster_health_grid.update),
            cv.update_cluster_stats(self.cluster_stats_grid.update),
            bv.update_backup_instances(self.backup_instances_table.update),
            bv.update_backup_tags(self.backup_tags_table.update),
            bv.update_dr_backup_instances(self.dr_instances_table.update),
            bv.update_dr_backup_tags(self.dr_tags_table.update),
            bv.update_dr_backup_dest_instances(self.dr_dest_instances_table.update),
            bv.update_dr_backup_dest_tags(self.dr_dest_tags_table.update),
        ]

        self.slides = SlideShow()
        self.slides.add("Locality", self.locality_table)
        self.slides.add("Usage Overview", self.usage_table)
        self.slides.add("Storage Processes", self.storage_table)
        self.slides.add("Log Processes", self.log_table)
        self.slides.add("Backups", (self.backup_instances_table, self.backup_tags_table))
        self.slides.add(
            "DR Backups",
            (
                self.dr_instances_table, self.dr_tags_table,
                self.dr_dest_instances_table, self.dr_dest_tags_table,
            ),
        )

        self.help_keys = HelpKeys(self.sorter, self.interval, self.em is not None)

        self._lock = threading.RLock()
        self._refresh = threading.Event()
        self._stopping = threading.Event()
        self._loop = None
        self._wake_fd = None
        self._table_widgets = {}
        self._grid_widgets = []
        self._slide_widgets = []
        self._status_widget = None
        self._tab_bar = None
        self._page_holder = None

    def _set_status(self, message, colour):
        with self._lock:
            stamp = datetime.now().strftime("%H:%M:%S")
            self.status_text = f"[{stamp}] {message}"
            self.status_colour = colour
        self._wake()

    def update_from_source(self):
        """Fetch and apply one refresh; returns the Update, or None on failure."""
        self._set_status("Updating data...", STATUS_IN_PROGRESS)
        start = time.monotonic()

        try:
            raw = self.provider.status()
        except Exception as exc:
            self._set_status(f"Failed to query Root data source: {exc}", STATUS_FAILURE)
            return None

        try:
            root = parse_root(raw)
        except (ValueError, TypeError) as exc:
            self._set_status(f"Failed to unmarshal data: {exc}", STATUS_FAILURE)
            return None

        root.cluster.processes = {
            pid: _strip_tls(proc) for pid, proc in root.cluster.processes.items()
        }
        update = Update(root=root)

        if self.em is not None:
            try:
                update.excluded_processes = list(self.em.excluded_processes() or [])
            except Exception as exc:
                self._set_status(
                    f"Failed to query excluded processes data source: {exc}", STATUS_FAILURE
                )
                return None
            try:
                update.exclusion_in_progress = list(
                    self.em.exclusion_in_progress_processes() or []
                )
            except Exception as exc:
                self._set_status(
                    f"Failed to query exclusion in progress data source: {exc}", STATUS_FAILURE
                )
                return None

        self.raw_json = bytes(raw)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        next_in = format_duration(self.interval.duration().total_seconds())
        self._set_status(f"Updated in {elapsed_ms}ms, next in {next_in}.", STATUS_SUCCESS)

        with self._lock:
            for apply in self._updatables:
                apply(update)
        self._wake()
        return update

    def snapshot_data(self):
        """Write the last raw status document to a file in the working directory.

        Returns the file name; raises OSError when the file cannot be written.
        """
        file_name = f"fdbexplorer-status-snapshot-{int(time.time())}.json"
        with open(file_name, "wb") as handle:
            handle.write(self.raw_json)
        return file_name

    def _focused_row(self, table):
        widget = self._table_widgets.get(id(table))
        return widget.focused_row() if widget is not None else 1

    def handle_key(self, key):
        """Act on a key press; returns None when handled, else the key."""
        with self._lock:
            if key == "left":
                self.slides.prev()
            elif key == "right":
                self.slides.next()
            elif key == "f1":
                self.sorter.next()
                self.store.sort()
            elif key == "f2":
                try:
                    file_name = self.snapshot_data()
                except OSError as exc:
                    self._set_status(f"Failed to write snapshot: {exc}", STATUS_FAILURE)
                else:
                    self._set_status(f"Snapshot written: {file_name}", STATUS_SUCCESS)
            elif key == "f3":
                self.interval.next()
            elif key == "f5":
                self._refresh.set()
            elif key in ("f7", "f8"):
                if self.em is not None:
                    include = key == "f7"
                    try:
                        manage_processes(self.em, self.store, include)
                    except Exception as exc:
                        verb = "include" if include else "exclude"
                        self._set_status(
                            f"Failed to {verb} processes: {exc}", STATUS_FAILURE
                        )
            elif key == "esc":
                self._stopping.set()
                self._refresh.set()
                if self._loop is not None:
                    raise urwid.ExitMainLoop()
            elif key == "ctrl l":
                if self._loop is not None:
                    self._loop.screen.clear()
            elif key == "\\":
                self.store.clear_selected()
                self.store.sort()
            elif key == " " and self.slides.current_page in self._process_tables:
                table = self.slides.current_page
                row = self._focused_row(table)
                if not 1 <= row < table.row_count():
                    return key
                table.get(row).metadata.toggle_selected()
                self.store.sort()
            else:
                return key
        return None

    def _wake(self):
        if self._wake_fd is not None:
            try:
                os.write(self._wake_fd, b"!")
            except OSError:
                pass

    def _on_wake(self, _data):
        self._refresh_widgets()
        return True

    def _unhandled_input(self, key):
        if isinstance(key, str):
            self.handle_key(key)
            self._refresh_widgets()

    def _refresh_widgets(self):
        with self._lock:
            for widget in self._table_widgets.values():
                widget.refresh()
            for widget in self._grid_widgets:
                widget.refresh()
            if self._status_widget is not None:
                self._status_widget.set_text((self.status_colour.value, self.status_text))
            if self._tab_bar is not None:
                markup = []
                for index, title in enumerate(self.slides.titles):
                    attr = "tab_active" if index == self.slides.current else Color.YELLOW.value
                    markup.extend([f"{index + 1} ", (attr, title), "  "])
                self._tab_bar.set_text(markup)
            if self._page_holder is not None:
                self._page_holder.original_widget = self._slide_widgets[self.slides.current]

    def _table_widget(self, table, selectable):
        widget = _TableWidget(table, selectable)
        self._table_widgets[id(table)] = widget
        return widget

    def _titled(self, title, grid):
        widget = _GridWidget(grid)
        self._grid_widgets.append(widget)
        heading = urwid.Text((Color.AQUA.value, title), align="center")
        return urwid.Pile([heading, widget])

    def _build_ui(self):
        for table in self._process_tables:
            self._slide_widgets.append(self._table_widget(table, True))

        self._slide_widgets.append(
            urwid.Pile([
                ("weight", 1, self._table_widget(self.backup_instances_table, False)),
                ("weight", 1, self._table_widget(self.backup_tags_table, False)),
            ])
        )

        def dr_box(instances, tags, title):
            body = urwid.Pile([
                ("weight", 2, self._table_widget(instances, False)),
                ("weight", 1, self._table_widget(tags, False)),
            ])
            return urwid.LineBox(body, title=title, title_attr=Color.AQUA.value)

        self._slide_widgets.append(
            urwid.Pile([
                ("weight", 1, dr_box(
                    self.dr_instances_table, self.dr_tags_table, "'Source' (Local) Cluster"
                )),
                ("weight", 1, dr_box(
                    self.dr_dest_instances_table, self.dr_dest_tags_table,
                    "'Destination' (Remote) Cluster",
                )),
            ])
        )

        top = urwid.Columns(
            [
                ("weight", 2, self._titled("Cluster Health", self.cluster_health_grid)),
                ("weight", 1, self._titled("Cluster Workload", self.cluster_stats_grid)),
            ],
            dividechars=3,
        )

        self._tab_bar = urwid.Text("", align="center", wrap="clip")
        self._page_holder = urwid.WidgetPlaceholder(self._slide_widgets[0])
        slides = urwid.Frame(
            body=urwid.Padding(self._page_holder, left=1, right=1),
            header=urwid.Pile([self._tab_bar, urwid.Divider()]),
        )

        help_widget = _GridWidget(self.help_keys, markup=True)
        self._grid_widgets.append(help_widget)
        self._status_widget = urwid.Text("", align="right", wrap="clip")
        bottom = urwid.Padding(
            urwid.Columns([("weight", 1, help_widget), ("weight", 1, self._status_widget)]),
            left=1,
            right=1,
        )

        body = urwid.Pile([
            ("fixed", 5, urwid.Filler(urwid.Padding(top, left=1, right=1), valign="top")),
            ("pack", urwid.Divider("─")),
            ("weight", 1, slides),
        ])
        body.focus_position = 2
        return urwid.Frame(body=body, footer=urwid.Pile([urwid.Divider("─"), bottom]))

    def _run_data(self):
        self.update_from_source()
        while not self._stopping.is_set():
            self._refresh.wait(self.interval.duration().total_seconds())
            self._refresh.clear()
            if self._stopping.is_set():
                break
            self.update_from_source()

    def run(self):
        """Start the terminal UI and refresh data in the background until Esc."""
        root = self._build_ui()
        self._loop = urwid.MainLoop(root, _PALETTE, unhandled_input=self._unhandled_input)
        self._wake_fd = self._loop.watch_pipe(self._on_wake)
        self._refresh_widgets()

        worker = threading.Thread(target=self._run_data, daemon=True)
        worker.start()
        try:
            self._loop.run()
        finally:
            self._stopping.set()
            self._refresh.set()
            fd, self._wake_fd = self._wake_fd, None
            self._loop.remove_watch_pipe(fd)
            self._loop = None