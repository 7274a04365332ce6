# fdbexplorer

A terminal explorer for the `status json` document that a FoundationDB
cluster reports. It shows cluster health and workload, per-process locality
and resource usage, storage and log process details, and backup and DR
backup state, fetching the document again on a fixed interval.

Instead of drawing the terminal interface it can serve the status document
over HTTP.

## Installation

```
pip install .
```

This installs the `fdbexplorer` command. The terminal interface uses
`urwid`.

## Usage

Explore a saved `status json` output:

```
fdbexplorer --input-file status.json
```

Fetch the status document from a URL with a GET request on every refresh:

```
fdbexplorer --url http://localhost:8080/status/json
```

Serve the status document on `/status/json` instead of showing the
interface:

```
fdbexplorer --input-file status.json --http-enable --http-address 127.0.0.1:8080
```

The command first prints `fdbexplorer <version>`. When neither
`--input-file` nor `--url` is given it prints the options to standard error
and exits with status 1. If both are given, the file is used.

### Options

Each option may also be written with a single dash (`-url`, `-input-file`, ...).

| Option | Default | Meaning |
| --- | --- | --- |
| `--input-file` | | Location of an output of `status json` to explore. |
| `--url` | | URL to fetch status json from periodically. |
| `--http-enable` | off | Serve the status json on `/status/json` instead of running the interface. |
| `--http-address` | `127.0.0.1:8080` | Host and port for the HTTP server; use `0.0.0.0` to bind all interfaces. |

### HTTP relay

With `--http-enable`, a GET on `/status/json` reads the status document from
the chosen source on each request and returns it as `application/json`. If
the source fails, the reply is status 500 with the error text. Any other path
or method gets a 404.

### Keys

| Key | Action |
| --- | --- |
| Left / Right | Previous / next page |
| F1 | Cycle the process sort order (Address, Role, Class, Uptime, Selected, Excluded) |
| F2 | Write the last fetched status json to `fdbexplorer-status-snapshot-<unix time>.json` in the working directory |
| F3 | Cycle the refresh interval (5s, 3s, 1s, 10s) |
| F5 | Refresh now |
| F7 / F8 | Include / exclude the selected processes, where the source supports it (see below) |
| Space | Toggle selection of the process under the cursor, on the process pages |
| `\` | Clear the selection |
| Ctrl-L | Redraw the screen |
| Esc | Quit |

The bottom bar lists the function keys with the current sort order and
interval. On the right it shows the result of the last action, such as
`Updated in 12ms, next in 5s.` or the error from a failed fetch.

Process rows are coloured by state:

- red: degraded
- yellow: has messages
- blue: excluded or under maintenance
- olive: excluded while an exclusion is in progress
- purple: known only from the exclusion list
- green: selected

## Pages

- **Locality**: address, TLS, status, machine, data hall / data centre, class, roles, version, uptime.
- **Usage Overview**: CPU, RAM, network and disk activity per process.
- **Storage Processes**: KV storage, input/durable rate, data and durability lag, queries.
- **Log Processes**: queue length, input/durable rate, queue storage.
- **Backups**: backup agent instances and backup tags.
- **DR Backups**: source and destination cluster DR instances and tags.

## Using the modules

- `fdbexplorer.models.parse_root(raw)` turns a status document (bytes or
  str) into a `Root` dataclass tree. It raises `ValueError` for malformed
  JSON or a field of the wrong type.
- `fdbexplorer.sources.FileSource(path)` and `UrlSource(url)` provide
  `status()`, which returns the raw document or raises `StatusSourceError`.
  `select_source(input_file, url)` picks one of them, or returns `None`.
- `fdbexplorer.http_server.StatusServer(provider, address)` builds responses
  with `handle(method, path)` and serves them with `run()`.
- `fdbexplorer.app.Explorer(provider)` is the terminal interface. Start it
  with `run()`.
- `fdbexplorer.display` has the formatting helpers `convert`, `titlify`,
  `boolify` and `format_duration`.

## What it does not do

- It does not connect to a cluster itself. It has no cluster-file option and
  no database client. The status document comes only from a file or a URL.
- Including and excluding processes (F7 / F8) works only with a source that
  implements the `ExclusionManager` protocol. `FileSource` and `UrlSource` do
  not implement it, so with the built-in sources these keys show `-` and do
  nothing, and no exclusion-list state is shown.

## Development

```
pip install -e ".[test]"
pytest
```