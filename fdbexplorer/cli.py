"""Command-line entry point of the explorer."""

import argparse
import sys

from fdbexplorer.http_server import DEFAULT_ADDRESS, StatusServer
from fdbexplorer.sources import select_source

try:
    from fdbexplorer import __version__
except ImportError:
    __version__ = "unknown"


def build_parser():
    """The argument parser for the explorer's options."""
    parser = argparse.ArgumentParser(
        prog="fdbexplorer",
        description="Explore the status of a cluster from its 'status json' output.",
    )
    parser.add_argument(
        "--input-file",
        "-input-file",
        dest="input_file",
        default="",
        help="Location of an output of 'status json' to explore, will not connect to the cluster.",
    )
    parser.add_argument(
        "--url",
        "-url",
        dest="url",
        default="",
        help="URL to fetch status json from periodically.",
    )
    parser.add_argument(
        "--http-enable",
        "-http-enable",
        dest="http_enable",
        action="store_true",
        help="If the http output should be enabled, making the `status json` output "
        "available on /status/json.",
    )
    parser.add_argument(
        "--http-address",
        "-http-address",
        dest="http_address",
        default=DEFAULT_ADDRESS,
        help="Host and port number for http server to listen on, using 0.0.0.0 for all "
        "interface bind.",
    )
    return parser


def select_output(provider, http_enable, http_address):
    """The HTTP server when enabled, otherwise the interactive explorer."""
    if http_enable:
        return StatusServer(provider, http_address)

    from fdbexplorer.app import Explorer

    return Explorer(provider)


def main(argv=None):
    """Run the explorer; returns the process exit status."""
    print(f"fdbexplorer {__version__}\n")

    parser = build_parser()
    args = parser.parse_args(argv)

    provider = select_source(args.input_file, args.url)
    if provider is None:
        parser.print_help(sys.stderr)
        return 1

    select_output(provider, args.http_enable, args.http_address).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())