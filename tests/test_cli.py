import pytest

from fdbexplorer.app import Explorer
from fdbexplorer.cli import build_parser, main, select_output
from fdbexplorer.http_server import StatusServer
from fdbexplorer.sources import FileSource, UrlSource


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.input_file == ""
    assert args.url == ""
    assert args.http_enable is False
    assert args.http_address == "127.0.0.1:8080"


def test_parser_double_dash_options():
    args = build_parser().parse_args(
        ["--input-file", "status.json", "--http-enable", "--http-address", "0.0.0.0:9000"]
    )
    assert args.input_file == "status.json"
    assert args.http_enable is True
    assert args.http_address == "0.0.0.0:9000"


def test_parser_single_dash_options():
    args = build_parser().parse_args(["-url", "http://localhost/status"])
    assert args.url == "http://localhost/status"
    assert args.input_file == ""


def test_select_output_http_enabled():
    source = FileSource("status.json")
    out = select_output(source, True, "0.0.0.0:9000")
    assert isinstance(out, StatusServer)
    assert out.address == "0.0.0.0:9000"
    assert out.provider is source


def test_select_output_defaults_to_explorer():
    source = UrlSource("http://localhost/status")
    out = select_output(source, False, "127.0.0.1:8080")
    assert isinstance(out, Explorer)
    assert out.provider is source
    assert out.em is None


def test_main_without_source_prints_usage_and_fails(capsys):
    assert main([]) == 1
    captured = capsys.readouterr()
    assert captured.out.startswith("fdbexplorer ")
    assert "--input-file" in captured.err
    assert "--http-address" in captured.err


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as exc_info:
        main(["--no-such-option"])
    assert exc_info.value.code == 2