"""Tests for leveled logging and the timing decorator."""

from unittest.mock import patch

from listening_ports.debug import debug, log


@patch("listening_ports.debug.log_level", return_value="info")
def test_log_respects_level(mock_level, capsys):
    log("hidden", "debug")
    log("shown", "info")
    log("bad", "error")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "[INFO]" in err and "shown" in err
    assert "[ERROR]" in err and "bad" in err


@patch("listening_ports.debug.log_level", return_value="nonsense")
def test_log_unknown_level_falls_back_to_info(mock_level, capsys):
    log("hidden", "debug")
    log("shown", "warn")
    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "shown" in err


def test_log_goes_to_stderr(capsys):
    with patch("listening_ports.debug.log_level", return_value="debug"):
        log("message", "debug")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "message" in captured.err


@patch("listening_ports.debug.verbose", return_value=False)
@patch("listening_ports.debug.log")
def test_debug_decorator_quiet(mock_log, mock_verbose):
    @debug("query")
    def query():
        return [22]

    assert query() == [22]
    mock_log.assert_not_called()


@patch("listening_ports.debug.verbose", return_value=True)
@patch("listening_ports.debug.log")
def test_debug_decorator_summarises_long_results(mock_log, mock_verbose):
    @debug("privileged_tcp_free")
    def query():
        return list(range(1, 1024))

    assert len(query()) == 1023
    message = mock_log.call_args[0][0]
    assert message.startswith("privileged_tcp_free (")
    assert "1023 ports [1..1023]" in message


@patch("listening_ports.debug.verbose", return_value=True)
@patch("listening_ports.debug.log")
def test_debug_decorator_short_result(mock_log, mock_verbose):
    @debug("privileged_tcp_used")
    def query():
        return None

    query()
    assert mock_log.call_args[0][0].endswith(": None")


@patch("listening_ports.debug.verbose", return_value=True)
@patch("listening_ports.debug.log")
def test_debug_decorator_summarises_nested_report(mock_log, mock_verbose):
    @debug("port_report")
    def report():
        return {"privileged": {"used": [22], "free": list(range(23, 1024))}}

    report()
    message = mock_log.call_args[0][0]
    assert "'used': [22]" in message
    assert "1001 ports [23..1023]" in message
