import io

import pytest

from enscan import log
from enscan.log import Level, Logger


@pytest.fixture
def stream():
    return io.StringIO()


def test_info_has_label(stream):
    Logger(stream=stream).info("hello")
    assert stream.getvalue() == "[INF] hello\n"


def test_trailing_newline_trimmed(stream):
    Logger(stream=stream).warning("careful\n")
    assert stream.getvalue() == "[WRN] careful\n"


def test_debug_hidden_by_default(stream):
    logger = Logger(stream=stream)
    logger.debug("quiet")
    assert stream.getvalue() == ""
    assert logger.enabled(Level.DEBUG) is False


def test_debug_after_raising_level(stream):
    logger = Logger(stream=stream)
    logger.set_max_level(Level.DEBUG)
    logger.debug("loud")
    assert stream.getvalue() == "[DBG] loud\n"
    assert logger.enabled(Level.VERBOSE) is False


def test_metadata_appended(stream):
    Logger(stream=stream).error("boom", pid="42")
    out = stream.getvalue()
    assert out.startswith("[ERR] boom")
    assert "pid=42" in out


def test_print_has_no_label(stream):
    Logger(stream=stream).print("plain")
    assert stream.getvalue() == "plain\n"


def test_fatal_exits(stream):
    with pytest.raises(SystemExit) as exc:
        Logger(stream=stream).fatal("dead")
    assert exc.value.code == 1
    assert "[FTL] dead" in stream.getvalue()


def test_enabled_follows_level_order(stream):
    logger = Logger(stream=stream)
    logger.set_max_level(Level.ERROR)
    assert logger.enabled(Level.FATAL) is True
    assert logger.enabled(Level.ERROR) is True
    assert logger.enabled(Level.INFO) is False
    logger.set_max_level(Level.DEBUG)
    assert logger.enabled(Level.WARNING) is True
    assert logger.enabled(Level.DEBUG) is True
    assert logger.enabled(Level.VERBOSE) is False


def test_module_echo_goes_to_stderr(capsys):
    log.echo("banner text")
    assert "banner text" in capsys.readouterr().err