import json
import logging

from argon2.low_level import Type

from argon2_harness.config import load_settings
from argon2_harness.crypto.context import HashContext
from argon2_harness.crypto.primitive import invoke
from argon2_harness.logging.json_logger import JSONFormatter, configure_json_logging


def test_settings_defaults(monkeypatch):
    for name in ("ARGON2_KAT_FILENAME", "ARGON2_ENCODED_CAPACITY", "ARGON2_CPU_GHZ",
                 "ARGON2_LOG_LEVEL", "ARGON2_LOG_JSON"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.kat_filename == "kat-argon2.log"
    assert settings.encoded_capacity == 300
    assert settings.cpu_ghz == 1.0
    assert settings.log_level == "WARNING"
    assert settings.log_json is False


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("ARGON2_KAT_FILENAME", "/tmp/other.log")
    monkeypatch.setenv("ARGON2_ENCODED_CAPACITY", "128")
    monkeypatch.setenv("ARGON2_CPU_GHZ", "3.2")
    monkeypatch.setenv("ARGON2_LOG_LEVEL", "debug")
    monkeypatch.setenv("ARGON2_LOG_JSON", "1")
    settings = load_settings()
    assert settings.kat_filename == "/tmp/other.log"
    assert settings.encoded_capacity == 128
    assert settings.cpu_ghz == 3.2
    assert settings.log_level == "DEBUG"
    assert settings.log_json is True


def test_json_formatter():
    record = logging.LogRecord("argon2_harness.test", logging.ERROR, __file__, 1,
                               "status %d", (-22,), None)
    payload = json.loads(JSONFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "argon2_harness.test"
    assert payload["message"] == "status -22"
    assert "timestamp" in payload


def test_configure_json_logging_installs_once():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        configure_json_logging(logging.INFO)
        configure_json_logging(logging.INFO)
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 1
        assert isinstance(added[0].formatter, JSONFormatter)
    finally:
        for h in list(root.handlers):
            if h not in before:
                root.removeHandler(h)


def test_json_formatter_carries_harness_fields():
    record = logging.LogRecord("argon2_harness.crypto.primitive", logging.ERROR, __file__, 1,
                               "Argon2%s returned %d", ("d", -12), None)
    record.status = -12
    record.argon2_type = "d"
    payload = json.loads(JSONFormatter().format(record))
    assert payload["status"] == -12
    assert payload["argon2_type"] == "d"
    assert "m_cost" not in payload
    assert "threads" not in payload


def test_primitive_failure_is_logged_with_status(caplog):
    ctx = HashContext(outlen=32, pwd=bytearray(b"pw"), salt=bytes(16),
                      t_cost=0, m_cost=64, lanes=4, threads=4)
    with caplog.at_level(logging.ERROR, logger="argon2_harness.crypto.primitive"):
        status = invoke(ctx, Type.I)
    record = caplog.records[-1]
    assert record.status == status != 0
    payload = json.loads(JSONFormatter().format(record))
    assert payload["status"] == status
    assert payload["argon2_type"] == "i"
