#!/usr/bin/env python3
"""Tests for configuration loading."""
import io
import json
import logging
from pathlib import Path

import pytest
import yaml

from healthmetrics.config import Config, FlattenerConfig, load_config, setup_logging
from healthmetrics.series import Percentile


def write_config(tmp_path, raw):
    path = tmp_path / "healthmetrics.yaml"
    path.write_text(yaml.safe_dump(raw))
    return str(path)


def test_defaults():
    config = Config()

    assert config.global_.log_level == "INFO"
    assert config.flattener.latency_family == "LATENCY"
    assert config.flattener.percentiles == [Percentile.P50, Percentile.P95, Percentile.P99]
    assert config.formatters.placeholder == "---"
    assert config.formatters.exponential_threshold == 1000


def test_load_config(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = write_config(tmp_path, {
        "global": {"log_level": "DEBUG", "log_format": "json"},
        "flattener": {"percentiles": ["P99", "P50"]},
        "formatters": {"latency_unit": "millis"},
    })

    config = load_config(path)

    assert config.global_.log_level == "DEBUG"
    assert config.global_.log_format == "json"
    assert config.flattener.percentiles == [Percentile.P99, Percentile.P50]
    assert config.formatters.latency_unit == "millis"
    assert config.formatters.request_rate_unit == "RPS"


def test_empty_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    path = tmp_path / "empty.yaml"
    path.write_text("")

    assert load_config(str(path)) == Config()


def test_log_level_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    path = write_config(tmp_path, {"global": {"log_level": "DEBUG"}})

    assert load_config(path).global_.log_level == "WARNING"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


@pytest.mark.parametrize("raw", [
    {"flattener": {"percentiles": []}},
    {"flattener": {"percentiles": ["P50", "P50"]}},
    {"flattener": {"percentiles": ["P75"]}},
    {"formatters": {"exponential_threshold": 0}},
    {"global": {"log_format": "xml"}},
])
def test_invalid_config(tmp_path, monkeypatch, raw):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    with pytest.raises(ValueError):
        load_config(write_config(tmp_path, raw))


def test_flattener_config_rejects_duplicates():
    with pytest.raises(ValueError):
        FlattenerConfig(percentiles=["P95", "P95"])


def test_setup_logging():
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("bogus", "json")
    assert logging.getLogger().level == logging.INFO


def test_example_config_loads(monkeypatch):
    """The shipped example config matches the defaults."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    config = load_config(str(Path(__file__).parent.parent / "healthmetrics.example.yaml"))

    assert isinstance(config, Config)
    assert config == Config()


def test_json_log_lines_are_valid_json():
    stream = io.StringIO()
    setup_logging("INFO", "json", stream=stream)

    logging.getLogger("healthmetrics.timeseries").info('latency "p99" spiked\nagain')

    record = json.loads(stream.getvalue().splitlines()[0])
    assert record["message"] == 'latency "p99" spiked\nagain'
    assert record["levelname"] == "INFO"
    assert record["name"] == "healthmetrics.timeseries"


def test_text_log_format():
    stream = io.StringIO()
    setup_logging("INFO", stream=stream)

    logging.getLogger("healthmetrics.formatters").warning("placeholder rendered")

    assert stream.getvalue().rstrip().endswith("| WARNING  | healthmetrics.formatters | placeholder rendered")


def test_top_level_list_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    path = tmp_path / "list.yaml"
    path.write_text("- global\n- formatters\n")

    with pytest.raises(ValueError):
        load_config(str(path))


def test_empty_global_section_with_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    path = tmp_path / "empty_global.yaml"
    path.write_text("global:\nformatters:\n  latency_unit: millis\n")

    config = load_config(str(path))

    assert config.global_.log_level == "DEBUG"
    assert config.formatters.latency_unit == "millis"


def test_scalar_global_section_is_rejected(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    path = write_config(tmp_path, {"global": 5})

    with pytest.raises(ValueError):
        load_config(path)
