#!/usr/bin/env python3
"""End-to-end demo run and CLI tests, with HTTP mocked out."""
import json
import logging
from unittest import mock

import pytest

from remote_write_demo import main as cli
from remote_write_demo.config import Config, DemoConfig, QuerySpec
from remote_write_demo.demo import run_demo


def response(status_code=200, body=None):
    resp = mock.Mock(status_code=status_code, ok=200 <= status_code < 300, text="")
    resp.json.return_value = body or {"status": "success", "data": {"result": []}}
    return resp


@pytest.fixture
def http():
    with mock.patch("remote_write_demo.query.requests.get") as get, \
            mock.patch("remote_write_demo.client.requests") as client_requests, \
            mock.patch("remote_write_demo.pusher.requests.post") as simple_post:
        full_post = client_requests.post
        full_post.return_value = response(204)
        simple_post.return_value = response(204)
        yield get, full_post, simple_post


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("PROMETHEUS_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)


def test_unhealthy_server_aborts_before_write(http):
    get, full_post, simple_post = http
    get.return_value = response(503)

    assert run_demo(Config(), "simple", sleep=lambda s: None) == 1

    assert get.call_count == 1
    full_post.assert_not_called()
    simple_post.assert_not_called()


def test_cli_exit_code_when_unhealthy(http):
    get, full_post, simple_post = http
    get.return_value = response(500)

    assert cli.main(["test"]) == 1
    simple_post.assert_not_called()


@pytest.mark.parametrize("mode", ["simple", "full"])
def test_healthy_run_writes_once_and_queries(http, mode):
    get, full_post, simple_post = http
    get.return_value = response(200)
    config = Config(demo=DemoConfig(queries=[QuerySpec(query="demo_gauge", name="Demo Gauge")]))
    sleeps = []

    assert run_demo(config, mode, sleep=sleeps.append) == 0

    post = full_post if mode == "full" else simple_post
    assert post.call_count == 1
    # health check + one query
    assert get.call_count == 2
    assert sleeps == [2.0]


def test_write_failure_does_not_fail_the_run(http):
    get, _, simple_post = http
    get.return_value = response(200)
    simple_post.side_effect = ConnectionError("refused")

    assert run_demo(Config(), "simple", sleep=lambda s: None) == 0


def test_cli_send_full(http):
    _, full_post, _ = http

    assert cli.main(["send"]) == 0
    assert full_post.call_count == 1


def test_cli_send_reports_success_even_when_write_fails(http):
    _, _, simple_post = http
    simple_post.return_value = response(500)
    simple_post.return_value.raise_for_status.side_effect = Exception("500 Server Error")

    assert cli.main(["send", "--mode", "simple"]) == 0


def test_cli_query(http):
    get, _, _ = http
    get.return_value = response(200)

    assert cli.main(["query", "up", "demo_gauge"]) == 0
    assert [c.kwargs["params"]["query"] for c in get.call_args_list] == ["up", "demo_gauge"]


def test_cli_bad_config_exits_1(capsys):
    assert cli.main(["--config", "missing.yaml", "send"]) == 1
    assert "Error loading configuration" in capsys.readouterr().err


def test_json_log_lines_stay_valid_with_quotes():
    record = logging.LogRecord(
        "remote_write_demo.query", logging.INFO, __file__, 1,
        'Querying: demo_counter_total{service="demo-service"}', None, None,
    )

    line = json.loads(cli.build_formatter("json").format(record))

    assert line["message"] == 'Querying: demo_counter_total{service="demo-service"}'
    assert line["level"] == "INFO"
    assert line["logger"] == "remote_write_demo.query"
    assert "time" in line


def test_text_log_format():
    record = logging.LogRecord("demo", logging.WARNING, __file__, 1, "hello", None, None)
    assert cli.build_formatter("text").format(record).endswith("| WARNING  | demo | hello")
