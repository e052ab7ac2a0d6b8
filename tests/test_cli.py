"""Tests for command line interface."""
import signal

from unittest.mock import MagicMock

import pytest

from testflows.github.ec2.runners import cli


def test_parse_start_arguments():
    args = cli.argparser().parse_args(
        [
            "--image-id",
            "ami-0123456789abcdef0",
            "--instance-type",
            "t3.medium",
            "--subnets",
            "subnet-a,subnet-b",
            "--max-attempts",
            "4",
            "--retry-delay",
            "1.5",
            "--market-type",
            "spot",
            "start",
        ]
    )

    assert args.func is cli.start_command
    assert args.subnets == ["subnet-a", "subnet-b"]
    assert args.max_attempts == 4
    assert args.retry_delay == 1.5
    assert args.market_type == "spot"


def test_parse_stop_arguments():
    args = cli.argparser().parse_args(["--instance-id", "i-1", "--label", "x", "stop"])

    assert args.func is cli.stop_command
    assert args.instance_id == "i-1"


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.argparser().parse_args([])


def test_invalid_subnets():
    with pytest.raises(SystemExit):
        cli.argparser().parse_args(["--subnets", "vpc-1", "start"])


def test_main_runs_command(monkeypatch):
    stop = MagicMock()
    monkeypatch.setattr(cli, "stop", stop)

    cli.main(["--instance-id", "i-1", "--label", "x", "--max-attempts", "2", "stop"])

    config = stop.call_args.kwargs["config"]
    assert config.instance_id == "i-1"
    assert config.label == "x"
    assert config.max_attempts == 2


def test_main_exits_on_failure(monkeypatch):
    monkeypatch.setattr(cli, "stop", MagicMock(side_effect=RuntimeError("failed")))

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--instance-id", "i-1", "--label", "x", "stop"])

    assert exc_info.value.code == 1


def test_main_exits_on_sigterm_during_start(monkeypatch):
    handler = signal.getsignal(signal.SIGTERM)

    def start(args, config, canceled):
        signal.raise_signal(signal.SIGTERM)
        assert canceled.is_set()
        return config.label, "i-1"

    monkeypatch.setattr(cli, "start", start)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--label", "x", "start"])

    assert exc_info.value.code == 1
    assert signal.getsignal(signal.SIGTERM) is handler


def test_main_start_without_sigterm(monkeypatch):
    start = MagicMock(return_value=("x", "i-1"))
    monkeypatch.setattr(cli, "start", start)

    cli.main(["--label", "x", "start"])

    assert not start.call_args.kwargs["canceled"].is_set()
