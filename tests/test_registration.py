"""Tests for GitHub runner registration. All GitHub API calls are mocked."""
import threading

from unittest.mock import MagicMock

import pytest

from github.GithubException import GithubException

from testflows.github.ec2.runners import registration
from testflows.github.ec2.runners.errors import (
    CanceledAcquisition,
    RegistrationError,
    TimeoutFailure,
)


def make_runner(name, labels, status="online"):
    runner = MagicMock()
    runner.name = name
    runner.status = status
    runner.labels.return_value = [{"id": i, "name": l} for i, l in enumerate(labels)]
    return runner


def test_get_runner_by_label():
    repo = MagicMock()
    other = make_runner("other", ["self-hosted", "other"])
    mine = make_runner("mine", ["self-hosted", "github-ec2-runner-1"])
    repo.get_self_hosted_runners.return_value = [other, mine]

    assert registration.get_runner(repo, "github-ec2-runner-1") is mine
    assert registration.get_runner(repo, "missing") is None


def test_get_runner_error():
    repo = MagicMock()
    repo.get_self_hosted_runners.side_effect = GithubException(500, "error", None)

    with pytest.raises(RegistrationError):
        registration.get_runner(repo, "github-ec2-runner-1")


def test_wait_runner_registered():
    repo = MagicMock()
    offline = make_runner("mine", ["github-ec2-runner-1"], status="offline")
    online = make_runner("mine", ["github-ec2-runner-1"], status="online")
    repo.get_self_hosted_runners.side_effect = [[], [offline], [online]]
    sleeps = []

    runner = registration.wait_runner_registered(
        repo,
        "github-ec2-runner-1",
        timeout=300,
        interval=10,
        quiet_period=30,
        sleep=sleeps.append,
    )

    assert runner is online
    assert sleeps == [30, 10, 10]


def test_wait_runner_registered_timeout():
    repo = MagicMock()
    repo.get_self_hosted_runners.return_value = []

    with pytest.raises(TimeoutFailure):
        registration.wait_runner_registered(
            repo,
            "github-ec2-runner-1",
            timeout=0,
            interval=10,
            quiet_period=0,
            sleep=lambda seconds: None,
        )


def test_wait_runner_registered_canceled():
    repo = MagicMock()
    repo.get_self_hosted_runners.return_value = []
    canceled = threading.Event()
    canceled.set()

    with pytest.raises(CanceledAcquisition):
        registration.wait_runner_registered(
            repo,
            "github-ec2-runner-1",
            timeout=300,
            interval=10,
            quiet_period=30,
            canceled=canceled,
        )

    repo.get_self_hosted_runners.assert_not_called()


def test_remove_runner():
    repo = MagicMock()
    runner = make_runner("mine", ["github-ec2-runner-1"])
    repo.get_self_hosted_runners.return_value = [runner]

    assert registration.remove_runner(repo, "github-ec2-runner-1") is True
    repo.remove_self_hosted_runner.assert_called_once_with(runner)


def test_remove_missing_runner():
    repo = MagicMock()
    repo.get_self_hosted_runners.return_value = []

    assert registration.remove_runner(repo, "github-ec2-runner-1") is False
    repo.remove_self_hosted_runner.assert_not_called()


def test_remove_runner_error():
    repo = MagicMock()
    repo.get_self_hosted_runners.return_value = [
        make_runner("mine", ["github-ec2-runner-1"])
    ]
    repo.remove_self_hosted_runner.side_effect = GithubException(403, "forbidden", None)

    with pytest.raises(RegistrationError):
        registration.remove_runner(repo, "github-ec2-runner-1")
