# Copyright 2025 Katteli Inc.
# TestFlows.com Open-Source Software Testing Framework (http://testflows.com)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
import time
import threading

from github import Github
from github.GithubException import GithubException
from github.Repository import Repository
from github.SelfHostedActionsRunner import SelfHostedActionsRunner

from .actions import Action
from .errors import CanceledAcquisition, RegistrationError, TimeoutFailure


def get_repository(github_token: str, github_repository: str) -> Repository:
    """Return GitHub repository."""
    with Action("Logging in to GitHub"):
        github = Github(login_or_token=github_token, per_page=100)

    with Action(f"Getting repository {github_repository}"):
        return github.get_repo(github_repository)


def runner_labels(runner: SelfHostedActionsRunner) -> set[str]:
    """Return names of the runner's labels."""
    return {label["name"] for label in runner.labels()}


def get_runner(repo: Repository, label: str) -> SelfHostedActionsRunner:
    """Return self-hosted runner that has the label or None."""
    try:
        runners: list[SelfHostedActionsRunner] = repo.get_self_hosted_runners()
        for runner in runners:
            if label in runner_labels(runner):
                return runner
    except GithubException as e:
        raise RegistrationError(f"failed to get self-hosted runners: {e}") from e
    return None


def wait_runner_registered(
    repo: Repository,
    label: str,
    timeout: float,
    interval: float,
    quiet_period: float = 0,
    sleep=time.sleep,
    canceled: threading.Event = None,
) -> SelfHostedActionsRunner:
    """Wait until runner with the label is registered and online.

    The first check is done after the quiet period as the instance needs
    time to boot and execute its user data script. Raises
    CanceledAcquisition if the canceled event is set while waiting.
    """

    def wait(seconds):
        if canceled is None:
            sleep(seconds)
        elif canceled.wait(seconds):
            raise CanceledAcquisition(f"waiting for runner {label} is canceled")

    with Action(f"Waiting for runner {label} to be registered", label=label) as action:
        action.note(f"Checking for the runner in {quiet_period} sec")
        wait(quiet_period)

        start_time = time.time()

        while True:
            runner = get_runner(repo, label)

            if runner is not None and runner.status == "online":
                action.note(f"Runner {runner.name} is registered and online")
                return runner

            if time.time() - start_time >= timeout:
                raise TimeoutFailure(
                    f"runner {label} was not registered after {timeout} sec"
                )

            action.note(f"Runner {label} is not registered yet, checking again")
            wait(interval)


def remove_runner(repo: Repository, label: str):
    """Remove self-hosted runner that has the label.

    Missing runner is not an error as the instance might
    have never registered it.
    """
    with Action(f"Removing runner {label}", label=label) as action:
        runner = get_runner(repo, label)

        if runner is None:
            action.note(f"Runner {label} is not found, nothing to remove")
            return False

        try:
            repo.remove_self_hosted_runner(runner)
        except GithubException as e:
            raise RegistrationError(f"failed to remove runner {runner.name}: {e}") from e

        action.note(f"Runner {runner.name} is removed")
        return True
