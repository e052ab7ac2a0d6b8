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
"""Shared test fixtures."""
import time

import pytest

from testflows.github.ec2.runners.errors import CreationFailure, TerminationFailure
from testflows.github.ec2.runners.instance import InstanceRequest


class FakeProvider:
    """Compute provider that replays scripted outcomes.

    Each outcome is either an instance id, a list of instance ids,
    or an exception instance to raise.
    """

    def __init__(self, outcomes=None, terminate_error=None, wait_error=None):
        self.outcomes = list(outcomes or [])
        self.terminate_error = terminate_error
        self.wait_error = wait_error
        self.calls = []
        self.call_times = []
        self.terminated = []
        self.waited = []

    @property
    def subnets(self):
        return [params["SubnetId"] for params in self.calls]

    def create_instances(self, params):
        self.calls.append(params)
        self.call_times.append(time.monotonic())
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, list):
            return outcome
        return [outcome]

    def terminate_instances(self, instance_ids):
        self.terminated.append(list(instance_ids))
        if self.terminate_error is not None:
            raise self.terminate_error

    def wait_until_running(self, instance_ids, timeout, poll_interval):
        self.waited.append((list(instance_ids), timeout, poll_interval))
        if self.wait_error is not None:
            raise self.wait_error


def failure(subnet_id="subnet-x"):
    return CreationFailure("InsufficientInstanceCapacity", subnet_id=subnet_id)


@pytest.fixture
def instance_request():
    """Minimal instance request."""
    return InstanceRequest(
        image_id="ami-0123456789abcdef0",
        instance_type="t3.medium",
        security_group_id="sg-0123456789abcdef0",
        tags=(("github-ec2-runner-label", "github-ec2-runner-1"),),
        user_data=b"#!/bin/bash\necho hello",
    )


@pytest.fixture
def fake_provider():
    """Factory for fake compute providers."""
    return FakeProvider


@pytest.fixture
def creation_failure():
    """Factory for creation failures."""
    return failure


@pytest.fixture
def termination_failure():
    return TerminationFailure("UnauthorizedOperation")
