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
import logging
import threading

from .actions import Action
from .logger import logger
from .instance import InstanceRequest
from .errors import (
    AcquisitionExhausted,
    CanceledAcquisition,
    CreationFailure,
    TerminationFailure,
)
from . import metrics


class InstanceAcquirer:
    """Acquire, wait for and terminate a single compute instance.

    The provider must implement `create_instances(params)`,
    `terminate_instances(ids)` and
    `wait_until_running(ids, timeout, poll_interval)`.
    """

    def __init__(self, provider, sleep=None):
        self.provider = provider
        self.sleep = time.sleep if sleep is None else sleep

    def _wait(self, delay: float, canceled: threading.Event = None):
        """Wait between attempts. Returns True if canceled."""
        if canceled is not None:
            return canceled.wait(delay)
        if delay > 0:
            self.sleep(delay)
        return False

    def _terminate_extra(self, instance_ids: list[str], subnet_id: str):
        """Best effort termination of instances returned by an attempt
        that did not produce exactly one instance."""
        with Action(
            f"Terminating extra instances {', '.join(instance_ids)}",
            ignore_fail=True,
            level=logging.WARNING,
            stacklevel=4,
            subnet=subnet_id,
        ):
            try:
                self.provider.terminate_instances(list(instance_ids))
            except TerminationFailure:
                metrics.record_termination(success=False)
                raise
            metrics.record_termination(success=True)

    def acquire(
        self,
        request: InstanceRequest,
        subnets: list[str],
        max_attempts: int,
        delay: float,
        canceled: threading.Event = None,
    ) -> str:
        """Create exactly one instance rotating through the subnets
        on each failed attempt and return its id.

        Subnet used on attempt k is subnets[k % len(subnets)].
        Raises AcquisitionExhausted with the last failure as the cause
        once max_attempts attempts have failed and CanceledAcquisition
        as soon as cancellation is observed.
        """
        if not request.tags:
            raise ValueError("instance request must have at least one tag")
        if not subnets:
            raise ValueError("subnets must not be empty")
        if max_attempts < 1:
            raise ValueError(f"max attempts {max_attempts} must be >= 1")
        if delay < 0:
            raise ValueError(f"delay {delay} must be >= 0")

        subnets = tuple(subnets)
        subnet_index = 0
        attempt = 0
        start_time = time.time()

        while True:
            if canceled is not None and canceled.is_set():
                raise CanceledAcquisition(
                    f"instance acquisition canceled after {attempt} attempts"
                )

            subnet_id = subnets[subnet_index]
            params = request.to_params(subnet_id)

            try:
                with Action(
                    f"Creating {request.instance_type} instance in subnet {subnet_id} "
                    f"(attempt {attempt + 1} of {max_attempts})",
                    stacklevel=3,
                    subnet=subnet_id,
                ):
                    metrics.record_creation_attempt(subnet=subnet_id)
                    try:
                        instance_ids = self.provider.create_instances(params)
                    except CreationFailure:
                        metrics.record_creation_failure(subnet=subnet_id)
                        raise

                    if len(instance_ids) != 1:
                        metrics.record_creation_failure(subnet=subnet_id)
                        logger.log(
                            msg=f"Possible orphaned instances {instance_ids}",
                            level=logging.WARNING,
                            extra={"subnet": subnet_id},
                        )
                        if instance_ids:
                            self._terminate_extra(instance_ids, subnet_id)
                        raise CreationFailure(
                            f"expected one instance but got {len(instance_ids)}",
                            subnet_id=subnet_id,
                        )

            except CreationFailure as e:
                attempt += 1
                if attempt == max_attempts:
                    raise AcquisitionExhausted(
                        f"failed to create instance after {attempt} attempts: {e}",
                        attempts=attempt,
                        cause=e,
                    ) from e

                subnet_index = (subnet_index + 1) % len(subnets)

                with Action(
                    f"Retrying in {delay} sec using subnet {subnets[subnet_index]} "
                    f"(attempt {attempt + 1} of {max_attempts})",
                    level=logging.WARNING,
                    stacklevel=3,
                    subnet=subnets[subnet_index],
                ):
                    if self._wait(delay, canceled):
                        raise CanceledAcquisition(
                            f"instance acquisition canceled after {attempt} attempts"
                        )
                continue

            instance_id = instance_ids[0]

            with Action(
                f"Instance {instance_id} is started",
                instance_id=instance_id,
                subnet=subnet_id,
            ):
                metrics.record_instance_creation(
                    instance_type=request.instance_type,
                    subnet=subnet_id,
                    creation_time=time.time() - start_time,
                )

            return instance_id

    def terminate(self, instance_id: str):
        """Terminate instance. Single attempt, no retries."""
        with Action(f"Terminating instance {instance_id}", instance_id=instance_id):
            try:
                self.provider.terminate_instances([instance_id])
            except TerminationFailure:
                metrics.record_termination(success=False)
                raise
            metrics.record_termination(success=True)

    def wait_running(self, instance_id: str, max_wait: float, poll_interval: float):
        """Wait for instance to be running."""
        with Action(
            f"Waiting for instance {instance_id} to be running",
            instance_id=instance_id,
        ):
            self.provider.wait_until_running(
                [instance_id], timeout=max_wait, poll_interval=poll_interval
            )
