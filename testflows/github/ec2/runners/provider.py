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
import math
import logging

import boto3

from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from .errors import CreationFailure, TerminationFailure, TimeoutFailure
from .logger import logger


class EC2Provider:
    """AWS EC2 compute provider.

    Translates boto3 responses and errors into what the instance
    acquirer expects: a list of created instance ids or one of
    CreationFailure, TerminationFailure, TimeoutFailure.
    """

    def __init__(self, client=None, region: str = None):
        if client is None:
            client = boto3.client("ec2", region_name=region)
        self.client = client

    def create_instances(self, params: dict) -> list[str]:
        """Create instances and return their ids."""
        subnet_id = params.get("SubnetId")

        try:
            response = self.client.run_instances(**params)
        except (ClientError, BotoCoreError) as e:
            raise CreationFailure(str(e), subnet_id=subnet_id) from e

        try:
            instance_ids = [
                instance["InstanceId"] for instance in response["Instances"]
            ]
        except (KeyError, TypeError) as e:
            reservation_id = (
                response.get("ReservationId", "-")
                if isinstance(response, dict)
                else "-"
            )
            logger.log(
                msg=(
                    f"Possible orphaned instance: reservation {reservation_id} "
                    f"returned no readable instance ids"
                ),
                level=logging.WARNING,
                extra={"subnet": subnet_id},
            )
            raise CreationFailure(
                f"invalid RunInstances response for reservation {reservation_id}",
                subnet_id=subnet_id,
            ) from e

        return instance_ids

    def terminate_instances(self, instance_ids: list[str]):
        """Terminate instances."""
        try:
            self.client.terminate_instances(InstanceIds=list(instance_ids))
        except (ClientError, BotoCoreError) as e:
            raise TerminationFailure(str(e)) from e

    def wait_until_running(
        self, instance_ids: list[str], timeout: float, poll_interval: float
    ):
        """Wait until instances are running."""
        delay = max(1, int(math.ceil(poll_interval)))
        max_attempts = max(1, int(math.ceil(timeout / delay)))

        waiter = self.client.get_waiter("instance_running")

        try:
            waiter.wait(
                InstanceIds=list(instance_ids),
                WaiterConfig={"Delay": delay, "MaxAttempts": max_attempts},
            )
        except WaiterError as e:
            raise TimeoutFailure(
                f"instances {', '.join(instance_ids)} are not running "
                f"after {timeout} sec: {e}"
            ) from e
        except (ClientError, BotoCoreError) as e:
            raise TimeoutFailure(
                f"failed to wait for instances {', '.join(instance_ids)} "
                f"to be running: {e}"
            ) from e
