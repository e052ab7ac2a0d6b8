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
import os
import time
import threading

from .actions import Action
from .config import Config
from .constants import runner_label_prefix
from .instance import InstanceRequest, tags_from_list
from .provider import EC2Provider
from .acquirer import InstanceAcquirer
from .errors import CanceledAcquisition
from .userdata import BootScriptParams, build_boot_script
from . import registration

# instance tag that holds the runner label
label_tag = "github-ec2-runner-label"


def uid():
    """Return unique id - just a timestamp with fixed width up to microseconds."""
    return f"{time.time():.6f}".replace(".", "")


def new_label():
    """Return new unique runner label."""
    return f"{runner_label_prefix}{uid()}"


def set_output(name: str, value: str):
    """Set GitHub Actions step output."""
    output_file = os.getenv("GITHUB_OUTPUT")

    with Action(f"Setting output {name}={value}"):
        if output_file:
            with open(output_file, "a", encoding="utf-8") as fd:
                fd.write(f"{name}={value}\n")


def check_canceled(canceled: threading.Event, instance_id: str):
    """Raise CanceledAcquisition if the canceled event is set."""
    if canceled is not None and canceled.is_set():
        raise CanceledAcquisition(f"start of instance {instance_id} is canceled")


def instance_request(config: Config, label: str) -> InstanceRequest:
    """Build instance request for the runner with the label."""
    user_data = build_boot_script(
        config.target_os,
        BootScriptParams(
            github_repository=config.github_repository,
            registration_token=config.registration_token,
            label=label,
            runner_home_dir=config.runner_home_dir,
            pre_runner_script=config.pre_runner_script,
            runner_version=config.runner_version,
        ),
    )

    tags = tags_from_list(config.resource_tags)
    if label_tag not in [key for key, _ in tags]:
        tags += ((label_tag, label),)

    return InstanceRequest(
        image_id=config.image_id,
        instance_type=config.instance_type,
        security_group_id=config.security_group_id,
        tags=tags,
        user_data=user_data,
        iam_role_name=config.iam_role_name,
        key_name=config.key_name,
        market_type=config.market_type,
    )


def start(
    args,
    config: Config,
    provider=None,
    repo=None,
    canceled: threading.Event = None,
):
    """Start new EC2 instance and wait for its runner to be registered.

    Returns (label, instance_id) tuple.
    """
    config.check(
        "github_token",
        "github_repository",
        "registration_token",
        "image_id",
        "instance_type",
        "subnets",
        "security_group_id",
    )

    label = config.label or new_label()

    with Action(f"Building {config.target_os} instance request", label=label):
        request = instance_request(config, label)

    if provider is None:
        with Action("Creating AWS EC2 client"):
            provider = EC2Provider(region=config.region)

    acquirer = InstanceAcquirer(provider)

    with Action(
        f"Starting EC2 instance for runner {label} "
        f"using subnets {', '.join(config.subnets)}",
        label=label,
    ):
        instance_id = acquirer.acquire(
            request,
            subnets=config.subnets,
            max_attempts=config.max_attempts,
            delay=config.retry_delay,
            canceled=canceled,
        )

    try:
        check_canceled(canceled, instance_id)

        set_output("label", label)
        set_output("ec2-instance-id", instance_id)

        acquirer.wait_running(
            instance_id,
            max_wait=config.max_running_wait,
            poll_interval=config.running_poll_interval,
        )
        check_canceled(canceled, instance_id)

        if repo is None:
            repo = registration.get_repository(
                config.github_token, config.github_repository
            )

        registration.wait_runner_registered(
            repo,
            label,
            timeout=config.max_registration_time,
            interval=config.registration_poll_interval,
            quiet_period=config.registration_quiet_period,
            canceled=canceled,
        )
    except CanceledAcquisition:
        with Action(
            f"Cleaning up canceled runner {label}",
            label=label,
            instance_id=instance_id,
        ):
            acquirer.terminate(instance_id)
        raise

    return label, instance_id
