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
import re
import sys
import yaml

from dataclasses import dataclass

from .. import constants

# add support for parsing ${ENV_VAR} in config
env_pattern = re.compile(r".*?\${(.*?)}.*?")


def env_constructor(loader, node):
    value = loader.construct_scalar(node)
    for group in env_pattern.findall(value):
        env_value = os.environ.get(group)
        if env_value is None:
            assert (
                False
            ), f"environment variable ${group} used in the config is not defined"
        value = value.replace(f"${{{group}}}", env_value)
    return value


yaml.add_implicit_resolver("!path", env_pattern, None, yaml.SafeLoader)
yaml.add_constructor("!path", env_constructor, yaml.SafeLoader)


@dataclass
class Config:
    """Program configuration class."""

    github_token: str = os.getenv("GITHUB_TOKEN")
    github_repository: str = os.getenv("GITHUB_REPOSITORY")
    registration_token: str = os.getenv("GITHUB_RUNNER_TOKEN")
    region: str = os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION"))

    # instance
    image_id: str = None
    instance_type: str = None
    subnets: list[str] = None
    security_group_id: str = None
    iam_role_name: str = None
    key_name: str = None
    resource_tags: list[dict] = None
    market_type: str = None
    target_os: str = "linux"

    # runner
    label: str = None
    instance_id: str = None
    runner_home_dir: str = None
    pre_runner_script: str = ""
    runner_version: str = constants.runner_version

    # acquisition and waiting
    max_attempts: int = constants.default_max_attempts
    retry_delay: float = constants.default_retry_delay
    max_running_wait: float = constants.default_max_running_wait
    running_poll_interval: float = constants.default_running_poll_interval
    max_registration_time: float = constants.default_max_registration_time
    registration_poll_interval: float = constants.default_registration_poll_interval
    registration_quiet_period: float = constants.default_registration_quiet_period

    debug: bool = False

    # special
    logger_config: dict = None
    config_file: str = None

    def __post_init__(self):
        if self.subnets is None:
            self.subnets = []

        if self.resource_tags is None:
            self.resource_tags = []

    def update(self, args):
        """Update configuration using command line arguments."""
        for attr in vars(self):
            if attr in ["config_file", "logger_config"]:
                continue

            arg_value = getattr(args, attr, None)

            if arg_value is not None:
                setattr(self, attr, arg_value)

    def check(self, *parameters):
        """Check mandatory configuration parameters."""

        if not parameters:
            parameters = ["github_token", "github_repository"]

        for name in parameters:
            value = getattr(self, name)
            if value:
                continue
            print(
                f"argument error: --{name.lower().replace('_','-')} is not defined",
                file=sys.stderr,
            )
            sys.exit(1)

