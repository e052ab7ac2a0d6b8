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
import yaml

from .config import Config
from ..constants import supported_os, supported_market_types

string_fields = (
    "github_token",
    "github_repository",
    "registration_token",
    "region",
    "image_id",
    "instance_type",
    "security_group_id",
    "iam_role_name",
    "key_name",
    "label",
    "instance_id",
    "runner_home_dir",
    "pre_runner_script",
    "runner_version",
)

seconds_fields = (
    "retry_delay",
    "max_running_wait",
    "running_poll_interval",
    "max_registration_time",
    "registration_poll_interval",
    "registration_quiet_period",
)


def parse_config(filename: str):
    """Load and parse yaml configuration file into config object.

    Does not check if image exists.
    Does not check if subnets or security group exist.
    Does not check instance type is available in the subnets.
    """
    with open(filename, "r") as f:
        doc = yaml.load(f, Loader=yaml.SafeLoader)

    if not isinstance(doc, dict) or doc.get("config") is None:
        assert False, "config: entry is missing"

    doc = doc["config"]

    assert isinstance(doc, dict), "config: is not a dictionary"

    for name in string_fields:
        if doc.get(name) is not None:
            assert isinstance(doc[name], str), f"config.{name}: is not a string"

    if doc.get("subnets") is not None:
        if isinstance(doc["subnets"], str):
            doc["subnets"] = [s.strip() for s in doc["subnets"].split(",")]
        assert isinstance(doc["subnets"], list), "config.subnets: is not a list"
        for i, subnet in enumerate(doc["subnets"]):
            assert isinstance(subnet, str), f"config.subnets[{i}]: is not a string"
            assert subnet.strip(), f"config.subnets[{i}]: cannot be empty"
        doc["subnets"] = [subnet.strip() for subnet in doc["subnets"]]
        assert doc["subnets"], "config.subnets: must not be empty"

    if doc.get("resource_tags") is not None:
        assert isinstance(
            doc["resource_tags"], list
        ), "config.resource_tags: is not a list"
        for i, tag in enumerate(doc["resource_tags"]):
            assert isinstance(tag, dict), f"config.resource_tags[{i}]: is not an object"
            assert (
                "Key" in tag and "Value" in tag
            ), f"config.resource_tags[{i}]: must have 'Key' and 'Value' fields"

    if doc.get("market_type") is not None:
        v = doc["market_type"]
        assert (
            v in supported_market_types
        ), f"config.market_type: must be one of {', '.join(supported_market_types)}"

    if doc.get("target_os") is not None:
        v = doc["target_os"]
        assert (
            v in supported_os
        ), f"config.target_os: must be one of {', '.join(supported_os)}"

    if doc.get("max_attempts") is not None:
        v = doc["max_attempts"]
        assert (
            isinstance(v, int) and not isinstance(v, bool) and v > 0
        ), "config.max_attempts: is not an integer > 0"

    for name in seconds_fields:
        if doc.get(name) is not None:
            v = doc[name]
            assert (
                isinstance(v, (int, float)) and not isinstance(v, bool) and v >= 0
            ), f"config.{name}: is not a number >= 0"

    if doc.get("debug") is not None:
        assert isinstance(doc["debug"], bool), "config.debug: is not a boolean"

    if doc.get("logger_config") is not None:
        assert isinstance(
            doc["logger_config"], dict
        ), "config.logger_config: is not a dictionary"

    return Config(**doc)
