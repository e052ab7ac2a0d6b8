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
import json

from argparse import ArgumentTypeError
from traceback import print_exception

from .constants import supported_os, supported_market_types


def path_type(v, check_exists=True):
    """Path argument type."""
    try:
        v = os.path.abspath(os.path.expanduser(v))
        if check_exists:
            assert os.path.exists(v), f"{v} does not exist"
    except Exception as e:
        raise ArgumentTypeError(str(e))
    return v


def count_type(v):
    """Count argument type."""
    try:
        v = int(v)
    except ValueError:
        raise ArgumentTypeError(f"{v} is not an integer")
    if not v >= 1:
        raise ArgumentTypeError(f"{v} must be >= 1")
    return v


def seconds_type(v):
    """Non-negative number of seconds argument type."""
    try:
        v = float(v)
    except ValueError:
        raise ArgumentTypeError(f"{v} is not a number")
    if v < 0:
        raise ArgumentTypeError(f"{v} must be >= 0")
    return v


def image_type(v):
    """AWS AMI ID argument. Example: ami-0abcdef1234567890"""
    if not re.match(r"^ami-([0-9a-f]{8}|[0-9a-f]{17})$", v):
        raise ArgumentTypeError(
            f"invalid AWS AMI ID {v}, must be in format ami-xxxxxxxxxxxxxxxxx"
        )
    return v


def instance_type(v):
    """AWS instance type argument. Example: t3.medium"""
    if not re.match(r"^[a-z][a-z0-9-]*\.[a-z0-9-]+$", v):
        raise ArgumentTypeError(
            f"invalid AWS instance type {v}, must be in format family.size"
        )
    return v


def subnets_type(v):
    """Comma-separated list of subnet IDs. Example: subnet-a,subnet-b"""
    subnets = [s.strip() for s in v.split(",") if s.strip()]
    if not subnets:
        raise ArgumentTypeError(f"invalid subnets {v}, at least one is required")
    for subnet in subnets:
        if not subnet.startswith("subnet-"):
            raise ArgumentTypeError(
                f"invalid AWS subnet ID {subnet}, must be in format subnet-xxxxxxxx"
            )
    return subnets


def tags_type(v):
    """Resource tags as JSON list. Example: [{"Key": "Name", "Value": "runner"}]"""
    try:
        tags = json.loads(v)
        assert isinstance(tags, list), "tags must be a list"
        for i, tag in enumerate(tags):
            assert isinstance(tag, dict), f"tag[{i}] is not an object"
            assert set(tag) == {"Key", "Value"}, f"tag[{i}] must have Key and Value"
    except (ValueError, AssertionError) as e:
        raise ArgumentTypeError(f"invalid tags {v}: {e}")
    return tags


def os_type(v):
    """Target operating system argument."""
    v = v.lower().strip()
    if v not in supported_os:
        raise ArgumentTypeError(
            f"invalid os {v}, must be one of {', '.join(supported_os)}"
        )
    return v


def market_type(v):
    """Instance market type argument. Empty value means on-demand."""
    v = v.lower().strip()
    if not v:
        return None
    if v not in supported_market_types:
        raise ArgumentTypeError(
            f"invalid market type {v}, must be one of {', '.join(supported_market_types)}"
        )
    return v


def config_type(v):
    """Program configuration file type."""
    from .config.parse import parse_config

    v = path_type(v)
    try:
        config = parse_config(v)
        config.config_file = v
    except Exception as e:
        if "--debug" in sys.argv:
            print_exception(e)
        if "unexpected keyword argument" in str(e):
            e = str(e).replace(".__init__()", "") + ", please remove it"
        raise ArgumentTypeError(str(e))

    return config
