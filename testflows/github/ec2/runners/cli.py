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
import sys
import signal
import logging
import argparse
import threading

from . import __version__
from . import args as types
from . import logger
from .actions import Action
from .config import Config
from .errors import CanceledAcquisition
from .start import start
from .stop import stop

description = """Start or stop self-hosted GitHub Actions runner on AWS EC2.

  The start command creates new EC2 instance, retrying in the next subnet
  on each failure, and waits for the runner to be registered.
  The stop command terminates the instance and removes the runner.
"""


def add_arguments(parser):
    """Add command line arguments to parser."""
    parser.add_argument(
        "-v", "--version", action="version", version=f"{__version__}"
    )

    parser.add_argument(
        "--config",
        metavar="path",
        type=types.config_type,
        help="program configuration file",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="enable debugging mode",
    )

    github_group = parser.add_argument_group("GitHub options")

    github_group.add_argument(
        "--github-token",
        metavar="token",
        type=str,
        help="GitHub token with repository administration permissions, default: $GITHUB_TOKEN environment variable",
    )

    github_group.add_argument(
        "--github-repository",
        metavar="owner/repo",
        type=str,
        help="GitHub repository, default: $GITHUB_REPOSITORY environment variable",
    )

    github_group.add_argument(
        "--registration-token",
        metavar="token",
        type=str,
        help="GitHub runner registration token, default: $GITHUB_RUNNER_TOKEN environment variable",
    )

    github_group.add_argument(
        "--label",
        metavar="label",
        type=str,
        help="runner label, default for start: generated unique label",
    )

    aws_group = parser.add_argument_group("AWS options")

    aws_group.add_argument(
        "--region",
        metavar="region",
        type=str,
        help="AWS region, default: $AWS_REGION or $AWS_DEFAULT_REGION environment variable",
    )

    aws_group.add_argument(
        "--image-id",
        metavar="ami-id",
        type=types.image_type,
        help="AWS AMI ID",
    )

    aws_group.add_argument(
        "--instance-type",
        metavar="instance-type",
        type=types.instance_type,
        help="AWS EC2 instance type (t3.medium)",
    )

    aws_group.add_argument(
        "--subnets",
        metavar="subnet-id[,subnet-id...]",
        type=types.subnets_type,
        help="AWS subnet IDs in order of preference",
    )

    aws_group.add_argument(
        "--security-group-id",
        metavar="sg-id",
        type=str,
        help="AWS security group ID",
    )

    aws_group.add_argument(
        "--iam-role-name",
        metavar="name",
        type=str,
        help="IAM role name to attach to the instance",
    )

    aws_group.add_argument(
        "--key-name",
        metavar="keypair",
        type=str,
        help="AWS EC2 key pair name",
    )

    aws_group.add_argument(
        "--resource-tags",
        metavar="json",
        type=types.tags_type,
        help='instance tags as JSON list, for example: [{"Key": "Team", "Value": "ci"}]',
    )

    aws_group.add_argument(
        "--market-type",
        metavar="type",
        type=types.market_type,
        help="instance market type: spot, default: on-demand",
    )

    aws_group.add_argument(
        "--instance-id",
        metavar="id",
        type=str,
        help="EC2 instance ID to terminate, required for stop",
    )

    runner_group = parser.add_argument_group("runner options")

    runner_group.add_argument(
        "--target-os",
        metavar="os",
        type=types.os_type,
        help="instance operating system: linux or windows, default: linux",
    )

    runner_group.add_argument(
        "--runner-home-dir",
        metavar="path",
        type=str,
        help="directory of the runner pre-installed in the image, default: download the runner",
    )

    runner_group.add_argument(
        "--pre-runner-script",
        metavar="script",
        type=str,
        help="script to execute before the runner is configured",
    )

    runner_group.add_argument(
        "--runner-version",
        metavar="version",
        type=str,
        help="GitHub Actions runner version to download",
    )

    retry_group = parser.add_argument_group("retry and wait options")

    retry_group.add_argument(
        "--max-attempts",
        metavar="count",
        type=types.count_type,
        help="maximum number of instance creation attempts, default: 10",
    )

    retry_group.add_argument(
        "--retry-delay",
        metavar="sec",
        type=types.seconds_type,
        help="delay between instance creation attempts, default: 30",
    )

    retry_group.add_argument(
        "--max-running-wait",
        metavar="sec",
        type=types.seconds_type,
        help="maximum time to wait for the instance to be running, default: 30",
    )

    retry_group.add_argument(
        "--running-poll-interval",
        metavar="sec",
        type=types.seconds_type,
        help="instance status polling interval, default: 3",
    )

    retry_group.add_argument(
        "--max-registration-time",
        metavar="sec",
        type=types.seconds_type,
        help="maximum time to wait for the runner to be registered, default: 300",
    )

    retry_group.add_argument(
        "--registration-poll-interval",
        metavar="sec",
        type=types.seconds_type,
        help="runner registration polling interval, default: 10",
    )

    retry_group.add_argument(
        "--registration-quiet-period",
        metavar="sec",
        type=types.seconds_type,
        help="time to wait before checking runner registration, default: 30",
    )

    commands = parser.add_subparsers(title="commands", metavar="command")
    commands.required = True

    start_parser = commands.add_parser(
        "start",
        help="start runner instance",
        description="Start EC2 instance and wait for the runner to be registered.",
    )
    start_parser.set_defaults(func=start_command)

    stop_parser = commands.add_parser(
        "stop",
        help="stop runner instance",
        description="Terminate EC2 instance and remove the runner.",
    )
    stop_parser.set_defaults(func=stop_command)


def argparser():
    """Return command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="github-ec2-runner",
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_arguments(parser)
    return parser


def start_command(args, config: Config):
    """Start command."""
    canceled = threading.Event()

    def cancel(signum, frame):
        canceled.set()

    previous_handler = signal.signal(signal.SIGTERM, cancel)

    try:
        start(args, config=config, canceled=canceled)
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    if canceled.is_set():
        raise CanceledAcquisition("start command is canceled")


def stop_command(args, config: Config):
    """Stop command."""
    stop(args, config=config)


def main(argv=None):
    """Main entry point."""
    args = argparser().parse_args(argv)

    config: Config = args.config if args.config else Config()
    config.update(args)

    Action.debug = bool(config.debug)
    logger.configure(config, level=logging.DEBUG if config.debug else logging.INFO)

    try:
        args.func(args, config=config)
    except KeyboardInterrupt:
        sys.exit(1)
    except Exception:
        if config.debug:
            raise
        sys.exit(1)
