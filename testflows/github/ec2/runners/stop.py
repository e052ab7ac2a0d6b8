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
from .actions import Action
from .config import Config
from .provider import EC2Provider
from .acquirer import InstanceAcquirer
from . import registration


def stop(args, config: Config, provider=None, repo=None):
    """Terminate EC2 instance and remove its runner from GitHub.

    Instance is terminated first so that a failure to remove
    the runner does not leave the instance running.
    """
    config.check("github_token", "github_repository", "label", "instance_id")

    if provider is None:
        with Action("Creating AWS EC2 client"):
            provider = EC2Provider(region=config.region)

    InstanceAcquirer(provider).terminate(config.instance_id)

    if repo is None:
        repo = registration.get_repository(
            config.github_token, config.github_repository
        )

    registration.remove_runner(repo, config.label)
