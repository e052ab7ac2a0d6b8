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

# GitHub Actions runner release installed by fresh install boot scripts
runner_version = "2.311.0"

# Runner label prefix
runner_label_prefix = "github-ec2-runner-"

# Instance acquisition
default_max_attempts = 10
default_retry_delay = 30

# Waiting for the instance to be running
default_max_running_wait = 30
default_running_poll_interval = 3

# Waiting for the runner to register with GitHub
default_max_registration_time = 300
default_registration_poll_interval = 10
default_registration_quiet_period = 30

# Supported target operating systems and market types
supported_os = ("linux", "windows")
supported_market_types = ("spot",)
