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
from prometheus_client import Counter, Histogram

# Instance metrics
INSTANCE_CREATION_ATTEMPTS_TOTAL = Counter(
    "github_ec2_runners_instance_creation_attempts_total",
    "Total number of instance creation attempts",
    ["subnet"],
)

INSTANCE_CREATION_FAILURES_TOTAL = Counter(
    "github_ec2_runners_instance_creation_failures_total",
    "Total number of failed instance creation attempts",
    ["subnet"],
)

INSTANCES_CREATED_TOTAL = Counter(
    "github_ec2_runners_instances_created_total",
    "Total number of instances created",
    ["instance_type", "subnet"],
)

INSTANCE_CREATION_TIME = Histogram(
    "github_ec2_runners_instance_creation_seconds",
    "Time taken to acquire an instance including retries",
    ["instance_type"],
    # 1s, 5s, 10s, 30s, 1m, 2m, 5m, 10m
    buckets=[1, 5, 10, 30, 60, 120, 300, 600],
)

INSTANCE_TERMINATIONS_TOTAL = Counter(
    "github_ec2_runners_instance_terminations_total",
    "Total number of instance terminations",
    ["status"],  # status: success, failure
)


def record_creation_attempt(subnet: str):
    """Record instance creation attempt."""
    INSTANCE_CREATION_ATTEMPTS_TOTAL.labels(subnet=subnet).inc()


def record_creation_failure(subnet: str):
    """Record failed instance creation attempt."""
    INSTANCE_CREATION_FAILURES_TOTAL.labels(subnet=subnet).inc()


def record_instance_creation(instance_type: str, subnet: str, creation_time: float):
    """Record successful instance creation.

    Args:
        instance_type: EC2 instance type
        subnet: subnet the instance was created in
        creation_time: seconds spent acquiring the instance
    """
    INSTANCES_CREATED_TOTAL.labels(instance_type=instance_type, subnet=subnet).inc()
    INSTANCE_CREATION_TIME.labels(instance_type=instance_type).observe(creation_time)


def record_termination(success: bool):
    """Record instance termination."""
    INSTANCE_TERMINATIONS_TOTAL.labels(
        status="success" if success else "failure"
    ).inc()
