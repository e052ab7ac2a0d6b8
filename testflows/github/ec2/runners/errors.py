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
"""
Exception classes for EC2 runners.
"""


class ConfigError(Exception):
    pass


class CreationFailure(Exception):
    """Exception to indicate that a single instance creation
    attempt failed."""

    def __init__(self, message, subnet_id: str = None):
        super().__init__(message)
        self.subnet_id = subnet_id


class AcquisitionExhausted(Exception):
    """Exception to indicate that all instance creation
    attempts failed. The last failure is available as `cause`."""

    def __init__(self, message, attempts: int, cause: CreationFailure = None):
        super().__init__(message)
        self.attempts = attempts
        self.cause = cause


class CanceledAcquisition(Exception):
    """Exception to indicate that instance acquisition was canceled."""

    pass


class TerminationFailure(Exception):
    """Exception to indicate that instance termination failed."""

    pass


class TimeoutFailure(TimeoutError):
    """Exception to indicate that a bounded wait has exceeded its budget."""

    pass


class RegistrationError(Exception):
    pass
