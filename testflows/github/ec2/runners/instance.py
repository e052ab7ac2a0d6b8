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
from dataclasses import dataclass

from .constants import supported_market_types


@dataclass(frozen=True)
class InstanceRequest:
    """Desired instance description.

    Tags are stored as a tuple of (key, value) pairs
    so that the request stays immutable.
    """

    image_id: str
    instance_type: str
    security_group_id: str
    tags: tuple[tuple[str, str], ...]
    user_data: bytes = b""
    iam_role_name: str = None
    key_name: str = None
    market_type: str = None

    def __post_init__(self):
        if not self.tags:
            raise ValueError("instance request must have at least one tag")
        if (
            self.market_type is not None
            and self.market_type not in supported_market_types
        ):
            raise ValueError(f"unsupported market type {self.market_type}")

    def market_options(self):
        """Return instance market options or None for on-demand instances."""
        if self.market_type == "spot":
            return {
                "MarketType": "spot",
                "SpotOptions": {"SpotInstanceType": "one-time"},
            }
        return None

    def tag_specifications(self):
        """Return tag specifications for the instance."""
        return [
            {
                "ResourceType": "instance",
                "Tags": [{"Key": key, "Value": value} for key, value in self.tags],
            }
        ]

    def to_params(self, subnet_id: str) -> dict:
        """Return RunInstances parameters for the specified subnet.

        User data is passed as raw bytes as boto3 base64 encodes it.
        """
        params = {
            "ImageId": self.image_id,
            "InstanceType": self.instance_type,
            "MinCount": 1,
            "MaxCount": 1,
            "UserData": self.user_data,
            "SecurityGroupIds": [self.security_group_id],
            "SubnetId": subnet_id,
            "TagSpecifications": self.tag_specifications(),
        }

        if self.iam_role_name:
            params["IamInstanceProfile"] = {"Name": self.iam_role_name}

        if self.key_name:
            params["KeyName"] = self.key_name

        market_options = self.market_options()
        if market_options is not None:
            params["InstanceMarketOptions"] = market_options

        return params


def tags_from_list(tags: list[dict]) -> tuple[tuple[str, str], ...]:
    """Convert a list of {"Key": key, "Value": value} dictionaries
    into instance request tags."""
    return tuple((str(tag["Key"]), str(tag["Value"])) for tag in tags)
