"""Tests for instance request parameters."""
import dataclasses

import pytest

from testflows.github.ec2.runners.instance import InstanceRequest, tags_from_list


def make_request(**kwargs):
    fields = dict(
        image_id="ami-0123456789abcdef0",
        instance_type="t3.medium",
        security_group_id="sg-1",
        tags=(("Name", "runner"),),
        user_data=b"#!/bin/bash",
    )
    fields.update(kwargs)
    return InstanceRequest(**fields)


def test_request_is_immutable():
    request = make_request()
    with pytest.raises(dataclasses.FrozenInstanceError):
        request.instance_type = "t3.large"


def test_request_requires_tags():
    with pytest.raises(ValueError):
        make_request(tags=())


def test_request_rejects_unknown_market_type():
    with pytest.raises(ValueError):
        make_request(market_type="reserved")


def test_params():
    params = make_request().to_params("subnet-a")

    assert params == {
        "ImageId": "ami-0123456789abcdef0",
        "InstanceType": "t3.medium",
        "MinCount": 1,
        "MaxCount": 1,
        "UserData": b"#!/bin/bash",
        "SecurityGroupIds": ["sg-1"],
        "SubnetId": "subnet-a",
        "TagSpecifications": [
            {"ResourceType": "instance", "Tags": [{"Key": "Name", "Value": "runner"}]}
        ],
    }


def test_params_optional_fields():
    params = make_request(
        iam_role_name="runner-role", key_name="runner-key", market_type="spot"
    ).to_params("subnet-b")

    assert params["IamInstanceProfile"] == {"Name": "runner-role"}
    assert params["KeyName"] == "runner-key"
    assert params["InstanceMarketOptions"] == {
        "MarketType": "spot",
        "SpotOptions": {"SpotInstanceType": "one-time"},
    }


def test_on_demand_has_no_market_options():
    request = make_request()
    assert request.market_options() is None
    assert "InstanceMarketOptions" not in request.to_params("subnet-a")


def test_tags_from_list():
    assert tags_from_list(
        [{"Key": "Team", "Value": "ci"}, {"Key": "Cost", "Value": 10}]
    ) == (("Team", "ci"), ("Cost", "10"))
