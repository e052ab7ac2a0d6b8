"""Tests for instance boot scripts."""
import pytest

from testflows.github.ec2.runners.errors import ConfigError
from testflows.github.ec2.runners.userdata import BootScriptParams, build_boot_script


def params(**kwargs):
    fields = dict(
        github_repository="owner/repo",
        registration_token="TOKEN",
        label="github-ec2-runner-1",
        pre_runner_script="echo pre",
        runner_version="2.311.0",
    )
    fields.update(kwargs)
    return BootScriptParams(**fields)


def test_linux_fresh_install():
    script = build_boot_script("linux", params()).decode("utf-8")
    lines = script.split("\n")

    assert lines[0] == "#!/bin/bash"
    assert "mkdir actions-runner && cd actions-runner" in lines
    assert "echo pre" in lines
    assert (
        "curl -o actions-runner-linux-x64-2.311.0.tar.gz -L "
        "https://github.com/actions/runner/releases/download/v2.311.0/"
        "actions-runner-linux-x64-2.311.0.tar.gz"
    ) in lines
    assert (
        "./config.sh --url https://github.com/owner/repo --token TOKEN "
        "--labels github-ec2-runner-1 --name github-ec2-runner-1 --unattended"
    ) in lines
    assert lines[-1] == "./run.sh"


def test_linux_preinstalled():
    script = build_boot_script(
        "linux", params(runner_home_dir="/opt/actions-runner")
    ).decode("utf-8")

    assert 'cd "/opt/actions-runner"' in script
    assert "curl" not in script
    assert "./run.sh" in script


def test_windows_fresh_install():
    script = build_boot_script("windows", params()).decode("utf-8")
    lines = script.split("\n")

    assert lines[0] == "<powershell>"
    assert "winrm quickconfig -q" in lines
    assert any(
        line.startswith("Invoke-WebRequest") and "actions-runner-win-x64-2.311.0.zip" in line
        for line in lines
    )
    assert "./run.cmd" in lines
    assert lines[-2:] == ["</powershell>", "<persist>false</persist>"]


def test_windows_preinstalled():
    script = build_boot_script(
        "windows", params(runner_home_dir="C:\\actions-runner")
    ).decode("utf-8")

    assert 'cd "C:\\actions-runner"' in script
    assert "Invoke-WebRequest" not in script


def test_unsupported_os():
    with pytest.raises(ConfigError):
        build_boot_script("macos", params())
