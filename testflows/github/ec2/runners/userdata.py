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
"""Instance boot scripts that install, configure and start
GitHub Actions runner on the first boot.

User data scripts are executed by the instance as the root user
on Linux and as the local administrator on Windows.
"""
from dataclasses import dataclass

from .constants import runner_version as default_runner_version
from .errors import ConfigError


@dataclass
class BootScriptParams:
    github_repository: str
    registration_token: str
    label: str
    runner_home_dir: str = None
    pre_runner_script: str = ""
    runner_version: str = default_runner_version

    @property
    def url(self):
        return f"https://github.com/{self.github_repository}"


class BootScript:
    """Boot script builder base class.

    If runner home directory is set then the runner is expected
    to be pre-installed in the image, otherwise it is downloaded.
    """

    def preinstalled(self, params: BootScriptParams) -> list[str]:
        raise NotImplementedError

    def fresh_install(self, params: BootScriptParams) -> list[str]:
        raise NotImplementedError

    def build(self, params: BootScriptParams) -> bytes:
        if params.runner_home_dir:
            lines = self.preinstalled(params)
        else:
            lines = self.fresh_install(params)
        return "\n".join(lines).encode("utf-8")


class LinuxBootScript(BootScript):
    def pre_runner(self, params: BootScriptParams):
        return [
            "cat > pre-runner-script.sh <<'__PRE_RUNNER_SCRIPT__'",
            params.pre_runner_script or "",
            "__PRE_RUNNER_SCRIPT__",
            "source pre-runner-script.sh",
        ]

    def configure_and_run(self, params: BootScriptParams):
        return [
            "export RUNNER_ALLOW_RUNASROOT=1",
            f"./config.sh --url {params.url} --token {params.registration_token} "
            f"--labels {params.label} --name {params.label} --unattended",
            "./run.sh",
        ]

    def preinstalled(self, params):
        return (
            ["#!/bin/bash", f'cd "{params.runner_home_dir}"']
            + self.pre_runner(params)
            + self.configure_and_run(params)
        )

    def fresh_install(self, params):
        archive = f"actions-runner-linux-x64-{params.runner_version}.tar.gz"
        return (
            ["#!/bin/bash", "mkdir actions-runner && cd actions-runner"]
            + self.pre_runner(params)
            + [
                f"curl -o {archive} -L https://github.com/actions/runner/releases/download/"
                f"v{params.runner_version}/{archive}",
                f"tar xzf ./{archive}",
            ]
            + self.configure_and_run(params)
        )


class WindowsBootScript(BootScript):
    # enable WinRM so that the instance can be reached for debugging
    winrm = [
        "winrm quickconfig -q",
        "winrm set winrm/config/service/Auth '@{Basic=\"true\"}'",
        "winrm set winrm/config/service '@{AllowUnencrypted=\"true\"}'",
        "winrm set winrm/config/winrs '@{MaxMemoryPerShellMB=\"0\"}'",
    ]

    def pre_runner(self, params: BootScriptParams):
        return [
            "@'",
            params.pre_runner_script or "",
            "'@ | Out-File -Encoding utf8 pre-runner-script.ps1",
            "& ./pre-runner-script.ps1",
        ]

    def configure_and_run(self, params: BootScriptParams):
        # name the runner the same as the label to avoid machine name conflicts
        return [
            f"./config.cmd --url {params.url} --token {params.registration_token} "
            f"--labels {params.label} --name {params.label} --unattended",
            "./run.cmd",
            "</powershell>",
            "<persist>false</persist>",
        ]

    def preinstalled(self, params):
        return (
            ["<powershell>"]
            + self.winrm
            + [f'cd "{params.runner_home_dir}"']
            + self.pre_runner(params)
            + self.configure_and_run(params)
        )

    def fresh_install(self, params):
        archive = f"actions-runner-win-x64-{params.runner_version}.zip"
        return (
            ["<powershell>"]
            + self.winrm
            + ["mkdir actions-runner; cd actions-runner"]
            + self.pre_runner(params)
            + [
                f"Invoke-WebRequest -Uri https://github.com/actions/runner/releases/download/"
                f"v{params.runner_version}/{archive} -OutFile {archive}",
                "Add-Type -AssemblyName System.IO.Compression.FileSystem ; "
                f'[System.IO.Compression.ZipFile]::ExtractToDirectory("$PWD/{archive}", "$PWD")',
            ]
            + self.configure_and_run(params)
        )


boot_scripts = {
    "linux": LinuxBootScript,
    "windows": WindowsBootScript,
}


def build_boot_script(os: str, params: BootScriptParams) -> bytes:
    """Build boot script for the target operating system."""
    try:
        boot_script = boot_scripts[os]()
    except KeyError:
        raise ConfigError(
            f"unsupported os {os}, must be one of {', '.join(boot_scripts)}"
        )
    return boot_script.build(params)
