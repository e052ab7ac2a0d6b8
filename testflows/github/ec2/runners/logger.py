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
import copy
import logging
import logging.config

logger_name = "testflows.github.ec2.runners"

logger = logging.getLogger(logger_name)


class StdoutHandler(logging.StreamHandler):
    pass


class LoggerAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        if kwargs.get("extra") is None:
            kwargs["extra"] = self.extra
        else:
            extra = {}
            for k, v in self.extra.items():
                value = kwargs["extra"].get(k, v)
                extra[k] = v if value in (None, "") else value
            kwargs["extra"] = extra
        return msg, kwargs


logger = LoggerAdapter(
    logger,
    {
        "label": "-",
        "instance_id": "-",
        "subnet": "-",
    },
)

#: default logger configuration
default_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "stdout": {
            "format": (
                "%(asctime)s %(levelname)8s %(label)s %(instance_id)s "
                "%(subnet)s %(message)s"
            ),
            "datefmt": "%H:%M:%S",
        },
    },
    "handlers": {
        "stdout": {
            "level": "INFO",
            "formatter": "stdout",
            "class": "testflows.github.ec2.runners.logger.StdoutHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        logger_name: {
            "level": "INFO",
            "handlers": ["stdout"],
        }
    },
}


def configure(config, level=logging.INFO):
    """Apply logging configuration."""
    level = logging.getLevelName(level)

    if config.logger_config is None:
        config.logger_config = copy.deepcopy(default_config)

    logger_config = config.logger_config

    for handler in logger_config.get("handlers", {}).values():
        handler["level"] = level

    if logger_name in logger_config.get("loggers", {}):
        logger_config["loggers"][logger_name]["level"] = level

    logging.config.dictConfig(logger_config)
