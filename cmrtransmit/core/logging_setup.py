################
# logging setup
################

import logging
import logging.config as logging_config

logging.captureWarnings(True)
logging.getLogger("requests").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)

DEBUG_LOGGER_NAME = "cmrtransmit_debug"
DEFAULT_LOGGER_NAME = "cmrtransmit_default"
SILENT_LOGGER_NAME = "cmrtransmit_silent"
PACKAGE_LOGGER_NAME = "cmrtransmit"
"""Parent of the module loggers of functions that are not given a Transmit client,
such as the ACL conversion functions."""


class LoggingInfoOnlyFilter(logging.Filter):
    def filter(self, record):
        return record.levelno == logging.INFO


class LoggingIgnoreInfoFilter(logging.Filter):
    def filter(self, record):
        return record.levelno != logging.INFO


logging_config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "debug_format": {
                "format": (
                    "%(asctime)s [%(name)s %(module)s:%(lineno)d - %(levelname)s]: "
                    "%(message)s"
                )
            },
            "brief_format": {"format": "%(message)s"},
            "warning_format": {"format": "[%(levelname)s] %(message)s"},
        },
        "filters": {
            "info_only": {"()": LoggingInfoOnlyFilter},
            "ignore_info": {"()": LoggingIgnoreInfoFilter},
        },
        "handlers": {
            "info_only_stdout": {
                "level": "INFO",
                "class": "logging.StreamHandler",
                "formatter": "brief_format",
                "stream": "ext://sys.stdout",
                "filters": ["info_only"],
            },
            "debug_stderr": {
                "level": "DEBUG",
                "class": "logging.StreamHandler",
                "formatter": "debug_format",
                "stream": "ext://sys.stderr",
            },
            "warning_stderr": {
                "level": "WARNING",
                "class": "logging.StreamHandler",
                "formatter": "warning_format",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            PACKAGE_LOGGER_NAME: {
                "handlers": ["info_only_stdout", "warning_stderr"],
                "level": "INFO",
                "propagate": True,
            },
            DEFAULT_LOGGER_NAME: {
                "handlers": ["info_only_stdout", "warning_stderr"],
                "level": "INFO",
                "propagate": True,
            },
            DEBUG_LOGGER_NAME: {
                "handlers": ["info_only_stdout", "debug_stderr"],
                "level": "DEBUG",
                "propagate": True,
            },
            SILENT_LOGGER_NAME: {
                "handlers": [],
                "level": "INFO",
                "propagate": False,
            },
        },
    }
)
