"""This module is responsible for exposing access to the connection settings of each
CMR application and the other library settings, either through environment
variables, the configuration file, or built in defaults.

Settings are resolved in that order. Environment variables are named after the
setting with a `CMR_` prefix, e.g. `CMR_METADATA_DB_PORT` or `CMR_ECHO_SYSTEM_TOKEN`.
In the configuration file connection settings live in a section named after the
application:

    [metadata-db]
    host = mdb.example.com
    port = 443
    protocol = https
    relative_root_url = /metadata-db

and everything else in the `[transmit]` section.
"""

import configparser
import functools
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from cmrtransmit.core.utils import screaming_snake_case

CONFIG_FILE = os.path.join(os.path.expanduser("~"), ".cmrTransmitConfig")
ENV_PREFIX = "CMR_"
TRANSMIT_SECTION_NAME = "transmit"

MOCK_ECHO_SYSTEM_GROUP_GUID = "mock-admin-group-guid"
MOCK_ECHO_SYSTEM_TOKEN = "mock-echo-system-token"

TOKEN_HEADER = "echo-token"


def mins_to_ms(mins: int) -> int:
    """Returns the number of minutes in milliseconds"""
    return mins * 60000


DEFAULT_CONN_INFO = {
    "protocol": "http",
    "host": "localhost",
    "port": 3000,
    "relative_root_url": "",
}

APP_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "metadata-db": {"port": 3001},
    "ingest": {"port": 3002},
    "search": {"port": 3003},
    "indexer": {"port": 3004},
    "index-set": {"port": 3005},
    "bootstrap": {"port": 3006},
    "cubby": {"port": 3007},
    "urs": {"port": 3008, "relative_root_url": "/urs"},
    "virtual-product": {"port": 3009},
    # CMR open search is 3010
    "access-control": {"port": 3011},
    "kms": {"port": 2999, "relative_root_url": "/kms"},
    "echo-rest": {"port": 3008},
}
"""The default connection values of every application, overriding DEFAULT_CONN_INFO."""

SETTING_DEFAULTS: Dict[str, Any] = {
    "echo_system_token": MOCK_ECHO_SYSTEM_TOKEN,
    "echo_system_username": "User101",
    "administrators_group_name": "Administrators",
    "administrators_group_legacy_guid": MOCK_ECHO_SYSTEM_GROUP_GUID,
    "urs_username": "mock-urs-username",
    # Larger than the VIP timeout. Responses taking longer than that should fail.
    "http_socket_timeout": mins_to_ms(6),
    "echo_http_socket_timeout": mins_to_ms(60),
    "health_check_timeout_seconds": 10,
}

INTEGER_SETTINGS = frozenset(
    [
        "port",
        "http_socket_timeout",
        "echo_http_socket_timeout",
        "health_check_timeout_seconds",
    ]
)


@functools.lru_cache()
def get_config_file(config_path: str) -> configparser.RawConfigParser:
    """
    Retrieves the library configuration information.

    Arguments:
        config_path:  Path to configuration file on local file system

    Returns:
        A RawConfigParser populated with properties from the configuration file.
    """

    try:
        config = configparser.RawConfigParser()
        config.read(config_path)  # Does not fail if the file does not exist
        return config
    except configparser.Error as ex:
        raise ValueError(
            f"Error parsing CMR transmit config file: {config_path}"
        ) from ex


def get_config_section_dict(
    section_name: str,
    config_path: str,
) -> Dict[str, str]:
    """
    Get a section in the configuration file with the section name.

    Arguments:
        section_name: The name of the section in the configuration file
        config_path:  Path to configuration file on local file system

    Returns:
        A dictionary containing the configuration section content. If the
        section does not exist, an empty dictionary is returned.
    """
    config = get_config_file(config_path)
    try:
        return dict(config.items(section_name))
    except configparser.NoSectionError:
        # section not present
        return {}


def env_var_name(setting_name: str, app_name: Optional[str] = None) -> str:
    """Returns the environment variable consulted for a setting, e.g.
    `CMR_METADATA_DB_PORT` for the `port` of `metadata-db`."""
    if app_name:
        return ENV_PREFIX + screaming_snake_case(f"{app_name}-{setting_name}")
    return ENV_PREFIX + screaming_snake_case(setting_name)


def _parse_value(setting_name: str, value: Any, parser: Optional[Callable]) -> Any:
    if parser is None:
        parser = int if setting_name in INTEGER_SETTINGS else str
    try:
        return parser(value)
    except (TypeError, ValueError) as cause:
        raise ValueError(f"Invalid {setting_name} config setting {value}") from cause


def get_setting(
    setting_name: str,
    config_path: str = CONFIG_FILE,
    *,
    app_name: Optional[str] = None,
    default: Any = None,
    environ: Optional[Mapping[str, str]] = None,
    parser: Optional[Callable] = None,
) -> Any:
    """
    Resolves a single setting from the environment, then the configuration file, then
    the given default.

    Arguments:
        setting_name: Snake case name of the setting, e.g. `http_socket_timeout`.
        config_path: Path to configuration file on local file system.
        app_name: When set the setting is a connection setting of this application and
            is read from the application's section of the configuration file.
        default: Value used when neither the environment nor the file set it. When
            None the library default from SETTING_DEFAULTS is used.
        environ: Mapping used instead of os.environ.
        parser: Callable converting the raw string value. Integer settings are
            parsed with int by default.

    Raises:
        ValueError: The configured value cannot be parsed.

    Returns:
        The resolved value.
    """
    environ = os.environ if environ is None else environ
    if default is None and app_name is None:
        default = SETTING_DEFAULTS.get(setting_name)

    env_value = environ.get(env_var_name(setting_name, app_name))
    if env_value:
        return _parse_value(setting_name, env_value, parser)

    section = app_name or TRANSMIT_SECTION_NAME
    file_value = get_config_section_dict(section, config_path).get(setting_name)
    if file_value:
        return _parse_value(setting_name, file_value, parser)

    return default


@dataclass(frozen=True)
class AppConnectionSettings:
    """
    Where to find one of the CMR applications.

    Attributes:
        app_name: The application name, e.g. `metadata-db`.
        protocol: `http` or `https`.
        host: The host name.
        port: The port number.
        relative_root_url: A root path that appears on all requests sent to this
            application. For example if the relative root url is `/cmr-app` and the
            path for a URL is `/foo` then the full url would be
            `http://host:port/cmr-app/foo`. This should be set when the application is
            deployed behind a VIP.
    """

    app_name: str
    protocol: str = "http"
    host: str = "localhost"
    port: int = 3000
    relative_root_url: str = ""

    @property
    def root_url(self) -> str:
        return f"{self.protocol}://{self.host}:{self.port}{self.relative_root_url}"


def app_connection_settings(
    app_name: str,
    config_path: str = CONFIG_FILE,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConnectionSettings:
    """
    Returns the connection settings for an application.

    Arguments:
        app_name: The application name. Must be a key of APP_DEFAULTS.
        config_path: Path to configuration file on local file system.
        environ: Mapping used instead of os.environ.

    Raises:
        ValueError: The application is unknown or a setting cannot be parsed.
    """
    if app_name not in APP_DEFAULTS:
        raise ValueError(
            f"Unknown application {app_name}. Expected one of {sorted(APP_DEFAULTS)}"
        )
    defaults = {**DEFAULT_CONN_INFO, **APP_DEFAULTS[app_name]}
    values = {
        field_name: get_setting(
            field_name,
            config_path,
            app_name=app_name,
            default=default,
            environ=environ,
        )
        for field_name, default in defaults.items()
    }
    return AppConnectionSettings(app_name=app_name, **values)


def app_conn_info(
    config_path: str = CONFIG_FILE,
    app_names: Optional[Iterable[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, AppConnectionSettings]:
    """Returns the connection settings of the given applications (all of them by
    default) by application name."""
    app_names = APP_DEFAULTS.keys() if app_names is None else app_names
    return {
        app_name: app_connection_settings(app_name, config_path, environ)
        for app_name in app_names
    }


def application_public_root_url(public_conf: Mapping[str, Any]) -> str:
    """
    Returns the public root url for an application given its public configuration.

    Arguments:
        public_conf: A mapping with `protocol`, `host`, `port` and optionally
            `relative-root-url`.
    """
    relative_root_url = public_conf.get("relative-root-url") or ""
    port = f"{public_conf['port']}{relative_root_url}"
    return f"{public_conf['protocol']}://{public_conf['host']}:{port}/"
