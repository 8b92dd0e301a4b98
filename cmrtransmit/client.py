"""
The `Transmit` object holds the connections to the CMR applications and is used by
every function in `cmrtransmit.api` to make requests.
"""

import json
import logging
import os
import time
import typing
import urllib.parse as urllib_urlparse
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

import requests
from opentelemetry import trace
from opentelemetry.trace import SpanKind

import cmrtransmit
from cmrtransmit.core import config
from cmrtransmit.core.config import CONFIG_FILE, TOKEN_HEADER
from cmrtransmit.core.connection import AppConnection, TransmitResponse
from cmrtransmit.core.exceptions import TransmitError
from cmrtransmit.core.logging_setup import (
    DEBUG_LOGGER_NAME,
    DEFAULT_LOGGER_NAME,
    SILENT_LOGGER_NAME,
)

tracer = trace.get_tracer("cmrtransmit")

DEBUG_DEFAULT = False

ECHO_REST = "echo-rest"


class Transmit(object):
    """
    Constructs a client for the CMR applications.

    Attributes:
        config_path: Path to the configuration file. Defaults to ~/.cmrTransmitConfig
        token: The user token sent when a request does not name one.
        system_token: The ECHO system token used for requests made on behalf of CMR.
        debug: Log debugging messages if True.
        connections: The AppConnection of each configured application by name.

    Example: Getting started
        Calling metadata-db with connection settings from the environment

            from cmrtransmit import Transmit
            from cmrtransmit.api import get_latest_concept

            Transmit()
            concept = get_latest_concept("C1200000000-PROV1")
    """

    _transmit_client = None

    def __init__(
        self,
        token: str = None,
        debug: bool = None,
        silent: bool = None,
        config_path: str = CONFIG_FILE,
        requests_session: requests.Session = None,
        app_names: Iterable[str] = None,
        cache_client: bool = True,
        environ: Mapping[str, str] = None,
    ) -> "Transmit":
        """
        Initialize Transmit object

        Arguments:
            token: The user token sent when a request does not name one.
            debug: Log debugging messages if True.
            silent: Suppresses messages.
            config_path: Path to config File with settings for the applications.
            requests_session: A custom [requests.Session object](https://requests.readthedocs.io/en/latest/user/advanced/)
                whose connection pool is used for every application.
            app_names: The applications to create connections for. Defaults to every
                application in `cmrtransmit.core.config.APP_DEFAULTS`.
            cache_client: Whether to cache this object so that functions taking an
                optional `transmit_client` can be called without one.
            environ: Mapping used instead of os.environ when resolving settings.

        Raises:
            ValueError: Warn for non-boolean debug value.
        """
        self._requests_session = requests_session or requests.Session()
        self.config_path = config_path

        config_debug = None
        if os.path.isfile(config_path):
            if config.get_config_file(config_path).has_section("debug"):
                config_debug = True

        if debug is None:
            debug = config_debug if config_debug is not None else DEBUG_DEFAULT

        if not isinstance(debug, bool):
            raise ValueError("debug must be set to a bool (either True or False)")
        self.debug = debug
        self.silent = silent
        self._init_logger()

        self.token = token
        self.system_token = config.get_setting(
            "echo_system_token", config_path, environ=environ
        )
        http_socket_timeout = config.get_setting(
            "http_socket_timeout", config_path, environ=environ
        )
        echo_http_socket_timeout = config.get_setting(
            "echo_http_socket_timeout", config_path, environ=environ
        )
        self.health_check_timeout_seconds = config.get_setting(
            "health_check_timeout_seconds", config_path, environ=environ
        )

        self.connections: Dict[str, AppConnection] = {}
        for app_name, settings in config.app_conn_info(
            config_path, app_names, environ
        ).items():
            self.connections[app_name] = AppConnection(
                settings=settings,
                session=self._requests_session,
                socket_timeout_ms=(
                    echo_http_socket_timeout
                    if app_name == ECHO_REST
                    else http_socket_timeout
                ),
            )

        self.default_headers = {"Accept": "application/json"}
        self.default_headers.update(cmrtransmit.USER_AGENT)

        if cache_client:
            Transmit.set_client(transmit_client=self)

    def _init_logger(self):
        """
        Initialize logger for this class
        """
        logger_name = (
            SILENT_LOGGER_NAME
            if self.silent
            else DEBUG_LOGGER_NAME
            if self.debug
            else DEFAULT_LOGGER_NAME
        )
        self.logger = logging.getLogger(logger_name)

    @classmethod
    def get_client(cls, transmit_client: typing.Union[None, "Transmit"]) -> "Transmit":
        """
        Convience function to get an instance of 'Transmit'. The latest instance created
        or set via `set_client` will be returned.

        Arguments:
            transmit_client: An instance of 'Transmit' or None. This is used to simplify
                logical checks in cases where a client is passed into them.

        Returns:
            An instance of 'Transmit'.

        Raises:
            TransmitError: No instance has been created.
        """
        if transmit_client:
            return transmit_client

        if not cls._transmit_client:
            raise TransmitError(
                "No instance has been created - Please create a Transmit object first"
            )
        return cls._transmit_client

    @classmethod
    def set_client(cls, transmit_client) -> None:
        cls._transmit_client = transmit_client

    def app_connection(self, app_name: str) -> AppConnection:
        """
        Returns the connection to an application.

        Raises:
            TransmitError: No connection was configured for the application.
        """
        try:
            return self.connections[app_name]
        except KeyError:
            raise TransmitError(
                f"No connection is configured for application [{app_name}]"
            ) from None

    def root_url(self, app_name: str) -> str:
        return self.app_connection(app_name).root_url

    def _build_url(
        self, conn: AppConnection, uri: Union[str, Callable[[AppConnection], str]]
    ) -> str:
        """Returns the url to request. A callable is given the connection. A relative
        uri is appended to the root url of the connection."""
        if callable(uri):
            return uri(conn)
        if urllib_urlparse.urlparse(uri).netloc == "":
            return conn.root_url + uri
        return uri

    def _generate_headers(
        self,
        headers: Optional[Mapping[str, str]],
        use_system_token: bool,
        token: Optional[str],
    ) -> Dict[str, str]:
        """Generate the headers for a request. An explicit token wins over the system
        token which wins over the token of this object."""
        generated = dict(self.default_headers)
        if token:
            generated[TOKEN_HEADER] = token
        elif use_system_token:
            generated[TOKEN_HEADER] = self.system_token
        elif self.token:
            generated[TOKEN_HEADER] = self.token
        if headers:
            generated.update(headers)
        return generated

    def rest_call(
        self,
        app_name: str,
        method: str,
        uri: Union[str, Callable[[AppConnection], str]],
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        content_type: Optional[str] = None,
        use_system_token: bool = False,
        token: Optional[str] = None,
        **kwargs,
    ) -> TransmitResponse:
        """
        Sends an HTTP request to one of the CMR applications. The status of the
        response is not checked; callers decide what each status means.

        Arguments:
            app_name: The application to send the request to, e.g. `metadata-db`.
            method: The HTTP method. Should be get, post, put or delete.
            uri: A path relative to the root url of the application, a full url, or a
                callable that is given the AppConnection and returns the url.
            body: The payload. Dictionaries and lists are sent as JSON.
            params: Query parameters.
            headers: Headers added to the generated headers.
            content_type: The content type of the body. Defaults to JSON for
                dictionaries and lists.
            use_system_token: Send the ECHO system token unless a token is given.
            token: The token to send.
            kwargs: Any other arguments taken by a
                [request](http://docs.python-requests.org/en/latest/) method

        Returns:
            The TransmitResponse.
        """
        conn = self.app_connection(app_name)
        url = self._build_url(conn, uri)
        request_headers = self._generate_headers(headers, use_system_token, token)

        if isinstance(body, (dict, list)):
            body = json.dumps(body)
            content_type = content_type or "application/json"
        if content_type:
            request_headers["Content-Type"] = content_type

        kwargs.setdefault("timeout", conn.timeout_seconds)
        requests_method_fn = getattr(conn.session, method.lower())

        current_span = trace.get_current_span()
        if current_span.is_recording():
            current_span = tracer.start_span(
                f"{method.upper()} {url}", kind=SpanKind.CLIENT
            )
            current_span.set_attributes(
                {"url": url, "http.method": method.upper(), "cmr.app": app_name}
            )

        start = time.monotonic()
        try:
            response = requests_method_fn(
                url, data=body, params=params, headers=request_headers, **kwargs
            )
            if current_span.is_recording():
                current_span.set_attribute(
                    "http.response.status_code", response.status_code
                )
        finally:
            self.logger.debug(
                "Completed %s %s Request to %s in [%d] ms",
                app_name,
                method.upper(),
                url,
                int((time.monotonic() - start) * 1000),
            )
            if current_span.is_recording():
                current_span.end()
        return TransmitResponse.from_requests(response)

    def rest_get(self, app_name: str, uri, **kwargs) -> TransmitResponse:
        """Sends an HTTP GET request. See `rest_call`."""
        return self.rest_call(app_name, "get", uri, **kwargs)

    def rest_post(
        self, app_name: str, uri, body: Any = None, **kwargs
    ) -> TransmitResponse:
        """Sends an HTTP POST request. See `rest_call`."""
        return self.rest_call(app_name, "post", uri, body=body, **kwargs)

    def rest_put(
        self, app_name: str, uri, body: Any = None, **kwargs
    ) -> TransmitResponse:
        """Sends an HTTP PUT request. See `rest_call`."""
        return self.rest_call(app_name, "put", uri, body=body, **kwargs)

    def rest_delete(self, app_name: str, uri, **kwargs) -> TransmitResponse:
        """Sends an HTTP DELETE request. See `rest_call`."""
        return self.rest_call(app_name, "delete", uri, **kwargs)
