"""Helpers for making requests to the CMR applications and for defining the
create, read, update, delete and search functions that most of them share."""

from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from cmrtransmit.core.connection import AppConnection, TransmitResponse
from cmrtransmit.core.exceptions import raise_for_status
from cmrtransmit.core.health import get_health, health_timeout_ms

if TYPE_CHECKING:
    from cmrtransmit import Transmit

UrlFn = Callable[[AppConnection], str]
ResponseHandler = Callable[[str, str, TransmitResponse], Any]


def reset_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/reset"


def clear_cache_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/caches/clear-cache"


def health_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/health"


def default_response_handler(
    app_name: str, method: str, response: TransmitResponse
) -> Any:
    """Returns the body of a successful response. Raises the error matching the status
    otherwise."""
    raise_for_status(response, action=f"{app_name} {method.upper()} request")
    if response.status == 204:
        return None
    return response.body


def not_found_as_none_response_handler(
    app_name: str, method: str, response: TransmitResponse
) -> Any:
    """Like default_response_handler but returns None for a 404."""
    if response.status == 404:
        return None
    return default_response_handler(app_name, method, response)


def request(
    app_name: str,
    *,
    url_fn: UrlFn,
    method: str,
    raw: bool = False,
    http_options: Optional[Mapping[str, Any]] = None,
    use_system_token: bool = False,
    token: Optional[str] = None,
    response_handler: Optional[ResponseHandler] = None,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """
    Makes a request to one of the CMR applications.

    Arguments:
        app_name: The application to send the request to.
        url_fn: Given the AppConnection of the application, returns the url.
        method: The HTTP method.
        raw: When True the TransmitResponse is returned without checking its status.
        http_options: Keyword arguments for `Transmit.rest_call` such as `body`,
            `params`, `headers` and `content_type`.
        use_system_token: Send the ECHO system token unless a token is given.
        token: The token to send.
        response_handler: Called with the application name, method and response when
            raw is False. Defaults to default_response_handler.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.

    Returns:
        The TransmitResponse when raw, otherwise the result of the response handler.
    """
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    response = client.rest_call(
        app_name,
        method,
        url_fn,
        use_system_token=use_system_token,
        token=token,
        **dict(http_options or {}),
    )
    if raw:
        return response
    handler = response_handler or default_response_handler
    return handler(app_name, method, response)


def _merge_options(
    defaults: Dict[str, Any], http_options: Optional[Mapping[str, Any]]
) -> Dict[str, Any]:
    merged = dict(defaults)
    merged.update(http_options or {})
    return merged


def make_creator(app_name: str, url_fn: UrlFn) -> Callable:
    """Returns a function that creates an item by POSTing it as JSON to url_fn."""

    def create(
        item: Any,
        *,
        raw: bool = False,
        token: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=url_fn,
            method="post",
            raw=raw,
            token=token,
            http_options=_merge_options({"body": item}, http_options),
            transmit_client=transmit_client,
        )

    create.__doc__ = f"Creates an item in {app_name}."
    return create


def make_updater(
    app_name: str, url_fn: Callable[[AppConnection, str], str]
) -> Callable:
    """Returns a function that updates the item with a concept id by PUTting it as
    JSON."""

    def update(
        concept_id: str,
        item: Any,
        *,
        raw: bool = False,
        token: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=lambda conn: url_fn(conn, concept_id),
            method="put",
            raw=raw,
            token=token,
            http_options=_merge_options({"body": item}, http_options),
            transmit_client=transmit_client,
        )

    update.__doc__ = f"Updates an item in {app_name}."
    return update


def make_destroyer(
    app_name: str, url_fn: Callable[[AppConnection, str], str]
) -> Callable:
    """Returns a function that deletes the item with a concept id."""

    def destroy(
        concept_id: str,
        *,
        raw: bool = False,
        token: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=lambda conn: url_fn(conn, concept_id),
            method="delete",
            raw=raw,
            token=token,
            http_options=http_options,
            transmit_client=transmit_client,
        )

    destroy.__doc__ = f"Deletes an item in {app_name}."
    return destroy


def make_getter(app_name: str, url_fn: Callable[[AppConnection, str], str]) -> Callable:
    """Returns a function that retrieves the item with a concept id, or None if it does
    not exist."""

    def get(
        concept_id: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        raw: bool = False,
        token: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=lambda conn: url_fn(conn, concept_id),
            method="get",
            raw=raw,
            token=token,
            http_options=_merge_options({"params": params}, http_options),
            response_handler=not_found_as_none_response_handler,
            transmit_client=transmit_client,
        )

    get.__doc__ = f"Retrieves an item from {app_name}."
    return get


def make_searcher(app_name: str, url_fn: UrlFn) -> Callable:
    """Returns a function that searches with query parameters."""

    def search(
        params: Optional[Mapping[str, Any]] = None,
        *,
        raw: bool = False,
        token: Optional[str] = None,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=url_fn,
            method="get",
            raw=raw,
            token=token,
            http_options=_merge_options({"params": params}, http_options),
            transmit_client=transmit_client,
        )

    search.__doc__ = f"Searches {app_name}."
    return search


def make_cache_clearer(app_name: str) -> Callable:
    """Returns a function that clears the caches of an application using the system
    token."""

    def clear_cache(
        *, raw: bool = False, transmit_client: Optional["Transmit"] = None
    ) -> Any:
        return request(
            app_name,
            url_fn=clear_cache_url,
            method="post",
            raw=raw,
            use_system_token=True,
            transmit_client=transmit_client,
        )

    clear_cache.__doc__ = f"Clears the caches of {app_name}."
    return clear_cache


def make_resetter(app_name: str) -> Callable:
    """Returns a function that calls the reset endpoint of an application using the
    system token."""

    def reset(
        *,
        raw: bool = False,
        http_options: Optional[Mapping[str, Any]] = None,
        transmit_client: Optional["Transmit"] = None,
    ) -> Any:
        return request(
            app_name,
            url_fn=reset_url,
            method="post",
            raw=raw,
            http_options=http_options,
            use_system_token=True,
            transmit_client=transmit_client,
        )

    reset.__doc__ = f"Resets {app_name}."
    return reset


def make_healther(app_name: str, extra_seconds: int = 2) -> Callable:
    """Returns a function that checks the health of an application with a timeout of
    the configured health check timeout plus extra_seconds."""

    def health_fn(client: "Transmit") -> Dict[str, Any]:
        response = request(
            app_name,
            url_fn=health_url,
            method="get",
            raw=True,
            transmit_client=client,
        )
        if response.status == 200:
            return {"ok?": True, "dependencies": response.body}
        return {"ok?": False, "problem": response.body}

    def get_app_health(
        *, transmit_client: Optional["Transmit"] = None
    ) -> Dict[str, Any]:
        from cmrtransmit import Transmit

        client = Transmit.get_client(transmit_client=transmit_client)
        return get_health(
            lambda: health_fn(client),
            health_timeout_ms(client.health_check_timeout_seconds, extra_seconds),
            logger=client.logger,
        )

    get_app_health.__doc__ = f"Returns the health of {app_name} with timeout handling."
    return get_app_health
