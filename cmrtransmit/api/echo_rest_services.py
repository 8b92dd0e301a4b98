"""Helpers for making requests to the legacy ECHO REST api. Every request is sent
with the ECHO system token."""

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

import requests

from cmrtransmit.core.exceptions import unexpected_status_error  # noqa: F401
from cmrtransmit.core.health import get_health, health_timeout_ms
from cmrtransmit.core.utils import is_json

if TYPE_CHECKING:
    from cmrtransmit import Transmit

ECHO_REST = "echo-rest"


def _parsed_body(response) -> Any:
    if is_json(response.headers.get("content-type")):
        return response.body
    return None


def rest_get(
    url_path: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Tuple[int, Any, str]:
    """
    Makes a GET request to ECHO REST.

    Arguments:
        url_path: The path relative to the ECHO REST root url, e.g. `/acls`.
        params: Query parameters.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.

    Returns:
        A tuple of the status, the parsed body (None unless the response is JSON) and
        the raw body.
    """
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    response = client.rest_get(
        ECHO_REST, url_path, params=params, use_system_token=True
    )
    return response.status, _parsed_body(response), response.text


def rest_post(
    url_path: str,
    body_obj: Any,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Tuple[int, Any, str]:
    """
    Makes a POST request to ECHO REST with body_obj encoded as JSON.

    Returns:
        A tuple of the status, the parsed body (None unless the response is JSON) and
        the raw body.
    """
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    response = client.rest_post(
        ECHO_REST,
        url_path,
        body=body_obj,
        content_type="application/json",
        use_system_token=True,
    )
    return response.status, _parsed_body(response), response.text


def rest_delete(
    url_path: str,
    params: Optional[Mapping[str, Any]] = None,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Tuple[int, str]:
    """
    Makes a DELETE request to ECHO REST.

    Returns:
        A tuple of the status and the raw body.
    """
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    response = client.rest_delete(
        ECHO_REST, url_path, params=params, use_system_token=True
    )
    return response.status, response.text


def health_fn(*, transmit_client: Optional["Transmit"] = None) -> Dict[str, Any]:
    """Returns the availability status of ECHO REST by calling its availability
    endpoint."""
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    try:
        response = client.rest_get(ECHO_REST, "/availability")
        status, body = response.status, response.text
    except requests.exceptions.RequestException as ex:
        status = 503
        body = f"Unable to get echo health, caught exception: {ex}"

    if status == 200:
        return {"ok?": True}
    return {
        "ok?": False,
        "problem": f"Received {status} from availability check. {body}",
    }


def health(*, transmit_client: Optional["Transmit"] = None) -> Dict[str, Any]:
    """Returns the ECHO REST health with timeout handling."""
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    return get_health(
        lambda: health_fn(transmit_client=client),
        health_timeout_ms(client.health_check_timeout_seconds, extra_seconds=0),
        logger=client.logger,
    )
