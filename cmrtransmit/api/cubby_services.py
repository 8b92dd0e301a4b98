"""Functions for accessing the cubby key value store."""

from typing import TYPE_CHECKING, Any, Optional

from cmrtransmit.core import http_helper
from cmrtransmit.core.connection import AppConnection
from cmrtransmit.core.utils import url_encode

if TYPE_CHECKING:
    from cmrtransmit import Transmit

CUBBY = "cubby"


def keys_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/keys"


def key_url(key_name: str, conn: AppConnection) -> str:
    return f"{conn.root_url}/keys/{url_encode(key_name)}"


def get_keys(
    *, raw: bool = False, transmit_client: Optional["Transmit"] = None
) -> Any:
    """Gets the stored keys of cached values."""
    return http_helper.request(
        CUBBY, url_fn=keys_url, method="get", raw=raw, transmit_client=transmit_client
    )


def get_value(
    key_name: str, *, raw: bool = False, transmit_client: Optional["Transmit"] = None
) -> Any:
    """Gets the value associated with the given key."""
    return http_helper.request(
        CUBBY,
        url_fn=lambda conn: key_url(key_name, conn),
        method="get",
        raw=raw,
        transmit_client=transmit_client,
    )


def set_value(
    key_name: str,
    value: str,
    *,
    raw: bool = False,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """
    Associates a value with the given key.

    Arguments:
        key_name: The key. It is url encoded.
        value: The value to store. It is sent as the request body.
        raw: When True the TransmitResponse is returned without checking its status.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.
    """
    return http_helper.request(
        CUBBY,
        url_fn=lambda conn: key_url(key_name, conn),
        method="put",
        raw=raw,
        http_options={"body": value},
        transmit_client=transmit_client,
    )


def delete_value(
    key_name: str, *, raw: bool = False, transmit_client: Optional["Transmit"] = None
) -> Any:
    """Dissociates the value with the given key."""
    return http_helper.request(
        CUBBY,
        url_fn=lambda conn: key_url(key_name, conn),
        method="delete",
        raw=raw,
        transmit_client=transmit_client,
    )


def delete_all_values(
    *, raw: bool = False, transmit_client: Optional["Transmit"] = None
) -> Any:
    return http_helper.request(
        CUBBY,
        url_fn=keys_url,
        method="delete",
        raw=raw,
        transmit_client=transmit_client,
    )


reset = http_helper.make_resetter(CUBBY)

get_cubby_health = http_helper.make_healther(CUBBY, 2)
