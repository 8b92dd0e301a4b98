"""Functions to invoke the index set application."""

from typing import TYPE_CHECKING, Any, Dict, Optional

from cmrtransmit.core import http_helper
from cmrtransmit.core.exceptions import TransmitInternalError, errors_from_body

if TYPE_CHECKING:
    from cmrtransmit import Transmit

INDEX_SET = "index-set"


def get_index_set(
    index_set_id: Any, *, transmit_client: Optional["Transmit"] = None
) -> Optional[Dict[str, Any]]:
    """
    Fetches the index set with the given id using the system token.

    Arguments:
        index_set_id: The id of the index set.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.

    Raises:
        TransmitInternalError: The index set application returned a status other than
            200 or 404.

    Returns:
        The index set, or None if it does not exist.
    """
    response = http_helper.request(
        INDEX_SET,
        url_fn=lambda conn: f"{conn.root_url}/index-sets/{index_set_id}",
        method="get",
        raw=True,
        use_system_token=True,
        transmit_client=transmit_client,
    )
    if response.status == 404:
        return None
    if response.status == 200:
        return response.parsed_json()
    raise TransmitInternalError(
        f"Unexpected error fetching index-set with id: {index_set_id}, "
        f"Index set app reported status: {response.status}, "
        f"error: {errors_from_body(response.body)!r}",
        status=response.status,
        response=response,
    )


get_index_set_health = http_helper.make_healther(INDEX_SET, 2)
