"""Retrieves the providers known to ECHO."""

from typing import TYPE_CHECKING, Dict, Optional

from cmrtransmit.api.echo_rest_services import rest_get
from cmrtransmit.core.exceptions import unexpected_status_error

if TYPE_CHECKING:
    from cmrtransmit import Transmit


def get_provider_guid_id_map(
    *, transmit_client: Optional["Transmit"] = None
) -> Dict[str, str]:
    """
    Returns a map of ECHO provider guids to CMR provider ids.

    Example: The ECHO REST response is converted
        `[{"provider": {"id": "CB91244B-...", "provider_id": "PROV1"}}]` becomes
        `{"CB91244B-...": "PROV1"}`
    """
    status, providers, body = rest_get("/providers", transmit_client=transmit_client)
    if status != 200:
        unexpected_status_error(status, body)
    return {
        item["provider"]["id"]: item["provider"]["provider_id"]
        for item in providers or []
    }
