"""Functions to invoke the ingest application. Concepts are ingested and deleted on
behalf of CMR with the system token."""

from typing import TYPE_CHECKING, Any, Mapping, Optional

from cmrtransmit.core import http_helper
from cmrtransmit.core.config import TOKEN_HEADER
from cmrtransmit.core.connection import AppConnection
from cmrtransmit.core.utils import timed, url_encode

if TYPE_CHECKING:
    from cmrtransmit import Transmit

INGEST = "ingest"

CONCEPT_TYPE_TO_URL_PART = {
    "collection": "collections",
    "granule": "granules",
}


def concept_ingest_url(
    provider_id: str, concept_type: str, native_id: str, conn: AppConnection
) -> str:
    return "%s/providers/%s/%s/%s" % (
        conn.root_url,
        url_encode(provider_id),
        CONCEPT_TYPE_TO_URL_PART[concept_type],
        url_encode(native_id),
    )


def _concept_headers(concept: Mapping[str, Any], system_token: str) -> dict:
    headers = {TOKEN_HEADER: system_token}
    if concept.get("revision-id") is not None:
        headers["cmr-revision-id"] = str(concept["revision-id"])
    return headers


def _concept_url_fn(concept: Mapping[str, Any]):
    return lambda conn: concept_ingest_url(
        concept["provider-id"], concept["concept-type"], concept["native-id"], conn
    )


@timed("ingest/ingest_concept")
def ingest_concept(
    concept: Mapping[str, Any],
    *,
    raw: bool = False,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """
    Ingests a concept by PUTting its metadata to ingest.

    Arguments:
        concept: A concept with `provider-id`, `concept-type` (`collection` or
            `granule`), `native-id`, `metadata`, `format` (the content type of the
            metadata) and optionally `revision-id`.
        raw: When True the TransmitResponse is returned without checking its status.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.
    """
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    return http_helper.request(
        INGEST,
        url_fn=_concept_url_fn(concept),
        method="put",
        raw=raw,
        http_options={
            "body": concept["metadata"],
            "content_type": concept.get("format"),
            "headers": _concept_headers(concept, client.system_token),
        },
        transmit_client=client,
    )


@timed("ingest/delete_concept")
def delete_concept(
    concept: Mapping[str, Any],
    *,
    raw: bool = False,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """Deletes a concept from ingest. The concept needs `provider-id`, `concept-type`,
    `native-id` and optionally `revision-id`."""
    from cmrtransmit import Transmit

    client = Transmit.get_client(transmit_client=transmit_client)
    return http_helper.request(
        INGEST,
        url_fn=_concept_url_fn(concept),
        method="delete",
        raw=raw,
        http_options={"headers": _concept_headers(concept, client.system_token)},
        transmit_client=client,
    )


get_ingest_health = http_helper.make_healther(INGEST, 2)
