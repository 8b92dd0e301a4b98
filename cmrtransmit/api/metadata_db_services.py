"""Functions to invoke the metadata-db application."""

import json
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Union

from cmrtransmit.core import http_helper
from cmrtransmit.core.connection import TransmitResponse
from cmrtransmit.core.exceptions import (
    TransmitConflictError,
    TransmitInternalError,
    TransmitInvalidDataError,
    TransmitNotFoundError,
    errors_from_body,
)
from cmrtransmit.core.models.concept import ConceptType, finish_parse_concept
from cmrtransmit.core.utils import timed, url_encode

if TYPE_CHECKING:
    from cmrtransmit import Transmit

METADATA_DB = "metadata-db"


def _call(
    method: str,
    path: str,
    transmit_client: Optional["Transmit"],
    **http_options,
) -> TransmitResponse:
    return http_helper.request(
        METADATA_DB,
        url_fn=lambda conn: f"{conn.root_url}{path}",
        method=method,
        raw=True,
        use_system_token=http_options.pop("use_system_token", False),
        http_options=http_options,
        transmit_client=transmit_client,
    )


def _internal_error(message: str, response: TransmitResponse) -> TransmitInternalError:
    return TransmitInternalError(message, status=response.status, response=response)


def _errors_str(response: TransmitResponse) -> str:
    return json.dumps(errors_from_body(response.body))


@timed("metadata-db/get_concept")
def get_concept(
    concept_id: str,
    revision_id: Union[int, str],
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Dict[str, Any]:
    """
    Retrieve the concept with the given concept id and revision id.

    Raises:
        TransmitNotFoundError: The concept revision could not be retrieved.
    """
    response = _call("get", f"/concepts/{concept_id}/{revision_id}", transmit_client)
    if response.status == 200:
        return finish_parse_concept(response.parsed_json())
    raise TransmitNotFoundError(
        f"Failed to retrieve concept {concept_id}/{revision_id} from metadata-db: "
        f"{response.text}",
        status=response.status,
        response=response,
    )


@timed("metadata-db/get_latest_concept")
def get_latest_concept(
    concept_id: str,
    throw_service_error: bool = True,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Optional[Dict[str, Any]]:
    """
    Retrieve the latest revision of the concept.

    Arguments:
        concept_id: The concept id.
        throw_service_error: When False None is returned for a concept that does not
            exist.

    Raises:
        TransmitNotFoundError: The concept does not exist and throw_service_error is
            True.

    Returns:
        The concept, or None for any other status.
    """
    response = _call("get", f"/concepts/{concept_id}", transmit_client)
    if response.status == 200:
        return finish_parse_concept(response.parsed_json())
    if throw_service_error and response.status == 404:
        raise TransmitNotFoundError(
            f"Failed to retrieve concept {concept_id} from metadata-db: "
            f"{response.text}",
            status=404,
            response=response,
        )
    return None


@timed("metadata-db/get_concept_id")
def get_concept_id(
    concept_type: Union[ConceptType, str],
    provider_id: str,
    native_id: str,
    throw_service_error: bool = True,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> Optional[str]:
    """
    Return the concept id of the concept matching the given arguments.

    Raises:
        TransmitNotFoundError: The concept does not exist and throw_service_error is
            True.
        TransmitInternalError: metadata-db returned an unexpected status.

    Returns:
        The concept id, or None if the concept does not exist and throw_service_error
        is False.
    """
    concept_type = ConceptType(concept_type)
    response = _call(
        "get",
        f"/concept-id/{concept_type.value}/{provider_id}/{url_encode(native_id)}",
        transmit_client,
    )
    if response.status == 404:
        if throw_service_error:
            raise TransmitNotFoundError(
                f"{concept_type.pascal_name} with native id [{native_id}] in provider "
                f"[{provider_id}] does not exist.",
                status=404,
                response=response,
            )
        return None
    if response.status == 200:
        return response.parsed_json()["concept-id"]
    raise _internal_error(
        "Concept id fetch failed. MetadataDb app response status code: "
        f"{response.status} {_errors_str(response)}",
        response,
    )


def _search_concepts(
    path: str,
    body: List[Any],
    allow_missing: bool,
    failure: str,
    transmit_client: Optional["Transmit"],
) -> List[Any]:
    response = _call(
        "post",
        path,
        transmit_client,
        body=body,
        params={"allow_missing": str(bool(allow_missing)).lower()},
    )
    if response.status == 404:
        from cmrtransmit import Transmit

        Transmit.get_client(transmit_client=transmit_client).logger.debug(
            "Not found response body: %s", response.text
        )
        raise TransmitNotFoundError(
            "Unable to find all concepts.", status=404, response=response
        )
    if response.status == 200:
        return response.parsed_json()
    raise _internal_error(
        f"{failure} failed. MetadataDb app response status code: "
        f"{response.status} {response.text}",
        response,
    )


@timed("metadata-db/get_concept_revisions")
def get_concept_revisions(
    concept_tuples: Iterable[Iterable[Any]],
    allow_missing: bool = False,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> List[Dict[str, Any]]:
    """
    Search metadata-db and return the concepts given by the (concept id, revision id)
    tuples.

    Raises:
        TransmitNotFoundError: Some of the concepts do not exist and allow_missing is
            False.
    """
    return _search_concepts(
        "/concepts/search/concept-revisions",
        [list(t) for t in concept_tuples],
        allow_missing,
        "Get concept revisions",
        transmit_client,
    )


@timed("metadata-db/get_latest_concepts")
def get_latest_concepts(
    concept_ids: Iterable[str],
    allow_missing: bool = False,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> List[Dict[str, Any]]:
    """Search metadata-db and return the latest revisions of the given concept ids."""
    concepts = _search_concepts(
        "/concepts/search/latest-concept-revisions",
        list(concept_ids),
        allow_missing,
        "Get latest concept revisions",
        transmit_client,
    )
    return [finish_parse_concept(c) for c in concepts]


@timed("metadata-db/find_collections")
def find_collections(
    params: Mapping[str, Any], *, transmit_client: Optional["Transmit"] = None
) -> List[Dict[str, Any]]:
    """Searches metadata-db for collections matching the given parameters."""
    response = _call(
        "get", "/concepts/search/collections", transmit_client, params=params
    )
    if response.status == 200:
        return [finish_parse_concept(c) for c in response.parsed_json()]
    raise _internal_error(
        f"Collection search failed. status: {response.status} body: {response.text}",
        response,
    )


@timed("metadata-db/get_expired_collection_concept_ids")
def get_expired_collection_concept_ids(
    provider_id: str, *, transmit_client: Optional["Transmit"] = None
) -> List[str]:
    """Returns the concept ids of the collections in a provider that have expired."""
    response = _call(
        "get",
        "/concepts/search/expired-collections",
        transmit_client,
        params={"provider": provider_id},
    )
    if response.status == 200:
        return response.parsed_json()
    raise _internal_error(
        f"Collection search failed. status: {response.status} body: {response.text}",
        response,
    )


def create_provider_raw(
    provider: Mapping[str, Any], *, transmit_client: Optional["Transmit"] = None
) -> TransmitResponse:
    """Create the provider, returning the response of metadata-db."""
    return _call(
        "post",
        "/providers",
        transmit_client,
        body=dict(provider),
        use_system_token=True,
    )


@timed("metadata-db/create_provider")
def create_provider(
    provider: Mapping[str, Any], *, transmit_client: Optional["Transmit"] = None
) -> None:
    """
    Create the provider.

    Raises:
        TransmitInternalError: metadata-db did not respond with 201.
    """
    response = create_provider_raw(provider, transmit_client=transmit_client)
    if response.status != 201:
        raise _internal_error(
            f"Failed to create provider status: {response.status} "
            f"body: {response.text}",
            response,
        )


def update_provider_raw(
    provider: Mapping[str, Any], *, transmit_client: Optional["Transmit"] = None
) -> TransmitResponse:
    """Update the provider identified by its `provider-id`, returning the response of
    metadata-db."""
    return _call(
        "put",
        f"/providers/{provider['provider-id']}",
        transmit_client,
        body=dict(provider),
        use_system_token=True,
    )


def delete_provider_raw(
    provider_id: str, *, transmit_client: Optional["Transmit"] = None
) -> TransmitResponse:
    return _call(
        "delete", f"/providers/{provider_id}", transmit_client, use_system_token=True
    )


@timed("metadata-db/delete_provider")
def delete_provider(
    provider_id: str, *, transmit_client: Optional["Transmit"] = None
) -> None:
    """Delete the provider. A provider that does not exist is not an error."""
    response = delete_provider_raw(provider_id, transmit_client=transmit_client)
    if response.status not in (200, 404):
        raise _internal_error(
            f"Failed to delete provider status: {response.status} "
            f"body: {response.text}",
            response,
        )


def get_providers_raw(
    *, transmit_client: Optional["Transmit"] = None
) -> TransmitResponse:
    return _call("get", "/providers", transmit_client)


@timed("metadata-db/get_providers")
def get_providers(*, transmit_client: Optional["Transmit"] = None) -> List[Any]:
    """Returns the providers configured in metadata-db."""
    response = get_providers_raw(transmit_client=transmit_client)
    if response.status == 200:
        return response.parsed_json()
    raise _internal_error(
        f"Failed to get providers status: {response.status} body: {response.text}",
        response,
    )


@timed("metadata-db/save_concept")
def save_concept(
    concept: Mapping[str, Any], *, transmit_client: Optional["Transmit"] = None
) -> Dict[str, Any]:
    """
    Saves a concept in metadata-db.

    Raises:
        TransmitInvalidDataError: metadata-db rejected the concept (422).
        TransmitConflictError: A post commit constraint was violated (409). The errors
            of the response are in its `errors` attribute.
        TransmitInternalError: Any other status other than 201.

    Returns:
        The `concept-id` and `revision-id` of the saved concept.
    """
    body = dict(concept)
    if isinstance(body.get("concept-type"), ConceptType):
        body["concept-type"] = body["concept-type"].value
    response = _call("post", "/concepts", transmit_client, body=body)

    if response.status == 201:
        result = response.parsed_json()
        return {
            "concept-id": result.get("concept-id"),
            "revision-id": result.get("revision-id"),
        }
    if response.status == 422:
        raise TransmitInvalidDataError(
            _errors_str(response),
            errors=errors_from_body(response.body),
            status=422,
            response=response,
        )
    if response.status == 409:
        errors = errors_from_body(response.body)
        raise TransmitConflictError(
            "; ".join(str(e) for e in errors),
            errors=errors,
            status=409,
            response=response,
        )
    raise _internal_error(
        "Save concept failed. MetadataDb app response status code: "
        f"{response.status} {response.text}",
        response,
    )


@timed("metadata-db/delete_concept")
def delete_concept(
    concept_id: str, *, transmit_client: Optional["Transmit"] = None
) -> Any:
    """
    Delete a concept from metadata-db.

    Raises:
        TransmitNotFoundError: The concept does not exist.

    Returns:
        The revision id of the tombstone.
    """
    response = _call("delete", f"/concepts/{concept_id}", transmit_client)
    if response.status == 200:
        return response.parsed_json()["revision-id"]
    if response.status == 404:
        raise TransmitNotFoundError(
            _errors_str(response),
            errors=errors_from_body(response.body),
            status=404,
            response=response,
        )
    raise _internal_error(
        "Delete concept operation failed. MetadataDb app response status code: "
        f"{response.status} {response.text}",
        response,
    )


get_metadata_db_health = http_helper.make_healther(METADATA_DB, 2)
