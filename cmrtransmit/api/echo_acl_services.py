"""This module is responsible for retrieving ACLs from the ECHO REST api and returning
them in the CMR shape."""

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional

from cmrtransmit.api.echo_provider_services import get_provider_guid_id_map
from cmrtransmit.api.echo_rest_services import rest_get
from cmrtransmit.core.acl_conversion import echo_acl_to_cmr_acl
from cmrtransmit.core.exceptions import (
    UnsupportedIdentityKindError,
    unexpected_status_error,
)
from cmrtransmit.core.models.acl import IdentityKind
from cmrtransmit.core.utils import remove_none_keys

if TYPE_CHECKING:
    from cmrtransmit import Transmit

ACL_TYPE_TO_ACL_KEY = {kind.value: kind.cmr_key for kind in IdentityKind}
"""A map of the acl object identity type to the field within the acl that stores the
object."""

VALID_ACL_TYPES = frozenset(ACL_TYPE_TO_ACL_KEY)
"""The acl object identity types that are supported."""

PROVIDER_GUID_IDENTITY_KEYS = (
    IdentityKind.CATALOG_ITEM.cmr_key,
    IdentityKind.PROVIDER_OBJECT.cmr_key,
)


def validate_type(acl_type: str) -> IdentityKind:
    """
    Validates the acl type is one of the expected ones.

    Raises:
        UnsupportedIdentityKindError: The acl type is not a valid acl type.
    """
    try:
        return IdentityKind(acl_type)
    except ValueError:
        raise UnsupportedIdentityKindError(
            f"Acl type {acl_type!r} is not a valid acl type."
        ) from None


def acl_type_to_object_identity_type_string(acl_type: str) -> str:
    """Converts an acl type such as `catalog-item` into the style supported on the ECHO
    REST api, `CATALOG_ITEM`."""
    return validate_type(acl_type).object_identity_type


def convert_provider_guid_to_id_in_acl(
    provider_guid_id_map: Mapping[str, str], acl: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Change all provider-guid references to provider-id for the given ACL. This
    simplifies working with ACLs since provider ids are commonly used throughout the
    code.

    Arguments:
        provider_guid_id_map: ECHO provider guids to CMR provider ids.
        acl: An ACL in the CMR shape. It is not modified.

    Returns:
        A new ACL. An identity whose guid is not in the map is left without a
        provider-id.
    """
    converted = dict(acl)
    for identity_key in PROVIDER_GUID_IDENTITY_KEYS:
        identity = converted.get(identity_key)
        if identity is None:
            continue
        identity = dict(identity)
        provider_id = provider_guid_id_map.get(identity.pop("provider-guid", None))
        if provider_id is not None:
            identity["provider-id"] = provider_id
        converted[identity_key] = identity
    return remove_none_keys(converted)


def get_acls_by_types(
    types: Iterable[str],
    provider_id: Optional[str] = None,
    *,
    transmit_client: Optional["Transmit"] = None,
) -> List[Dict[str, Any]]:
    """
    Fetches ACLs from ECHO by object identity type.

    Arguments:
        types: The acl types to fetch, e.g. `["catalog-item", "system-object"]`.
        provider_id: Only fetch ACLs of this provider.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.

    Raises:
        UnsupportedIdentityKindError: One of the types is not a valid acl type.
        TransmitInternalError: ECHO returned an unexpected status.

    Returns:
        The ACLs in the CMR shape with provider ids in place of provider guids.
    """
    types = list(types)
    object_identity_types = [acl_type_to_object_identity_type_string(t) for t in types]

    provider_guid_id_map = get_provider_guid_id_map(transmit_client=transmit_client)
    params = {
        "object_identity_type": ",".join(object_identity_types),
        "reference": "false",
    }
    if provider_id:
        params["provider_id"] = provider_id

    status, acls, body = rest_get("/acls", params, transmit_client=transmit_client)
    if status != 200:
        unexpected_status_error(status, body)

    return [
        convert_provider_guid_to_id_in_acl(
            provider_guid_id_map, echo_acl_to_cmr_acl(acl)
        )
        for acl in acls or []
    ]
