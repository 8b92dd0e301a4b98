"""
Converts ACLs between the shape returned by the ECHO REST api and the shape used
throughout CMR.

ECHO:

    {"acl": {"id": "5C1B77E7-...",
             "access_control_entries": [
                 {"permissions": ["ORDER", "READ"],
                  "sid": {"group_sid": {"group_guid": "3730376E-..."}}},
                 {"permissions": ["READ"],
                  "sid": {"user_authorization_type_sid":
                          {"user_authorization_type": "GUEST"}}}],
             "catalog_item_identity": {
                 "name": "All Granules",
                 "provider_guid": "CB91244B-...",
                 "collection_applicable": False,
                 "granule_applicable": True,
                 "collection_identifier": {
                     "collection_ids": [{"data_set_id": "Landsat 1-5 ..."}],
                     "restriction_flag": {"include_undefined_value": False,
                                          "min_value": 3.0,
                                          "max_value": 3.0}}}}}

CMR:

    {"guid": "5C1B77E7-...",
     "aces": [{"permissions": ["order", "read"], "group-guid": "3730376E-..."},
              {"permissions": ["read"], "user-type": "guest"}],
     "catalog-item-identity": {
         "name": "All Granules",
         "provider-guid": "CB91244B-...",
         "collection-applicable": False,
         "granule-applicable": True,
         "collection-identifier": {
             "entry-titles": ["Landsat 1-5 ..."],
             "access-value": {"include-undefined": False,
                              "min-value": 3.0,
                              "max-value": 3.0}}}}

Fields missing from the input are missing from the output. Fields that are not part
of the ACL schema are not copied. The functions never modify their input and the
output shares no mutable values with it.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from cmrtransmit.core.exceptions import (
    MalformedSidError,
    SchemaViolationError,
    UnsupportedIdentityKindError,
)
from cmrtransmit.core.models.acl import (
    DEFAULT_USER_TYPES,
    Direction,
    FieldMapping,
    GroupSid,
    IdentityKind,
    Sid,
    UserTypeSid,
)
from cmrtransmit.core.utils import is_mapping

logger = logging.getLogger(__name__)

ECHO_ACL_WRAPPER_KEY = "acl"

ECHO_GROUP_SID = "group_sid"
ECHO_GROUP_GUID = "group_guid"
ECHO_USER_TYPE_SID = "user_authorization_type_sid"
ECHO_USER_TYPE = "user_authorization_type"

CMR_GROUP_GUID = "group-guid"
CMR_USER_TYPE = "user-type"


@dataclass(frozen=True)
class ConversionOptions:
    """
    Attributes:
        user_types: The lower case user types accepted in sids.
        strict: When False user types outside of user_types are passed through
            instead of rejected.
    """

    user_types: FrozenSet[str] = DEFAULT_USER_TYPES
    strict: bool = True


def _options(user_types: Optional[Iterable[str]], strict: bool) -> ConversionOptions:
    if user_types is None:
        return ConversionOptions(strict=strict)
    return ConversionOptions(
        user_types=frozenset(t.lower() for t in user_types), strict=strict
    )


def _child_path(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _index_path(path: str, index: int) -> str:
    return f"{path}[{index}]"


def _require_mapping(value: Any, path: str) -> Mapping:
    if not is_mapping(value):
        raise SchemaViolationError(
            f"Expected an object but found {type(value).__name__}", path, value
        )
    return value


def _require_list(value: Any, path: str) -> Sequence:
    if not isinstance(value, (list, tuple)):
        raise SchemaViolationError(
            f"Expected a list but found {type(value).__name__}", path, value
        )
    return value


def _require_string(value: Any, path: str) -> str:
    if not isinstance(value, str):
        raise SchemaViolationError(
            f"Expected a string but found {type(value).__name__}", path, value
        )
    return value


def rename_fields(
    source: Any,
    mappings: Sequence[FieldMapping],
    direction: Direction,
    path: str,
    options: ConversionOptions,
) -> Dict[str, Any]:
    """
    Builds a new dictionary from the fields of source named in mappings, renamed and
    converted for the given direction. Only fields present in source are emitted and
    a null value stays null.

    Arguments:
        source: The object to convert.
        mappings: The renaming table.
        direction: Which of the two keys of each mapping is the source key.
        path: The location of source, used in error messages.
        options: Passed to the converters of the mappings.

    Raises:
        SchemaViolationError: source is not an object.
    """
    source = _require_mapping(source, path)
    result = {}
    for mapping in mappings:
        from_key, to_key, convert = mapping.for_direction(direction)
        if from_key not in source:
            continue
        value = source[from_key]
        if value is None:
            result[to_key] = None
        elif convert is not None:
            result[to_key] = convert(value, _child_path(path, from_key), options)
        else:
            result[to_key] = deepcopy(value)

    known_keys = {mapping.for_direction(direction)[0] for mapping in mappings}
    for ignored_key in set(source) - known_keys:
        logger.debug(
            "Ignoring field [%s] not in the ACL schema at [%s]", ignored_key, path
        )
    return result


###############################################################################
# Permissions
###############################################################################


def echo_permissions_to_cmr(
    permissions: Sequence[str], path: str = "permissions"
) -> List[str]:
    """Converts ECHO permission tokens such as `["ORDER", "READ"]` to the lower case
    CMR tokens `["order", "read"]`. Order and duplicates are kept. Tokens that are not
    known permissions are lower cased as well."""
    permissions = _require_list(permissions, path)
    return [
        _require_string(p, _index_path(path, i)).lower()
        for i, p in enumerate(permissions)
    ]


def cmr_permissions_to_echo(
    permissions: Sequence[str], path: str = "permissions"
) -> List[str]:
    """Converts CMR permission tokens to the upper case ECHO tokens."""
    permissions = _require_list(permissions, path)
    return [
        _require_string(p, _index_path(path, i)).upper()
        for i, p in enumerate(permissions)
    ]


###############################################################################
# Sids
###############################################################################


def _validate_user_type(
    user_type: str, path: str, options: ConversionOptions
) -> str:
    user_type = user_type.lower()
    if options.strict and user_type not in options.user_types:
        raise SchemaViolationError(
            f"Unknown user type [{user_type}], expected one of "
            f"{sorted(options.user_types)}",
            path,
            user_type,
        )
    return user_type


def _echo_sid_object_to_cmr(sid: Any, path: str, options: ConversionOptions) -> Sid:
    if not is_mapping(sid):
        raise MalformedSidError(f"Expected a sid object but found {sid!r}", path, sid)

    variants = {ECHO_GROUP_SID, ECHO_USER_TYPE_SID}
    present = variants.intersection(sid)
    if len(present) != 1 or len(sid) != 1:
        raise MalformedSidError(
            f"A sid must contain exactly one of {sorted(variants)} but was {sid!r}",
            path,
            sid,
        )

    if ECHO_GROUP_SID in sid:
        group_sid = sid[ECHO_GROUP_SID]
        group_guid = group_sid.get(ECHO_GROUP_GUID) if is_mapping(group_sid) else None
        if not isinstance(group_guid, str):
            raise MalformedSidError(
                f"A group sid must contain a {ECHO_GROUP_GUID} but was {sid!r}",
                path,
                sid,
            )
        return GroupSid(group_guid=group_guid)

    user_type_sid = sid[ECHO_USER_TYPE_SID]
    user_type = (
        user_type_sid.get(ECHO_USER_TYPE) if is_mapping(user_type_sid) else None
    )
    if not isinstance(user_type, str):
        raise MalformedSidError(
            f"A user authorization type sid must contain a {ECHO_USER_TYPE} "
            f"but was {sid!r}",
            path,
            sid,
        )
    return UserTypeSid(
        user_type=_validate_user_type(
            user_type,
            _child_path(_child_path(path, ECHO_USER_TYPE_SID), ECHO_USER_TYPE),
            options,
        )
    )


def echo_sid_to_cmr_sid(
    echo_sid: Mapping[str, Any],
    *,
    user_types: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> Sid:
    """
    Converts an ECHO sid into a GroupSid or a UserTypeSid.

    Arguments:
        echo_sid: Either an object holding the sid under a `sid` key, such as an ECHO
            access control entry, or the sid object itself.
        user_types: The accepted user types. Defaults to DEFAULT_USER_TYPES.
        strict: When False unknown user types are lower cased and accepted.

    Raises:
        MalformedSidError: The sid is neither a group sid nor a user type sid.
        SchemaViolationError: The user type is unknown and strict is True.

    Example: Converting sids
            echo_sid_to_cmr_sid({"sid": {"group_sid": {"group_guid": "guid1"}}})
            # GroupSid(group_guid="guid1")

            echo_sid_to_cmr_sid(
                {"user_authorization_type_sid": {"user_authorization_type": "GUEST"}})
            # UserTypeSid(user_type="guest")
    """
    options = _options(user_types, strict)
    if is_mapping(echo_sid) and "sid" in echo_sid:
        return _echo_sid_object_to_cmr(echo_sid["sid"], "sid", options)
    return _echo_sid_object_to_cmr(echo_sid, "", options)


def cmr_sid_to_echo_sid(sid: Sid) -> Dict[str, Any]:
    """
    Converts a GroupSid or UserTypeSid into the ECHO sid, wrapped in a `sid` key the way
    it appears on an ECHO access control entry.

    Raises:
        MalformedSidError: sid is not a GroupSid or a UserTypeSid.
    """
    if isinstance(sid, GroupSid):
        return {"sid": {ECHO_GROUP_SID: {ECHO_GROUP_GUID: sid.group_guid}}}
    if isinstance(sid, UserTypeSid):
        return {
            "sid": {ECHO_USER_TYPE_SID: {ECHO_USER_TYPE: sid.user_type.upper()}}
        }
    raise MalformedSidError(
        f"Expected a GroupSid or UserTypeSid but was {sid!r}", "sid", sid
    )


def sid_from_cmr_ace(
    ace: Mapping[str, Any],
    path: str = "",
    options: ConversionOptions = ConversionOptions(),
) -> Sid:
    """Reads the subject of a CMR access control entry, which carries exactly one of
    `group-guid` and `user-type`."""
    ace = _require_mapping(ace, path)
    has_group = CMR_GROUP_GUID in ace
    has_user_type = CMR_USER_TYPE in ace
    if has_group == has_user_type:
        raise MalformedSidError(
            f"An access control entry must contain exactly one of "
            f"[{CMR_GROUP_GUID}, {CMR_USER_TYPE}] but was {ace!r}",
            path,
            ace,
        )
    if has_group:
        group_guid = ace[CMR_GROUP_GUID]
        if not isinstance(group_guid, str):
            raise MalformedSidError(
                f"{CMR_GROUP_GUID} must be a string but was {group_guid!r}",
                _child_path(path, CMR_GROUP_GUID),
                group_guid,
            )
        return GroupSid(group_guid=group_guid)

    user_type = ace[CMR_USER_TYPE]
    if not isinstance(user_type, str):
        raise MalformedSidError(
            f"{CMR_USER_TYPE} must be a string but was {user_type!r}",
            _child_path(path, CMR_USER_TYPE),
            user_type,
        )
    return UserTypeSid(
        user_type=_validate_user_type(
            user_type, _child_path(path, CMR_USER_TYPE), options
        )
    )


def sid_to_cmr_ace_fields(sid: Sid) -> Dict[str, str]:
    """Returns the field of a CMR access control entry that identifies the subject."""
    if isinstance(sid, GroupSid):
        return {CMR_GROUP_GUID: sid.group_guid}
    if isinstance(sid, UserTypeSid):
        return {CMR_USER_TYPE: sid.user_type}
    raise MalformedSidError(
        f"Expected a GroupSid or UserTypeSid but was {sid!r}", "", sid
    )


###############################################################################
# Access control entries
###############################################################################


def _echo_ace_to_cmr(
    ace: Any, path: str, options: ConversionOptions
) -> Dict[str, Any]:
    ace = _require_mapping(ace, path)
    result = {}
    if "permissions" in ace:
        result["permissions"] = echo_permissions_to_cmr(
            ace["permissions"], _child_path(path, "permissions")
        )
    sid_path = _child_path(path, "sid")
    if "sid" not in ace:
        raise MalformedSidError(
            "An access control entry must contain a sid", sid_path, ace
        )
    result.update(
        sid_to_cmr_ace_fields(_echo_sid_object_to_cmr(ace["sid"], sid_path, options))
    )
    return result


def _cmr_ace_to_echo(
    ace: Any, path: str, options: ConversionOptions
) -> Dict[str, Any]:
    ace = _require_mapping(ace, path)
    result = {}
    if "permissions" in ace:
        result["permissions"] = cmr_permissions_to_echo(
            ace["permissions"], _child_path(path, "permissions")
        )
    result.update(cmr_sid_to_echo_sid(sid_from_cmr_ace(ace, path, options)))
    return result


def _echo_aces_to_cmr(aces: Any, path: str, options: ConversionOptions) -> List:
    aces = _require_list(aces, path)
    return [
        _echo_ace_to_cmr(ace, _index_path(path, i), options)
        for i, ace in enumerate(aces)
    ]


def _cmr_aces_to_echo(aces: Any, path: str, options: ConversionOptions) -> List:
    aces = _require_list(aces, path)
    return [
        _cmr_ace_to_echo(ace, _index_path(path, i), options)
        for i, ace in enumerate(aces)
    ]


###############################################################################
# Identities
###############################################################################


def _collection_ids_to_entry_titles(
    collection_ids: Any, path: str, options: ConversionOptions
) -> List[str]:
    collection_ids = _require_list(collection_ids, path)
    entry_titles = []
    for i, collection_id in enumerate(collection_ids):
        item_path = _index_path(path, i)
        collection_id = _require_mapping(collection_id, item_path)
        if "data_set_id" not in collection_id:
            raise SchemaViolationError(
                "A collection id must contain a data_set_id", item_path, collection_id
            )
        entry_titles.append(
            _require_string(
                collection_id["data_set_id"], _child_path(item_path, "data_set_id")
            )
        )
    return entry_titles


def _entry_titles_to_collection_ids(
    entry_titles: Any, path: str, options: ConversionOptions
) -> List[Dict[str, str]]:
    entry_titles = _require_list(entry_titles, path)
    return [
        {"data_set_id": _require_string(entry_title, _index_path(path, i))}
        for i, entry_title in enumerate(entry_titles)
    ]


def _nested(mappings: Sequence[FieldMapping], direction: Direction):
    def convert(value: Any, path: str, options: ConversionOptions) -> Dict[str, Any]:
        return rename_fields(value, mappings, direction, path, options)

    return convert


def _nested_mapping(
    echo_key: str, cmr_key: str, mappings: Sequence[FieldMapping]
) -> FieldMapping:
    return FieldMapping(
        echo_key,
        cmr_key,
        to_cmr=_nested(mappings, Direction.TO_CMR),
        to_echo=_nested(mappings, Direction.TO_ECHO),
    )


RESTRICTION_FLAG_FIELDS = (
    FieldMapping("include_undefined_value", "include-undefined"),
    FieldMapping("min_value", "min-value"),
    FieldMapping("max_value", "max-value"),
)

ACCESS_VALUE_FIELD = _nested_mapping(
    "restriction_flag", "access-value", RESTRICTION_FLAG_FIELDS
)

COLLECTION_IDENTIFIER_FIELDS = (
    FieldMapping(
        "collection_ids",
        "entry-titles",
        to_cmr=_collection_ids_to_entry_titles,
        to_echo=_entry_titles_to_collection_ids,
    ),
    ACCESS_VALUE_FIELD,
)

GRANULE_IDENTIFIER_FIELDS = (ACCESS_VALUE_FIELD,)

CATALOG_ITEM_IDENTITY_FIELDS = (
    FieldMapping("name", "name"),
    FieldMapping("provider_guid", "provider-guid"),
    FieldMapping("collection_applicable", "collection-applicable"),
    FieldMapping("granule_applicable", "granule-applicable"),
    _nested_mapping(
        "collection_identifier", "collection-identifier", COLLECTION_IDENTIFIER_FIELDS
    ),
    _nested_mapping(
        "granule_identifier", "granule-identifier", GRANULE_IDENTIFIER_FIELDS
    ),
)

SYSTEM_OBJECT_IDENTITY_FIELDS = (FieldMapping("target", "target"),)

PROVIDER_OBJECT_IDENTITY_FIELDS = (
    FieldMapping("provider_guid", "provider-guid"),
    FieldMapping("target", "target"),
)

SINGLE_INSTANCE_OBJECT_IDENTITY_FIELDS = (
    FieldMapping("target", "target"),
    FieldMapping("target_guid", "target-guid"),
)

IDENTITY_FIELDS = {
    IdentityKind.CATALOG_ITEM: CATALOG_ITEM_IDENTITY_FIELDS,
    IdentityKind.SYSTEM_OBJECT: SYSTEM_OBJECT_IDENTITY_FIELDS,
    IdentityKind.PROVIDER_OBJECT: PROVIDER_OBJECT_IDENTITY_FIELDS,
    IdentityKind.SINGLE_INSTANCE_OBJECT: SINGLE_INSTANCE_OBJECT_IDENTITY_FIELDS,
}

ACL_FIELDS = (
    FieldMapping("id", "guid"),
    FieldMapping(
        "access_control_entries",
        "aces",
        to_cmr=_echo_aces_to_cmr,
        to_echo=_cmr_aces_to_echo,
    ),
) + tuple(
    _nested_mapping(kind.echo_key, kind.cmr_key, fields)
    for kind, fields in IDENTITY_FIELDS.items()
)


def echo_catalog_item_identity_to_cmr(
    identity: Mapping[str, Any], path: str = "catalog_item_identity"
) -> Dict[str, Any]:
    """Converts an ECHO catalog_item_identity into a CMR catalog-item-identity."""
    return rename_fields(
        identity,
        CATALOG_ITEM_IDENTITY_FIELDS,
        Direction.TO_CMR,
        path,
        ConversionOptions(),
    )


def cmr_catalog_item_identity_to_echo(
    identity: Mapping[str, Any], path: str = "catalog-item-identity"
) -> Dict[str, Any]:
    """Converts a CMR catalog-item-identity into an ECHO catalog_item_identity."""
    return rename_fields(
        identity,
        CATALOG_ITEM_IDENTITY_FIELDS,
        Direction.TO_ECHO,
        path,
        ConversionOptions(),
    )


def echo_restriction_flag_to_access_value(
    restriction_flag: Mapping[str, Any], path: str = "restriction_flag"
) -> Dict[str, Any]:
    """Converts an ECHO restriction_flag into a CMR access-value."""
    return rename_fields(
        restriction_flag,
        RESTRICTION_FLAG_FIELDS,
        Direction.TO_CMR,
        path,
        ConversionOptions(),
    )


def access_value_to_echo_restriction_flag(
    access_value: Mapping[str, Any], path: str = "access-value"
) -> Dict[str, Any]:
    """Converts a CMR access-value into an ECHO restriction_flag."""
    return rename_fields(
        access_value,
        RESTRICTION_FLAG_FIELDS,
        Direction.TO_ECHO,
        path,
        ConversionOptions(),
    )


def acl_identity_kind(
    acl: Mapping[str, Any], direction: Direction, path: str = ""
) -> Optional[IdentityKind]:
    """
    Returns the kind of object the ACL applies to, or None if it holds no identity.

    Arguments:
        acl: An unwrapped ECHO ACL when direction is TO_CMR, a CMR ACL otherwise.
        direction: Which shape acl is in.
        path: The location of acl, used in error messages.

    Raises:
        UnsupportedIdentityKindError: The ACL has an identity field of an unknown kind.
        SchemaViolationError: The ACL has more than one identity.
    """
    acl = _require_mapping(acl, path)
    suffix = "_identity" if direction is Direction.TO_CMR else "-identity"
    keys = {
        (kind.echo_key if direction is Direction.TO_CMR else kind.cmr_key): kind
        for kind in IdentityKind
    }
    for key in acl:
        if isinstance(key, str) and key.endswith(suffix) and key not in keys:
            raise UnsupportedIdentityKindError(
                f"Unsupported ACL identity [{key}]", _child_path(path, key), acl[key]
            )
    present = [kind for key, kind in keys.items() if key in acl]
    if len(present) > 1:
        raise SchemaViolationError(
            f"An ACL must contain at most one identity but contained "
            f"{[kind.value for kind in present]}",
            path,
            acl,
        )
    return present[0] if present else None


###############################################################################
# Public API
###############################################################################


def echo_acl_to_cmr_acl(
    echo_acl: Mapping[str, Any],
    *,
    user_types: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> Dict[str, Any]:
    """
    Converts an ACL returned by the ECHO REST api into the CMR shape.

    Arguments:
        echo_acl: The ECHO ACL, with or without the outer `acl` wrapper object.
        user_types: The accepted user types. Defaults to DEFAULT_USER_TYPES.
        strict: When False unknown user types are lower cased and accepted.

    Raises:
        MalformedSidError: An access control entry has a sid that is neither a group
            sid nor a user type sid.
        UnsupportedIdentityKindError: The ACL applies to an unknown kind of object.
        SchemaViolationError: A field the conversion interprets has the wrong shape.

    Returns:
        A new dictionary holding the CMR ACL.
    """
    options = _options(user_types, strict)
    path = ""
    acl = echo_acl
    if is_mapping(echo_acl) and ECHO_ACL_WRAPPER_KEY in echo_acl:
        acl = echo_acl[ECHO_ACL_WRAPPER_KEY]
        path = ECHO_ACL_WRAPPER_KEY
    acl_identity_kind(acl, Direction.TO_CMR, path)
    return rename_fields(acl, ACL_FIELDS, Direction.TO_CMR, path, options)


def cmr_acl_to_echo_acl(
    cmr_acl: Mapping[str, Any],
    *,
    user_types: Optional[Iterable[str]] = None,
    strict: bool = True,
) -> Dict[str, Any]:
    """
    Converts a CMR ACL into the shape used by the ECHO REST api, wrapped in an `acl`
    object.

    Arguments:
        cmr_acl: The CMR ACL.
        user_types: The accepted user types. Defaults to DEFAULT_USER_TYPES.
        strict: When False unknown user types are accepted.

    Raises:
        MalformedSidError: An access control entry has neither or both of
            `group-guid` and `user-type`.
        UnsupportedIdentityKindError: The ACL applies to an unknown kind of object.
        SchemaViolationError: A field the conversion interprets has the wrong shape.

    Returns:
        A new dictionary holding the ECHO ACL.
    """
    options = _options(user_types, strict)
    acl_identity_kind(cmr_acl, Direction.TO_ECHO)
    return {
        ECHO_ACL_WRAPPER_KEY: rename_fields(
            cmr_acl, ACL_FIELDS, Direction.TO_ECHO, "", options
        )
    }
