"""Functions for interacting with the access control application: groups, their
members, ACLs and permissions."""

from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from cmrtransmit.core import http_helper
from cmrtransmit.core.connection import AppConnection

if TYPE_CHECKING:
    from cmrtransmit import Transmit

ACCESS_CONTROL = "access-control"


def groups_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/groups"


def group_url(conn: AppConnection, group_id: str) -> str:
    return f"{groups_url(conn)}/{group_id}"


def members_url(conn: AppConnection, group_id: str) -> str:
    return f"{group_url(conn, group_id)}/members"


def acl_root_url(conn: AppConnection) -> str:
    """Returns the URL of the ACL API root."""
    return f"{conn.root_url}/acls/"


def acl_concept_id_url(conn: AppConnection, concept_id: str) -> str:
    return f"{conn.root_url}/acls/{concept_id}"


def acl_permission_url(conn: AppConnection) -> str:
    return f"{conn.root_url}/permissions/"


def reset(
    *,
    raw: bool = False,
    bootstrap_data: Optional[bool] = None,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """
    Calls the reset endpoint of access control with the system token.

    Arguments:
        raw: When True the TransmitResponse is returned without checking its status.
        bootstrap_data: Sent as the `bootstrap_data` query parameter when given.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.
    """
    params = {}
    if bootstrap_data is not None:
        params["bootstrap_data"] = str(bool(bootstrap_data)).lower()
    return http_helper.request(
        ACCESS_CONTROL,
        url_fn=http_helper.reset_url,
        method="post",
        raw=raw,
        http_options={"params": params},
        use_system_token=True,
        transmit_client=transmit_client,
    )


clear_cache = http_helper.make_cache_clearer(ACCESS_CONTROL)

create_group = http_helper.make_creator(ACCESS_CONTROL, groups_url)
search_for_groups = http_helper.make_searcher(ACCESS_CONTROL, groups_url)
update_group = http_helper.make_updater(ACCESS_CONTROL, group_url)
delete_group = http_helper.make_destroyer(ACCESS_CONTROL, group_url)
get_group = http_helper.make_getter(ACCESS_CONTROL, group_url)


def _modify_members(
    method: str,
    concept_id: str,
    members: Iterable[str],
    raw: bool,
    token: Optional[str],
    http_options: Optional[Mapping[str, Any]],
    transmit_client: Optional["Transmit"],
) -> Any:
    options = {"body": list(members)}
    options.update(http_options or {})
    return http_helper.request(
        ACCESS_CONTROL,
        url_fn=lambda conn: members_url(conn, concept_id),
        method=method,
        raw=raw,
        token=token,
        http_options=options,
        transmit_client=transmit_client,
    )


def add_members(
    concept_id: str,
    members: Iterable[str],
    *,
    raw: bool = False,
    token: Optional[str] = None,
    http_options: Optional[Mapping[str, Any]] = None,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """
    Adds members to the group.

    Arguments:
        concept_id: The concept id of the group.
        members: The user names to add.
        raw: When True the TransmitResponse is returned without checking its status.
        token: The user token to use. If not set the token of the client is used.
        http_options: Other options passed to `Transmit.rest_call`.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.
    """
    return _modify_members(
        "post", concept_id, members, raw, token, http_options, transmit_client
    )


def remove_members(
    concept_id: str,
    members: Iterable[str],
    *,
    raw: bool = False,
    token: Optional[str] = None,
    http_options: Optional[Mapping[str, Any]] = None,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """Removes the given members from the group. Takes the same options as
    add_members."""
    return _modify_members(
        "delete", concept_id, members, raw, token, http_options, transmit_client
    )


def get_members(
    concept_id: str,
    *,
    raw: bool = False,
    token: Optional[str] = None,
    http_options: Optional[Mapping[str, Any]] = None,
    transmit_client: Optional["Transmit"] = None,
) -> Any:
    """Gets a list of the members in the group."""
    return http_helper.request(
        ACCESS_CONTROL,
        url_fn=lambda conn: members_url(conn, concept_id),
        method="get",
        raw=raw,
        token=token,
        http_options=http_options,
        transmit_client=transmit_client,
    )


create_acl = http_helper.make_creator(ACCESS_CONTROL, acl_root_url)
update_acl = http_helper.make_updater(ACCESS_CONTROL, acl_concept_id_url)
search_for_acls = http_helper.make_searcher(ACCESS_CONTROL, acl_root_url)
delete_acl = http_helper.make_destroyer(ACCESS_CONTROL, acl_concept_id_url)
get_acl = http_helper.make_getter(ACCESS_CONTROL, acl_concept_id_url)

get_permissions = http_helper.make_searcher(ACCESS_CONTROL, acl_permission_url)

get_access_control_health = http_helper.make_healther(ACCESS_CONTROL, 2)
