"""Unit tests for converting ACLs between the ECHO and CMR shapes."""

import copy

import pytest

from cmrtransmit.core import acl_conversion
from cmrtransmit.core.acl_conversion import (
    cmr_acl_to_echo_acl,
    cmr_permissions_to_echo,
    cmr_sid_to_echo_sid,
    echo_acl_to_cmr_acl,
    echo_permissions_to_cmr,
    echo_sid_to_cmr_sid,
)
from cmrtransmit.core.exceptions import (
    AclConversionError,
    MalformedSidError,
    SchemaViolationError,
    UnsupportedIdentityKindError,
)
from cmrtransmit.core.models.acl import (
    Direction,
    GroupSid,
    IdentityKind,
    UserTypeSid,
)

EXAMPLE_ECHO_ACL = {
    "acl": {
        "id": "5C1B77E7-48E5-4579-E516-7D933F500F23",
        "access_control_entries": [
            {
                "permissions": ["ORDER", "READ"],
                "sid": {
                    "group_sid": {"group_guid": "3730376E-4DCF-53EE-90ED-FE945351A64F"}
                },
            },
            {
                "permissions": ["READ"],
                "sid": {
                    "user_authorization_type_sid": {"user_authorization_type": "GUEST"}
                },
            },
            {
                "permissions": ["READ"],
                "sid": {
                    "user_authorization_type_sid": {
                        "user_authorization_type": "REGISTERED"
                    }
                },
            },
        ],
        "catalog_item_identity": {
            "collection_applicable": False,
            "granule_applicable": True,
            "name": "All Granules",
            "provider_guid": "CB91244B-C8B7-CA27-3089-3EC721FFF4D8",
            "collection_identifier": {
                "collection_ids": [
                    {"data_set_id": "Landsat 1-5 Multispectral Scanner V1"},
                    {"data_set_id": "Landsat 4-5 Thematic Mapper V1"},
                ],
                "restriction_flag": {
                    "include_undefined_value": False,
                    "max_value": 3.0,
                    "min_value": 3.0,
                },
            },
            "granule_identifier": {
                "restriction_flag": {
                    "include_undefined_value": True,
                    "max_value": 5.0,
                    "min_value": 3.0,
                }
            },
        },
    }
}

EXAMPLE_CMR_ACL = {
    "guid": "5C1B77E7-48E5-4579-E516-7D933F500F23",
    "aces": [
        {
            "permissions": ["order", "read"],
            "group-guid": "3730376E-4DCF-53EE-90ED-FE945351A64F",
        },
        {"permissions": ["read"], "user-type": "guest"},
        {"permissions": ["read"], "user-type": "registered"},
    ],
    "catalog-item-identity": {
        "collection-applicable": False,
        "granule-applicable": True,
        "name": "All Granules",
        "provider-guid": "CB91244B-C8B7-CA27-3089-3EC721FFF4D8",
        "collection-identifier": {
            "entry-titles": [
                "Landsat 1-5 Multispectral Scanner V1",
                "Landsat 4-5 Thematic Mapper V1",
            ],
            "access-value": {
                "include-undefined": False,
                "max-value": 3.0,
                "min-value": 3.0,
            },
        },
        "granule-identifier": {
            "access-value": {
                "include-undefined": True,
                "max-value": 5.0,
                "min-value": 3.0,
            }
        },
    },
}

SID_PAIRS = [
    (
        UserTypeSid("guest"),
        {"sid": {"user_authorization_type_sid": {"user_authorization_type": "GUEST"}}},
    ),
    (
        UserTypeSid("registered"),
        {
            "sid": {
                "user_authorization_type_sid": {"user_authorization_type": "REGISTERED"}
            }
        },
    ),
    (GroupSid("group-guid"), {"sid": {"group_sid": {"group_guid": "group-guid"}}}),
]


def _echo_acl_with_entries(*entries):
    return {"acl": {"id": "acl-guid", "access_control_entries": list(entries)}}


def _group_entry(guid="group-guid", permissions=("READ",)):
    return {
        "permissions": list(permissions),
        "sid": {"group_sid": {"group_guid": guid}},
    }


class TestAclConversion:
    def test_echo_to_cmr(self):
        # GIVEN the example ECHO ACL
        # WHEN I convert it to the CMR shape
        result = echo_acl_to_cmr_acl(EXAMPLE_ECHO_ACL)

        # THEN I expect the cleaned up CMR ACL
        assert result == EXAMPLE_CMR_ACL

    def test_cmr_to_echo(self):
        # GIVEN the example CMR ACL
        # WHEN I convert it to the ECHO shape
        result = cmr_acl_to_echo_acl(EXAMPLE_CMR_ACL)

        # THEN I expect the wrapped ECHO ACL
        assert result == EXAMPLE_ECHO_ACL

    def test_echo_to_cmr_without_wrapper(self):
        # GIVEN an ECHO ACL that is not wrapped in an acl object
        # WHEN I convert it
        result = echo_acl_to_cmr_acl(EXAMPLE_ECHO_ACL["acl"])

        # THEN it is converted the same as the wrapped ACL
        assert result == EXAMPLE_CMR_ACL

    def test_round_trips(self):
        assert cmr_acl_to_echo_acl(echo_acl_to_cmr_acl(EXAMPLE_ECHO_ACL)) == (
            EXAMPLE_ECHO_ACL
        )
        assert echo_acl_to_cmr_acl(cmr_acl_to_echo_acl(EXAMPLE_CMR_ACL)) == (
            EXAMPLE_CMR_ACL
        )

    def test_aces_keep_their_order(self):
        # GIVEN entries for three different groups
        echo_acl = _echo_acl_with_entries(
            _group_entry("g3"), _group_entry("g1"), _group_entry("g2")
        )

        # WHEN I convert the ACL
        result = echo_acl_to_cmr_acl(echo_acl)

        # THEN the order of the entries is kept
        assert [ace["group-guid"] for ace in result["aces"]] == ["g3", "g1", "g2"]

    def test_absent_fields_stay_absent(self):
        # GIVEN an ACL with only an id
        # WHEN I convert it both ways
        cmr_acl = echo_acl_to_cmr_acl({"acl": {"id": "acl-guid"}})
        echo_acl = cmr_acl_to_echo_acl({"guid": "acl-guid"})

        # THEN no other fields are added
        assert cmr_acl == {"guid": "acl-guid"}
        assert echo_acl == {"acl": {"id": "acl-guid"}}

    def test_catalog_item_identity_without_identifiers(self):
        # GIVEN a catalog item identity with only a name
        echo_acl = {"acl": {"catalog_item_identity": {"name": "All Collections"}}}

        # WHEN I convert it
        result = echo_acl_to_cmr_acl(echo_acl)

        # THEN no collection or granule identifier is emitted
        assert result == {"catalog-item-identity": {"name": "All Collections"}}

    def test_null_values_stay_null(self):
        assert echo_acl_to_cmr_acl({"acl": {"id": None}}) == {"guid": None}
        assert cmr_acl_to_echo_acl({"guid": None}) == {"acl": {"id": None}}

    def test_unknown_fields_are_dropped(self):
        # GIVEN an ECHO ACL with a field that is not part of the ACL schema
        echo_acl = {"acl": {"id": "acl-guid", "legacy_field": "ignored"}}

        # WHEN I convert it
        result = echo_acl_to_cmr_acl(echo_acl)

        # THEN the unknown field is not copied
        assert result == {"guid": "acl-guid"}

    def test_input_is_not_mutated(self):
        # GIVEN copies of the example ACLs
        echo_acl = copy.deepcopy(EXAMPLE_ECHO_ACL)
        cmr_acl = copy.deepcopy(EXAMPLE_CMR_ACL)

        # WHEN I convert them
        echo_acl_to_cmr_acl(echo_acl)
        cmr_acl_to_echo_acl(cmr_acl)

        # THEN the inputs are unchanged
        assert echo_acl == EXAMPLE_ECHO_ACL
        assert cmr_acl == EXAMPLE_CMR_ACL

    def test_output_does_not_alias_input(self):
        # GIVEN an ACL whose identity carries a nested value that is copied unchanged
        echo_acl = {
            "acl": {"system_object_identity": {"target": ["GROUP", "PROVIDER"]}}
        }

        # WHEN I convert it and modify the result
        result = echo_acl_to_cmr_acl(echo_acl)
        result["system-object-identity"]["target"].append("ANY_ACL")

        # THEN the input is unchanged
        assert echo_acl["acl"]["system_object_identity"]["target"] == [
            "GROUP",
            "PROVIDER",
        ]


class TestSidConversion:
    @pytest.mark.parametrize("cmr_sid,echo_sid", SID_PAIRS)
    def test_sids_by_themselves(self, cmr_sid, echo_sid):
        assert echo_sid_to_cmr_sid(echo_sid) == cmr_sid
        assert cmr_sid_to_echo_sid(cmr_sid) == echo_sid

    def test_bare_sid_object(self):
        # GIVEN a sid object without the sid wrapper
        # WHEN I convert it
        result = echo_sid_to_cmr_sid({"group_sid": {"group_guid": "guid1"}})

        # THEN I expect a group sid
        assert result == GroupSid(group_guid="guid1")

    def test_user_type_is_case_folded(self):
        result = echo_sid_to_cmr_sid(
            {
                "sid": {
                    "user_authorization_type_sid": {"user_authorization_type": "Guest"}
                }
            }
        )
        assert result == UserTypeSid("guest")

    @pytest.mark.parametrize(
        "sid",
        [
            {},
            {
                "group_sid": {"group_guid": "guid1"},
                "user_authorization_type_sid": {"user_authorization_type": "GUEST"},
            },
            {"group_sid": {"group_guid": "guid1"}, "extra": True},
            {"group_sid": {}},
            {"group_sid": {"group_guid": 5}},
            {"user_authorization_type_sid": {}},
            "GUEST",
        ],
    )
    def test_malformed_sids(self, sid):
        with pytest.raises(MalformedSidError):
            echo_sid_to_cmr_sid({"sid": sid})

    def test_unknown_user_type_is_rejected_when_strict(self):
        # GIVEN a sid with a user type that is not known
        echo_sid = {
            "sid": {"user_authorization_type_sid": {"user_authorization_type": "ADMIN"}}
        }

        # WHEN I convert it
        # THEN I expect a schema violation
        with pytest.raises(SchemaViolationError) as ex:
            echo_sid_to_cmr_sid(echo_sid)
        assert "admin" in str(ex.value)

    def test_unknown_user_type_passes_when_not_strict(self):
        echo_sid = {
            "sid": {"user_authorization_type_sid": {"user_authorization_type": "ADMIN"}}
        }
        assert echo_sid_to_cmr_sid(echo_sid, strict=False) == UserTypeSid("admin")

    def test_extra_user_types(self):
        echo_sid = {
            "sid": {"user_authorization_type_sid": {"user_authorization_type": "ADMIN"}}
        }
        result = echo_sid_to_cmr_sid(
            echo_sid, user_types=["guest", "registered", "admin"]
        )
        assert result == UserTypeSid("admin")

    def test_cmr_sid_of_unknown_type(self):
        with pytest.raises(MalformedSidError):
            cmr_sid_to_echo_sid("guest")


class TestPermissionConversion:
    def test_order_and_duplicates_are_kept(self):
        assert echo_permissions_to_cmr(["READ", "READ", "ORDER"]) == [
            "read",
            "read",
            "order",
        ]
        assert cmr_permissions_to_echo(["read", "read", "order"]) == [
            "READ",
            "READ",
            "ORDER",
        ]

    def test_unknown_tokens_pass_through(self):
        assert echo_permissions_to_cmr(["DELETE", "Frobnicate"]) == [
            "delete",
            "frobnicate",
        ]

    def test_empty_permissions(self):
        assert echo_permissions_to_cmr([]) == []

    def test_permissions_must_be_a_list(self):
        with pytest.raises(SchemaViolationError):
            echo_permissions_to_cmr("READ")

    def test_permissions_must_be_strings(self):
        with pytest.raises(SchemaViolationError) as ex:
            echo_permissions_to_cmr(["READ", 7])
        assert ex.value.path == "permissions[1]"


class TestConversionErrors:
    def test_malformed_sid_path(self):
        # GIVEN an ACL whose third entry has an empty sid
        echo_acl = _echo_acl_with_entries(
            _group_entry("g1"), _group_entry("g2"), {"permissions": ["READ"], "sid": {}}
        )

        # WHEN I convert it
        # THEN the error names the location of the sid
        with pytest.raises(MalformedSidError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == "acl.access_control_entries[2].sid"
        assert str(ex.value).endswith("at [acl.access_control_entries[2].sid]")

    def test_entry_without_sid(self):
        echo_acl = _echo_acl_with_entries({"permissions": ["READ"]})
        with pytest.raises(MalformedSidError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == "acl.access_control_entries[0].sid"

    def test_unknown_user_type_path(self):
        echo_acl = _echo_acl_with_entries(
            _group_entry(),
            {
                "permissions": ["READ"],
                "sid": {
                    "user_authorization_type_sid": {"user_authorization_type": "ADMIN"}
                },
            },
        )
        with pytest.raises(SchemaViolationError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == (
            "acl.access_control_entries[1].sid"
            ".user_authorization_type_sid.user_authorization_type"
        )

    def test_unknown_user_type_passes_through_acl_when_not_strict(self):
        echo_acl = _echo_acl_with_entries(
            {
                "permissions": ["READ"],
                "sid": {
                    "user_authorization_type_sid": {"user_authorization_type": "ADMIN"}
                },
            }
        )
        result = echo_acl_to_cmr_acl(echo_acl, strict=False)
        assert result["aces"] == [{"permissions": ["read"], "user-type": "admin"}]

    def test_permissions_with_wrong_type(self):
        echo_acl = _echo_acl_with_entries({"permissions": "READ", "sid": {}})
        with pytest.raises(SchemaViolationError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == "acl.access_control_entries[0].permissions"

    def test_entries_must_be_a_list(self):
        with pytest.raises(SchemaViolationError):
            echo_acl_to_cmr_acl({"acl": {"access_control_entries": {}}})

    def test_collection_id_without_data_set_id(self):
        echo_acl = {
            "acl": {
                "catalog_item_identity": {
                    "collection_identifier": {"collection_ids": [{"short_name": "L1"}]}
                }
            }
        }
        with pytest.raises(SchemaViolationError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == (
            "acl.catalog_item_identity.collection_identifier.collection_ids[0]"
        )

    @pytest.mark.parametrize(
        "ace",
        [
            {"permissions": ["read"]},
            {"permissions": ["read"], "group-guid": "g1", "user-type": "guest"},
            {"permissions": ["read"], "group-guid": 5},
        ],
    )
    def test_malformed_cmr_aces(self, ace):
        with pytest.raises(MalformedSidError) as ex:
            cmr_acl_to_echo_acl({"aces": [ace]})
        assert ex.value.path.startswith("aces[0]")

    def test_errors_share_a_base_class(self):
        with pytest.raises(AclConversionError):
            echo_acl_to_cmr_acl("not an acl")


class TestIdentityKinds:
    @pytest.mark.parametrize(
        "echo_identity,cmr_identity",
        [
            (
                {"system_object_identity": {"target": "GROUP"}},
                {"system-object-identity": {"target": "GROUP"}},
            ),
            (
                {
                    "provider_object_identity": {
                        "provider_guid": "provider-guid",
                        "target": "AUDIT_REPORT",
                    }
                },
                {
                    "provider-object-identity": {
                        "provider-guid": "provider-guid",
                        "target": "AUDIT_REPORT",
                    }
                },
            ),
            (
                {
                    "single_instance_object_identity": {
                        "target": "GROUP_MANAGEMENT",
                        "target_guid": "group-guid",
                    }
                },
                {
                    "single-instance-object-identity": {
                        "target": "GROUP_MANAGEMENT",
                        "target-guid": "group-guid",
                    }
                },
            ),
        ],
    )
    def test_other_identity_kinds(self, echo_identity, cmr_identity):
        echo_acl = {"acl": dict(echo_identity, id="acl-guid")}
        cmr_acl = dict(cmr_identity, guid="acl-guid")

        assert echo_acl_to_cmr_acl(echo_acl) == cmr_acl
        assert cmr_acl_to_echo_acl(cmr_acl) == echo_acl

    def test_unsupported_identity_kind(self):
        # GIVEN an ACL applying to an unknown kind of object
        echo_acl = {"acl": {"id": "acl-guid", "collection_group_identity": {}}}

        # WHEN I convert it
        # THEN I expect the identity to be rejected
        with pytest.raises(UnsupportedIdentityKindError) as ex:
            echo_acl_to_cmr_acl(echo_acl)
        assert ex.value.path == "acl.collection_group_identity"

    def test_unsupported_cmr_identity_kind(self):
        with pytest.raises(UnsupportedIdentityKindError):
            cmr_acl_to_echo_acl({"collection-group-identity": {}})

    def test_more_than_one_identity(self):
        echo_acl = {
            "acl": {
                "catalog_item_identity": {"name": "All Granules"},
                "system_object_identity": {"target": "GROUP"},
            }
        }
        with pytest.raises(SchemaViolationError):
            echo_acl_to_cmr_acl(echo_acl)

    def test_acl_identity_kind(self):
        assert (
            acl_conversion.acl_identity_kind(
                EXAMPLE_ECHO_ACL["acl"], Direction.TO_CMR
            )
            is IdentityKind.CATALOG_ITEM
        )
        assert (
            acl_conversion.acl_identity_kind(EXAMPLE_CMR_ACL, Direction.TO_ECHO)
            is IdentityKind.CATALOG_ITEM
        )
        assert acl_conversion.acl_identity_kind({}, Direction.TO_ECHO) is None

    def test_identity_kind_keys(self):
        kind = IdentityKind("single-instance-object")
        assert kind.echo_key == "single_instance_object_identity"
        assert kind.cmr_key == "single-instance-object-identity"
        assert kind.object_identity_type == "SINGLE_INSTANCE_OBJECT"


class TestPartialCodecs:
    def test_catalog_item_identity(self):
        echo_identity = EXAMPLE_ECHO_ACL["acl"]["catalog_item_identity"]
        cmr_identity = EXAMPLE_CMR_ACL["catalog-item-identity"]

        assert acl_conversion.echo_catalog_item_identity_to_cmr(echo_identity) == (
            cmr_identity
        )
        assert acl_conversion.cmr_catalog_item_identity_to_echo(cmr_identity) == (
            echo_identity
        )

    def test_restriction_flag(self):
        restriction_flag = {"include_undefined_value": True, "min_value": 1.5}
        access_value = {"include-undefined": True, "min-value": 1.5}

        assert acl_conversion.echo_restriction_flag_to_access_value(
            restriction_flag
        ) == (access_value)
        assert acl_conversion.access_value_to_echo_restriction_flag(
            access_value
        ) == (restriction_flag)

    def test_sid_to_cmr_ace_fields(self):
        assert acl_conversion.sid_to_cmr_ace_fields(GroupSid("g1")) == {
            "group-guid": "g1"
        }
        assert acl_conversion.sid_to_cmr_ace_fields(UserTypeSid("guest")) == {
            "user-type": "guest"
        }

    def test_sid_from_cmr_ace(self):
        assert acl_conversion.sid_from_cmr_ace({"user-type": "REGISTERED"}) == (
            UserTypeSid("registered")
        )
