"""
Access Control List (ACL) types shared by the ECHO <-> CMR ACL conversion.

An ACL names the subjects (sids) that are granted permissions on an object identity.
ECHO describes a subject as a nested object that is either a group sid or a user
authorization type sid. Within CMR the same subject is one of two fields on the
access control entry. The dataclasses here give the subject a single tagged type so
that code handling it does not need to inspect optional keys.
"""

import enum
from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional, Tuple, Union

DEFAULT_USER_TYPES: FrozenSet[str] = frozenset(["guest", "registered"])
"""The user authorization types known to CMR. ECHO may define more; see the `strict`
argument of the conversion functions."""


@dataclass(frozen=True)
class GroupSid:
    """
    A subject that is the members of a group.

    Attributes:
        group_guid: The legacy guid of the group.
    """

    group_guid: str


@dataclass(frozen=True)
class UserTypeSid:
    """
    A subject that is every user of an authorization type.

    Attributes:
        user_type: The lower case user type, e.g. `guest` or `registered`.
    """

    user_type: str


Sid = Union[GroupSid, UserTypeSid]


class IdentityKind(str, enum.Enum):
    """The kinds of object an ACL can apply to. The value is the ACL type name used
    throughout CMR."""

    CATALOG_ITEM = "catalog-item"
    SYSTEM_OBJECT = "system-object"
    PROVIDER_OBJECT = "provider-object"
    SINGLE_INSTANCE_OBJECT = "single-instance-object"

    @property
    def echo_key(self) -> str:
        """The ECHO ACL field holding this identity, e.g. `catalog_item_identity`."""
        return self.value.replace("-", "_") + "_identity"

    @property
    def cmr_key(self) -> str:
        """The CMR ACL field holding this identity, e.g. `catalog-item-identity`."""
        return self.value + "-identity"

    @property
    def object_identity_type(self) -> str:
        """The identity type as named by the ECHO REST api, e.g. `CATALOG_ITEM`."""
        return self.value.replace("-", "_").upper()


class Direction(enum.Enum):
    TO_CMR = "to-cmr"
    TO_ECHO = "to-echo"


Converter = Callable[[Any, str, Any], Any]


@dataclass(frozen=True)
class FieldMapping:
    """
    One row of a declarative renaming table.

    Attributes:
        echo_key: The field name in the ECHO shape.
        cmr_key: The field name in the CMR shape.
        to_cmr: Converts the value when going from ECHO to CMR. Called with the value,
            its path and the conversion options. When None the value is copied.
        to_echo: The inverse of to_cmr.
    """

    echo_key: str
    cmr_key: str
    to_cmr: Optional[Converter] = None
    to_echo: Optional[Converter] = None

    def for_direction(
        self, direction: Direction
    ) -> Tuple[str, str, Optional[Converter]]:
        """Returns the source key, target key and converter for a direction."""
        if direction is Direction.TO_CMR:
            return self.echo_key, self.cmr_key, self.to_cmr
        return self.cmr_key, self.echo_key, self.to_echo
