"""
Typed HTTP clients for the applications of the Common Metadata Repository (CMR):
metadata-db, ingest, index-set, access-control, cubby, the GCMD keyword management
system, and the legacy ECHO REST api. Also converts ACLs between the ECHO and CMR
shapes.
"""

import importlib.resources
import json

import requests

# public APIs
from .client import Transmit
from .core.acl_conversion import (
    cmr_acl_to_echo_acl,
    cmr_sid_to_echo_sid,
    echo_acl_to_cmr_acl,
    echo_sid_to_cmr_sid,
)
from .core.models.acl import GroupSid, IdentityKind, UserTypeSid

with importlib.resources.files(__name__).joinpath("cmrTransmit").open("r") as fp:
    __version__ = json.load(fp)["latestVersion"]

__all__ = [
    # objects
    "Transmit",
    "GroupSid",
    "UserTypeSid",
    "IdentityKind",
    # functions
    "echo_acl_to_cmr_acl",
    "cmr_acl_to_echo_acl",
    "echo_sid_to_cmr_sid",
    "cmr_sid_to_echo_sid",
]

USER_AGENT = {
    "User-Agent": "cmrtransmit/%s %s"
    % (__version__, requests.utils.default_user_agent())
}

# patch logging
from .core import logging_setup  # noqa
