"""Types describing the concepts stored in metadata-db."""

from enum import Enum
from typing import Any, Dict, Mapping

from cmrtransmit.core.utils import pascal_case


class ConceptType(str, Enum):
    """The type of a concept. Members compare equal to their string value."""

    COLLECTION = "collection"
    GRANULE = "granule"
    SERVICE = "service"
    TAG = "tag"
    TAG_ASSOCIATION = "tag-association"
    ACCESS_GROUP = "access-group"
    ACL = "acl"

    @property
    def pascal_name(self) -> str:
        return pascal_case(self.value)


def finish_parse_concept(concept: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Finishes the parsing of a concept. After a concept has been parsed from JSON its
    concept-type is still a string.

    Returns:
        A copy of the concept with `concept-type` as a ConceptType. An unknown type is
        left as the string.
    """
    parsed = dict(concept)
    concept_type = parsed.get("concept-type")
    if concept_type is not None:
        try:
            parsed["concept-type"] = ConceptType(concept_type)
        except ValueError:
            pass
    return parsed
