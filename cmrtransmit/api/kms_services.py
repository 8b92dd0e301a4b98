"""
Retrieval of controlled keywords from the GCMD Keyword Management System (KMS). There
are several different keyword schemes within KMS such as providers, platforms,
instruments, science keywords and locations.

For each of the supported keyword schemes the leaf field is expected to uniquely
identify a row. The actual KMS does contain duplicates, so duplicate leaf values are
logged as warnings so that GCMD can be told to fix the entries.
"""

import csv
import io
import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional

from cmrtransmit.core import http_helper
from cmrtransmit.core.exceptions import raise_for_status
from cmrtransmit.core.logging_setup import DEFAULT_LOGGER_NAME
from cmrtransmit.core.utils import kebab_case, remove_blank_keys

if TYPE_CHECKING:
    from cmrtransmit import Transmit

KMS = "kms"

KEYWORD_SCHEME_TO_LEAF_FIELD_NAME = {
    "providers": "short-name",
    "platforms": "short-name",
    "instruments": "short-name",
    "projects": "short-name",
    "temporal-keywords": "temporal-resolution-range",
    "spatial-keywords": "uuid",
    "science-keywords": "uuid",
}
"""The subfield of each keyword scheme which identifies the keyword as a leaf node."""

KEYWORD_SCHEME_TO_GCMD_RESOURCE_NAME = {
    "providers": "providers/providers.csv",
    "platforms": "platforms/platforms.csv",
    "instruments": "instruments/instruments.csv",
    "projects": "projects/projects.csv",
    "temporal-keywords": "temporalresolutionrange/temporalresolutionrange.csv",
    "spatial-keywords": "locations/locations.csv",
    "science-keywords": "sciencekeywords/sciencekeywords.csv",
}

KEYWORD_SCHEME_TO_FIELD_NAMES = {
    "providers": [
        "level-0",
        "level-1",
        "level-2",
        "level-3",
        "short-name",
        "long-name",
        "url",
        "uuid",
    ],
    "platforms": ["category", "series-entity", "short-name", "long-name", "uuid"],
    "instruments": [
        "category",
        "class",
        "type",
        "subtype",
        "short-name",
        "long-name",
        "uuid",
    ],
    "projects": ["bucket", "short-name", "long-name", "uuid"],
    "temporal-keywords": ["temporal-resolution-range", "uuid"],
    "spatial-keywords": [
        "category",
        "type",
        "subregion-1",
        "subregion-2",
        "subregion-3",
        "uuid",
    ],
    "science-keywords": [
        "category",
        "topic",
        "term",
        "variable-level-1",
        "variable-level-2",
        "variable-level-3",
        "detailed-variable",
        "uuid",
    ],
}
"""The names CMR gives to the subfields of each keyword scheme."""

KEYWORD_SCHEME_TO_EXPECTED_FIELD_NAMES = dict(
    KEYWORD_SCHEME_TO_FIELD_NAMES,
    **{
        "providers": [
            "bucket-level-0",
            "bucket-level-1",
            "bucket-level-2",
            "bucket-level-3",
            "short-name",
            "long-name",
            "data-center-url",
            "uuid",
        ],
        "spatial-keywords": [
            "location-category",
            "location-type",
            "location-subregion-1",
            "location-subregion-2",
            "location-subregion-3",
            "uuid",
        ],
    },
)
"""The subfield names KMS returns for each keyword scheme. Some are renamed in
KEYWORD_SCHEME_TO_FIELD_NAMES."""

KEYWORD_SCHEME_TO_REQUIRED_FIELD = dict(
    KEYWORD_SCHEME_TO_LEAF_FIELD_NAME,
    **{"science-keywords": "term", "spatial-keywords": "category"},
)
"""A field that must be present for a keyword to be valid."""

CMR_TO_GCMD_KEYWORD_SCHEME_ALIASES = {
    "archive-centers": "providers",
    "data-centers": "providers",
    "location-keywords": "spatial-keywords",
}

NUM_HEADER_LINES = 2
"""Number of lines which contain header information rather than keyword values."""


def translate_keyword_scheme_to_gcmd(keyword_scheme: str) -> str:
    """Translates a keyword scheme into a known keyword scheme for GCMD."""
    return CMR_TO_GCMD_KEYWORD_SCHEME_ALIASES.get(keyword_scheme, keyword_scheme)


def translate_keyword_scheme_to_cmr(keyword_scheme: str) -> str:
    """Translates a keyword scheme into a known keyword scheme for CMR. When several
    CMR names alias the same GCMD scheme the last one declared is used."""
    gcmd_to_cmr = {v: k for k, v in CMR_TO_GCMD_KEYWORD_SCHEME_ALIASES.items()}
    return gcmd_to_cmr.get(keyword_scheme, keyword_scheme)


def _validate_keyword_scheme(keyword_scheme: str) -> None:
    if keyword_scheme not in KEYWORD_SCHEME_TO_FIELD_NAMES:
        raise ValueError(f"Unsupported keyword scheme [{keyword_scheme}]")


def validate_subfield_names(keyword_scheme: str, subfield_names: List[str]) -> None:
    """
    Raises:
        ValueError: The subfield names are not the ones expected for the keyword
            scheme.
    """
    expected = KEYWORD_SCHEME_TO_EXPECTED_FIELD_NAMES[keyword_scheme]
    if expected != list(subfield_names):
        raise ValueError(
            f"Expected subfield names for {keyword_scheme} to be {expected!r}, "
            f"but were {list(subfield_names)!r}."
        )


def find_invalid_entries(
    keyword_entries: Iterable[Mapping[str, str]], leaf_field_name: str
) -> List[Mapping[str, str]]:
    """Returns every entry whose leaf field value is shared with another entry."""
    by_leaf = defaultdict(list)
    for entry in keyword_entries:
        by_leaf[entry.get(leaf_field_name)].append(entry)
    return [entry for group in by_leaf.values() if len(group) > 1 for entry in group]


def parse_entries_from_csv(
    keyword_scheme: str, csv_content: str, logger: Optional[logging.Logger] = None
) -> Dict[str, Dict[str, str]]:
    """
    Parses the CSV returned by KMS. The first line holds metadata, the second the
    subfield names of the keyword scheme, and the rest are the keyword values.

    Arguments:
        keyword_scheme: The keyword scheme the CSV holds.
        csv_content: The CSV returned by KMS.
        logger: Receives warnings about duplicate keywords and keywords without a
            leaf field, which are skipped. Defaults to the
            cmrtransmit_default logger.

    Returns:
        The full hierarchy of each keyword keyed by its lower-cased leaf field. GCMD
        ensures that no two leaf fields are equal when compared case insensitively.

    Raises:
        ValueError: The subfield names are not the expected ones.
    """
    logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
    all_lines = list(csv.reader(io.StringIO(csv_content)))
    header = all_lines[1] if len(all_lines) > 1 else []
    validate_subfield_names(keyword_scheme, [kebab_case(name) for name in header])

    field_names = KEYWORD_SCHEME_TO_FIELD_NAMES[keyword_scheme]
    leaf_field_name = KEYWORD_SCHEME_TO_LEAF_FIELD_NAME[keyword_scheme]
    required_field = KEYWORD_SCHEME_TO_REQUIRED_FIELD[keyword_scheme]

    keyword_entries = []
    for row in all_lines[NUM_HEADER_LINES:]:
        entry = remove_blank_keys(dict(zip(field_names, row)))
        if not entry.get(required_field):
            continue
        if not entry.get(leaf_field_name):
            logger.warning(
                "Skipping %s keyword without a %s: %s",
                keyword_scheme,
                leaf_field_name,
                entry,
            )
            continue
        keyword_entries.append(entry)

    for entry in find_invalid_entries(keyword_entries, leaf_field_name):
        logger.warning(
            "Found duplicate keywords for %s short-name [%s]: %s",
            keyword_scheme,
            entry.get("short-name"),
            entry,
        )

    return {entry[leaf_field_name].lower(): entry for entry in keyword_entries}


def get_by_keyword_scheme(
    keyword_scheme: str, *, transmit_client: Optional["Transmit"] = None
) -> str:
    """Returns the CSV KMS holds for the keyword scheme.

    Raises:
        TransmitHTTPError: KMS did not respond successfully.
    """
    resource_name = KEYWORD_SCHEME_TO_GCMD_RESOURCE_NAME[keyword_scheme]
    response = http_helper.request(
        KMS,
        url_fn=lambda conn: f"{conn.root_url}/{resource_name}",
        method="get",
        raw=True,
        http_options={"headers": {"Accept": "text/csv"}},
        transmit_client=transmit_client,
    )
    raise_for_status(response, action=f"KMS request for {keyword_scheme}")
    return response.text


def get_keywords_for_keyword_scheme(
    keyword_scheme: str, *, transmit_client: Optional["Transmit"] = None
) -> Dict[str, Dict[str, str]]:
    """
    Returns the full list of keywords from KMS for the given keyword scheme.

    Arguments:
        keyword_scheme: One of the keys of KEYWORD_SCHEME_TO_FIELD_NAMES, e.g.
            `platforms`.
        transmit_client: If not passed in and caching was not disabled this will use
            the last created instance from the Transmit class constructor.

    Raises:
        ValueError: The keyword scheme is not supported or KMS returned unexpected
            subfield names.

    Returns:
        The full hierarchy of each keyword keyed by its lower-cased leaf field.

    Example: Response
        `{"etalon-2": {"uuid": "c9c07cf0-49eb-4c7f-aeff-2e95caae9500",
        "short-name": "ETALON-2", "series-entity": "ETALON",
        "category": "Earth Observation Satellites"}}`
    """
    from cmrtransmit import Transmit

    _validate_keyword_scheme(keyword_scheme)
    client = Transmit.get_client(transmit_client=transmit_client)
    keywords = parse_entries_from_csv(
        keyword_scheme,
        get_by_keyword_scheme(keyword_scheme, transmit_client=client),
        logger=client.logger,
    )
    client.logger.debug("Found %s keywords for %s", len(keywords), keyword_scheme)
    return keywords
