"""
Utility functions useful in the implementation and testing of the library.
"""

import collections.abc
import functools
import logging
import re
import time
import typing
import urllib.parse as urllib_urlparse

from opentelemetry import trace

tracer = trace.get_tracer("cmrtransmit")

logger = logging.getLogger(__name__)


def is_json(content_type):
    """detect if a content-type is JSON"""
    # The value of Content-Type defined here:
    # http://www.w3.org/Protocols/rfc2616/rfc2616-sec3.html#sec3.7
    return (
        content_type.lower().strip().startswith("application/json")
        if content_type
        else False
    )


def flatten(value) -> typing.Iterator:
    """Yields the leaves of arbitrarily nested lists and tuples."""
    if isinstance(value, (list, tuple)):
        for item in value:
            yield from flatten(item)
    else:
        yield value


def remove_none_keys(incoming_object: typing.Mapping) -> typing.Dict:
    """Returns a copy of the mapping without any keys that have None values."""
    return {k: v for k, v in incoming_object.items() if v is not None}


def remove_blank_keys(incoming_object: typing.Mapping) -> typing.Dict:
    """Returns a copy of the mapping without keys whose values are None or blank."""
    return {
        k: v
        for k, v in incoming_object.items()
        if not (v is None or (isinstance(v, str) and not v.strip()))
    }


def kebab_case(string: str) -> str:
    """Convert CamelCase, snake_case or spaced words into kebab-case. Digits following a
    letter start a new word, so `Bucket_Level0` becomes `bucket-level-0`."""
    string = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", string.strip())
    string = re.sub(r"(?<=[A-Za-z])(?=[0-9])", "-", string)
    return re.sub(r"[\s_\-]+", "-", string).lower()


def screaming_snake_case(string: str) -> str:
    """Convert kebab-case or CamelCase into SCREAMING_SNAKE_CASE"""
    return kebab_case(string).replace("-", "_").upper()


def pascal_case(string: str) -> str:
    """Convert kebab-case or snake_case into PascalCase"""
    return "".join(part.capitalize() for part in kebab_case(string).split("-"))


def url_encode(value: typing.Any) -> str:
    """Percent encodes a value for use as a single URL path segment."""
    return urllib_urlparse.quote(str(value), safe="")


def is_mapping(value) -> bool:
    return isinstance(value, collections.abc.Mapping)


def timed(function_name: str = None):
    """
    Decorator that records how long a call takes. The duration is logged at debug
    level and, when there is a recording OpenTelemetry span, the call is wrapped in a
    child span.

    Example: Timing a service call

            @timed("metadata-db/get_concept")
            def get_concept(concept_id, revision_id, *, transmit_client=None):
                ...

    Arguments:
        function_name: The name reported in the log message and span. Defaults to the
            qualified name of the wrapped function.
    """

    def decorator(func):
        name = function_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def timed_wrapper(*args, **kwargs):
            start = time.monotonic()
            try:
                if trace.get_current_span().is_recording():
                    with tracer.start_as_current_span(f"CMRTransmit::{name}"):
                        return func(*args, **kwargs)
                return func(*args, **kwargs)
            finally:
                logger.debug(
                    "%s took [%d] ms", name, int((time.monotonic() - start) * 1000)
                )

        return timed_wrapper

    return decorator
