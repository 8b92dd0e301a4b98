"""Connections to the CMR applications. A connection pairs the settings of an
application with the pooled HTTP session used to talk to it."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests
from requests.structures import CaseInsensitiveDict

from cmrtransmit.core.config import AppConnectionSettings
from cmrtransmit.core.utils import is_json


@dataclass
class AppConnection:
    """
    Attributes:
        settings: Where the application lives.
        session: The session whose connection pool is used for requests.
        socket_timeout_ms: The number of milliseconds before a request times out.
    """

    settings: AppConnectionSettings
    session: requests.Session
    socket_timeout_ms: Optional[int] = None

    @property
    def app_name(self) -> str:
        return self.settings.app_name

    @property
    def root_url(self) -> str:
        return self.settings.root_url

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.socket_timeout_ms is None:
            return None
        return self.socket_timeout_ms / 1000.0


@dataclass
class TransmitResponse:
    """
    The response of a request to a CMR application.

    Attributes:
        status: The HTTP status code.
        headers: The response headers.
        body: The decoded JSON body when the response is JSON, otherwise the text.
        text: The undecoded body.
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: Any = None
    text: str = ""

    def __post_init__(self):
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers or {})

    @classmethod
    def from_requests(cls, response: requests.Response) -> "TransmitResponse":
        text = response.text
        body = text
        if is_json(response.headers.get("content-type", None)) and text:
            try:
                body = response.json()
            except ValueError:
                body = text
        return cls(
            status=response.status_code,
            headers=CaseInsensitiveDict(response.headers),
            body=body,
            text=text,
        )

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def parsed_json(self) -> Any:
        """Returns the text parsed as JSON regardless of the content type, or None when
        the body is empty."""
        if isinstance(self.body, (dict, list)):
            return self.body
        return json.loads(self.text) if self.text else None

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "headers": dict(self.headers), "body": self.body}
