# tests/helpers.py
"""Builders and fakes shared by the schemagate test suite.

- ScriptedRegistryClient: SchemaRegistryClient answering from a per-schema
  script (superseding version or error); unscripted schemas are valid.
- sdj / contexts_envelope / unstruct_envelope: raw event attachment text.
"""

from __future__ import annotations

import json
import time
from threading import Lock
from typing import Any

from schemagate.contracts.registry import RegistryClientError
from schemagate.contracts.schema_key import SchemaVer
from schemagate.contracts.self_describing import SelfDescribingDocument

CONTEXTS_URI = "iglu:com.snowplowanalytics.snowplow/contexts/jsonschema/1-0-1"
UNSTRUCT_URI = "iglu:com.snowplowanalytics.snowplow/unstruct_event/jsonschema/1-0-0"

type Response = SchemaVer | RegistryClientError | None


class ScriptedRegistryClient:
    """Registry client fake.

    Responses are keyed by schema URI. A SchemaVer is returned as the
    superseding version, a RegistryClientError is raised. Every call is
    recorded in `calls` (in completion order).
    """

    def __init__(
        self,
        responses: dict[str, Response] | None = None,
        *,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.responses: dict[str, Response] = dict(responses or {})
        self.delays = dict(delays or {})
        self.calls: list[str] = []
        self._lock = Lock()

    def check(self, document: SelfDescribingDocument) -> SchemaVer | None:
        uri = document.schema.to_schema_uri()
        delay = self.delays.get(uri)
        if delay:
            time.sleep(delay)
        with self._lock:
            self.calls.append(uri)
        response = self.responses.get(uri)
        if isinstance(response, RegistryClientError):
            raise response
        return response


def sdj(uri: str, data: Any) -> dict[str, Any]:
    return {"schema": uri, "data": data}


def contexts_envelope(*documents: dict[str, Any], uri: str = CONTEXTS_URI) -> str:
    return json.dumps(sdj(uri, list(documents)))


def unstruct_envelope(document: Any, uri: str = UNSTRUCT_URI) -> str:
    return json.dumps(sdj(uri, document))
