from __future__ import annotations


# Metadata store key namespaces; all documents share one flat keyspace.
DEFINITION_PREFIX = "code-"
DESCRIPTOR_PREFIX = "file-"
ANALYTICS_PREFIX = "analytics-"


def definition_key(code_id: str) -> str:
    return f"{DEFINITION_PREFIX}{code_id}"


def descriptor_key(payload_ref: str) -> str:
    return f"{DESCRIPTOR_PREFIX}{payload_ref}"


def analytics_key(code_id: str) -> str:
    return f"{ANALYTICS_PREFIX}{code_id}"
