"""Build signature utilities for rebuild detection."""

import hashlib
import json

from folio.config import AppConfig
from folio.storage.state_store import STATE_SCHEMA_VERSION

# Bump when parser or validator output changes for the same input.
PARSER_REVISION = 1


def compute_signature(config: AppConfig) -> str:
    """Compute a stable signature of everything that shapes built documents."""
    payload = {
        "state_schema": STATE_SCHEMA_VERSION,
        "parser_revision": PARSER_REVISION,
        "parsing": {
            "derive_defaults": config.parsing.derive_defaults,
        },
    }
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()
