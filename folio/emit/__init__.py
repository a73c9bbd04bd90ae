"""Publication emitters."""

from folio.emit.base import BaseEmitter
from folio.emit.json_feed import JsonFeedEmitter

__all__ = ["BaseEmitter", "JsonFeedEmitter"]
