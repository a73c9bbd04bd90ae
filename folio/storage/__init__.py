"""Storage adapters for the folio pipeline."""

from folio.storage.corpus_index import CorpusIndex, CorpusSnapshot
from folio.storage.ordering import SortedKeySet
from folio.storage.state_store import BuildState, SourceRecord, StateStore

__all__ = [
    "BuildState",
    "CorpusIndex",
    "CorpusSnapshot",
    "SortedKeySet",
    "SourceRecord",
    "StateStore",
]
