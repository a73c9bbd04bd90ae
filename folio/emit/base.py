"""Base publication emitter interface."""

from abc import ABC, abstractmethod

from folio.storage.corpus_index import CorpusSnapshot


class BaseEmitter(ABC):
    """Abstract base class for publication emitters.

    Rendering is outside the core pipeline. An emitter receives an immutable
    snapshot of the finished corpus and owns whatever output format it
    produces.
    """

    @abstractmethod
    def emit(self, snapshot: CorpusSnapshot) -> None:
        """Render the snapshot.

        Args:
            snapshot: Read-only corpus view taken after a build pass
        """
        pass
