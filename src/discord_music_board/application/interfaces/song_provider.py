"""Port interface for turning user queries into linkable songs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ...domain.music.entities import LinkableSong
    from ...domain.music.value_objects import ProviderKind
    from ..services.music_models import MusicContext


class SongProvider(ABC):
    """A capability that resolves a text query into a LinkableSong."""

    kind: ClassVar[ProviderKind]

    @abstractmethod
    def is_query_provider_url(self, query: str) -> bool:
        """Return True if *query* is one of this provider's native URL forms."""
        ...

    @abstractmethod
    async def get_linkable_song(
        self, query: str, is_native_url: bool, context: MusicContext | None = None
    ) -> LinkableSong | None:
        """Resolve *query* to a song, or None when nothing matches.

        Raises:
            ResolutionError: If the lookup itself failed.
        """
        ...
