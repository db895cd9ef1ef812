"""
Media backend interface used by the recap assembler.

The assembler only needs two capabilities: probing a clip's container and
exporting a finished timeline. Keeping them behind this interface leaves the
composition logic independent of the codec tooling.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..models.composition_models import ClipProbe, CompositionTimeline


class MediaBackend(ABC):
    """Abstract probe/export capability."""

    @abstractmethod
    async def probe(self, clip_path: Path) -> ClipProbe:
        """
        Inspect a clip's container.

        Raises:
            VideoProcessingError: if the container cannot be opened
        """

    @abstractmethod
    async def export(self, timeline: CompositionTimeline, output_path: Path) -> None:
        """
        Encode the timeline into a single file at output_path.

        output_path may be overwritten; callers pass a private temporary path.

        Raises:
            VideoProcessingError: if encoding fails or times out
        """
