from pathlib import Path
from typing import Union

from .recap_generator.models.recap_models import WeekPeriod, MonthPeriod
from .recap_generator.utils.filename_codec import encode_recap_name, VIDEO_EXTENSION


class PathHandler:
    """All file locations inside the flat video storage directory."""

    def __init__(self, videos_dir: Union[str, Path]):
        self.videos_dir = Path(videos_dir)

    def get_videos_dir(self) -> Path:
        """Get the storage directory."""
        return self.videos_dir

    def get_clip_path(self, filename: str) -> Path:
        return self.videos_dir / filename

    def get_recap_path(self, period: Union[WeekPeriod, MonthPeriod]) -> Path:
        """Canonical output path of a period's recap; also its idempotence key."""
        return self.videos_dir / encode_recap_name(period)

    @staticmethod
    def get_partial_export_path(output_path: Path) -> Path:
        """Hidden in-progress file next to the output, ignored by scans."""
        output_path = Path(output_path)
        return output_path.with_name(f".{output_path.stem}.partial{VIDEO_EXTENSION}")

    @staticmethod
    def get_sidecar_path(recap_path: Path) -> Path:
        """Hidden audit sidecar stored next to a recap."""
        recap_path = Path(recap_path)
        return recap_path.with_name(f".{recap_path.name}.json")
