"""
FFmpeg utilities for recap generation.

This module provides the production media backend: container probing with
ffprobe and timeline export with a single ffmpeg concat-filter run.
"""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from ...utils.logger_utils import setup_logging
from ..exceptions.recap_exceptions import VideoProcessingError
from ..models.composition_models import ClipProbe, CompositionTimeline
from ..models.recap_models import RecapConfiguration
from .media_backend import MediaBackend

logger = setup_logging(__name__)

STDERR_TAIL_CHARS = 4000


def _fmt_seconds(value: float) -> str:
    return f"{value:.6f}"


class FFmpegUtils(MediaBackend):
    """Utility class for FFmpeg operations in recap generation."""

    def __init__(self, configuration: Optional[RecapConfiguration] = None):
        self.configuration = configuration or RecapConfiguration()

    def validate_ffmpeg_installation(self) -> None:
        """Validate that FFmpeg and ffprobe are installed and accessible."""
        for binary in (self.configuration.ffmpeg_binary, self.configuration.ffprobe_binary):
            try:
                result = subprocess.run([binary, '-version'],
                                        capture_output=True, text=True, timeout=10)
            except (subprocess.TimeoutExpired, FileNotFoundError) as e:
                raise VideoProcessingError(f"{binary} validation failed: {e}")
            if result.returncode != 0:
                raise VideoProcessingError(f"{binary} is not properly installed or accessible")
        logger.info("✅ FFmpeg installation validated")

    async def _run(self, cmd: List[str], timeout: float, operation: str) -> Tuple[int, str, str]:
        """
        Run a command as an asyncio subprocess.

        The child is killed if the timeout expires or the calling task is cancelled.

        Returns:
            Tuple of (return code, stdout, stderr)
        """
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise VideoProcessingError(
                f"Could not start {cmd[0]}: {e}",
                operation=operation,
                ffmpeg_command=' '.join(cmd)
            )

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            raise VideoProcessingError(
                f"Timed out after {timeout:g}s",
                operation=operation,
                ffmpeg_command=' '.join(cmd)
            )
        except asyncio.CancelledError:
            logger.warning(f"⚠️ {operation} cancelled, stopping {cmd[0]}")
            await self._kill(process)
            raise

        return (
            process.returncode,
            stdout.decode('utf-8', errors='replace'),
            stderr.decode('utf-8', errors='replace')
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    async def get_video_info(self, video_path: Path) -> Dict[str, Any]:
        """
        Get video information using ffprobe.

        Args:
            video_path: Path to video file

        Returns:
            Parsed ffprobe JSON (format and streams)
        """
        cmd = [
            self.configuration.ffprobe_binary, '-v', 'error', '-print_format', 'json',
            '-show_format', '-show_streams', str(video_path)
        ]
        return_code, stdout, stderr = await self._run(
            cmd, self.configuration.probe_timeout_seconds, "probe"
        )
        if return_code != 0:
            raise VideoProcessingError(
                f"Failed to get video info: {stderr.strip()[-STDERR_TAIL_CHARS:]}",
                operation="probe",
                ffmpeg_command=' '.join(cmd),
                return_code=return_code,
                stderr_output=stderr[-STDERR_TAIL_CHARS:]
            )
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise VideoProcessingError(f"Failed to parse video info JSON: {e}", operation="probe")

    async def probe(self, clip_path: Path) -> ClipProbe:
        info = await self.get_video_info(clip_path)
        streams = info.get('streams', [])

        video_streams = [
            s for s in streams
            if s.get('codec_type') == 'video' and not s.get('disposition', {}).get('attached_pic')
        ]
        has_audio = any(s.get('codec_type') == 'audio' for s in streams)

        duration = self._parse_duration(info.get('format', {}).get('duration'))
        if duration <= 0:
            # Some containers only report per-stream durations
            duration = max((self._parse_duration(s.get('duration')) for s in streams), default=0.0)

        first_video = video_streams[0] if video_streams else {}
        return ClipProbe(
            duration=duration,
            has_video=bool(video_streams),
            has_audio=has_audio,
            width=first_video.get('width'),
            height=first_video.get('height')
        )

    @staticmethod
    def _parse_duration(raw: Any) -> float:
        try:
            return float(raw)
        except (TypeError, ValueError):
            return 0.0

    def build_concat_command(self, timeline: CompositionTimeline, output_path: Path) -> List[str]:
        """
        Build the single ffmpeg command that renders a timeline.

        Every segment is scaled and letterboxed to the output frame, resampled to
        a common audio layout and trimmed to its probed duration, then all
        segments go through one concat filter. Segments without audio get a
        silent lavfi source so the concat filter always sees one audio pad per segment.

        Args:
            timeline: Non-empty composition timeline
            output_path: Target file (ffmpeg overwrites it)

        Returns:
            Argument list for ffmpeg
        """
        cfg = self.configuration
        width, height = cfg.output_width, cfg.output_height
        rate = cfg.audio_sample_rate

        cmd: List[str] = [cfg.ffmpeg_binary, '-hide_banner', '-nostdin', '-y']
        filters: List[str] = []
        concat_inputs: List[str] = []
        input_index = 0

        for i, segment in enumerate(timeline.segments):
            duration = _fmt_seconds(segment.duration)
            cmd += ['-i', str(segment.clip)]
            video_input = input_index
            input_index += 1

            if segment.has_audio:
                audio_source = f"[{video_input}:a:0]"
            else:
                cmd += [
                    '-f', 'lavfi', '-t', duration,
                    '-i', f"anullsrc=channel_layout=stereo:sample_rate={rate}"
                ]
                audio_source = f"[{input_index}:a]"
                input_index += 1

            filters.append(
                f"[{video_input}:v:0]trim=duration={duration},setpts=PTS-STARTPTS,"
                f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
                f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2,setsar=1,"
                f"fps={cfg.frame_rate},format=yuv420p[v{i}]"
            )
            filters.append(
                f"{audio_source}aresample={rate},"
                f"aformat=sample_fmts=fltp:channel_layouts=stereo,"
                f"apad,atrim=0:{duration},asetpts=PTS-STARTPTS[a{i}]"
            )
            concat_inputs.append(f"[v{i}][a{i}]")

        filters.append(
            f"{''.join(concat_inputs)}concat=n={len(timeline.segments)}:v=1:a=1[outv][outa]"
        )

        cmd += [
            '-filter_complex', ';'.join(filters),
            '-map', '[outv]', '-map', '[outa]',
            '-c:v', cfg.video_codec,
            '-preset', cfg.ffmpeg_preset,
            '-crf', str(cfg.crf),
            '-profile:v', 'high',
            '-pix_fmt', 'yuv420p',
            '-r', str(cfg.frame_rate),
            '-c:a', cfg.audio_codec,
            '-b:a', cfg.audio_bitrate,
            '-ar', str(rate),
            '-movflags', '+faststart',
            '-f', 'mp4',
            str(output_path)
        ]
        return cmd

    async def export(self, timeline: CompositionTimeline, output_path: Path) -> None:
        if timeline.is_empty:
            raise VideoProcessingError("Cannot export an empty timeline", operation="export")

        cmd = self.build_concat_command(timeline, output_path)
        logger.info(f"🎬 Exporting {len(timeline.segments)} segment(s) "
                    f"({timeline.duration:.1f}s) to {output_path.name}")
        logger.debug(f"FFmpeg command: {' '.join(cmd)}")

        return_code, _, stderr = await self._run(
            cmd, self.configuration.export_timeout_seconds, "export"
        )
        if return_code != 0:
            raise VideoProcessingError(
                f"FFmpeg exited with code {return_code}",
                operation="export",
                ffmpeg_command=' '.join(cmd),
                return_code=return_code,
                stderr_output=stderr[-STDERR_TAIL_CHARS:]
            )
        if not output_path.exists() or output_path.stat().st_size == 0:
            raise VideoProcessingError(
                "FFmpeg reported success but produced no output",
                operation="export",
                ffmpeg_command=' '.join(cmd),
                return_code=return_code
            )
        logger.info(f"✅ Export finished: {output_path.name}")
