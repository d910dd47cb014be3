"""Video transcoding through the ffmpeg command line."""

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FfmpegVideoCodec:
    """Transcodes video to baseline H.264/AAC in a fast-start MP4."""

    ffmpeg_path: str = "ffmpeg"
    timeout_seconds: int = 3600

    def command(self, input_path: str, output_path: str) -> list[str]:
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-loglevel", "error",
            "-i", input_path,
            "-c:v", "libx264",
            "-profile:v", "baseline",
            "-level", "3.1",
            "-pix_fmt", "yuv420p",
            "-preset", "veryfast",
            "-crf", "23",
            "-c:a", "aac",
            "-b:a", "128k",
            "-movflags", "+faststart",
            "-f", "mp4",
            "-y", output_path,
        ]  # fmt: skip

    def transcode(self, input_path: str, output_path: str) -> None:
        """Run ffmpeg, raising ``RuntimeError`` with its stderr on failure."""
        command = self.command(input_path, output_path)
        logger.info("Transcoding video", extra={"input_path": input_path})
        try:
            subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as exc:
            raise RuntimeError(f"ffmpeg not found at {self.ffmpeg_path}") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip().splitlines()
            raise RuntimeError(
                f"ffmpeg exited with {exc.returncode}: {detail[-1] if detail else ''}"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError("ffmpeg timed out") from exc
