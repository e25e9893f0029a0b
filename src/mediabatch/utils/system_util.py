"""
Helpers for running external commands and checking that the ffmpeg tool
binaries can be found before a batch starts.
"""
import shutil
import subprocess
import sys
from typing import Tuple, List, Optional

from mediabatch.utils.constants import EXIT_USAGE
from mediabatch.utils.logger import LogLevel, log


def run_cmd(cmd: List[str], timeout: Optional[float] = None) -> Tuple[int, str, str]:
    """
    Run a command to completion and return (code, stdout, stderr).

    A binary that cannot be launched is reported as exit code 127 with the
    OS error text on stderr, the same convention a shell uses.
    """
    try:
        p = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, timeout=timeout)
    except OSError as e:
        return 127, "", str(e)
    except subprocess.TimeoutExpired:
        return 124, "", f"timed out after {timeout}s"
    return p.returncode, p.stdout, p.stderr


def which_or_die(*binaries: str) -> None:
    """Exit with a usage error if any of the binaries is missing from PATH."""
    missing = [b for b in binaries if shutil.which(b) is None]
    if not missing:
        return
    for binary in missing:
        log("startup.missing_binary", LogLevel.ERROR,
            binary=binary,
            hint="install ffmpeg or set MEDIABATCH_FFMPEG / MEDIABATCH_FFPROBE")
    sys.exit(EXIT_USAGE)
