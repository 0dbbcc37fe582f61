"""
Tagging tool backed by Universal or Exuberant Ctags.
"""
import logging
import shutil
import subprocess
import threading
from typing import Callable, List, Optional

from ..constants import DEFAULT_CTAGS_BINARY, DEFAULT_CTAGS_TIMEOUT
from ..scopes.errors import TaggingToolUnavailable, TagStreamMalformed
from ..scopes.models import TagRecord
from .base import TaggingTool, TagStreamResult
from .parser import parse_json_tag, parse_tag_line

logger = logging.getLogger(__name__)

UNIVERSAL = 'universal'
EXUBERANT = 'exuberant'


def _sort_key(record: TagRecord) -> int:
    # Records with a broken line keep their place up front; the builder reports them.
    return record.line if isinstance(record.line, int) and not isinstance(record.line, bool) else -1


class CtagsTool(TaggingTool):
    """Tagging tool using the 'ctags' command-line program."""

    def __init__(self, binary: str = DEFAULT_CTAGS_BINARY, timeout: float = DEFAULT_CTAGS_TIMEOUT):
        """
        Args:
            binary: Name or path of the ctags executable
            timeout: Seconds allowed for each ctags invocation
        """
        self.binary = binary
        self.timeout = timeout
        self.flavor: Optional[str] = None
        self.json_output = False
        self._started = False
        self._closed = False
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        """The name of the tagging tool."""
        return 'ctags'

    def is_available(self) -> bool:
        """Check if the ctags binary is available on the system."""
        return shutil.which(self.binary) is not None

    def start(self) -> None:
        """Detect the ctags flavor and whether it can emit JSON."""
        with self._lock:
            if self._closed:
                raise TaggingToolUnavailable(f"{self.binary} was closed")
            if self._started:
                return

            version = self._run([self.binary, '--version']).stdout
            if 'Universal Ctags' in version:
                self.flavor = UNIVERSAL
                features = self._run([self.binary, '--list-features']).stdout
                self.json_output = any(
                    line.split()[0] == 'json' for line in features.splitlines() if line.strip()
                )
            elif 'Exuberant Ctags' in version:
                self.flavor = EXUBERANT
                self.json_output = False
            else:
                raise TaggingToolUnavailable(
                    f"{self.binary} is neither Universal nor Exuberant Ctags"
                )

            self._started = True
            first_line = version.splitlines()[0] if version else ''
            logger.info(f"Using {first_line} (json output: {self.json_output})")

    def build_command(self, file_path: str, language: Optional[str] = None) -> List[str]:
        """Build the ctags command line for one file."""
        cmd = [self.binary]
        if self.json_output:
            cmd.append('--output-format=json')
        else:
            cmd.append('--excmd=number')
        cmd.append('--sort=no')
        # Exuberant Ctags has no end-line field
        cmd.append('--fields=+nesKS' if self.flavor == UNIVERSAL else '--fields=+nsKS')
        cmd.extend(['-f', '-'])
        if language:
            cmd.append(f'--language-force={language}')
        # Add -- so that a file name starting with '-' is not read as an option
        cmd.append('--')
        cmd.append(file_path)
        return cmd

    def tag_file(self, file_path: str, language: Optional[str] = None) -> TagStreamResult:
        """
        Run ctags on one file and parse its output.

        Args:
            file_path: Path of the source file
            language: ctags language name to force (e.g. 'C++')

        Returns:
            TagStreamResult with records ordered by line
        """
        if self._closed:
            raise TaggingToolUnavailable(f"{self.binary} was closed")
        self.start()

        process = self._run(self.build_command(file_path, language))
        if process.returncode != 0:
            raise TaggingToolUnavailable(
                f"{self.binary} failed on {file_path} with exit code {process.returncode}: "
                f"{process.stderr.strip()}"
            )

        parse: Callable[[str], Optional[TagRecord]] = (
            parse_json_tag if self.json_output else parse_tag_line
        )
        result = TagStreamResult(file_path=file_path)
        for line_no, line in enumerate(process.stdout.splitlines(), start=1):
            try:
                record = parse(line)
            except TagStreamMalformed as e:
                message = f"{file_path}: output line {line_no}: {e}"
                logger.warning(f"Skipping malformed ctags output: {message}")
                result.warnings.append(message)
                continue
            if record is not None:
                result.records.append(record)

        result.records.sort(key=_sort_key)
        return result

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._started = False

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                check=False,  # Exit codes are inspected by the caller
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TaggingToolUnavailable(
                f"{self.binary} not found. Please install Universal Ctags and ensure it's in your PATH."
            ) from e
        except subprocess.TimeoutExpired as e:
            # subprocess.run() kills the child before re-raising
            raise TaggingToolUnavailable(
                f"{self.binary} timed out after {self.timeout}s"
            ) from e
        except OSError as e:
            raise TaggingToolUnavailable(f"An error occurred while running {self.binary}: {e}") from e
