"""
Mirror transport for jsan.

Fetches release archives from a JSAN mirror over HTTP and keeps a local
copy under the mirror directory, laid out like the remote one.
"""

import logging
from pathlib import Path
from typing import Optional

import requests

from ..config import config_path_value
from ..exit_codes import BackendError

logger = logging.getLogger(__name__)


class Transport:
    """
    HTTP access to a JSAN mirror.

    Args:
        mirror: Base URL of the mirror, e.g. 'http://openjsan.org'
        mirror_dir: Local directory holding downloaded files
        timeout: Request timeout in seconds
        session: Optional requests session (tests pass a mock)
    """

    def __init__(
        self,
        mirror: str,
        mirror_dir: Path,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.mirror = mirror.rstrip('/')
        self.mirror_dir = Path(mirror_dir)
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config: dict) -> 'Transport':
        return cls(
            mirror=config['transport']['mirror'],
            mirror_dir=config_path_value(config, 'install', 'mirror_dir'),
            timeout=config['transport'].get('timeout_seconds', 30),
        )

    def url_for(self, source: str) -> str:
        return f"{self.mirror}/{source.lstrip('/')}"

    def local_path(self, source: str) -> Path:
        relative = Path(source.lstrip('/'))
        if relative.is_absolute() or '..' in relative.parts:
            raise BackendError(f"Refusing unsafe mirror path '{source}'")
        return self.mirror_dir / relative

    def mirror_file(self, source: str, refresh: bool = False) -> Path:
        """
        Make sure ``source`` exists in the local mirror.

        Args:
            source: Path of the file on the mirror
            refresh: Download again even if a local copy exists

        Returns:
            Path to the local copy

        Raises:
            BackendError: If the download fails
        """
        target = self.local_path(source)
        if target.exists() and not refresh:
            logger.debug(f"Using mirrored {target}")
            return target

        url = self.url_for(source)
        logger.info(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            response.raise_for_status()
            target.parent.mkdir(parents=True, exist_ok=True)
            partial = target.with_name(target.name + '.part')
            with open(partial, 'wb') as f:
                for chunk in response.iter_content(chunk_size=65536):
                    f.write(chunk)
            partial.replace(target)
        except requests.RequestException as e:
            raise BackendError(f"Failed to fetch {url}: {e}") from e
        except OSError as e:
            raise BackendError(f"Failed to store {target}: {e}") from e

        return target
