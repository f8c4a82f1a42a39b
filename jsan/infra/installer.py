"""
Release installation for jsan.

``Installer`` is the hook the shell's ``get`` and ``install`` commands
call. ``TransportInstaller`` downloads release archives through a
``Transport`` and copies the ``lib/`` tree of the archive into the
install prefix.
"""

import logging
import shutil
import tarfile
import tempfile
import zipfile
from pathlib import Path
from typing import List, Protocol

from ..config import config_path_value
from ..domain import Distribution, Release
from ..exit_codes import BackendError, UserInputError
from .transport import Transport

logger = logging.getLogger(__name__)


class Installer(Protocol):
    """Download and install hook used by the shell."""

    def get(self, dist: Distribution, release: Release) -> Path: ...

    def install(self, dist: Distribution, release: Release, force: bool = False) -> List[Path]: ...


class TransportInstaller:
    """Install releases fetched from a JSAN mirror."""

    def __init__(self, transport: Transport, prefix: Path):
        self.transport = transport
        self.prefix = Path(prefix)

    @classmethod
    def from_config(cls, config: dict) -> 'TransportInstaller':
        return cls(
            transport=Transport.from_config(config),
            prefix=config_path_value(config, 'install', 'prefix'),
        )

    def get(self, dist: Distribution, release: Release) -> Path:
        """Download the release archive; returns the local path."""
        if not release.source:
            raise UserInputError(f"The release {dist.name} {release.version or ''} has no source archive")
        return self.transport.mirror_file(release.source)

    def install(self, dist: Distribution, release: Release, force: bool = False) -> List[Path]:
        """
        Install a release into the prefix.

        Args:
            dist: Distribution being installed
            release: Its release (normally the latest)
            force: Overwrite files that are already installed

        Returns:
            Installed file paths, relative to the prefix

        Raises:
            UserInputError: If files exist and ``force`` is not set
            BackendError: If the archive cannot be read
        """
        archive = self.get(dist, release)

        with tempfile.TemporaryDirectory(prefix='jsan-') as tmp:
            root = Path(tmp)
            _extract(archive, root)
            lib_dir = _find_lib_dir(root)
            if lib_dir is None:
                raise BackendError(f"{archive.name} has no lib/ directory")

            files = sorted(p.relative_to(lib_dir) for p in lib_dir.rglob('*') if p.is_file())
            existing = [f for f in files if (self.prefix / f).exists()]
            if existing and not force:
                raise UserInputError(
                    f"{dist.name} is already installed ({existing[0]} exists). "
                    f"Use 'install --force {dist.name}' to reinstall"
                )

            for relative in files:
                target = self.prefix / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(lib_dir / relative, target)

        logger.info(f"Installed {dist.name} {release.version or ''} into {self.prefix}")
        return files


def _extract(archive: Path, dest: Path) -> None:
    try:
        if zipfile.is_zipfile(archive):
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        else:
            with tarfile.open(archive) as tf:
                tf.extractall(dest, filter='data')
    except (tarfile.TarError, zipfile.BadZipFile, OSError) as e:
        raise BackendError(f"Cannot unpack {archive.name}: {e}") from e


def _find_lib_dir(root: Path):
    """Locate lib/ at the archive root or one directory down."""
    if (root / 'lib').is_dir():
        return root / 'lib'
    for child in sorted(root.iterdir()):
        if child.is_dir() and (child / 'lib').is_dir():
            return child / 'lib'
    return None
