"""
Tests for the mirror transport and release installer.
"""

import io
import tarfile
from pathlib import Path

import pytest
import requests
from unittest.mock import MagicMock

from jsan.config import get_default_config
from jsan.domain import Distribution, Release
from jsan.exit_codes import BackendError, UserInputError
from jsan.infra import Transport, TransportInstaller


SOURCE = '/dist/a/ad/adamk/Display.Swap-0.02.tar.gz'
DIST = Distribution(id=1, name='Display.Swap')
RELEASE = Release(id=2, distribution_id=1, author_id=1, version='0.02', source=SOURCE)


def make_tarball(files):
    """Gzipped tar with ``files`` ({member name: text}) as bytes."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode='w:gz') as tf:
        for name, text in files.items():
            data = text.encode('utf-8')
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def mock_session(payload=b'', error=None):
    response = MagicMock()
    response.iter_content.return_value = [payload[:10], payload[10:]]
    if error is not None:
        response.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = response
    return session


class TestTransport:

    def test_url_for(self, tmp_path):
        transport = Transport('http://openjsan.org/', tmp_path, session=MagicMock())
        assert transport.url_for(SOURCE) == 'http://openjsan.org/dist/a/ad/adamk/Display.Swap-0.02.tar.gz'

    def test_from_config(self, tmp_path):
        config = get_default_config()
        config['install']['mirror_dir'] = str(tmp_path / 'mirror')
        config['transport']['timeout_seconds'] = 7

        transport = Transport.from_config(config)

        assert transport.mirror == 'http://openjsan.org'
        assert transport.mirror_dir == tmp_path / 'mirror'
        assert transport.timeout == 7

    @pytest.mark.parametrize("source", ['/dist/../../etc/passwd', '../x.tar.gz'])
    def test_unsafe_paths_rejected(self, tmp_path, source):
        transport = Transport('http://openjsan.org', tmp_path, session=MagicMock())
        with pytest.raises(BackendError):
            transport.local_path(source)

    def test_mirror_file_downloads(self, tmp_path):
        session = mock_session(b'archive bytes go here')
        transport = Transport('http://openjsan.org', tmp_path, timeout=5, session=session)

        path = transport.mirror_file(SOURCE)

        assert path == tmp_path / 'dist/a/ad/adamk/Display.Swap-0.02.tar.gz'
        assert path.read_bytes() == b'archive bytes go here'
        assert not path.with_name(path.name + '.part').exists()
        session.get.assert_called_once_with(
            'http://openjsan.org/dist/a/ad/adamk/Display.Swap-0.02.tar.gz', timeout=5, stream=True,
        )

    def test_mirror_file_uses_cache(self, tmp_path):
        cached = tmp_path / 'dist/a/ad/adamk/Display.Swap-0.02.tar.gz'
        cached.parent.mkdir(parents=True)
        cached.write_bytes(b'cached')
        session = mock_session(b'fresh')
        transport = Transport('http://openjsan.org', tmp_path, session=session)

        assert transport.mirror_file(SOURCE).read_bytes() == b'cached'
        session.get.assert_not_called()

        assert transport.mirror_file(SOURCE, refresh=True).read_bytes() == b'fresh'

    def test_http_error_is_backend_error(self, tmp_path):
        session = mock_session(error=requests.HTTPError("404 Client Error: Not Found"))
        transport = Transport('http://openjsan.org', tmp_path, session=session)

        with pytest.raises(BackendError, match="404"):
            transport.mirror_file(SOURCE)

    def test_connection_error_is_backend_error(self, tmp_path):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        transport = Transport('http://openjsan.org', tmp_path, session=session)

        with pytest.raises(BackendError, match="connection refused"):
            transport.mirror_file(SOURCE)


@pytest.fixture
def archive_bytes():
    return make_tarball({
        'Display.Swap-0.02/README': 'Swap display styles',
        'Display.Swap-0.02/lib/Display/Swap.js': 'var Display = {};',
        'Display.Swap-0.02/lib/Foo.js': 'var Foo = 1;',
    })


@pytest.fixture
def installer(tmp_path, archive_bytes):
    transport = Transport('http://openjsan.org', tmp_path / 'mirror', session=mock_session(archive_bytes))
    return TransportInstaller(transport, tmp_path / 'lib')


class TestTransportInstaller:

    def test_get_returns_mirrored_path(self, installer, tmp_path):
        path = installer.get(DIST, RELEASE)
        assert path == tmp_path / 'mirror/dist/a/ad/adamk/Display.Swap-0.02.tar.gz'
        assert path.exists()

    def test_get_without_source(self, installer):
        release = Release(id=3, distribution_id=1, author_id=1, version='0.03')
        with pytest.raises(UserInputError):
            installer.get(DIST, release)

    def test_install_copies_lib_tree(self, installer, tmp_path):
        files = installer.install(DIST, RELEASE)

        assert files == [Path('Display/Swap.js'), Path('Foo.js')]
        assert (tmp_path / 'lib/Foo.js').read_text() == 'var Foo = 1;'
        assert (tmp_path / 'lib/Display/Swap.js').exists()
        assert not (tmp_path / 'lib/README').exists()

    def test_reinstall_requires_force(self, installer, tmp_path):
        installer.install(DIST, RELEASE)
        (tmp_path / 'lib/Foo.js').write_text('local edit')

        with pytest.raises(UserInputError, match="install --force Display.Swap"):
            installer.install(DIST, RELEASE)
        assert (tmp_path / 'lib/Foo.js').read_text() == 'local edit'

        installer.install(DIST, RELEASE, force=True)
        assert (tmp_path / 'lib/Foo.js').read_text() == 'var Foo = 1;'

    def test_archive_without_lib(self, tmp_path):
        payload = make_tarball({'Thing-1.0/README': 'nothing here'})
        transport = Transport('http://openjsan.org', tmp_path / 'mirror', session=mock_session(payload))
        installer = TransportInstaller(transport, tmp_path / 'lib')

        with pytest.raises(BackendError, match="no lib/ directory"):
            installer.install(DIST, RELEASE)

    def test_corrupt_archive(self, tmp_path):
        transport = Transport('http://openjsan.org', tmp_path / 'mirror', session=mock_session(b'not an archive'))
        installer = TransportInstaller(transport, tmp_path / 'lib')

        with pytest.raises(BackendError, match="Cannot unpack"):
            installer.install(DIST, RELEASE)
