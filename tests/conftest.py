"""Shared fixtures for jsan tests."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from jsan.index import Database, SQLiteIndex, load_index_data, transaction


SAMPLE_INDEX = {
    'authors': [
        {'login': 'AdamK', 'name': 'Adam Kennedy', 'email': 'adam@ali.as', 'url': 'http://ali.as/'},
        {'login': 'cwest', 'name': 'Casey West', 'email': 'casey@geeknest.com', 'url': None},
    ],
    'distributions': [
        {
            'name': 'Display.Swap',
            'releases': [
                {
                    'version': '0.01',
                    'created': 1110000000,
                    'author': 'adamk',
                    'source': '/dist/a/ad/adamk/Display.Swap-0.01.tar.gz',
                    'libraries': [{'name': 'Display.Swap', 'version': '0.01'}],
                },
                {
                    'version': '0.02',
                    'created': 1120000000,
                    'author': 'adamk',
                    'source': '/dist/a/ad/adamk/Display.Swap-0.02.tar.gz',
                    'libraries': [
                        {'name': 'Foo', 'version': '1.0'},
                        {'name': 'Bazinga', 'version': '2.1'},
                    ],
                },
            ],
        },
        {
            'name': 'JSAN',
            'releases': [
                {
                    'version': '0.10',
                    'created': 1115000000,
                    'author': 'cwest',
                    'source': '/dist/c/cw/cwest/JSAN-0.10.tar.gz',
                    'latest': True,
                    'libraries': [{'name': 'JSAN', 'version': '0.10'}],
                },
            ],
        },
    ],
}


@pytest.fixture
def index_path(tmp_path) -> Path:
    """Index database populated with SAMPLE_INDEX."""
    db_path = tmp_path / 'index.db'
    with Database(db_path=db_path) as db:
        with transaction(db):
            load_index_data(db, SAMPLE_INDEX)
    return db_path


@pytest.fixture
def sqlite_index(index_path):
    index = SQLiteIndex(db_path=index_path)
    yield index
    index.close()


@pytest.fixture
def console_buffer():
    """A console writing to a buffer, plus the buffer."""
    buffer = io.StringIO()
    return Console(file=buffer, width=200), buffer
