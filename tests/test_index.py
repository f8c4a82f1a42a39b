"""
Tests for jsan.index module.

Tests cover:
- Database connection management
- Schema creation
- Index dump loading
- Record lookups
- Backend error wrapping
"""

import json
import os
import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from jsan.domain import Author, Library
from jsan.exit_codes import BackendError, FatalError
from jsan.index import (
    CURRENT_VERSION,
    Database,
    SQLiteIndex,
    get_database_info,
    get_db_path,
    load_index_file,
)
from jsan.index.queries import (
    get_author_by_login,
    get_latest_release,
    get_libraries_by_release,
    get_library_by_name,
)
from jsan.index.schema import get_schema_version

from conftest import SAMPLE_INDEX


class IndexTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / 'index.db'
        self.dump_path = Path(self.temp_dir) / 'index.json'
        self.dump_path.write_text(json.dumps(SAMPLE_INDEX))

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)


class TestDatabaseConnection(IndexTestCase):

    def test_get_db_path_default(self):
        with patch.dict(os.environ, {}, clear=True):
            with patch('pathlib.Path.home', return_value=Path('/home/test')):
                self.assertEqual(get_db_path(), Path('/home/test/.jsan/index.db'))

    def test_get_db_path_env_override(self):
        with patch.dict(os.environ, {'JSAN_DB': '/tmp/custom.db'}):
            self.assertEqual(get_db_path(), Path('/tmp/custom.db'))

    def test_get_db_path_from_config(self):
        with patch.dict(os.environ, {}, clear=True):
            path = get_db_path({'index': {'path': '/srv/jsan/index.db'}})
        self.assertEqual(path, Path('/srv/jsan/index.db'))

    def test_schema_created(self):
        with Database(db_path=self.db_path) as db:
            self.assertEqual(get_schema_version(db.conn), CURRENT_VERSION)
            db.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row['name'] for row in db.fetchall()}
        self.assertTrue({'authors', 'distributions', 'releases', 'libraries'} <= tables)

    def test_conn_outside_context_raises(self):
        db = Database(db_path=self.db_path)
        with self.assertRaises(RuntimeError):
            db.conn

    def test_database_info_missing(self):
        info = get_database_info(db_path=self.db_path)
        self.assertFalse(info['exists'])

    def test_database_info_counts(self):
        load_index_file(self.dump_path, db_path=self.db_path)
        info = get_database_info(db_path=self.db_path)
        self.assertTrue(info['exists'])
        self.assertEqual(info['authors'], 2)
        self.assertEqual(info['distributions'], 2)
        self.assertEqual(info['releases'], 3)
        self.assertEqual(info['libraries'], 4)


class TestLoader(IndexTestCase):

    def test_counts(self):
        counts = load_index_file(self.dump_path, db_path=self.db_path)
        self.assertEqual(counts, {'authors': 2, 'distributions': 2, 'releases': 3, 'libraries': 4})

    def test_reimport_replaces_contents(self):
        load_index_file(self.dump_path, db_path=self.db_path)
        load_index_file(self.dump_path, db_path=self.db_path)
        self.assertEqual(get_database_info(db_path=self.db_path)['authors'], 2)

    def test_logins_lowercased(self):
        load_index_file(self.dump_path, db_path=self.db_path)
        with Database(db_path=self.db_path) as db:
            author = get_author_by_login(db, 'adamk')
        self.assertIsInstance(author, Author)
        self.assertEqual(author.to_dict(), {
            'id': author.id,
            'login': 'adamk',
            'name': 'Adam Kennedy',
            'email': 'adam@ali.as',
            'url': 'http://ali.as/',
        })

    def test_newest_release_marked_latest(self):
        load_index_file(self.dump_path, db_path=self.db_path)
        with Database(db_path=self.db_path) as db:
            db.execute("SELECT version FROM releases WHERE latest = 1 ORDER BY version")
            versions = [row['version'] for row in db.fetchall()]
        self.assertEqual(versions, ['0.02', '0.10'])

    def test_unknown_author_rejected(self):
        data = {
            'authors': [],
            'distributions': [{'name': 'X', 'releases': [{'version': '1', 'author': 'nobody'}]}],
        }
        self.dump_path.write_text(json.dumps(data))
        with self.assertRaises(ValueError):
            load_index_file(self.dump_path, db_path=self.db_path)

    def test_failed_import_keeps_previous_index(self):
        load_index_file(self.dump_path, db_path=self.db_path)
        self.dump_path.write_text(json.dumps({'authors': [{'name': 'No Login'}]}))
        with self.assertRaises(ValueError):
            load_index_file(self.dump_path, db_path=self.db_path)
        self.assertEqual(get_database_info(db_path=self.db_path)['authors'], 2)

    def test_text_created_rejected(self):
        data = json.loads(json.dumps(SAMPLE_INDEX))
        data['distributions'][1]['releases'][0]['created'] = '2005-06-28'
        self.dump_path.write_text(json.dumps(data))
        with self.assertRaisesRegex(ValueError, "epoch seconds"):
            load_index_file(self.dump_path, db_path=self.db_path)

    def test_missing_created_accepted(self):
        data = json.loads(json.dumps(SAMPLE_INDEX))
        del data['distributions'][1]['releases'][0]['created']
        self.dump_path.write_text(json.dumps(data))
        self.assertEqual(load_index_file(self.dump_path, db_path=self.db_path)['releases'], 3)

    def test_non_object_entries_rejected(self):
        dumps = [
            {'authors': ['adamk']},
            {'authors': {'login': 'adamk'}},
            {'authors': [], 'distributions': ['JSAN']},
            {'authors': [], 'distributions': [{'name': 'JSAN', 'releases': [None]}]},
            {
                'authors': [{'login': 'cwest'}],
                'distributions': [{
                    'name': 'JSAN',
                    'releases': [{'author': 'cwest', 'libraries': ['JSAN']}],
                }],
            },
        ]
        for data in dumps:
            self.dump_path.write_text(json.dumps(data))
            with self.assertRaises(ValueError, msg=repr(data)):
                load_index_file(self.dump_path, db_path=self.db_path)

    def test_non_object_rejected(self):
        self.dump_path.write_text('[]')
        with self.assertRaises(ValueError):
            load_index_file(self.dump_path, db_path=self.db_path)


class TestQueries(IndexTestCase):

    def setUp(self):
        super().setUp()
        load_index_file(self.dump_path, db_path=self.db_path)

    def test_latest_release(self):
        with Database(db_path=self.db_path) as db:
            db.execute("SELECT id FROM distributions WHERE name = 'Display.Swap'")
            dist_id = db.fetchone()['id']
            release = get_latest_release(db, dist_id)
        self.assertEqual(release.version, '0.02')
        self.assertEqual(release.created, 1120000000)

    def test_library_by_name(self):
        with Database(db_path=self.db_path) as db:
            library = get_library_by_name(db, 'Bazinga')
            self.assertIsInstance(library, Library)
            siblings = get_libraries_by_release(db, library.release_id)
        self.assertEqual(sorted(l.name for l in siblings), ['Bazinga', 'Foo'])

    def test_library_missing(self):
        with Database(db_path=self.db_path) as db:
            self.assertIsNone(get_library_by_name(db, 'Nope'))


class TestSQLiteIndex(IndexTestCase):

    def setUp(self):
        super().setUp()
        load_index_file(self.dump_path, db_path=self.db_path)
        self.index = SQLiteIndex(db_path=self.db_path)

    def tearDown(self):
        self.index.close()
        super().tearDown()

    def test_relations(self):
        dist = self.index.get_distribution_by_name('JSAN')
        release = self.index.get_latest_release(dist.id)
        self.assertEqual(self.index.get_release(release.id), release)
        self.assertEqual(self.index.get_distribution(release.distribution_id), dist)
        self.assertEqual(self.index.get_author(release.author_id).login, 'cwest')
        self.assertEqual([l.name for l in self.index.list_libraries_by_release(release.id)], ['JSAN'])

    def test_sqlite_errors_become_backend_errors(self):
        self.index._db.execute("DROP TABLE libraries")
        with self.assertRaises(BackendError):
            self.index.get_library_by_name('Foo')

    def test_read_only_index_opens_without_writes(self):
        with patch('jsan.index.connection.os.access', return_value=False):
            index = SQLiteIndex(db_path=self.db_path)
        try:
            self.assertEqual(index.get_author_by_login('cwest').name, 'Casey West')
            with self.assertRaises(sqlite3.OperationalError):
                index._db.execute("DELETE FROM authors")
        finally:
            index.close()

    def test_new_index_warns(self):
        fresh = Path(self.temp_dir) / 'fresh.db'
        with self.assertLogs('jsan', level='WARNING') as cm:
            SQLiteIndex(db_path=fresh).close()
        self.assertIn("Created a new empty index", cm.output[0])

    def test_empty_index_warns(self):
        empty = Path(self.temp_dir) / 'empty.db'
        with Database(db_path=empty):
            pass
        with self.assertLogs('jsan', level='WARNING') as cm:
            SQLiteIndex(db_path=empty).close()
        self.assertIn("is empty", cm.output[0])

    def test_open_failure_is_fatal(self):
        blocker = Path(self.temp_dir) / 'file'
        blocker.write_text('')
        with self.assertRaises(FatalError):
            SQLiteIndex(db_path=blocker / 'index.db')

    def test_not_a_database_is_fatal(self):
        bogus = Path(self.temp_dir) / 'bogus.db'
        bogus.write_bytes(b'this is not sqlite' * 100)
        with self.assertRaises(FatalError):
            SQLiteIndex(db_path=bogus)


if __name__ == '__main__':
    unittest.main()
