"""
单元测试：MessageStore 邮件记录存储

测试覆盖：
- put (写入记录、原子替换、同ID覆盖)
- list (扫描目录、从文件名恢复ID)
- locate / read / get (单条查询)
- clear (清空记录)
- get_message_store (按目录复用实例)
"""
import json
import shutil
import tempfile
import threading
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

from app_fakesmtpd.exceptions.message_store_exception import MessageStoreException
from app_fakesmtpd.models.message import Message
from app_fakesmtpd.services.message_store import MessageStore, get_message_store


class TestMessageStore(TestCase):
    """测试 MessageStore"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.store = MessageStore(self.temp_dir)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _put(self, message_id='20240501000000123456789', **kwargs):
        return self.store.put(
            message_id,
            kwargs.get('mail_from', 'MAIL FROM:<x@example.org>'),
            kwargs.get('recipients', ['RCPT TO:<y@example.org>']),
            kwargs.get('body', ['Subject: hi', '', 'hello']),
        )

    def test_put_writes_json_record(self):
        location = self._put()

        expected_path = Path(self.temp_dir).resolve() / 'fakesmtpd-client-20240501000000123456789.json'
        self.assertEqual(location, str(expected_path))
        with open(location, encoding='utf-8') as f:
            document = json.load(f)
        self.assertEqual(document, {
            'message_id': '20240501000000123456789',
            'from': 'MAIL FROM:<x@example.org>',
            'recipients': ['RCPT TO:<y@example.org>'],
            'body': ['Subject: hi', '', 'hello'],
        })

    def test_put_then_get_round_trip(self):
        body = ['Subject: ünïcödé', '..dot stuffed', '\ttabbed ', '']
        recipients = ['RCPT TO:<a@example.org>', 'RCPT TO:<a@example.org>', 'rcpt to:<b@example.org>']
        self._put('1', mail_from='MAIL FROM:<>', recipients=recipients, body=body)

        message = self.store.get('1')

        self.assertEqual(message, Message(
            message_id='1',
            mail_from='MAIL FROM:<>',
            recipients=recipients,
            body=body,
        ))

    def test_put_same_id_last_write_wins(self):
        self._put('7', body=['first'])
        self._put('7', body=['second'])

        self.assertEqual(len(self.store.list()), 1)
        self.assertEqual(self.store.get('7').body, ['second'])

    def test_put_leaves_no_temp_files(self):
        self._put('1')
        self._put('2')

        names = sorted(p.name for p in Path(self.temp_dir).iterdir())
        self.assertEqual(names, ['fakesmtpd-client-1.json', 'fakesmtpd-client-2.json'])

    def test_put_failure_raises_and_cleans_up(self):
        with patch('app_fakesmtpd.services.message_store.os.replace', side_effect=OSError('disk full')):
            with self.assertRaises(MessageStoreException) as context:
                self._put('1')

        self.assertIn('disk full', str(context.exception))
        self.assertEqual(list(Path(self.temp_dir).iterdir()), [])

    def test_put_into_missing_dir_raises(self):
        store = MessageStore(str(Path(self.temp_dir) / 'missing'))
        with self.assertRaises(MessageStoreException):
            store.put('1', 'MAIL FROM:<x@example.org>', [], [])

    def test_list(self):
        self.assertEqual(self.store.list(), [])

        location_1 = self._put('1')
        location_2 = self._put('2')

        self.assertEqual(sorted(self.store.list()), [('1', location_1), ('2', location_2)])

    def test_list_ignores_other_files(self):
        self._put('1')
        (Path(self.temp_dir) / 'notes.txt').write_text('x')
        (Path(self.temp_dir) / '.tmp-abc.json').write_text('{}')

        self.assertEqual([message_id for message_id, _ in self.store.list()], ['1'])

    def test_message_id_of_strips_non_digits(self):
        path = Path('/tmp/fakesmtpd-client-2024-05-01_123.json')
        self.assertEqual(MessageStore.message_id_of(path), '20240501123')

    def test_locate_read_get_missing(self):
        self.assertIsNone(self.store.locate('404'))
        self.assertIsNone(self.store.read('404'))
        self.assertIsNone(self.store.get('404'))

    def test_locate_and_read(self):
        location = self._put('5')

        self.assertEqual(self.store.locate('5'), location)
        self.assertEqual(self.store.read('5')['message_id'], '5')

    def test_clear(self):
        self._put('1')
        self._put('2')
        self._put('3')

        deleted = self.store.clear()

        self.assertEqual(deleted, 3)
        self.assertEqual(self.store.list(), [])
        self.assertEqual(self.store.clear(), 0)

    def test_concurrent_puts(self):
        threads = [
            threading.Thread(target=self._put, args=(str(i),), kwargs={'body': [f'line {i}']})
            for i in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(self.store.list()), 20)
        self.assertEqual(self.store.get('13').body, ['line 13'])

    def test_get_message_store_one_instance_per_dir(self):
        store_1 = get_message_store(self.temp_dir)
        store_2 = get_message_store(str(Path(self.temp_dir) / '.' / ''))
        other_dir = tempfile.mkdtemp()
        try:
            store_3 = get_message_store(other_dir)
        finally:
            shutil.rmtree(other_dir, ignore_errors=True)

        self.assertIs(store_1, store_2)
        self.assertIsNot(store_1, store_3)
