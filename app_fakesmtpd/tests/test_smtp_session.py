"""
单元测试：SMTPSession 会话状态机

测试覆盖：
- greet / feed 状态转换
- EHLO 扩展应答（区分大小写）与 DATA 识别（不区分大小写）
- 原样记录 from / recipients / body
- chomp 行尾处理
"""
from unittest import TestCase
from unittest.mock import patch

from app_fakesmtpd.enums.session_state_enum import SessionStateEnum
from app_fakesmtpd.servers.smtp_server import SMTPSession, chomp


class TestSMTPSession(TestCase):
    """测试 SMTPSession"""

    def _run(self, session, lines):
        replies = []
        for line in lines:
            replies.extend(session.feed(line))
        return replies

    def test_helo_dialog(self):
        session = SMTPSession()

        greeting = session.greet()
        replies = self._run(session, [
            'HELO a',
            'MAIL FROM:<x@example.org>',
            'RCPT TO:<y@example.org>',
            'DATA',
            'Subject: hi',
            '.',
            'QUIT',
        ])

        self.assertEqual(greeting, ['220 localhost fakesmtpd ready ESMTP'])
        self.assertEqual(replies, ['250 OK', '250 OK', '354 Lemme have it', '250 OK', '221 Buhbye'])
        self.assertTrue(session.is_done)

        message = session.to_message()
        self.assertEqual(message.mail_from, 'MAIL FROM:<x@example.org>')
        self.assertEqual(message.recipients, ['RCPT TO:<y@example.org>'])
        self.assertEqual(message.body, ['Subject: hi'])

    def test_ehlo_adds_extension_banner(self):
        session = SMTPSession()
        session.greet()

        self.assertEqual(session.feed('EHLO test'), [
            '250-localhost only has this one extension',
            '250 HELP',
        ])
        self.assertEqual(session.state, SessionStateEnum.FROM)

    def test_helo_has_no_reply(self):
        session = SMTPSession()
        session.greet()

        self.assertEqual(session.feed('HELO test'), [])
        self.assertEqual(session.state, SessionStateEnum.FROM)

    def test_ehlo_is_case_sensitive(self):
        for line in ('ehlo test', 'Ehlo test', 'EHLO', 'EHLOtest'):
            session = SMTPSession()
            session.greet()
            self.assertEqual(session.feed(line), [], line)
            self.assertEqual(session.state, SessionStateEnum.FROM)

    def test_data_is_case_insensitive_prefix(self):
        for line in ('DATA', 'data', 'Data', 'DATAFOO'):
            session = SMTPSession()
            session.greet()
            self._run(session, ['HELO a', 'MAIL FROM:<x@example.org>'])
            self.assertEqual(session.feed(line), ['354 Lemme have it'], line)
            self.assertEqual(session.state, SessionStateEnum.DATA)
            self.assertEqual(session.recipients, [])

    def test_no_recipients(self):
        session = SMTPSession()
        session.greet()
        self._run(session, ['HELO a', 'MAIL FROM:<x@example.org>', 'DATA', 'body', '.'])

        self.assertTrue(session.is_complete)
        self.assertEqual(session.to_message().recipients, [])

    def test_recipients_keep_order_and_duplicates(self):
        session = SMTPSession()
        session.greet()
        recipients = ['RCPT TO:<b@example.org>', 'RCPT TO:<a@example.org>', 'RCPT TO:<b@example.org>']
        replies = self._run(session, ['HELO a', 'MAIL FROM:<x@example.org>'] + recipients)

        self.assertEqual(replies, ['250 OK'] * 4)
        self.assertEqual(session.recipients, recipients)

    def test_body_is_kept_verbatim(self):
        body = ['From: a', 'Subject: b', '', '..leading dot', ' . ', '.. ', 'DATA', '']
        session = SMTPSession()
        session.greet()
        replies = self._run(session, ['EHLO a', 'MAIL FROM:<>', 'DATA'] + body)

        self.assertEqual(replies[-1], '354 Lemme have it')
        self.assertEqual(session.body, body)
        self.assertEqual(session.state, SessionStateEnum.DATA)

        self.assertEqual(session.feed('.'), ['250 OK'])
        self.assertEqual(session.state, SessionStateEnum.QUIT)
        self.assertEqual(session.feed('anything at all'), ['221 Buhbye'])
        self.assertEqual(session.to_message().body, body)

    def test_message_id_assigned_at_helo(self):
        session = SMTPSession()
        session.greet()
        self.assertIsNone(session.message_id)

        with patch('app_fakesmtpd.servers.smtp_server.get_now_fixed_width_str',
                   return_value='20240501000000123456789'):
            session.feed('HELO a')

        self.assertEqual(session.message_id, '20240501000000123456789')
        self.assertEqual(str(session), '<smtp client 20240501000000123456789>')

    def test_message_id_is_fixed_width_timestamp(self):
        session = SMTPSession()
        session.greet()
        session.feed('HELO a')

        self.assertEqual(len(session.message_id), 23)
        self.assertTrue(session.message_id.isdigit())

    def test_incomplete_session_has_no_message(self):
        session = SMTPSession()
        session.greet()
        self._run(session, ['HELO a', 'MAIL FROM:<>', 'DATA', 'body'])

        self.assertFalse(session.is_complete)
        with self.assertRaises(ValueError):
            session.to_message()

    def test_invalid_states(self):
        session = SMTPSession()
        with self.assertRaises(ValueError):
            session.feed('HELO a')

        session.greet()
        with self.assertRaises(ValueError):
            session.greet()

        self._run(session, ['HELO a', 'MAIL FROM:<>', 'DATA', '.', 'QUIT'])
        with self.assertRaises(ValueError):
            session.feed('QUIT')


class TestChomp(TestCase):
    def test_chomp(self):
        self.assertEqual(chomp('abc\r\n'), 'abc')
        self.assertEqual(chomp('abc\n'), 'abc')
        self.assertEqual(chomp('abc\r'), 'abc')
        self.assertEqual(chomp('abc'), 'abc')
        self.assertEqual(chomp('abc\r\r\n'), 'abc\r')
        self.assertEqual(chomp('abc\n\n'), 'abc\n')
        self.assertEqual(chomp(''), '')
