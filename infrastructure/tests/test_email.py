"""
Email Infrastructure Tests
===========================

Unit tests for email service abstraction layer.
"""

import socket
from unittest.mock import MagicMock, patch

from django.core import mail
from django.test import TestCase, override_settings

from infrastructure.email import (
    EmailException,
    EmailFactory,
    EmailMessage,
    EmailServiceInterface,
    EmailTimeoutException,
    MockEmailService,
    SMTPEmailService,
)


def _message(**overrides):
    fields = {
        "subject": "Order Confirmation - ORD-1",
        "to": ["buyer@example.com"],
        "html_body": "<h1>Thanks</h1>",
        "text_body": "Thanks",
        "template": "order_confirmation",
    }
    fields.update(overrides)
    return EmailMessage(**fields)


class EmailInterfaceTest(TestCase):
    """Test EmailServiceInterface contract."""

    def test_interface_is_abstract(self):
        """EmailServiceInterface should not be instantiable."""
        with self.assertRaises(TypeError):
            EmailServiceInterface()

    def test_timeout_is_an_email_exception(self):
        self.assertTrue(issubclass(EmailTimeoutException, EmailException))
        self.assertTrue(EmailTimeoutException.retryable)


class MockEmailServiceTest(TestCase):
    """Test MockEmailService implementation."""

    def setUp(self):
        """Set up test fixtures."""
        self.email_service = MockEmailService()

    def test_send_email(self):
        """Test sending email stores message."""
        receipt = self.email_service.send(_message())

        self.assertEqual(receipt.recipients, ["buyer@example.com"])
        self.assertTrue(receipt.message_id.startswith("mock-"))
        self.assertEqual(self.email_service.get_sent_count(), 1)
        self.assertEqual(self.email_service.get_last_message().subject, "Order Confirmation - ORD-1")

    def test_send_bulk_emails(self):
        """Test bulk email sending."""
        messages = [_message(to=[f"user{i}@test.com"]) for i in range(3)]

        count = self.email_service.send_bulk(messages)

        self.assertEqual(count, 3)
        self.assertEqual(self.email_service.get_sent_count(), 3)

    def test_messages_for_template(self):
        self.email_service.send(_message())
        self.email_service.send(_message(template="welcome", subject="Welcome"))

        welcome = self.email_service.messages_for_template("welcome")

        self.assertEqual(len(welcome), 1)
        self.assertEqual(welcome[0].subject, "Welcome")

    def test_fail_with_raises_email_exception(self):
        self.email_service.fail_with = RuntimeError("sender down")

        with self.assertRaises(EmailException):
            self.email_service.send(_message())
        self.assertEqual(self.email_service.get_sent_count(), 0)

    def test_clear_sent_messages(self):
        """Test clearing sent messages."""
        self.email_service.send(_message())
        self.email_service.clear_sent_messages()

        self.assertEqual(self.email_service.get_sent_count(), 0)
        self.assertIsNone(self.email_service.get_last_message())


@override_settings(
    EMAIL_BACKEND="django.core.mail.backends.locmem.EmailBackend",
    DEFAULT_FROM_EMAIL="noreply@test.com",
)
class SMTPEmailServiceTest(TestCase):
    """Test SMTPEmailService implementation."""

    def setUp(self):
        """Set up test fixtures."""
        self.email_service = SMTPEmailService()

    def test_send_email_success(self):
        """Message goes through the configured Django backend with an HTML alternative."""
        receipt = self.email_service.send(_message())

        self.assertEqual(len(mail.outbox), 1)
        sent = mail.outbox[0]
        self.assertEqual(sent.subject, "Order Confirmation - ORD-1")
        self.assertEqual(sent.from_email, "noreply@test.com")
        self.assertEqual(sent.alternatives[0][1], "text/html")
        self.assertEqual(sent.extra_headers["Message-ID"], receipt.message_id)

    @patch("infrastructure.email.smtp_service.EmailMultiAlternatives")
    def test_send_email_failure(self, mock_email_class):
        """Test email send failure."""
        mock_msg = MagicMock()
        mock_msg.send.side_effect = Exception("SMTP error")
        mock_email_class.return_value = mock_msg

        with self.assertRaises(EmailException) as ctx:
            self.email_service.send(_message())
        self.assertNotIsInstance(ctx.exception, EmailTimeoutException)

    @patch("infrastructure.email.smtp_service.EmailMultiAlternatives")
    def test_send_email_timeout(self, mock_email_class):
        mock_msg = MagicMock()
        mock_msg.send.side_effect = socket.timeout("timed out")
        mock_email_class.return_value = mock_msg

        with self.assertRaises(EmailTimeoutException):
            self.email_service.send(_message())

    @patch("infrastructure.email.smtp_service.EmailMultiAlternatives")
    def test_backend_accepting_nothing_is_a_failure(self, mock_email_class):
        mock_msg = MagicMock()
        mock_msg.send.return_value = 0
        mock_email_class.return_value = mock_msg

        with self.assertRaises(EmailException):
            self.email_service.send(_message())

    def test_default_from_email(self):
        """Test default from email is set from settings."""
        self.assertEqual(self.email_service.default_from, "noreply@test.com")


class EmailFactoryTest(TestCase):
    """Test EmailFactory."""

    def test_default_to_mock_in_testing(self):
        """Test settings select the mock backend."""
        self.assertIsInstance(EmailFactory.create(), MockEmailService)

    @override_settings(INFRASTRUCTURE={"EMAIL_BACKEND_TYPE": "smtp"})
    def test_create_smtp_service(self):
        """Test factory creates SMTP service from settings."""
        self.assertIsInstance(EmailFactory.create(), SMTPEmailService)

    def test_create_with_explicit_backend(self):
        """Test factory with explicit backend."""
        self.assertIsInstance(EmailFactory.create("smtp"), SMTPEmailService)
        self.assertIsInstance(EmailFactory.create("mock"), MockEmailService)

    def test_create_invalid_backend(self):
        """Test factory raises error for invalid backend."""
        with self.assertRaises(ValueError):
            EmailFactory.create("invalid")
