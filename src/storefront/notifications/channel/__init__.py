"""Email sender registry.

Returns a singleton adapter chosen by ``STOREFRONT_EMAIL_BACKEND``: the
in-memory fake by default, SMTP in production.
"""

from storefront import config
from storefront.notifications.channel.email_port import EmailPort

_email_sender: EmailPort | None = None


def get_email_sender() -> EmailPort:
    global _email_sender
    if _email_sender is None:
        if config.email_backend_name() == "smtp":
            from storefront.notifications.channel.smtp_adapter import SMTPEmailAdapter

            _email_sender = SMTPEmailAdapter()
        else:
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _email_sender = FakeEmailAdapter()
    return _email_sender


def set_email_sender(sender: EmailPort) -> None:
    global _email_sender
    _email_sender = sender


def reset_email_sender() -> None:
    """Reset the sender singleton (useful for testing)."""
    global _email_sender
    _email_sender = None
