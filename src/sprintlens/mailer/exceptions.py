"""Custom exceptions for the mailer."""


class MailerError(Exception):
    """Base exception for mailer errors."""


class EmailDeliveryError(MailerError):
    """The email API rejected or failed to accept a message."""
