"""Mailer - sends rendered reports by email."""

from sprintlens.mailer.exceptions import EmailDeliveryError, MailerError
from sprintlens.mailer.sender import EmailSender

__all__ = [
    "EmailDeliveryError",
    "EmailSender",
    "MailerError",
]
