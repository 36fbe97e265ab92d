"""Outgoing mail."""

from finna.boundary.mail.mailer import MailError, Mailer

__all__ = ["Mailer", "MailError"]
