"""Email adapters - Console and SMTP implementations."""

from .console import ConsoleEmailSender
from .mailer import SmtpEmailSender, load_template

__all__ = ["ConsoleEmailSender", "SmtpEmailSender", "load_template"]
