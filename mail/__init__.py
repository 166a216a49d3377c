from .mailer import Mailer, MailError

__all__ = ["Mailer", "MailError"]
