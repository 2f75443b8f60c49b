from .mailer import Mailer, email_allowed
from .templates import EmailMessageContent

__all__ = ["Mailer", "EmailMessageContent", "email_allowed"]
