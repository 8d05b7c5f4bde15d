from .decoder import DecodeErrorDetail, DecodeIssue, decode_user, format_location
from .user import (
    AccountVerification,
    EmailAddress,
    EmailAddressVerification,
    EmailSamlVerification,
    EnterpriseAccount,
    SamlAccount,
    SamlAccountVerification,
    TicketVerification,
    User,
)

__all__ = [
    "User",
    "EmailAddress",
    "SamlAccount",
    "EnterpriseAccount",
    "EmailAddressVerification",
    "AccountVerification",
    "EmailSamlVerification",
    "SamlAccountVerification",
    "TicketVerification",
    "decode_user",
    "format_location",
    "DecodeIssue",
    "DecodeErrorDetail",
]
