from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class StrictModel(BaseModel):
    """Base for every decoded shape: unknown keys and type coercion both fail."""

    model_config = ConfigDict(extra="forbid", strict=True)


# --- email address verifications ---


class _EmailVerificationBase(StrictModel):
    status: str
    strategy: str
    attempts: Optional[int] = None
    expire_at: Optional[int] = None


class OtpVerification(_EmailVerificationBase):
    object: Literal["verification_otp"]


class EmailCodeVerification(_EmailVerificationBase):
    object: Literal["verification_email_code"]


class EmailLinkVerification(_EmailVerificationBase):
    object: Literal["verification_email_link"]


class AdminVerification(_EmailVerificationBase):
    object: Literal["verification_admin"]


class FromOauthVerification(_EmailVerificationBase):
    object: Literal["verification_from_oauth"]
    error: Optional[Dict[str, Any]] = None


class EmailSamlVerification(_EmailVerificationBase):
    """SAML strategy as seen on an email address. Carries no redirect url."""

    object: Literal["verification_saml"]
    error: Optional[Dict[str, Any]] = None


EmailAddressVerification = Annotated[
    Union[
        OtpVerification,
        EmailCodeVerification,
        EmailLinkVerification,
        AdminVerification,
        FromOauthVerification,
        EmailSamlVerification,
    ],
    Field(discriminator="object"),
]


# --- SAML / enterprise account verifications ---


class SamlAccountVerification(StrictModel):
    """SAML verification on an account; the redirect url is required but nullable."""

    object: Literal["verification_saml"]
    status: str
    strategy: str
    external_verification_redirect_url: Optional[str]
    error: Optional[Dict[str, Any]] = None
    attempts: Optional[int] = None
    expire_at: Optional[int] = None


class TicketVerification(StrictModel):
    object: Literal["verification_ticket"]
    status: str
    strategy: str
    external_verification_redirect_url: Optional[str] = None
    attempts: Optional[int] = None
    expire_at: Optional[int] = None


AccountVerification = Annotated[
    Union[SamlAccountVerification, TicketVerification],
    Field(discriminator="object"),
]


# --- collection records ---


class IdentificationLink(StrictModel):
    type: str
    id: str


class EmailAddress(StrictModel):
    object: Literal["email_address"]
    email_address: str
    id: Optional[str] = None
    reserved: bool = False
    verification: Optional[EmailAddressVerification] = None
    linked_to: List[IdentificationLink] = Field(default_factory=list)
    matches_sso_connection: Optional[bool] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None


class _AccountBase(StrictModel):
    id: str
    provider: str
    active: bool
    email_address: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    provider_user_id: Optional[str] = None
    public_metadata: Dict[str, Any] = Field(default_factory=dict)
    verification: Optional[AccountVerification] = None


class SamlAccount(_AccountBase):
    object: Literal["saml_account"]
    saml_connection: Optional[Dict[str, Any]] = None


class EnterpriseAccount(_AccountBase):
    object: Literal["enterprise_account"]
    protocol: Optional[str] = None
    enterprise_connection: Optional[Dict[str, Any]] = None


# --- the user entity ---


class User(StrictModel):
    """User entity as the consumer decodes it.

    Nearly every field is optional; required-ness lives in the nested records.
    """

    id: Optional[str] = None
    object: Optional[Literal["user"]] = None
    external_id: Optional[str] = None
    primary_email_address_id: Optional[str] = None
    primary_phone_number_id: Optional[str] = None
    primary_web3_wallet_id: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    image_url: Optional[str] = None
    has_image: Optional[bool] = None
    public_metadata: Optional[Dict[str, Any]] = None
    private_metadata: Optional[Dict[str, Any]] = None
    unsafe_metadata: Optional[Dict[str, Any]] = None
    email_addresses: Optional[List[EmailAddress]] = None
    phone_numbers: Optional[List[Dict[str, Any]]] = None
    web3_wallets: Optional[List[Dict[str, Any]]] = None
    passkeys: Optional[List[Dict[str, Any]]] = None
    external_accounts: Optional[List[Dict[str, Any]]] = None
    saml_accounts: Optional[List[SamlAccount]] = None
    enterprise_accounts: Optional[List[EnterpriseAccount]] = None
    password_enabled: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None
    totp_enabled: Optional[bool] = None
    backup_code_enabled: Optional[bool] = None
    mfa_enabled_at: Optional[int] = None
    mfa_disabled_at: Optional[int] = None
    banned: Optional[bool] = None
    locked: Optional[bool] = None
    lockout_expires_in_seconds: Optional[int] = None
    verification_attempts_remaining: Optional[int] = None
    delete_self_enabled: Optional[bool] = None
    create_organization_enabled: Optional[bool] = None
    last_sign_in_at: Optional[int] = None
    last_active_at: Optional[int] = None
    legal_accepted_at: Optional[int] = None
    password_last_updated_at: Optional[int] = None
    created_at: Optional[int] = None
    updated_at: Optional[int] = None
