# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Wire contracts of the identity/credential management sub-protocol.

A feature server that manages profiles, SSO tokens and STS credentials owns
these methods via :meth:`~lsprouter.router.server.LspServer.set_request_handler`.
The router validates the request payloads against the models below and
otherwise treats them as opaque.

Failures are reported as :class:`~lsprouter.errors.AwsResponseError` with an
:class:`~lsprouter.errors.AwsErrorCodes` value.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Final, Literal

from mcp import types as jsonrpc
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ResponseError

LIST_PROFILES: Final[str] = "aws/identity/listProfiles"
UPDATE_PROFILE: Final[str] = "aws/identity/updateProfile"
GET_SSO_TOKEN: Final[str] = "aws/identity/getSsoToken"
GET_IAM_CREDENTIAL: Final[str] = "aws/identity/getIamCredential"
GET_MFA_CODE: Final[str] = "aws/identity/getMfaCode"
INVALIDATE_SSO_TOKEN: Final[str] = "aws/identity/invalidateSsoToken"
INVALIDATE_STS_CREDENTIAL: Final[str] = "aws/identity/invalidateStsCredential"
SSO_TOKEN_CHANGED: Final[str] = "aws/identity/ssoTokenChanged"
STS_CREDENTIAL_CHANGED: Final[str] = "aws/identity/stsCredentialChanged"

# Progress token announcing that an SSO login is in flight.
GET_SSO_TOKEN_PROGRESS_TOKEN: Final[str] = "aws/identity/getSsoToken/progressToken"

Q_PERMISSION_SET: Final[tuple[str, ...]] = (
    "q:StartConversation",
    "q:SendMessage",
    "q:GetConversation",
    "q:ListConversations",
    "q:UpdateConversation",
    "q:DeleteConversation",
    "q:PassRequest",
    "q:StartTroubleshootingAnalysis",
    "q:StartTroubleshootingResolutionExplanation",
    "q:GetTroubleshootingResults",
    "q:UpdateTroubleshootingCommandResult",
    "q:GetIdentityMetaData",
    "q:GenerateCodeFromCommands",
    "q:UsePlugin",
    "codewhisperer:GenerateRecommendations",
)


class _Model(BaseModel):
    model_config = ConfigDict(extra="allow")


class ProfileKind(StrEnum):
    UNKNOWN = "Unknown"
    SSO_TOKEN_PROFILE = "SsoTokenProfile"
    IAM_CREDENTIALS_PROFILE = "IamCredentialsProfile"
    IAM_SOURCE_PROFILE_PROFILE = "IamSourceProfileProfile"
    IAM_CREDENTIAL_SOURCE_PROFILE = "IamCredentialSourceProfile"
    IAM_CREDENTIAL_PROCESS_PROFILE = "IamCredentialProcessProfile"


class SsoTokenSourceKind(StrEnum):
    IAM_IDENTITY_CENTER = "IamIdentityCenter"
    AWS_BUILDER_ID = "AwsBuilderId"


class AuthorizationFlowKind(StrEnum):
    DEVICE_CODE = "DeviceCode"
    PKCE = "Pkce"


class GetSsoTokenProgressState(StrEnum):
    IN_PROGRESS = "InProgress"
    COMPLETE = "Complete"


class CredentialChangedKind(StrEnum):
    EXPIRED = "Expired"
    REFRESHED = "Refreshed"


# ---------------------------------------------------------------------------
# listProfiles / updateProfile
# ---------------------------------------------------------------------------


class ProfileSettings(_Model):
    region: str | None = None
    sso_session: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None
    role_arn: str | None = None
    role_session_name: str | None = None
    credential_process: str | None = None
    credential_source: str | None = None
    source_profile: str | None = None
    mfa_serial: str | None = None
    external_id: str | None = None
    credential_cache: str | None = None
    credential_cache_location: str | None = None


class Profile(_Model):
    kinds: list[ProfileKind]
    name: str
    settings: ProfileSettings | None = None


class SsoSessionSettings(_Model):
    sso_start_url: str | None = None
    sso_region: str | None = None
    sso_registration_scopes: list[str] | None = None


class SsoSession(_Model):
    name: str
    settings: SsoSessionSettings | None = None


class ListProfilesParams(_Model):
    pass


class ListProfilesResult(_Model):
    profiles: list[Profile]
    ssoSessions: list[SsoSession]


class UpdateProfileOptions(_Model):
    createNonexistentProfile: bool = True
    createNonexistentSsoSession: bool = True
    updateSharedSsoSession: bool = False


class UpdateProfileParams(_Model):
    """Settings set to ``None`` are deleted; settings left out keep their previous value."""

    profile: Profile
    ssoSession: SsoSession | None = None
    options: UpdateProfileOptions | None = None


class UpdateProfileResult(_Model):
    pass


# ---------------------------------------------------------------------------
# getSsoToken
# ---------------------------------------------------------------------------


class AwsBuilderIdSsoTokenSource(_Model):
    kind: Literal["AwsBuilderId"]
    ssoRegistrationScopes: list[str]


class IamIdentityCenterSsoTokenSource(_Model):
    kind: Literal["IamIdentityCenter"]
    profileName: str


class GetSsoTokenOptions(_Model):
    loginOnInvalidToken: bool = True
    # Ignored when loginOnInvalidToken is false.
    authorizationFlow: AuthorizationFlowKind = AuthorizationFlowKind.PKCE


class GetSsoTokenParams(_Model):
    source: IamIdentityCenterSsoTokenSource | AwsBuilderIdSsoTokenSource = Field(discriminator="kind")
    clientName: str
    options: GetSsoTokenOptions | None = None


class SsoToken(_Model):
    id: str
    accessToken: str


class GetSsoTokenResult(_Model):
    ssoToken: SsoToken
    updateCredentialsParams: dict[str, Any]


class GetSsoTokenProgress(_Model):
    state: GetSsoTokenProgressState
    message: str | None = None


# ---------------------------------------------------------------------------
# getIamCredential / getMfaCode
# ---------------------------------------------------------------------------


class IamCredentials(_Model):
    accessKeyId: str
    secretAccessKey: str
    sessionToken: str | None = None
    expiration: str | None = None


class GetIamCredentialOptions(_Model):
    callStsOnInvalidIamCredential: bool = True
    permissionSet: list[str] = Field(default_factory=lambda: list(Q_PERMISSION_SET))
    credentialOverride: IamCredentials | None = None


class GetIamCredentialParams(_Model):
    profileName: str
    options: GetIamCredentialOptions | None = None


class IamCredential(_Model):
    id: str
    kinds: list[ProfileKind]
    credentials: IamCredentials


class GetIamCredentialResult(_Model):
    credential: IamCredential
    updateCredentialsParams: dict[str, Any]


class GetMfaCodeParams(_Model):
    profileName: str
    mfaSerial: str | None = None


class GetMfaCodeResult(_Model):
    code: str
    mfaSerial: str


# ---------------------------------------------------------------------------
# invalidation and change notifications
# ---------------------------------------------------------------------------


class InvalidateSsoTokenParams(_Model):
    ssoTokenId: str


class InvalidateStsCredentialParams(_Model):
    iamCredentialId: str


class SsoTokenChangedParams(_Model):
    kind: CredentialChangedKind
    ssoTokenId: str


class StsCredentialChangedParams(_Model):
    kind: CredentialChangedKind
    stsCredentialId: str


REQUEST_PARAMS: Final[dict[str, type[BaseModel]]] = {
    LIST_PROFILES: ListProfilesParams,
    UPDATE_PROFILE: UpdateProfileParams,
    GET_SSO_TOKEN: GetSsoTokenParams,
    GET_IAM_CREDENTIAL: GetIamCredentialParams,
    GET_MFA_CODE: GetMfaCodeParams,
    INVALIDATE_SSO_TOKEN: InvalidateSsoTokenParams,
    INVALIDATE_STS_CREDENTIAL: InvalidateStsCredentialParams,
}

REQUEST_METHODS: Final[tuple[str, ...]] = tuple(REQUEST_PARAMS)


def parse_request(method: str, raw: Any) -> BaseModel:
    """Validate the payload of identity request *method*."""
    model = REQUEST_PARAMS.get(method)
    if model is None:
        raise ResponseError(jsonrpc.METHOD_NOT_FOUND, f"Unknown identity method {method}")
    try:
        return model.model_validate(raw if raw is not None else {})
    except ValidationError as exc:
        raise ResponseError(
            jsonrpc.INVALID_PARAMS, f"Invalid params for {method}", exc.errors(include_url=False)
        ) from exc


__all__ = [
    "GET_SSO_TOKEN_PROGRESS_TOKEN",
    "REQUEST_METHODS",
    "REQUEST_PARAMS",
    "AuthorizationFlowKind",
    "AwsBuilderIdSsoTokenSource",
    "CredentialChangedKind",
    "GetIamCredentialOptions",
    "GetIamCredentialParams",
    "GetIamCredentialResult",
    "GetMfaCodeParams",
    "GetMfaCodeResult",
    "GetSsoTokenOptions",
    "GetSsoTokenParams",
    "GetSsoTokenProgress",
    "GetSsoTokenProgressState",
    "GetSsoTokenResult",
    "IamCredential",
    "IamCredentials",
    "IamIdentityCenterSsoTokenSource",
    "InvalidateSsoTokenParams",
    "InvalidateStsCredentialParams",
    "ListProfilesParams",
    "ListProfilesResult",
    "Profile",
    "ProfileKind",
    "ProfileSettings",
    "SsoSession",
    "SsoSessionSettings",
    "SsoToken",
    "SsoTokenChangedParams",
    "SsoTokenSourceKind",
    "StsCredentialChangedParams",
    "UpdateProfileOptions",
    "UpdateProfileParams",
    "UpdateProfileResult",
    "parse_request",
]
