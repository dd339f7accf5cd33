from __future__ import annotations

from mcp import types as jsonrpc
import pytest

from lsprouter import identity
from lsprouter.errors import ResponseError


def test_every_identity_request_has_a_params_model() -> None:
    assert set(identity.REQUEST_METHODS) == {
        "aws/identity/listProfiles",
        "aws/identity/updateProfile",
        "aws/identity/getSsoToken",
        "aws/identity/getIamCredential",
        "aws/identity/getMfaCode",
        "aws/identity/invalidateSsoToken",
        "aws/identity/invalidateStsCredential",
    }


def test_get_sso_token_source_is_discriminated_by_kind() -> None:
    params = identity.parse_request(
        identity.GET_SSO_TOKEN,
        {"source": {"kind": "IamIdentityCenter", "profileName": "dev"}, "clientName": "ide"},
    )

    assert isinstance(params, identity.GetSsoTokenParams)
    assert isinstance(params.source, identity.IamIdentityCenterSsoTokenSource)
    assert params.source.profileName == "dev"


def test_builder_id_source_requires_scopes() -> None:
    with pytest.raises(ResponseError) as exc_info:
        identity.parse_request(identity.GET_SSO_TOKEN, {"source": {"kind": "AwsBuilderId"}, "clientName": "ide"})

    assert exc_info.value.code == jsonrpc.INVALID_PARAMS


def test_unknown_identity_method() -> None:
    with pytest.raises(ResponseError) as exc_info:
        identity.parse_request("aws/identity/unknown", {})

    assert exc_info.value.code == jsonrpc.METHOD_NOT_FOUND


def test_iam_credential_options_default_to_q_permission_set() -> None:
    options = identity.GetIamCredentialOptions()

    assert options.callStsOnInvalidIamCredential is True
    assert options.permissionSet == list(identity.Q_PERMISSION_SET)


def test_update_profile_keeps_unknown_settings() -> None:
    params = identity.parse_request(
        identity.UPDATE_PROFILE,
        {"profile": {"kinds": ["SsoTokenProfile"], "name": "dev", "settings": {"region": "us-east-1", "x": 1}}},
    )

    assert isinstance(params, identity.UpdateProfileParams)
    assert params.profile.kinds == [identity.ProfileKind.SSO_TOKEN_PROFILE]
    assert params.profile.settings is not None
    assert params.profile.settings.model_dump(exclude_none=True) == {"region": "us-east-1", "x": 1}


def test_list_profiles_accepts_missing_params() -> None:
    assert isinstance(identity.parse_request(identity.LIST_PROFILES, None), identity.ListProfilesParams)
