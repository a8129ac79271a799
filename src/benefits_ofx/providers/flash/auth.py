"""Flash login: Cognito password auth, SMS challenge and employee sign-in.

The session moves through three states, one way only::

    NotStarted -> Initialized(session) -> Authenticated(token)
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic.alias_generators import to_pascal

from ...utils.http import parse_body, reveal, send


logger = logging.getLogger(__name__)

AUTH_URL = "https://hros-auth.flashapp.services"
WEB_AUTH_URL = "https://flashos-entrance.us.flashapp.services/v1/auth"
CLIENT_ID = "4r4ki1jqohppg2dko3uf7rvq13"

COGNITO_CONTENT_TYPE = "application/x-amz-json-1.1"
INITIATE_AUTH_TARGET = "AWSCognitoIdentityProviderService.InitiateAuth"
RESPOND_TO_CHALLENGE_TARGET = "AWSCognitoIdentityProviderService.RespondToAuthChallenge"


@dataclass(frozen=True)
class NotStarted:
    pass


@dataclass(frozen=True)
class Initialized:
    session: SecretStr


@dataclass(frozen=True)
class Authenticated:
    token: SecretStr


AuthState = Union[NotStarted, Initialized, Authenticated]


class CognitoModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True)


class InitiateAuthResponse(CognitoModel):
    session: SecretStr
    challenge_name: Optional[str] = None


class AuthenticationResult(CognitoModel):
    access_token: SecretStr
    expires_in: Optional[int] = None
    token_type: Optional[str] = None
    refresh_token: Optional[SecretStr] = None
    id_token: Optional[SecretStr] = None


class RespondToAuthChallengeResponse(CognitoModel):
    authentication_result: AuthenticationResult


class EmployeeToken(BaseModel):
    token: SecretStr


class SignInEmployeeResult(BaseModel):
    data: EmployeeToken


class SignInEmployeeResponse(BaseModel):
    result: SignInEmployeeResult


def _cognito_call(session: requests.Session,
                  auth_url: str,
                  target: str,
                  body: dict,
                  timeout: Optional[float]) -> requests.Response:
    return send(
        session,
        "POST",
        auth_url,
        timeout=timeout,
        headers={"X-Amz-Target": target, "Content-Type": COGNITO_CONTENT_TYPE},
        data=json.dumps(body),
    )


def initiate_password_auth(session: requests.Session,
                           username: str,
                           password: Union[str, SecretStr],
                           auth_url: str = AUTH_URL,
                           client_id: str = CLIENT_ID,
                           timeout: Optional[float] = None) -> SecretStr:
    """Start a USER_PASSWORD_AUTH flow and return the challenge session"""
    response = _cognito_call(session, auth_url, INITIATE_AUTH_TARGET, {
        "AuthFlow": "USER_PASSWORD_AUTH",
        "ClientId": client_id,
        "AuthParameters": {
            "USERNAME": username,
            "PASSWORD": reveal(password),
        },
        "ClientMetadata": {
            "preferredMfa": "SMS_MFA",
        },
    }, timeout)
    initiated = parse_body(InitiateAuthResponse, response.text)
    logger.debug("Cognito challenge: %s", initiated.challenge_name)
    return initiated.session


def respond_to_sms_challenge(session: requests.Session,
                             username: str,
                             challenge_session: SecretStr,
                             code: str,
                             auth_url: str = AUTH_URL,
                             client_id: str = CLIENT_ID,
                             timeout: Optional[float] = None) -> SecretStr:
    """Answer the SMS_MFA challenge and return the Cognito access token"""
    response = _cognito_call(session, auth_url, RESPOND_TO_CHALLENGE_TARGET, {
        "ChallengeName": "SMS_MFA",
        "ChallengeResponses": {
            "USERNAME": username,
            "SMS_MFA_CODE": code,
        },
        "ClientId": client_id,
        "Session": reveal(challenge_session),
    }, timeout)
    return parse_body(RespondToAuthChallengeResponse, response.text).authentication_result.access_token


def sign_in_employee(session: requests.Session,
                     access_token: SecretStr,
                     employee_id: str,
                     company_id: str,
                     web_auth_url: str = WEB_AUTH_URL,
                     timeout: Optional[float] = None) -> SecretStr:
    """Trade a Cognito access token for the Flash application token"""
    response = send(
        session,
        "POST",
        f"{web_auth_url.rstrip('/')}/trpc/signInEmployee",
        timeout=timeout,
        headers={"Authorization": f"Bearer {reveal(access_token)}"},
        json={"employeeId": employee_id, "companyId": company_id},
    )
    return parse_body(SignInEmployeeResponse, response.text).result.data.token
