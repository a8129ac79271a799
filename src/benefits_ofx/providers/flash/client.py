"""Flash statement client."""

import logging
from typing import List, Optional, Sequence, Union

import requests
from pydantic import SecretStr

from ...exceptions import AuthNotStartedError, NotAuthenticatedError
from ...models.core import Statement
from ...utils.http import build_session, parse_body_as, send
from . import auth, statement
from .auth import AuthState, Authenticated, Initialized, NotStarted
from .statement import BatchResponse, FlashTransaction


logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:135.0) Gecko/20100101 Firefox/135.0"


def _as_secret(value: Union[str, SecretStr]) -> SecretStr:
    if isinstance(value, SecretStr):
        return value
    return SecretStr(value)


class FlashClient:
    """Client for the Flash benefits card.

    Logging in takes two calls from the caller: :meth:`initiate_auth` sends
    the password and triggers an SMS code, :meth:`finish_login` submits that
    code. A client built with :meth:`with_token` skips both.
    """

    name = statement.ACCOUNT_LABEL

    def __init__(self,
                 username: str,
                 password: Union[str, SecretStr],
                 company_id: str,
                 employee_id: str,
                 session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None,
                 auth_url: str = auth.AUTH_URL,
                 web_auth_url: str = auth.WEB_AUTH_URL,
                 bff_url: str = statement.BFF_URL,
                 client_id: str = auth.CLIENT_ID):
        self.username = username
        self._password = _as_secret(password)
        self.company_id = company_id
        self.employee_id = employee_id
        self.session = session or build_session(USER_AGENT)
        self.timeout = timeout
        self.auth_url = auth_url
        self.web_auth_url = web_auth_url
        self.bff_url = bff_url.rstrip("/")
        self.client_id = client_id
        self.auth: AuthState = NotStarted()

    @classmethod
    def with_token(cls,
                   token: Union[str, SecretStr],
                   company_id: str,
                   employee_id: str,
                   **kwargs) -> "FlashClient":
        """Build an already authenticated client from an application token"""
        client = cls("", SecretStr(""), company_id, employee_id, **kwargs)
        client.auth = Authenticated(_as_secret(token))
        return client

    @property
    def is_authenticated(self) -> bool:
        return isinstance(self.auth, Authenticated)

    def initiate_auth(self) -> None:
        """Send the password; Flash answers by texting a code.

        Does nothing once the login has been initiated.
        """
        if not isinstance(self.auth, NotStarted):
            return

        session = auth.initiate_password_auth(
            self.session,
            self.username,
            self._password,
            auth_url=self.auth_url,
            client_id=self.client_id,
            timeout=self.timeout,
        )
        self.auth = Initialized(session)
        logger.info("Flash login initiated for %s", self.username)

    def finish_login(self, second_factor: str) -> None:
        """Submit the SMS code and obtain the application token.

        The state only advances when both the challenge answer and the
        employee sign-in succeed, so a failed attempt can be retried with a
        new code.

        Raises:
            AuthNotStartedError: If :meth:`initiate_auth` has not succeeded
        """
        if isinstance(self.auth, NotStarted):
            raise AuthNotStartedError("auth not started. Call initiate_auth first")
        if isinstance(self.auth, Authenticated):
            return

        access_token = auth.respond_to_sms_challenge(
            self.session,
            self.username,
            self.auth.session,
            second_factor,
            auth_url=self.auth_url,
            client_id=self.client_id,
            timeout=self.timeout,
        )
        token = auth.sign_in_employee(
            self.session,
            access_token,
            self.employee_id,
            self.company_id,
            web_auth_url=self.web_auth_url,
            timeout=self.timeout,
        )
        self.auth = Authenticated(token)
        logger.info("Flash login completed for employee %s", self.employee_id)

    def fetch_month(self, month: int, year: Optional[int] = None) -> List[FlashTransaction]:
        """Fetch the first page (up to 100 items) of a month's statement.

        Raises:
            NotAuthenticatedError: If the login has not completed
        """
        if not isinstance(self.auth, Authenticated):
            raise NotAuthenticatedError("Not authenticated")

        token = self.auth.token.get_secret_value()
        start, end = statement.statement_window(month, year)
        response = send(
            self.session,
            "GET",
            f"{self.bff_url}/person.getStatement",
            timeout=self.timeout,
            params={
                "batch": "1",
                "input": statement.build_statement_input(start, end),
            },
            headers={
                "Authorization": token,
                "x-flash-auth": f"Bearer {token}",
                "company-id": self.company_id,
            },
        )
        batch = parse_body_as(List[BatchResponse], response.text)
        items = statement.extract_items(batch)

        logger.info("Fetched %d Flash items for %s to %s", len(items), start.date(), end.date())
        return items

    def convert(self, items: Sequence[FlashTransaction]) -> Statement:
        return statement.convert(items)
