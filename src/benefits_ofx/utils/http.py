"""HTTP transport helpers shared by the provider clients."""

import logging
from typing import Any, Optional, Type, TypeVar, Union

import requests
from pydantic import BaseModel, SecretStr, TypeAdapter, ValidationError

from ..exceptions import ParseError, TransportError


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def build_session(user_agent: Optional[str] = None) -> requests.Session:
    """Create a session, optionally with a fixed User-Agent"""
    session = requests.Session()
    if user_agent:
        session.headers["User-Agent"] = user_agent
    return session


def send(session: requests.Session,
         method: str,
         url: str,
         timeout: Optional[float] = None,
         **kwargs: Any) -> requests.Response:
    """Issue a request and fail on transport errors or non-2xx responses.

    Raises:
        TransportError: On connection failures or when the server answers
            with an error status; the response body is attached.
    """
    logger.debug("%s %s", method, url)
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        raise TransportError(f"{method} {url} failed: {e}") from e

    if not response.ok:
        raise TransportError(
            f"{method} {url} returned HTTP {response.status_code}",
            status_code=response.status_code,
            body=response.text,
        )
    return response


def parse_body(model: Type[M], text: str) -> M:
    """Validate a JSON body against a response model"""
    try:
        return model.model_validate_json(text)
    except ValidationError as e:
        raise ParseError(str(e), raw_body=text) from e


def parse_body_as(type_: Any, text: str) -> Any:
    """Validate a JSON body against an arbitrary type, e.g. ``List[Model]``"""
    try:
        return TypeAdapter(type_).validate_json(text)
    except ValidationError as e:
        raise ParseError(str(e), raw_body=text) from e


def reveal(secret: Union[str, SecretStr]) -> str:
    """Plain value of a secret, for use in a request only"""
    if isinstance(secret, SecretStr):
        return secret.get_secret_value()
    return secret
