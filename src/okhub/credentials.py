"""Locate API credentials: an explicit token, else a ``~/.netrc`` entry."""

from __future__ import annotations

import logging

import requests
from requests.auth import AuthBase, HTTPBasicAuth
from requests.utils import get_netrc_auth

logger = logging.getLogger(__name__)


class TokenAuth(AuthBase):
    """Send an OAuth token the way the GitHub v3 API expects it."""

    def __init__(self, token: str) -> None:
        self.token = token

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TokenAuth) and other.token == self.token

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        request.headers["Authorization"] = f"token {self.token}"
        return request


def resolve_auth(base_url: str, token: str | None = None) -> AuthBase | None:
    """Return the auth to attach to every request, if any is configured.

    A token wins over the netrc file; the netrc lookup uses the host of
    ``base_url`` (``machine api.github.com`` for the public API).
    """
    if token:
        logger.debug("Using token credentials.")
        return TokenAuth(token)
    netrc_auth = get_netrc_auth(base_url)
    if netrc_auth:
        login, password = netrc_auth
        logger.debug("Using netrc credentials for %s.", login)
        return HTTPBasicAuth(login, password)
    logger.info("No credentials found; sending unauthenticated requests.")
    return None
