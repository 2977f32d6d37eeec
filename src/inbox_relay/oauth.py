"""Google OAuth2 authorization-code flow."""

import logging
from typing import Any

from google.auth.exceptions import GoogleAuthError
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from oauthlib.oauth2.rfc6749.errors import OAuth2Error
from pydantic import BaseModel

from inbox_relay.email.connectors.config import GoogleClientConfig
from inbox_relay.exceptions import RemoteError

logger = logging.getLogger(__name__)

OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "openid",
]


class AuthorizationRequest(BaseModel):
    """Where to send the user, plus the values to keep until the callback."""

    url: str
    state: str
    code_verifier: str | None = None


class AuthorizationResult(BaseModel):
    """Outcome of a completed code exchange.

    ``refresh_token`` is None when the provider did not reissue one.
    """

    email: str
    refresh_token: str | None = None


class GoogleAuthorizer:
    """Runs the web-server OAuth flow against Google."""

    def __init__(self, client: GoogleClientConfig, scopes: list[str] | None = None) -> None:
        self._client = client
        self._scopes = scopes or OAUTH_SCOPES

    def _client_config(self) -> dict[str, Any]:
        return {
            "web": {
                "client_id": self._client.client_id,
                "client_secret": self._client.client_secret.get_secret_value(),
                "auth_uri": self._client.auth_uri,
                "token_uri": self._client.token_uri,
                "redirect_uris": [self._client.redirect_uri],
            }
        }

    def _flow(self, state: str | None = None) -> Flow:
        return Flow.from_client_config(
            self._client_config(),
            scopes=self._scopes,
            redirect_uri=self._client.redirect_uri,
            state=state,
        )

    def authorization_url(self) -> AuthorizationRequest:
        """Build the consent URL.

        Offline access with a forced consent prompt makes Google issue a
        refresh token on every authorization.
        """
        flow = self._flow()
        url, state = flow.authorization_url(access_type="offline", prompt="consent")
        return AuthorizationRequest(
            url=url,
            state=state,
            code_verifier=flow.code_verifier,
        )

    def exchange(
        self,
        code: str,
        state: str | None = None,
        code_verifier: str | None = None,
    ) -> AuthorizationResult:
        """Exchange an authorization code and identify the authorized account.

        Raises:
            RemoteError: If the exchange or the profile lookup fails.
        """
        flow = self._flow(state=state)
        if code_verifier:
            flow.code_verifier = code_verifier

        try:
            flow.fetch_token(code=code)
            credentials = flow.credentials
            oauth2 = build("oauth2", "v2", credentials=credentials, cache_discovery=False)
            profile = oauth2.userinfo().get().execute()
        except (OAuth2Error, GoogleAuthError, HttpError) as e:
            logger.warning("OAuth code exchange failed: %s", e)
            raise RemoteError("Authorization with Google failed") from e

        email = profile.get("email")
        if not email:
            raise RemoteError("Google did not return an email address for this account")

        return AuthorizationResult(email=email, refresh_token=credentials.refresh_token or None)
