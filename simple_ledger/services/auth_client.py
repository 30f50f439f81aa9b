# simple_ledger/services/auth_client.py
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from simple_ledger.errors import AuthError
import simple_ledger.common as common


class AuthClient:
    """HTTP client for the hosted identity provider.

    Built once per application by create_app and reached through
    ``common.get_auth_client()``; nothing here keeps per-user state.
    """

    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        authorize_url: Optional[str],
        token_url: Optional[str],
        userinfo_url: Optional[str],
        timeout: float = 10,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorize_url = authorize_url
        self.token_url = token_url
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self.http = requests.Session()

    @classmethod
    def from_config(cls, config) -> "AuthClient":
        return cls(
            client_id=config.get("OAUTH_CLIENT_ID"),
            client_secret=config.get("OAUTH_CLIENT_SECRET"),
            authorize_url=config.get("OAUTH_AUTHORIZE_URL"),
            token_url=config.get("OAUTH_TOKEN_URL"),
            userinfo_url=config.get("OAUTH_USERINFO_URL"),
            timeout=float(config.get("AUTH_HTTP_TIMEOUT", 10)),
        )

    def authorization_url(self, redirect_uri: str, state: str) -> str:
        if not self.authorize_url or not self.client_id:
            raise AuthError("OAuth provider is not configured")
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
        }
        return f"{self.authorize_url}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """Trade an authorization code for the provider's user info.

        Returns the userinfo document; it always carries ``sub``.
        """
        if not self.token_url or not self.userinfo_url:
            raise AuthError("OAuth provider is not configured")

        try:
            token_response = self.http.post(
                self.token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": redirect_uri,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                },
                timeout=self.timeout,
            )
            token_response.raise_for_status()
            access_token = token_response.json().get("access_token")
            if not access_token:
                raise AuthError("No access token in provider response")

            userinfo_response = self.http.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
            userinfo_response.raise_for_status()
            userinfo = userinfo_response.json()
        except (requests.RequestException, ValueError) as e:
            common.logger.warning(f"OAuth code exchange failed: {e}")
            raise AuthError("Could not complete sign in") from e

        if not userinfo.get("sub"):
            raise AuthError("Provider did not identify the user")
        return userinfo

    def fetch_phone_payload(self, user_json_url: str) -> Dict[str, Any]:
        """Fetch the signed user payload an SMS/OTP login hands back."""
        response = self.http.get(user_json_url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self.http.close()
