from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from oauthlib.oauth2.rfc6749.errors import OAuth2Error

from utils.config import AppConfig
from utils.errors import AuthenticationError

LOGGER = logging.getLogger(__name__)
SCOPES: Iterable[str] = ("https://www.googleapis.com/auth/gmail.modify",)


class AuthService:
    """Handle the OAuth2 credential lifecycle for the Gmail account."""

    def __init__(self, config: AppConfig):
        self._credentials_file: Path = config.credentials_file
        self._token_file: Path = config.token_file

    def _save_credentials(self, creds: Credentials) -> None:
        LOGGER.debug("Persisting OAuth tokens to %s", self._token_file)
        self._token_file.parent.mkdir(parents=True, exist_ok=True)
        self._token_file.write_text(creds.to_json(), encoding="utf-8")

    def _load_existing_credentials(self) -> Credentials | None:
        if not self._token_file.exists():
            return None
        LOGGER.debug("Loading cached credential from %s", self._token_file)
        try:
            data = self._token_file.read_text(encoding="utf-8")
            return Credentials.from_authorized_user_info(json.loads(data), SCOPES)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unusable token cache %s: %s", self._token_file, exc)
            return None

    def _run_consent_flow(self) -> Credentials:
        if not self._credentials_file.exists():
            raise AuthenticationError(f"Client secret file not found: {self._credentials_file}")

        LOGGER.info("Initiating OAuth flow using %s", self._credentials_file)
        try:
            flow = InstalledAppFlow.from_client_secrets_file(str(self._credentials_file), scopes=SCOPES)
        except ValueError as exc:
            raise AuthenticationError(f"Client secret file {self._credentials_file} is invalid: {exc}") from exc
        try:
            creds = flow.run_local_server(port=0)
        except OAuth2Error as exc:
            raise AuthenticationError(f"Authorization was not granted: {exc}") from exc
        self._save_credentials(creds)
        return creds

    def authenticate(self) -> Credentials:
        creds = self._load_existing_credentials()
        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            LOGGER.info("Refreshing expired Gmail token")
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                LOGGER.warning("Token refresh failed, asking for consent again: %s", exc)
            else:
                self._save_credentials(creds)
                return creds

        return self._run_consent_flow()
