"""
YouTube authentication using Google OAuth2.

Loads the cached token file when it exists, otherwise runs the installed-app
consent flow (browser + local redirect listener) and caches the result.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from ..activity_log import ActivityLogger
from ..config import YOUTUBE_UPLOAD_SCOPE
from ..errors import AuthError

DEFAULT_TOKENS_PATH = Path.home() / "youtube-tokens.json"
DEFAULT_CLIENT_SECRETS_FILE = "credentials.json"

PathLike = Union[str, Path]


def authorize(
    activity: ActivityLogger,
    tokens_path: Optional[PathLike] = None,
    client_secrets_path: Optional[PathLike] = None,
    scopes: Optional[List[str]] = None,
) -> Credentials:
    """
    Return YouTube credentials, running the consent flow only when needed.

    Authorization flow:
    1. If tokens_path exists, load it and return it as-is. Expired access
       tokens are refreshed by google-auth on first use.
    2. Otherwise run the OAuth2 installed-app flow with client_secrets_path
    3. Save the obtained token to tokens_path for future runs

    Args:
        activity: Activity log receiving auth start/success/error records
        tokens_path: Token cache (default: ~/youtube-tokens.json)
        client_secrets_path: OAuth client file (default: ./credentials.json)
        scopes: OAuth scopes (default: youtube.upload)

    Returns:
        google.oauth2.credentials.Credentials: Authorized credentials

    Raises:
        AuthError: If no cached token exists and the consent flow cannot complete
    """
    tokens_path = Path(tokens_path) if tokens_path else DEFAULT_TOKENS_PATH
    if client_secrets_path is None:
        client_secrets_path = Path.cwd() / DEFAULT_CLIENT_SECRETS_FILE
    client_secrets_path = Path(client_secrets_path)
    scopes = scopes or [YOUTUBE_UPLOAD_SCOPE]

    activity.log_auth_start()
    try:
        if tokens_path.exists():
            activity.info(
                "Using existing cached credentials", {"tokens_path": str(tokens_path)}
            )
            creds = _load_cached(tokens_path, scopes)
        else:
            activity.info(
                "Initiating new authentication flow",
                {"credentials_path": str(client_secrets_path)},
            )
            creds = _run_consent_flow(client_secrets_path, scopes)
            _save(creds, tokens_path)
            activity.info("Saved credentials to cache", {"tokens_path": str(tokens_path)})
    except AuthError as e:
        activity.log_auth_error(e)
        raise

    activity.log_auth_success()
    return creds


def _load_cached(tokens_path: Path, scopes: List[str]) -> Credentials:
    try:
        return Credentials.from_authorized_user_file(str(tokens_path), scopes)
    except (OSError, ValueError) as e:
        raise AuthError(
            f"Could not load cached credentials from {tokens_path}: {e}"
        ) from e


def _run_consent_flow(client_secrets_path: Path, scopes: List[str]) -> Credentials:
    if not os.path.exists(client_secrets_path):
        raise AuthError(f"Credentials file not found at: {client_secrets_path}")

    try:
        flow = InstalledAppFlow.from_client_secrets_file(
            str(client_secrets_path), scopes=scopes
        )
        creds = flow.run_local_server(port=0)
    except Exception as e:
        raise AuthError(f"OAuth flow failed: {e}") from e

    if not creds or not creds.token:
        raise AuthError("No valid credentials found. Run auth flow first.")
    return creds


def _save(creds: Credentials, tokens_path: Path):
    try:
        tokens_path.parent.mkdir(parents=True, exist_ok=True)
        tokens_path.write_text(creds.to_json(), encoding="utf-8")
    except OSError as e:
        raise AuthError(f"Could not save credentials to {tokens_path}: {e}") from e


def build_service(credentials: Credentials):
    """
    Build an authenticated YouTube Data API v3 service.

    Raises:
        AuthError: If credentials are missing or the service cannot be built
    """
    if not credentials:
        raise AuthError("No valid credentials found. Run auth flow first.")
    try:
        return build("youtube", "v3", credentials=credentials, cache_discovery=False)
    except Exception as e:
        raise AuthError(f"Failed to build YouTube service: {str(e)}") from e
