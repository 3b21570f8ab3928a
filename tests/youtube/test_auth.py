import json

import pytest
from unittest.mock import MagicMock, patch

from youtube_uploader_cli.errors import AuthError
from youtube_uploader_cli.youtube.auth import authorize, build_service

TOKEN = {
    "token": "access-token",
    "refresh_token": "refresh-token",
    "token_uri": "https://oauth2.googleapis.com/token",
    "client_id": "client-id.apps.googleusercontent.com",
    "client_secret": "client-secret",
    "scopes": ["https://www.googleapis.com/auth/youtube.upload"],
}


@pytest.fixture
def tokens_path(tmp_path):
    return tmp_path / "home" / "youtube-tokens.json"


@pytest.fixture
def client_secrets(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({"installed": {"client_id": "x", "client_secret": "y"}}))
    return path


@patch("youtube_uploader_cli.youtube.auth.InstalledAppFlow")
def test_cached_token_skips_consent_flow(mock_flow, activity, tokens_path, tmp_path):
    tokens_path.parent.mkdir(parents=True)
    tokens_path.write_text(json.dumps(TOKEN))

    for _ in range(2):
        creds = authorize(
            activity,
            tokens_path=tokens_path,
            client_secrets_path=tmp_path / "missing.json",
        )
        assert creds.token == "access-token"
        assert creds.refresh_token == "refresh-token"

    mock_flow.from_client_secrets_file.assert_not_called()
    content = activity.current_log_file.read_text()
    assert "Using existing cached credentials" in content
    assert "Authentication successful" in content


@patch("youtube_uploader_cli.youtube.auth.InstalledAppFlow")
def test_missing_client_secrets(mock_flow, activity, tokens_path, tmp_path):
    with pytest.raises(AuthError, match="Credentials file not found"):
        authorize(
            activity,
            tokens_path=tokens_path,
            client_secrets_path=tmp_path / "credentials.json",
        )

    mock_flow.from_client_secrets_file.assert_not_called()
    assert "[ERROR] Authentication failed" in activity.current_log_file.read_text()


@patch("youtube_uploader_cli.youtube.auth.InstalledAppFlow")
def test_consent_flow_saves_token(mock_flow, activity, tokens_path, client_secrets):
    creds = MagicMock()
    creds.token = "fresh-token"
    creds.to_json.return_value = json.dumps(TOKEN)
    mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = creds

    result = authorize(
        activity, tokens_path=tokens_path, client_secrets_path=client_secrets
    )

    assert result is creds
    mock_flow.from_client_secrets_file.assert_called_once_with(
        str(client_secrets), scopes=["https://www.googleapis.com/auth/youtube.upload"]
    )
    mock_flow.from_client_secrets_file.return_value.run_local_server.assert_called_once_with(
        port=0
    )
    assert json.loads(tokens_path.read_text()) == TOKEN


@patch("youtube_uploader_cli.youtube.auth.InstalledAppFlow")
def test_consent_flow_failure(mock_flow, activity, tokens_path, client_secrets):
    mock_flow.from_client_secrets_file.return_value.run_local_server.side_effect = (
        RuntimeError("access_denied")
    )

    with pytest.raises(AuthError, match="OAuth flow failed: access_denied"):
        authorize(activity, tokens_path=tokens_path, client_secrets_path=client_secrets)

    assert not tokens_path.exists()


@patch("youtube_uploader_cli.youtube.auth.InstalledAppFlow")
def test_consent_flow_without_token(mock_flow, activity, tokens_path, client_secrets):
    mock_flow.from_client_secrets_file.return_value.run_local_server.return_value = None

    with pytest.raises(AuthError, match="No valid credentials found"):
        authorize(activity, tokens_path=tokens_path, client_secrets_path=client_secrets)


def test_malformed_cache(activity, tokens_path):
    tokens_path.parent.mkdir(parents=True)
    tokens_path.write_text("not json")

    with pytest.raises(AuthError, match="Could not load cached credentials"):
        authorize(activity, tokens_path=tokens_path)


def test_build_service_requires_credentials():
    with pytest.raises(AuthError):
        build_service(None)


@patch("youtube_uploader_cli.youtube.auth.build")
def test_build_service(mock_build):
    creds = MagicMock()
    assert build_service(creds) is mock_build.return_value
    mock_build.assert_called_once_with(
        "youtube", "v3", credentials=creds, cache_discovery=False
    )
