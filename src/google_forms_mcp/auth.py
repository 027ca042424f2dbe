"""
Authentication for Google Forms MCP Server.

Credentials are resolved in this order:
1. Service account key file (SERVICE_ACCOUNT_PATH)
2. Saved OAuth token from a previous run (credentials/token.json)
3. Application default credentials (GOOGLE_APPLICATION_CREDENTIALS)
4. Interactive OAuth2 loopback flow using credentials/credentials.json
"""

import os
from pathlib import Path

import google.auth
from google.auth.exceptions import DefaultCredentialsError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google.oauth2.service_account import Credentials as ServiceAccountCredentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build

from google_forms_mcp.utils import log

# Scopes required to read and edit forms
SCOPES = [
    "https://www.googleapis.com/auth/forms.body",
]

DEFAULT_OAUTH_PORT = 3000

# In Docker: /workspace/credentials/
# In local dev: ./credentials/
if os.getenv("DOCKER_ENV"):
    CREDENTIALS_DIR = Path("/workspace/credentials")
else:
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    CREDENTIALS_DIR = PROJECT_ROOT / "credentials"

TOKEN_PATH = CREDENTIALS_DIR / "token.json"
CREDENTIALS_PATH = CREDENTIALS_DIR / "credentials.json"


def get_oauth_port() -> int:
    """Return the OAuth loopback port (OAUTH_PORT, default 3000)."""
    raw = os.environ.get("OAUTH_PORT")
    if not raw:
        return DEFAULT_OAUTH_PORT
    try:
        return int(raw)
    except ValueError:
        log(f"Ignoring invalid OAUTH_PORT value {raw!r}", "WARNING")
        return DEFAULT_OAUTH_PORT


def _authorize_with_service_account(service_account_path: str) -> ServiceAccountCredentials:
    """
    Authorize using a service account key file.

    Raises:
        Exception: If the key file is missing or invalid
    """
    path = Path(service_account_path)
    if not path.exists():
        raise Exception(f"Service account key file not found at path: {service_account_path}")

    try:
        credentials = ServiceAccountCredentials.from_service_account_file(
            str(path), scopes=SCOPES
        )
    except Exception as e:
        log(f"Error loading service account key: {e}", "ERROR")
        raise Exception(
            "Failed to authorize using the service account. "
            "Ensure the key file is valid and the path is correct."
        )
    log("Service account authentication successful!")
    return credentials


def _load_saved_credentials() -> Credentials | None:
    """Load saved OAuth credentials, refreshing them if expired."""
    if not TOKEN_PATH.exists():
        return None

    try:
        credentials = Credentials.from_authorized_user_file(str(TOKEN_PATH), SCOPES)
        if credentials.valid:
            return credentials
        if credentials.expired and credentials.refresh_token:
            credentials.refresh(Request())
            _save_credentials(credentials)
            return credentials
        return None
    except Exception as e:
        log(f"Error loading saved credentials: {e}", "WARNING")
        return None


def _save_credentials(credentials: Credentials) -> None:
    try:
        TOKEN_PATH.parent.mkdir(parents=True, exist_ok=True)
        TOKEN_PATH.write_text(credentials.to_json())
        log(f"Token stored to {TOKEN_PATH}")
    except OSError as e:
        log(f"Error saving credentials: {e}", "WARNING")


def _authorize_with_application_default():
    """Use application default credentials when GOOGLE_APPLICATION_CREDENTIALS is set."""
    try:
        credentials, project_id = google.auth.default(scopes=SCOPES)
    except DefaultCredentialsError as e:
        log(f"Application default credentials unavailable: {e}", "WARNING")
        return None
    log(f"Using application default credentials (project: {project_id or 'unknown'})")
    return credentials


def _authenticate() -> Credentials:
    """
    Run the OAuth2 loopback flow and persist the resulting token.

    Raises:
        Exception: If the client secrets file is missing or the flow fails
    """
    if not CREDENTIALS_PATH.exists():
        raise Exception(f"Credentials file not found at {CREDENTIALS_PATH}")

    port = get_oauth_port()
    flow = InstalledAppFlow.from_client_secrets_file(str(CREDENTIALS_PATH), scopes=SCOPES)
    log(f"Starting OAuth loopback flow on http://localhost:{port}")
    credentials = flow.run_local_server(
        host="localhost",
        port=port,
        open_browser=False,
        access_type="offline",
        authorization_prompt_message="Authorize this app by visiting this URL:\n{url}",
        success_message="Authentication successful! You can close this window.",
    )
    if credentials.refresh_token:
        _save_credentials(credentials)
    else:
        log("Did not receive refresh token. Token might expire.", "WARNING")
    log("Authentication successful!")
    return credentials


def authorize():
    """
    Authorize with Google APIs.

    Returns:
        Valid credentials for Google Forms API access
    """
    service_account_path = os.environ.get("SERVICE_ACCOUNT_PATH")
    if service_account_path:
        log("Service account path detected. Attempting service account authentication...")
        return _authorize_with_service_account(service_account_path)

    credentials = _load_saved_credentials()
    if credentials:
        log("Using saved credentials.")
        return credentials

    if os.environ.get("GOOGLE_APPLICATION_CREDENTIALS"):
        credentials = _authorize_with_application_default()
        if credentials:
            return credentials

    log("Starting authentication flow...")
    return _authenticate()


def get_forms_client():
    """
    Build an authorized Google Forms API v1 client.

    Raises:
        Exception: If authorization fails
    """
    log("Attempting to authorize Google API client...")
    credentials = authorize()
    log("Google API client authorized successfully.")
    return build("forms", "v1", credentials=credentials)
