"""Google Docs implementation of RemoteDocument, via the Drive v3 REST API."""

import asyncio
from typing import Optional

import httpx
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from ..config import BotConfig
from ..errors import DocumentError
from ..utils.logging import get_logger

logger = get_logger("documents.google_doc")

_DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"
_DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]
NOT_AVAILABLE = "<not available>"


class GoogleCredentials:
    """Service-account credentials shared by every GoogleDoc handle."""

    def __init__(self, credentials_file: str) -> None:
        self._credentials = service_account.Credentials.from_service_account_file(
            credentials_file, scopes=_DRIVE_SCOPES
        )

    async def token(self) -> str:
        if not self._credentials.valid:
            # google-auth refresh is blocking
            await asyncio.to_thread(self._credentials.refresh, Request())
        return self._credentials.token


class GoogleDoc:
    """A document on Google Drive. Holds only the Drive file metadata."""

    def __init__(self, credentials: GoogleCredentials, timeout: float = 30.0) -> None:
        self._credentials = credentials
        self._timeout = timeout
        self._file: Optional[dict] = None

    async def _headers(self) -> dict:
        token = await self._credentials.token()
        return {"Authorization": f"Bearer {token}", "Accept": "application/json"}

    async def create_from_template(self, title: str, config: BotConfig) -> str:
        if not config.doc_template_id:
            raise DocumentError("No document template configured")
        body: dict = {"name": title}
        # A shared drive id is a valid parent for its root folder
        parent = config.doc_folder or config.doc_drive
        if parent:
            body["parents"] = [parent]
        params = {"supportsAllDrives": "true"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                headers = await self._headers()
                response = await client.post(
                    f"{_DRIVE_BASE_URL}/files/{config.doc_template_id}/copy",
                    params=params,
                    headers=headers,
                    json=body,
                )
                response.raise_for_status()
                file = response.json()
                if config.doc_domain:
                    permission = await client.post(
                        f"{_DRIVE_BASE_URL}/files/{file['id']}/permissions",
                        params=params,
                        headers=headers,
                        json={
                            "type": "domain",
                            "domain": config.doc_domain,
                            "role": "writer",
                            "allowFileDiscovery": True,
                        },
                    )
                    permission.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("gdoc_create_error", title=title, status=exc.response.status_code)
            raise DocumentError(f"Could not copy the template to a new file: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("gdoc_create_error", title=title, error=str(exc))
            raise DocumentError(f"Could not copy the template to a new file: {exc}") from exc
        self._file = file
        logger.info("gdoc_created", title=title, id=file["id"])
        return file["id"]

    async def load_by_id(self, document_id: str) -> None:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    f"{_DRIVE_BASE_URL}/files/{document_id}",
                    params={"supportsAllDrives": "true"},
                    headers=await self._headers(),
                )
                response.raise_for_status()
                self._file = response.json()
        except httpx.HTTPStatusError as exc:
            raise DocumentError(
                f"Could not find the document with id {document_id}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DocumentError(f"Could not find the document with id {document_id}: {exc}") from exc

    def url(self) -> str:
        if not self._file or not self._file.get("id"):
            return NOT_AVAILABLE
        return f"https://docs.google.com/document/d/{self._file['id']}/edit"

    def id(self) -> str:
        return self._file.get("id", "") if self._file else ""


def google_doc_factory(config: BotConfig):
    """DocumentFactory for the configured service account, or None if documents are off."""
    if not config.documents_enabled:
        return None
    credentials = GoogleCredentials(config.google_credentials_file)
    return lambda: GoogleDoc(credentials)
