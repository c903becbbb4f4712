from typing import Optional

from endpoints import FILES
from .catalog import FileCatalog
from .client import VaultClient, parse_json
from .errors import NetworkError, PermissionDeniedError, ValidationError
from .models import Session, UploadFile, UploadReceipt, UploadTicket
from .preview import PreviewHandle
from .session_store import SessionStore
from .state import Selection


class UploadCoordinator:
    """Three-phase upload: delegated credential, direct blob write, confirm.

    Each phase runs only if the previous one succeeded. Nothing observable
    (selection, catalog, preview) changes unless all three complete.
    """

    def __init__(
        self,
        client: VaultClient,
        sessions: SessionStore,
        catalog: FileCatalog,
        selection: Optional[Selection] = None,
        verify_object_key: bool = True,
        preview_dir: Optional[str] = None,
    ) -> None:
        self._client = client
        self._sessions = sessions
        self._catalog = catalog
        self._selection = selection
        self.verify_object_key = verify_object_key
        self.preview_dir = preview_dir
        self.logger = client.logger

    def upload(self, file: UploadFile) -> UploadReceipt:
        if not file.name or not file.name.strip():
            raise ValidationError("Choose a file to upload.")
        session = self._sessions.require()

        ticket = self.request_ticket(session, file.name)
        self.logger.info("Uploading %s (%d bytes) -> %s", file.name, len(file.data), ticket.object_key)
        self._client.put_blob(ticket.upload_url, file.data, file.content_type)

        files = self._catalog.list(session.identity.owner_id)
        preview = PreviewHandle.create(file.data, ticket.object_key, cache_dir=self.preview_dir)
        receipt = UploadReceipt(object_key=ticket.object_key, files=files, preview=preview)
        if self._selection is not None:
            self._selection.select(receipt.object_key, preview)
        return receipt

    def request_ticket(self, session: Session, file_name: str) -> UploadTicket:
        endpoint = FILES["sas"]
        resp = self._client.request(endpoint["method"], endpoint["path"], auth=True, json={"fileName": file_name})
        parsed = parse_json(resp, fallback={})
        data = parsed.value if isinstance(parsed.value, dict) else {}
        upload_url = data.get("uploadUrl")
        if not upload_url or not isinstance(upload_url, str):
            raise NetworkError("Upload credential response is missing uploadUrl.", status=resp.status_code)

        expected = f"{session.identity.owner_id}/{file_name}"
        object_key = data.get("objectKey")
        if not isinstance(object_key, str) or not object_key:
            object_key = None
        if self.verify_object_key:
            if object_key != expected:
                raise PermissionDeniedError(
                    f"Upload credential targets {object_key or 'no key'}, expected {expected}."
                )
        elif object_key is None:
            object_key = expected
        return UploadTicket(upload_url=upload_url, object_key=object_key)
