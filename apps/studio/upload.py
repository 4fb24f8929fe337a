"""
Upload flow: signed credentials, a chunked direct upload to the provider,
then recording the asset through the API.

    idle -> awaiting_credentials -> transferring -> persisting -> complete

``failed`` is reachable from every non-idle state and ``cancelled`` from
any state before persisting. A file over the size ceiling fails before
a single request is made.
"""
import logging
import os
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from apps.studio.client import StudioClient
from apps.studio.exceptions import (
    FileTooLargeError,
    InvalidTransitionError,
    StudioError,
    UploadCancelledError,
)
from apps.studio.models import Asset

logger = logging.getLogger(__name__)

MB = 1024 * 1024

CHUNK_SIZE = 6 * MB

MAX_FILE_SIZE = {
    'video': 500 * MB,
    'image': 10 * MB,
}

ProgressCallback = Callable[[int], None]


class UploadState(str, Enum):
    IDLE = 'idle'
    AWAITING_CREDENTIALS = 'awaiting_credentials'
    TRANSFERRING = 'transferring'
    PERSISTING = 'persisting'
    COMPLETE = 'complete'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


class CancellationToken:
    """Abort handle checked by the flow between chunks."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise UploadCancelledError("Upload cancelled.")


@dataclass
class TransferResult:
    public_id: str
    bytes: int
    duration: float
    format: str = ''
    width: int | None = None
    height: int | None = None

    @classmethod
    def from_provider(cls, data: dict[str, Any]) -> "TransferResult":
        return cls(
            public_id=data['public_id'],
            bytes=int(data.get('bytes') or 0),
            duration=float(data.get('duration') or 0),
            format=data.get('format') or '',
            width=data.get('width'),
            height=data.get('height'),
        )


class UploadFlow:
    """
    One file's trip from local disk to a recorded asset.

    A flow runs once. Progress is clamped to 0-100 and never decreases;
    ``error`` holds the single user-visible message after a failure.
    """

    def __init__(
        self,
        client: StudioClient,
        kind: str = 'video',
        max_size: int | None = None,
        chunk_size: int = CHUNK_SIZE,
        on_progress: ProgressCallback | None = None,
        token: CancellationToken | None = None,
    ) -> None:
        self.client = client
        self.kind = kind
        self.max_size = max_size if max_size is not None else MAX_FILE_SIZE[kind]
        self.chunk_size = chunk_size
        self.on_progress = on_progress
        self.token = token or CancellationToken()

        self.state = UploadState.IDLE
        self.progress = 0
        self.error: str | None = None
        self.public_id: str | None = None
        self.asset: Asset | None = None

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def is_finished(self) -> bool:
        return self.state in (UploadState.COMPLETE, UploadState.FAILED, UploadState.CANCELLED)

    async def run(
        self,
        path: str | os.PathLike,
        title: str | None = None,
        description: str = '',
        duration: float | None = None,
    ) -> Asset:
        """
        Upload ``path`` and record it as an asset.

        :param path: Local file
        :param title: Display title, defaults to the file name without extension
        :param description: Optional description
        :param duration: Seconds, used when the provider does not report one
        :return: The recorded asset
        :raises FileTooLargeError: Before any request when over the ceiling
        :raises UploadCancelledError: When the token is cancelled mid-transfer
        :raises StudioError: On any other failure; ``error`` holds the message
        """
        if self.state is not UploadState.IDLE:
            raise InvalidTransitionError(self.state.value, 'start an upload')

        path = Path(path)

        try:
            try:
                size = path.stat().st_size
            except OSError as e:
                raise StudioError(f"Cannot read {path.name}: {e.strerror}") from e
            if size > self.max_size:
                raise FileTooLargeError(size, self.max_size)
            if size == 0:
                raise StudioError("File is empty.")

            self.token.raise_if_cancelled()
            self.state = UploadState.AWAITING_CREDENTIALS
            credentials = await self.client.upload_credentials(self.kind)

            self.state = UploadState.TRANSFERRING
            transfer = await self._transfer(path, size, credentials)
            self.public_id = transfer.public_id
        except UploadCancelledError as e:
            self._finish(UploadState.CANCELLED, str(e))
            raise
        except StudioError as e:
            self._finish(UploadState.FAILED, str(e))
            raise
        except Exception as e:
            raise self._fail_unexpected(e) from e

        self.state = UploadState.PERSISTING
        payload = {
            'title': (title or path.stem).strip(),
            'description': description.strip(),
            'public_id': transfer.public_id,
            'kind': self.kind,
            'original_size': size,
            'compressed_size': transfer.bytes,
            'duration': 0 if self.kind == 'image' else (transfer.duration or duration or 0),
            'format': transfer.format,
            'width': transfer.width,
            'height': transfer.height,
        }

        try:
            self.asset = await self.client.create_asset(payload)
        except StudioError as e:
            await self._discard_orphan(transfer.public_id)
            self._finish(UploadState.FAILED, str(e))
            raise
        except Exception as e:
            await self._discard_orphan(transfer.public_id)
            raise self._fail_unexpected(e) from e

        self.state = UploadState.COMPLETE
        logger.info(f"Uploaded {path.name} as asset {self.asset.id} ({size} bytes)")
        return self.asset

    async def _transfer(self, path: Path, size: int, credentials) -> TransferResult:
        upload_id = uuid.uuid4().hex
        sent = 0
        response: dict[str, Any] = {}

        with path.open('rb') as fh:
            while sent < size:
                self.token.raise_if_cancelled()

                chunk = fh.read(self.chunk_size)
                if not chunk:
                    break

                response = await self.client.upload_chunk(
                    credentials,
                    chunk,
                    start=sent,
                    total=size,
                    upload_id=upload_id,
                    filename=path.name,
                )
                sent += len(chunk)
                self._report_progress(sent * 100 // size)

        if 'public_id' not in response:
            raise StudioError("Provider did not return a public id.")

        return TransferResult.from_provider(response)

    def _report_progress(self, value: int) -> None:
        value = max(self.progress, min(100, max(0, value)))
        if value == self.progress:
            return
        self.progress = value
        if self.on_progress is not None:
            self.on_progress(value)

    async def _discard_orphan(self, public_id: str) -> None:
        try:
            await self.client.discard_upload(public_id, self.kind)
        except Exception as e:
            logger.warning(f"Could not discard orphaned upload {public_id}: {e}")

    def _finish(self, state: UploadState, message: str) -> None:
        self.state = state
        self.error = message
        logger.warning(f"Upload {state.value}: {message}")

    def _fail_unexpected(self, error: Exception) -> StudioError:
        """Fail the flow on a non-studio error and return it wrapped."""
        message = f"Upload failed: {type(error).__name__}: {error}"
        self._finish(UploadState.FAILED, message)
        return StudioError(message)
