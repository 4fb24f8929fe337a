"""
Application state for one studio session.

Owns the client and every view-level object built on it for a bounded
lifetime. Use it as an async context manager; leaving the block cancels
unfinished uploads and closes the client.
"""
import logging
from typing import Any

from apps.studio.client import StudioClient
from apps.studio.editor import Editor, GenerationTimer
from apps.studio.library import Library
from apps.studio.upload import CancellationToken, UploadFlow

logger = logging.getLogger(__name__)


class StudioState:

    def __init__(
        self,
        base_url: str,
        cloud_name: str,
        session_id: str | None = None,
        csrf_token: str | None = None,
        timer: GenerationTimer | None = None,
        client: StudioClient | None = None,
    ) -> None:
        self.client = client or StudioClient(base_url, session_id=session_id, csrf_token=csrf_token)
        self.library = Library(self.client)
        self.editor = Editor(
            self.client,
            cloud_name,
            timer=timer,
            on_saved=self.library.on_asset_saved,
        )
        self.uploads: list[UploadFlow] = []

    async def __aenter__(self) -> "StudioState":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()

    def new_upload(self, kind: str = 'video', **options: Any) -> UploadFlow:
        """Create an upload flow tied to this session's lifetime."""
        options.setdefault('token', CancellationToken())
        flow = UploadFlow(self.client, kind=kind, **options)
        self.uploads.append(flow)
        return flow

    async def upload(self, path, kind: str = 'video', **run_options: Any):
        """Run a new upload and refresh the library once it completes."""
        flow = self.new_upload(kind)
        asset = await flow.run(path, **run_options)
        await self.library.refresh()
        return asset

    async def close(self) -> None:
        pending = [flow for flow in self.uploads if not flow.is_finished]
        for flow in pending:
            flow.cancel()
        if pending:
            logger.info(f"Cancelled {len(pending)} unfinished upload(s)")
        await self.client.close()
