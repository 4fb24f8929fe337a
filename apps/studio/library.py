"""
The caller's library: fetch, client-side sort and search, multi-select and
bulk actions dispatched one request per asset.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable

from apps.studio.client import StudioClient
from apps.studio.exceptions import StudioError
from apps.studio.models import Asset

logger = logging.getLogger(__name__)


class SortKey(str, Enum):
    CREATED_AT = 'created_at'
    TITLE = 'title'
    ORIGINAL_SIZE = 'original_size'


SORT_KEYS: dict[SortKey, Callable[[Asset], Any]] = {
    SortKey.CREATED_AT: lambda asset: asset.created_at.timestamp() if asset.created_at else 0,
    SortKey.TITLE: lambda asset: asset.title.casefold(),
    SortKey.ORIGINAL_SIZE: lambda asset: asset.original_size,
}


@dataclass
class BulkResult:
    """Outcome of a bulk action: ids that succeeded and error messages by id."""
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def summary(self) -> str:
        if not self.failed:
            return f"{self.succeeded_count} succeeded"
        return f"{self.succeeded_count} succeeded, {self.failed_count} failed"


async def _run_bulk(ids: Iterable[str], action: Callable[[str], Awaitable[Any]]) -> BulkResult:
    """Run ``action`` for every id concurrently; one failure never cancels the others."""
    ids = list(ids)
    outcomes = await asyncio.gather(*(action(asset_id) for asset_id in ids), return_exceptions=True)

    result = BulkResult()
    for asset_id, outcome in zip(ids, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            result.failed[asset_id] = str(outcome)
        else:
            result.succeeded.append(asset_id)
    return result


class Library:
    """
    Client-side view over the caller's assets.

    ``assets`` keeps server order (newest first); ``visible`` applies the
    search text and a stable sort on top of it.
    """

    def __init__(self, client: StudioClient, kind: str | None = None) -> None:
        self.client = client
        self.kind = kind

        self.assets: list[Asset] = []
        self.search = ''
        self.sort_key = SortKey.CREATED_AT
        self.descending = True
        self.selected: set[str] = set()

    async def refresh(self) -> list[Asset]:
        self.assets = await self.client.list_assets(kind=self.kind)
        known = {asset.id for asset in self.assets}
        self.selected &= known
        return self.assets

    # SORTING & SEARCH

    def sort_by(self, key: SortKey | str) -> None:
        """Pick a sort key; picking the active key again flips the order."""
        key = SortKey(key)
        if key is self.sort_key:
            self.descending = not self.descending
        else:
            self.sort_key = key
            self.descending = True

    @property
    def visible(self) -> list[Asset]:
        needle = self.search.strip().casefold()
        assets = [a for a in self.assets if needle in a.title.casefold()] if needle else self.assets
        # sorted() is stable for reverse=True as well, so ties keep server order
        return sorted(assets, key=SORT_KEYS[self.sort_key], reverse=self.descending)

    def get(self, asset_id: str) -> Asset | None:
        return next((asset for asset in self.assets if asset.id == asset_id), None)

    # SELECTION

    def toggle(self, asset_id: str) -> None:
        if asset_id in self.selected:
            self.selected.discard(asset_id)
        else:
            self.selected.add(asset_id)

    def select_all(self) -> None:
        self.selected = {asset.id for asset in self.visible}

    def clear_selection(self) -> None:
        self.selected.clear()

    # BULK ACTIONS

    async def bulk_delete(self, ids: Iterable[str] | None = None) -> BulkResult:
        """
        Delete the selected assets concurrently.

        Only confirmed deletions leave ``assets`` and the selection.
        """
        ids = list(self.selected if ids is None else ids)
        result = await _run_bulk(ids, self.client.delete_asset)

        removed = set(result.succeeded)
        self.assets = [asset for asset in self.assets if asset.id not in removed]
        self.selected -= removed

        logger.info(f"Bulk delete: {result.summary}")
        return result

    async def bulk_share(
        self,
        output_format: str,
        caption: str = '',
        ids: Iterable[str] | None = None,
    ) -> BulkResult:
        """Create one social-share draft per selected asset."""
        ids = list(self.selected if ids is None else ids)

        async def share(asset_id: str) -> None:
            await self.client.upsert_draft(asset_id, output_format, caption=caption)

        result = await _run_bulk(ids, share)
        logger.info(f"Bulk share as {output_format}: {result.summary}")
        return result

    async def on_asset_saved(self, asset: Asset) -> None:
        """Hook for the editor: refresh so the new asset shows up first."""
        try:
            await self.refresh()
        except StudioError as e:
            logger.warning(f"Library refresh after save failed: {e}")
            self.assets.insert(0, asset)
