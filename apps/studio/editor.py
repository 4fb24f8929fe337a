"""
Editing and selection state for the studio.

    home -> mode_selected -> generating -> generated -> saved | discarded

Edits are delivery-time URL transformations, so "generating" does not wait
on any backend job. It is a UI-only timer that drives the loading state
while the provider renders the preview URL on first fetch.

Analysis tools run their own idle -> analyzing -> result | error cycle per
tool, independent of the generate/save cycle.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from apps.media.enums import AnalysisTool
from apps.media.transformations import (
    AspectRatio,
    Gravity,
    TransformMode,
    TransformationRequest,
    build_delivery_url,
)
from apps.studio.client import StudioClient
from apps.studio.exceptions import InvalidTransitionError, StudioError
from apps.studio.models import Asset

logger = logging.getLogger(__name__)

DEFAULT_GENERATION_DELAY = 2.0

Sleep = Callable[[float], Awaitable[Any]]


class EditorState(str, Enum):
    HOME = 'home'
    MODE_SELECTED = 'mode_selected'
    GENERATING = 'generating'
    GENERATED = 'generated'
    SAVED = 'saved'
    DISCARDED = 'discarded'


class AnalysisStatus(str, Enum):
    IDLE = 'idle'
    ANALYZING = 'analyzing'
    RESULT = 'result'
    ERROR = 'error'


class GenerationTimer:
    """Fixed client-side delay standing in for generation."""

    def __init__(self, delay: float = DEFAULT_GENERATION_DELAY, sleep: Sleep = asyncio.sleep) -> None:
        self.delay = delay
        self._sleep = sleep

    async def wait(self) -> None:
        await self._sleep(self.delay)


@dataclass
class ToolState:
    status: AnalysisStatus = AnalysisStatus.IDLE
    result: dict[str, Any] | None = None
    error: str | None = None


class Editor:
    """
    Selection, tool parameters and generate/save gating for one studio view.
    """

    def __init__(
        self,
        client: StudioClient,
        cloud_name: str,
        timer: GenerationTimer | None = None,
        on_saved: Callable[[Asset], Awaitable[Any]] | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.client = client
        self.cloud_name = cloud_name
        self.timer = timer or GenerationTimer()
        self.on_saved = on_saved
        self._clock = clock

        self.state = EditorState.HOME
        self.asset: Asset | None = None
        self.mode: TransformMode | AnalysisTool | None = None
        self.last_outcome: EditorState | None = None

        self.prompt = ''
        self.replacement = ''
        self.fill_prompt = ''
        self.aspect_ratio: AspectRatio = AspectRatio.SQUARE
        self.gravity: Gravity = Gravity.AUTO
        self.quality: int | None = None

        self.tools: dict[AnalysisTool, ToolState] = {tool: ToolState() for tool in AnalysisTool}
        self.vision_history: list[tuple[str, str]] = []

    # SELECTION

    def select_asset(self, asset: Asset) -> None:
        """Switching asset drops any generated preview."""
        if self.state is EditorState.GENERATING:
            raise InvalidTransitionError(self.state.value, 'switch assets')
        self.asset = asset
        self.state = EditorState.MODE_SELECTED if self.mode is not None else EditorState.HOME

    def select_mode(self, mode: TransformMode | AnalysisTool | str) -> None:
        """Select a tool, resetting the generated flag and that tool's results."""
        if self.state is EditorState.GENERATING:
            raise InvalidTransitionError(self.state.value, 'switch tools')

        self.mode = _coerce_mode(mode)
        self.state = EditorState.MODE_SELECTED
        if isinstance(self.mode, AnalysisTool):
            self.tools[self.mode] = ToolState()
            if self.mode is AnalysisTool.VISION:
                self.vision_history.clear()

    def go_home(self) -> None:
        if self.state is EditorState.GENERATING:
            raise InvalidTransitionError(self.state.value, 'leave the editor')
        self.mode = None
        self.state = EditorState.HOME

    # GENERATE / DISCARD / SAVE

    @property
    def can_generate(self) -> bool:
        return (
            self.asset is not None
            and isinstance(self.mode, TransformMode)
            and self.state is not EditorState.GENERATING
        )

    @property
    def can_save(self) -> bool:
        return self.asset is not None and self.state is EditorState.GENERATED

    @property
    def transformation_request(self) -> TransformationRequest | None:
        if not isinstance(self.mode, TransformMode):
            return None

        prompt = self.fill_prompt if self.mode is TransformMode.REPLACE_BACKGROUND else self.prompt
        return TransformationRequest(
            mode=self.mode,
            prompt=prompt.strip(),
            replacement=self.replacement.strip(),
            aspect_ratio=self.aspect_ratio,
            gravity=self.gravity,
            quality=self.quality,
        )

    @property
    def preview_url(self) -> str | None:
        """Delivery URL with the current edit applied."""
        if self.asset is None:
            return None
        return build_delivery_url(
            self.cloud_name,
            self.asset.public_id,
            request=self.transformation_request,
            kind=self.asset.kind,
        )

    async def generate(self) -> str:
        if not self.can_generate:
            raise InvalidTransitionError(self.state.value, 'generate')

        self.state = EditorState.GENERATING
        try:
            await self.timer.wait()
        except asyncio.CancelledError:
            self.state = EditorState.MODE_SELECTED
            raise

        self.state = EditorState.GENERATED
        return self.preview_url

    def discard(self) -> None:
        if self.state is EditorState.GENERATING:
            raise InvalidTransitionError(self.state.value, 'discard')

        self.prompt = ''
        self.replacement = ''
        self.fill_prompt = ''
        self.last_outcome = EditorState.DISCARDED
        self.state = EditorState.MODE_SELECTED if self.mode is not None else EditorState.HOME

    async def save(self) -> Asset:
        """
        Record the edit as a new asset pointing at the same stored file.
        """
        if not self.can_save:
            raise InvalidTransitionError(self.state.value, 'save')

        source = self.asset
        payload = {
            'title': f"{self.mode.value} - {self._clock().strftime('%H:%M:%S')}",
            'public_id': source.public_id,
            'kind': source.kind,
            'original_size': source.original_size,
            'compressed_size': source.compressed_size,
            'duration': source.duration,
        }

        saved = await self.client.create_asset(payload)
        self.state = EditorState.SAVED
        self.last_outcome = EditorState.SAVED
        logger.info(f"Saved {self.mode.value} edit of {source.public_id} as {saved.id}")

        if self.on_saved is not None:
            await self.on_saved(saved)

        return saved

    # ANALYSIS

    async def analyze(self, tool: AnalysisTool | str, question: str | None = None) -> dict[str, Any]:
        """
        Run one analysis tool on the selected asset.

        Errors are kept on the tool's state and leave earlier results intact.
        """
        tool = AnalysisTool(tool)
        if self.asset is None:
            raise InvalidTransitionError(self.state.value, f'run {tool.value} without an asset')

        tool_state = self.tools[tool]
        if tool_state.status is AnalysisStatus.ANALYZING:
            raise InvalidTransitionError(tool_state.status.value, f'run {tool.value}')

        payload: dict[str, Any] = {'public_id': self.asset.public_id}
        if tool is AnalysisTool.VISION:
            if not (question and question.strip()):
                raise StudioError("A question is required.")
            payload['question'] = question.strip()
        elif tool is AnalysisTool.MODERATE:
            payload['kind'] = self.asset.kind

        tool_state.status = AnalysisStatus.ANALYZING
        tool_state.error = None

        try:
            result = await self.client.analyze(tool.value, payload)
        except StudioError as e:
            tool_state.status = AnalysisStatus.ERROR
            tool_state.error = str(e)
            logger.warning(f"{tool.value} failed for {self.asset.public_id}: {e}")
            raise

        tool_state.status = AnalysisStatus.RESULT
        tool_state.result = result
        if tool is AnalysisTool.VISION:
            self.vision_history.append(('user', payload['question']))
            self.vision_history.append(('assistant', result.get('response', '')))

        return result


def _coerce_mode(mode: TransformMode | AnalysisTool | str) -> TransformMode | AnalysisTool:
    if isinstance(mode, (TransformMode, AnalysisTool)):
        return mode
    try:
        return TransformMode(mode)
    except ValueError:
        return AnalysisTool(mode)
