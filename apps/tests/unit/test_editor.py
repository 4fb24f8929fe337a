"""Tests for the editing and selection state machine."""
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from apps.media.enums import AnalysisTool
from apps.media.transformations import TransformMode
from apps.studio.editor import AnalysisStatus, Editor, EditorState, GenerationTimer
from apps.studio.exceptions import APIError, InvalidTransitionError, StudioError
from apps.studio.models import Asset


def make_asset(**overrides) -> Asset:
    fields = {
        'id': 'a-1',
        'public_id': 'image-uploads/beach',
        'title': 'Beach',
        'kind': 'image',
        'original_size': 2048,
        'compressed_size': 1024,
    }
    fields.update(overrides)
    return Asset(**fields)


def make_client():
    client = MagicMock()
    client.create_asset = AsyncMock(side_effect=lambda payload: make_asset(id='a-2', title=payload['title']))
    client.analyze = AsyncMock()
    return client


def make_editor(client=None, **kwargs):
    sleep = AsyncMock()
    editor = Editor(
        client or make_client(),
        'demo',
        timer=GenerationTimer(sleep=sleep),
        clock=lambda: datetime(2026, 1, 5, 14, 3, 9),
        **kwargs,
    )
    return editor, sleep


class TestSelection:

    def test_starts_home(self):
        editor, _ = make_editor()

        assert editor.state is EditorState.HOME
        assert not editor.can_generate

    def test_select_mode_from_string(self):
        editor, _ = make_editor()

        editor.select_mode('smart-crop')

        assert editor.mode is TransformMode.SMART_CROP
        assert editor.state is EditorState.MODE_SELECTED

    def test_unknown_mode_rejected(self):
        editor, _ = make_editor()

        with pytest.raises(ValueError):
            editor.select_mode('sharpen')

    def test_analysis_tools_are_modes_too(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())

        editor.select_mode('ocr')

        assert editor.mode is AnalysisTool.OCR
        assert not editor.can_generate

    def test_switching_blocked_while_generating(self):
        editor, _ = make_editor()
        editor.state = EditorState.GENERATING

        with pytest.raises(InvalidTransitionError):
            editor.select_mode('restore')
        with pytest.raises(InvalidTransitionError):
            editor.select_asset(make_asset(id='a-9'))


class TestPreview:

    def test_smart_crop_preview_url(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode(TransformMode.SMART_CROP)
        editor.aspect_ratio = '9:16'
        editor.gravity = 'auto:faces'

        url = editor.preview_url

        assert url.index('ar_9:16') < url.index('g_auto:faces')

    def test_fill_prompt_drives_background_replace(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode('replace-background')
        editor.prompt = 'ignored'
        editor.fill_prompt = 'sunset'

        assert editor.transformation_request.prompt == 'sunset'
        assert 'e_gen_background_replace:prompt_sunset' in editor.preview_url

    def test_no_asset_no_preview(self):
        editor, _ = make_editor()

        assert editor.preview_url is None


class TestGenerateAndSave:

    @pytest.mark.asyncio
    async def test_generate_waits_for_timer(self):
        editor, sleep = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode('restore')

        url = await editor.generate()

        sleep.assert_awaited_once_with(2.0)
        assert editor.state is EditorState.GENERATED
        assert 'e_gen_restore' in url
        assert editor.can_save

    @pytest.mark.asyncio
    async def test_generate_requires_asset(self):
        editor, sleep = make_editor()
        editor.select_mode('restore')

        with pytest.raises(InvalidTransitionError):
            await editor.generate()

        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_requires_generated(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode('restore')

        with pytest.raises(InvalidTransitionError):
            await editor.save()

    @pytest.mark.asyncio
    async def test_save_creates_asset_with_same_public_id(self):
        client = make_client()
        on_saved = AsyncMock()
        editor, _ = make_editor(client, on_saved=on_saved)
        editor.select_asset(make_asset())
        editor.select_mode('restore')
        await editor.generate()

        saved = await editor.save()

        payload = client.create_asset.await_args[0][0]
        assert payload['title'] == 'restore - 14:03:09'
        assert payload['public_id'] == 'image-uploads/beach'
        assert payload['kind'] == 'image'
        assert editor.state is EditorState.SAVED
        on_saved.assert_awaited_once_with(saved)

    @pytest.mark.asyncio
    async def test_discard_clears_prompts(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode('replace-object')
        editor.prompt = 'cat'
        editor.replacement = 'dog'
        await editor.generate()

        editor.discard()

        assert (editor.prompt, editor.replacement, editor.fill_prompt) == ('', '', '')
        assert editor.state is EditorState.MODE_SELECTED
        assert editor.last_outcome is EditorState.DISCARDED
        assert not editor.can_save

    @pytest.mark.asyncio
    async def test_selecting_mode_resets_generated(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())
        editor.select_mode('restore')
        await editor.generate()

        editor.select_mode('smart-crop')

        assert editor.state is EditorState.MODE_SELECTED
        assert not editor.can_save


class TestAnalysis:

    @pytest.mark.asyncio
    async def test_vision_needs_question(self):
        editor, _ = make_editor()
        editor.select_asset(make_asset())

        with pytest.raises(StudioError):
            await editor.analyze('vision', question='  ')

    @pytest.mark.asyncio
    async def test_vision_keeps_history(self):
        client = make_client()
        client.analyze.return_value = {'response': 'A beach.', 'is_placeholder': False}
        editor, _ = make_editor(client)
        editor.select_asset(make_asset())

        await editor.analyze('vision', question='What is this?')

        client.analyze.assert_awaited_once_with(
            'vision', {'public_id': 'image-uploads/beach', 'question': 'What is this?'}
        )
        assert editor.vision_history == [('user', 'What is this?'), ('assistant', 'A beach.')]
        assert editor.tools[AnalysisTool.VISION].status is AnalysisStatus.RESULT

    @pytest.mark.asyncio
    async def test_moderation_sends_kind(self):
        client = make_client()
        client.analyze.return_value = {'safe': True}
        editor, _ = make_editor(client)
        editor.select_asset(make_asset(kind='video', public_id='video-uploads/v'))

        await editor.analyze(AnalysisTool.MODERATE)

        assert client.analyze.await_args[0][1] == {'public_id': 'video-uploads/v', 'kind': 'video'}

    @pytest.mark.asyncio
    async def test_error_keeps_previous_result(self):
        client = make_client()
        client.analyze.side_effect = [{'tags': ['Beach']}, APIError('HTTP 502: down', status_code=502)]
        editor, _ = make_editor(client)
        editor.select_asset(make_asset())

        await editor.analyze('tags')
        with pytest.raises(APIError):
            await editor.analyze('tags')

        tool = editor.tools[AnalysisTool.TAGS]
        assert tool.status is AnalysisStatus.ERROR
        assert tool.result == {'tags': ['Beach']}
        assert 'down' in tool.error

    @pytest.mark.asyncio
    async def test_requires_asset(self):
        editor, _ = make_editor()

        with pytest.raises(InvalidTransitionError):
            await editor.analyze('ocr')
