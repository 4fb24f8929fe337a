"""Tests for the chunked upload flow."""
from unittest.mock import AsyncMock

import pytest
import respx
from httpx import Response

from apps.studio.client import StudioClient
from apps.studio.exceptions import (
    APIError,
    FileTooLargeError,
    InvalidTransitionError,
    StudioError,
    UploadCancelledError,
)
from apps.studio.upload import MAX_FILE_SIZE, UploadFlow, UploadState


BASE_URL = 'http://testserver'
API_URL = f'{BASE_URL}/api/v1'
UPLOAD_URL = 'https://api.cloudinary.com/v1_1/demo/video/upload'

CREDENTIALS = {
    'signature': 'sig',
    'timestamp': 1700000000,
    'expires_at': 1700003600,
    'cloud_name': 'demo',
    'api_key': '123',
    'folder': 'video-uploads',
    'resource_type': 'video',
    'upload_url': UPLOAD_URL,
}

PROVIDER_DONE = {
    'public_id': 'video-uploads/demo',
    'bytes': 6,
    'duration': 30.0,
    'format': 'mp4',
    'width': 1280,
    'height': 720,
}


def write_file(tmp_path, name='Demo.mp4', content=b'0123456789'):
    path = tmp_path / name
    path.write_bytes(content)
    return path


def sparse_file(tmp_path, size, name='big.bin'):
    path = tmp_path / name
    with path.open('wb') as fh:
        fh.truncate(size)
    return path


def mock_credentials():
    return respx.get(f'{API_URL}/upload-credentials/').mock(
        return_value=Response(200, json={'success': True, 'data': CREDENTIALS})
    )


def mock_chunks(*bodies):
    return respx.post(UPLOAD_URL).mock(side_effect=[Response(200, json=body) for body in bodies])


def asset_response(payload_title='Demo'):
    return Response(201, json={'success': True, 'message': 'Asset saved', 'data': {
        'id': 'a-1',
        'public_id': 'video-uploads/demo',
        'title': payload_title,
        'kind': 'video',
        'original_size': 10,
        'compressed_size': 6,
        'duration': 30.0,
        'created_at': '2026-01-05T10:00:00Z',
    }})


class TestSizeCeiling:

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_over_ceiling_makes_no_requests(self, tmp_path):
        path = sparse_file(tmp_path, MAX_FILE_SIZE['image'] + 1)
        mock_credentials()

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client, kind='image')
            with pytest.raises(FileTooLargeError):
                await flow.run(path)

        assert respx.calls.call_count == 0
        assert flow.state is UploadState.FAILED
        assert 'limit is 10 MB' in flow.error

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_video_ceiling_is_500_mb(self, tmp_path):
        path = sparse_file(tmp_path, MAX_FILE_SIZE['video'] + 1)

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client, kind='video')
            with pytest.raises(FileTooLargeError) as exc_info:
                await flow.run(path)

        assert exc_info.value.limit == 500 * 1024 * 1024
        assert respx.calls.call_count == 0

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_empty_file_fails(self, tmp_path):
        path = write_file(tmp_path, content=b'')

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            with pytest.raises(StudioError, match='empty'):
                await flow.run(path)

        assert flow.state is UploadState.FAILED
        assert respx.calls.call_count == 0


class TestChunkedTransfer:

    @pytest.mark.asyncio
    @respx.mock
    async def test_happy_path(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        chunks = mock_chunks({'done': False}, {'done': False}, PROVIDER_DONE)
        create = respx.post(f'{API_URL}/assets/').mock(return_value=asset_response())
        progress = []

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client, chunk_size=4, on_progress=progress.append)
            asset = await flow.run(path)

        assert flow.state is UploadState.COMPLETE
        assert flow.progress == 100
        assert progress == [40, 80, 100]
        assert asset.id == 'a-1'
        assert flow.public_id == 'video-uploads/demo'

        ranges = [call.request.headers['Content-Range'] for call in chunks.calls]
        assert ranges == ['bytes 0-3/10', 'bytes 4-7/10', 'bytes 8-9/10']
        upload_ids = {call.request.headers['X-Unique-Upload-Id'] for call in chunks.calls}
        assert len(upload_ids) == 1

        body = create.calls.last.request.content
        assert b'"title"' in body and b'Demo' in body
        assert b'"original_size"' in body

    @pytest.mark.asyncio
    @respx.mock
    async def test_persisted_payload(self, tmp_path):
        import json

        path = write_file(tmp_path, name='holiday clip.mp4')
        mock_credentials()
        mock_chunks(PROVIDER_DONE)
        create = respx.post(f'{API_URL}/assets/').mock(return_value=asset_response('holiday clip'))

        async with StudioClient(BASE_URL) as client:
            await UploadFlow(client).run(path, description='  Summer  ')

        payload = json.loads(create.calls.last.request.content)
        assert payload['title'] == 'holiday clip'
        assert payload['description'] == 'Summer'
        assert payload['original_size'] == 10
        assert payload['compressed_size'] == 6
        assert payload['duration'] == 30.0
        assert payload['public_id'] == 'video-uploads/demo'

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_public_id_fails(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        mock_chunks({'done': True})

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            with pytest.raises(StudioError, match='public id'):
                await flow.run(path)

        assert flow.state is UploadState.FAILED

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_malformed_credentials_fail_the_flow(self, tmp_path):
        path = write_file(tmp_path)
        respx.get(f'{API_URL}/upload-credentials/').mock(
            return_value=Response(200, json={'success': True, 'data': {'signature': 's'}})
        )
        chunks = respx.post(UPLOAD_URL).mock(return_value=Response(200, json=PROVIDER_DONE))

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            with pytest.raises(StudioError) as exc_info:
                await flow.run(path)

        assert isinstance(exc_info.value.__cause__, KeyError)
        assert flow.state is UploadState.FAILED
        assert flow.is_finished
        assert 'timestamp' in flow.error
        assert not chunks.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_flow_runs_once(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        mock_chunks(PROVIDER_DONE)
        respx.post(f'{API_URL}/assets/').mock(return_value=asset_response())

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            await flow.run(path)
            with pytest.raises(InvalidTransitionError):
                await flow.run(path)


class TestCancellation:

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_cancel_between_chunks(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        chunks = mock_chunks({'done': False}, {'done': False}, PROVIDER_DONE)
        create = respx.post(f'{API_URL}/assets/').mock(return_value=asset_response())

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client, chunk_size=4)
            flow.on_progress = lambda value: flow.cancel()
            with pytest.raises(UploadCancelledError):
                await flow.run(path)

        assert flow.state is UploadState.CANCELLED
        assert chunks.call_count == 1
        assert not create.called

    @pytest.mark.asyncio
    @respx.mock(assert_all_called=False)
    async def test_cancel_before_start(self, tmp_path):
        path = write_file(tmp_path)
        credentials = mock_credentials()

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            flow.cancel()
            with pytest.raises(UploadCancelledError):
                await flow.run(path)

        assert flow.state is UploadState.CANCELLED
        assert not credentials.called


class TestCompensation:

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_persist_discards_upload(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        mock_chunks(PROVIDER_DONE)
        respx.post(f'{API_URL}/assets/').mock(return_value=Response(500, json={
            'success': False,
            'error': {'code': 'INTERNAL_SERVER_ERROR', 'message': 'An unexpected error occurred.'},
        }))
        discard = respx.post(f'{API_URL}/uploads/discard/').mock(
            return_value=Response(202, json={'success': True, 'data': {'job_id': 'j-1'}})
        )

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            with pytest.raises(APIError):
                await flow.run(path)

        assert flow.state is UploadState.FAILED
        assert 'unexpected error' in flow.error
        assert discard.called
        assert b'video-uploads/demo' in discard.calls.last.request.content

    @pytest.mark.asyncio
    @respx.mock
    async def test_discard_failure_keeps_original_error(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        mock_chunks(PROVIDER_DONE)
        respx.post(f'{API_URL}/assets/').mock(return_value=Response(400, json={
            'success': False,
            'error': {'code': 'VALIDATION_ERROR', 'message': 'title: This field may not be blank.'},
        }))
        respx.post(f'{API_URL}/uploads/discard/').mock(return_value=Response(503, text='down'))

        async with StudioClient(BASE_URL) as client:
            flow = UploadFlow(client)
            with pytest.raises(APIError) as exc_info:
                await flow.run(path)

        assert exc_info.value.code == 'VALIDATION_ERROR'
        assert 'title' in flow.error

    @pytest.mark.asyncio
    @respx.mock
    async def test_unexpected_persist_error_fails_and_discards(self, tmp_path):
        path = write_file(tmp_path)
        mock_credentials()
        mock_chunks(PROVIDER_DONE)
        discard = respx.post(f'{API_URL}/uploads/discard/').mock(
            return_value=Response(202, json={'success': True, 'data': {'job_id': 'j-1'}})
        )

        async with StudioClient(BASE_URL) as client:
            client.create_asset = AsyncMock(side_effect=RuntimeError('client closed'))
            flow = UploadFlow(client)
            with pytest.raises(StudioError, match='client closed'):
                await flow.run(path)

        assert flow.state is UploadState.FAILED
        assert flow.error == 'Upload failed: RuntimeError: client closed'
        assert discard.called
