"""Tests for the studio HTTP client."""
import httpx
import pytest
import respx
from httpx import Response

from apps.studio.client import StudioClient, _sanitize_for_logging, _sanitize_headers
from apps.studio.exceptions import APIError, NetworkError
from apps.studio.models import UploadCredentials


BASE_URL = 'http://testserver'
API_URL = f'{BASE_URL}/api/v1'
UPLOAD_URL = 'https://api.cloudinary.com/v1_1/demo/video/upload'

ASSET = {
    'id': '6f1c3a52-8a3e-4c0e-9a1c-5c2b0f9d1e11',
    'public_id': 'video-uploads/demo',
    'title': 'Demo',
    'kind': 'video',
    'original_size': 10485760,
    'compressed_size': 6291456,
    'duration': 30.0,
    'created_at': '2026-01-05T10:00:00Z',
}


def envelope(data=None, **extra):
    body = {'success': True, **extra}
    if data is not None:
        body['data'] = data
    return body


def make_credentials(**overrides) -> UploadCredentials:
    fields = {
        'signature': 'sig',
        'timestamp': 1700000000,
        'cloud_name': 'demo',
        'api_key': '123',
        'folder': 'video-uploads',
        'resource_type': 'video',
        'upload_url': UPLOAD_URL,
    }
    fields.update(overrides)
    return UploadCredentials(**fields)


class TestStudioClient:
    """Tests for the StudioClient class."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_assets_unwraps_envelope(self):
        route = respx.get(f'{API_URL}/assets/').mock(
            return_value=Response(200, json=envelope([ASSET]))
        )

        async with StudioClient(BASE_URL) as client:
            assets = await client.list_assets(kind='video')

        assert route.called
        assert route.calls.last.request.url.params['kind'] == 'video'
        assert assets[0].title == 'Demo'
        assert assets[0].created_at.year == 2026

    @pytest.mark.asyncio
    @respx.mock
    async def test_none_query_params_are_dropped(self):
        route = respx.get(f'{API_URL}/assets/').mock(return_value=Response(200, json=envelope([])))

        async with StudioClient(BASE_URL) as client:
            await client.list_assets()

        assert 'kind' not in route.calls.last.request.url.params

    @pytest.mark.asyncio
    @respx.mock
    async def test_session_and_csrf_are_sent(self):
        route = respx.post(f'{API_URL}/assets/').mock(
            return_value=Response(201, json=envelope(ASSET))
        )

        async with StudioClient(BASE_URL, session_id='sess-1', csrf_token='tok-1') as client:
            await client.create_asset({'title': 'Demo', 'public_id': 'video-uploads/demo'})

        request = route.calls.last.request
        assert request.headers['X-CSRFToken'] == 'tok-1'
        assert 'sessionid=sess-1' in request.headers['cookie']
        assert b'video-uploads/demo' in request.content

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_envelope_becomes_api_error(self):
        respx.get(f'{API_URL}/assets/').mock(return_value=Response(401, json={
            'success': False,
            'error': {'code': 'UNAUTHENTICATED', 'message': 'Authentication credentials were not provided.'},
        }))

        async with StudioClient(BASE_URL) as client:
            with pytest.raises(APIError) as exc_info:
                await client.list_assets()

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == 'UNAUTHENTICATED'
        assert 'Authentication credentials' in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_error(self):
        respx.get(f'{API_URL}/assets/').mock(return_value=Response(502, text='Bad Gateway'))

        async with StudioClient(BASE_URL) as client:
            with pytest.raises(APIError) as exc_info:
                await client.list_assets()

        assert exc_info.value.code is None
        assert 'Bad Gateway' in str(exc_info.value)

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error_becomes_network_error(self):
        respx.get(f'{API_URL}/drafts/').mock(side_effect=httpx.ConnectError('refused'))

        async with StudioClient(BASE_URL) as client:
            with pytest.raises(NetworkError):
                await client.list_drafts()

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_becomes_network_error(self):
        respx.get(f'{API_URL}/drafts/').mock(side_effect=httpx.ReadTimeout('slow'))

        async with StudioClient(BASE_URL) as client:
            with pytest.raises(NetworkError, match='timed out'):
                await client.list_drafts()

    @pytest.mark.asyncio
    @respx.mock
    async def test_delete_asset_uses_query_param(self):
        route = respx.delete(f'{API_URL}/assets/').mock(
            return_value=Response(200, json=envelope(message='Asset deleted successfully'))
        )

        async with StudioClient(BASE_URL) as client:
            await client.delete_asset(ASSET['id'])

        assert route.calls.last.request.url.params['id'] == ASSET['id']

    @pytest.mark.asyncio
    @respx.mock
    async def test_upsert_draft_only_sends_id_when_updating(self):
        draft = {'id': 'd-1', 'asset_id': ASSET['id'], 'output_format': 'X Post', 'caption': ''}
        route = respx.post(f'{API_URL}/drafts/').mock(return_value=Response(201, json=envelope(draft)))

        async with StudioClient(BASE_URL) as client:
            await client.upsert_draft(ASSET['id'], 'X Post')
            first = route.calls.last.request.content
            await client.upsert_draft(ASSET['id'], 'X Post', draft_id='d-1')
            second = route.calls.last.request.content

        assert b'"id"' not in first
        assert b'"id": "d-1"' in second or b'"id":"d-1"' in second

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_favorites_returns_assets(self):
        respx.get(f'{API_URL}/favorites/').mock(return_value=Response(200, json=envelope([
            {'asset_id': ASSET['id'], 'created_at': '2026-01-05T10:00:00Z', 'asset': ASSET},
        ])))

        async with StudioClient(BASE_URL) as client:
            favorites = await client.list_favorites()

        assert favorites[0].public_id == 'video-uploads/demo'

    @pytest.mark.asyncio
    @respx.mock
    async def test_upload_credentials(self):
        respx.get(f'{API_URL}/upload-credentials/').mock(return_value=Response(200, json=envelope({
            'signature': 'sig',
            'timestamp': 1700000000,
            'expires_at': 1700003600,
            'cloud_name': 'demo',
            'api_key': '123',
            'folder': 'image-uploads',
            'resource_type': 'image',
            'upload_url': UPLOAD_URL,
        })))

        async with StudioClient(BASE_URL) as client:
            credentials = await client.upload_credentials('image')

        assert credentials.form_fields() == {
            'api_key': '123',
            'timestamp': '1700000000',
            'signature': 'sig',
            'folder': 'image-uploads',
        }


    @pytest.mark.asyncio
    @respx.mock
    async def test_signed_uploader_tag_is_sent_with_chunks(self):
        respx.get(f'{API_URL}/upload-credentials/').mock(return_value=Response(200, json=envelope({
            'signature': 'sig',
            'timestamp': 1700000000,
            'cloud_name': 'demo',
            'api_key': '123',
            'folder': 'video-uploads',
            'resource_type': 'video',
            'upload_url': UPLOAD_URL,
            'tags': 'uploader-7',
        })))

        async with StudioClient(BASE_URL) as client:
            credentials = await client.upload_credentials('video')

        assert credentials.form_fields()['tags'] == 'uploader-7'


class TestUploadChunk:

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_chunk_headers_to_provider(self):
        route = respx.post(UPLOAD_URL).mock(return_value=Response(200, json={'done': False}))

        async with StudioClient(BASE_URL, session_id='sess-1', csrf_token='tok-1') as client:
            await client.upload_chunk(make_credentials(), b'abcd', start=4, total=10,
                                      upload_id='u-1', filename='clip.mp4')

        request = route.calls.last.request
        assert request.headers['Content-Range'] == 'bytes 4-7/10'
        assert request.headers['X-Unique-Upload-Id'] == 'u-1'
        assert b'clip.mp4' in request.content
        assert b'sig' in request.content

    @pytest.mark.asyncio
    @respx.mock
    async def test_session_never_reaches_provider(self):
        route = respx.post(UPLOAD_URL).mock(return_value=Response(200, json={}))

        async with StudioClient(BASE_URL, session_id='sess-1', csrf_token='tok-1') as client:
            await client.upload_chunk(make_credentials(), b'x', start=0, total=1,
                                      upload_id='u-1', filename='a.mp4')

        request = route.calls.last.request
        assert 'cookie' not in request.headers
        assert 'X-CSRFToken' not in request.headers

    @pytest.mark.asyncio
    @respx.mock
    async def test_provider_error(self):
        respx.post(UPLOAD_URL).mock(return_value=Response(400, json={'error': {'message': 'Invalid Signature'}}))

        async with StudioClient(BASE_URL) as client:
            with pytest.raises(APIError, match='Invalid Signature'):
                await client.upload_chunk(make_credentials(), b'x', start=0, total=1,
                                          upload_id='u-1', filename='a.mp4')


class TestSanitizers:

    def test_sensitive_keys_are_redacted(self):
        result = _sanitize_for_logging({'signature': 's', 'title': 'Demo', 'nested': {'api_key': 'k'}})

        assert result == {'signature': '[REDACTED]', 'title': 'Demo', 'nested': {'api_key': '[REDACTED]'}}

    def test_sensitive_headers_are_redacted(self):
        result = _sanitize_headers({'X-CSRFToken': 't', 'Content-Range': 'bytes 0-1/2'})

        assert result == {'X-CSRFToken': '[REDACTED]', 'Content-Range': 'bytes 0-1/2'}
