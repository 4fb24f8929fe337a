import logging
from typing import Any, Literal

import httpx
from httpx import Response, Timeout

from apps.studio.exceptions import APIError, NetworkError
from apps.studio.models import Asset, Draft, UploadCredentials

logger = logging.getLogger(__name__)

# Suppress verbose httpx debug logging
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

API_PREFIX = '/api/v1'
USER_AGENT = 'MediaDeckStudio/1.0'

SESSION_COOKIE = 'sessionid'
CSRF_COOKIE = 'csrftoken'
CSRF_HEADER = 'X-CSRFToken'

SENSITIVE_HEADERS = {CSRF_HEADER.lower(), 'authorization', 'cookie', 'set-cookie'}
SENSITIVE_KEYS = {'signature', 'api_key', 'password', 'token'}

HttpMethod = Literal['GET', 'POST', 'PUT', 'DELETE']


def _sanitize_for_logging(data: dict | None) -> dict[str, Any] | None:
    """Remove sensitive data from dict before logging."""
    if data is None:
        return None
    result: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in SENSITIVE_KEYS:
            result[key] = '[REDACTED]'
        elif isinstance(value, dict):
            result[key] = _sanitize_for_logging(value)
        else:
            result[key] = value
    return result


def _sanitize_headers(headers: dict | None) -> dict | None:
    """Remove sensitive headers before logging."""
    if headers is None:
        return None
    return {k: '[REDACTED]' if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def _handle_response_error(response: Response) -> None:
    """Check response status and raise APIError with the envelope's code and message."""
    if response.status_code < 400:
        return

    code = None
    try:
        body = response.json()
        error = body.get('error', {})
        if isinstance(error, dict):
            message = error.get('message') or response.text
            code = error.get('code')
        else:
            message = str(error) or response.text
    except Exception:
        message = response.text

    raise APIError(
        f"HTTP {response.status_code}: {message}",
        status_code=response.status_code,
        code=code,
    )


class StudioClient:
    """
    Async client for the MediaDeck API and direct provider uploads.

    API calls go through ``http_client`` (session cookie and CSRF header
    attached); chunk uploads go through ``provider_client`` so none of the
    session credentials ever reach the provider.
    """

    def __init__(
        self,
        base_url: str,
        session_id: str | None = None,
        csrf_token: str | None = None,
        timeout: float = 20.0,
        upload_timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            'accept': 'application/json',
            'user-agent': USER_AGENT,
        }
        cookies = {}
        if session_id:
            cookies[SESSION_COOKIE] = session_id
        if csrf_token:
            cookies[CSRF_COOKIE] = csrf_token
            headers[CSRF_HEADER] = csrf_token

        self.http_client = httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}{API_PREFIX}",
            headers=headers,
            cookies=cookies,
            timeout=Timeout(timeout=timeout),
            transport=transport,
        )
        self.provider_client = httpx.AsyncClient(
            headers={'user-agent': USER_AGENT},
            timeout=Timeout(timeout=upload_timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "StudioClient":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http_client.aclose()
        await self.provider_client.aclose()

    async def _request(
        self,
        method: HttpMethod,
        url: str,
        data: dict[str, Any] | None = None,
        query_params: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an API request and unwrap the response envelope.

        :param method: HTTP method (GET, POST, PUT, DELETE)
        :param url: Path relative to /api/v1
        :param data: JSON body data (for POST/PUT)
        :param query_params: Query parameters
        :return: The envelope's ``data`` (None when absent)
        :raises NetworkError: On connection/timeout errors
        :raises APIError: On HTTP errors or non-JSON responses
        """
        if query_params:
            query_params = {k: v for k, v in query_params.items() if v is not None}

        logger.debug(
            f'{method} request to {url} '
            f'data={_sanitize_for_logging(data)} query_params={query_params}'
        )

        try:
            request_kwargs: dict[str, Any] = {
                'url': url,
                'params': query_params,
            }
            if method in ('POST', 'PUT'):
                request_kwargs['json'] = data

            response = await self.http_client.request(method, **request_kwargs)
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request timed out: {e}")
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}")

        _handle_response_error(response)

        try:
            json_body = response.json()
        except Exception:
            raise APIError(
                f'Non-JSON response ({response.status_code}): {response.text}',
                status_code=response.status_code,
            )

        logger.debug(f'Response ({response.status_code}) from {url}')

        return json_body.get('data') if isinstance(json_body, dict) else json_body

    # ASSETS

    async def list_assets(self, kind: str | None = None) -> list[Asset]:
        data = await self._request('GET', '/assets/', query_params={'kind': kind})
        return [Asset.from_api(item) for item in data or []]

    async def create_asset(self, payload: dict[str, Any]) -> Asset:
        data = await self._request('POST', '/assets/', data=payload)
        return Asset.from_api(data)

    async def delete_asset(self, asset_id: str) -> None:
        await self._request('DELETE', '/assets/', query_params={'id': asset_id})

    async def save_copy(self, asset_id: str, **payload: Any) -> dict[str, Any]:
        return await self._request('POST', f'/assets/{asset_id}/save-copy/', data=payload)

    # DRAFTS & FAVORITES

    async def list_drafts(self) -> list[Draft]:
        data = await self._request('GET', '/drafts/')
        return [Draft.from_api(item) for item in data or []]

    async def upsert_draft(
        self,
        asset_id: str,
        output_format: str,
        caption: str = '',
        draft_id: str | None = None,
        thumbnail_public_id: str = '',
    ) -> Draft:
        payload = {
            'asset_id': asset_id,
            'output_format': output_format,
            'caption': caption,
            'thumbnail_public_id': thumbnail_public_id,
        }
        if draft_id:
            payload['id'] = draft_id
        data = await self._request('POST', '/drafts/', data=payload)
        return Draft.from_api(data)

    async def delete_draft(self, draft_id: str) -> None:
        await self._request('DELETE', '/drafts/', query_params={'id': draft_id})

    async def list_favorites(self) -> list[Asset]:
        data = await self._request('GET', '/favorites/')
        return [Asset.from_api(item['asset']) for item in data or []]

    async def add_favorite(self, asset_id: str) -> None:
        await self._request('POST', '/favorites/', data={'asset_id': asset_id})

    async def remove_favorite(self, asset_id: str) -> None:
        await self._request('DELETE', f'/favorites/{asset_id}/')

    # UPLOADS

    async def upload_credentials(self, kind: str = 'video') -> UploadCredentials:
        data = await self._request('GET', '/upload-credentials/', query_params={'kind': kind})
        return UploadCredentials.from_api(data)

    async def discard_upload(self, public_id: str, kind: str = 'video') -> None:
        await self._request('POST', '/uploads/discard/', data={'public_id': public_id, 'kind': kind})

    async def upload_chunk(
        self,
        credentials: UploadCredentials,
        chunk: bytes,
        start: int,
        total: int,
        upload_id: str,
        filename: str,
    ) -> dict[str, Any]:
        """
        Send one chunk of a chunked upload straight to the provider.

        :return: The provider's JSON response for this chunk
        """
        end = start + len(chunk) - 1
        headers = {
            'Content-Range': f'bytes {start}-{end}/{total}',
            'X-Unique-Upload-Id': upload_id,
        }

        logger.debug(f'Uploading bytes {start}-{end}/{total} headers={_sanitize_headers(headers)}')

        try:
            response = await self.provider_client.post(
                credentials.upload_url,
                data=credentials.form_fields(),
                files={'file': (filename, chunk, 'application/octet-stream')},
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise NetworkError(f"Upload timed out: {e}")
        except httpx.RequestError as e:
            raise NetworkError(f"Network error during upload: {e}")

        _handle_response_error(response)

        try:
            return response.json()
        except Exception:
            raise APIError(
                f'Non-JSON provider response ({response.status_code}): {response.text}',
                status_code=response.status_code,
            )

    # ANALYSIS

    async def analyze(self, tool: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request('POST', f'/ai/{tool}/', data=payload)

    async def social_formats(self) -> list[dict[str, Any]]:
        return await self._request('GET', '/social-formats/')
