"""Client-side records parsed from API responses."""
from dataclasses import dataclass
from datetime import datetime
from typing import Any


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


@dataclass
class Asset:
    id: str
    public_id: str
    title: str
    kind: str = 'video'
    description: str = ''
    original_size: int = 0
    compressed_size: int = 0
    duration: float = 0
    format: str = ''
    width: int | None = None
    height: int | None = None
    created_at: datetime | None = None
    url: str = ''
    thumbnail_url: str = ''

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Asset":
        return cls(
            id=str(data['id']),
            public_id=data['public_id'],
            title=data['title'],
            kind=data.get('kind', 'video'),
            description=data.get('description') or '',
            original_size=int(data.get('original_size') or 0),
            compressed_size=int(data.get('compressed_size') or 0),
            duration=float(data.get('duration') or 0),
            format=data.get('format') or '',
            width=data.get('width'),
            height=data.get('height'),
            created_at=_parse_datetime(data.get('created_at')),
            url=data.get('url') or '',
            thumbnail_url=data.get('thumbnail_url') or '',
        )


@dataclass
class Draft:
    id: str
    asset_id: str
    output_format: str
    caption: str = ''
    thumbnail_public_id: str = ''
    updated_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Draft":
        return cls(
            id=str(data['id']),
            asset_id=str(data['asset_id']),
            output_format=data['output_format'],
            caption=data.get('caption') or '',
            thumbnail_public_id=data.get('thumbnail_public_id') or '',
            updated_at=_parse_datetime(data.get('updated_at')),
        )


@dataclass
class UploadCredentials:
    signature: str
    timestamp: int
    cloud_name: str
    api_key: str
    folder: str
    resource_type: str
    upload_url: str
    expires_at: int | None = None
    upload_preset: str | None = None
    tags: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "UploadCredentials":
        return cls(
            signature=data['signature'],
            timestamp=int(data['timestamp']),
            cloud_name=data['cloud_name'],
            api_key=data['api_key'],
            folder=data['folder'],
            resource_type=data['resource_type'],
            upload_url=data['upload_url'],
            expires_at=data.get('expires_at'),
            upload_preset=data.get('upload_preset'),
            tags=data.get('tags'),
        )

    def form_fields(self) -> dict[str, str]:
        """Signed fields sent with every chunk."""
        fields = {
            'api_key': self.api_key,
            'timestamp': str(self.timestamp),
            'signature': self.signature,
            'folder': self.folder,
        }
        if self.upload_preset:
            fields['upload_preset'] = self.upload_preset
        if self.tags:
            fields['tags'] = self.tags
        return fields
