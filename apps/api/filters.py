# apps/api/filters.py

"""
Query-string filters for list endpoints.
"""

import django_filters

from apps.media.enums import AssetKind
from apps.media.models import Asset


class AssetFilter(django_filters.FilterSet):
    """
    Filters for GET /assets/.

        ?kind=video|image
        ?search=<text>   case-insensitive match on title
    """
    kind = django_filters.ChoiceFilter(choices=AssetKind.choices)
    search = django_filters.CharFilter(field_name='title', lookup_expr='icontains')

    class Meta:
        model = Asset
        fields = ['kind', 'search']
