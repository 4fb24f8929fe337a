"""
Custom throttling classes for API rate limiting.

Every endpoint requires a caller, so all scopes are keyed by user id.
Rates live in REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'].
"""

from rest_framework.throttling import SimpleRateThrottle


class UserScopedRateThrottle(SimpleRateThrottle):
    """Base class: one bucket per authenticated user and scope."""

    def get_cache_key(self, request, view):
        if not (request.user and request.user.is_authenticated):
            # Unauthenticated requests are rejected before throttling matters
            return None

        return self.cache_format % {
            'scope': self.scope,
            'ident': request.user.pk
        }


class BurstRateThrottle(UserScopedRateThrottle):
    """
    General short-term limit for CRUD endpoints.
    """
    scope = 'burst'


class UploadRateThrottle(UserScopedRateThrottle):
    """
    Throttle for upload credential signing and discards.

    More restrictive since each credential allows a provider upload.
    """
    scope = 'uploads'


class AnalysisRateThrottle(UserScopedRateThrottle):
    """
    Throttle for the /ai/ endpoints, which call paid add-ons.
    """
    scope = 'analysis'
