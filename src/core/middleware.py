"""Core middleware."""
from django.conf import settings
from django.utils.cache import patch_cache_control


class NoStoreAPIMiddleware:
    """Keep admin and incentive payloads out of browser and proxy caches.

    Paths are matched against ``NO_STORE_PATH_PREFIXES``.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.prefixes = tuple(getattr(settings, "NO_STORE_PATH_PREFIXES", ("/api/",)))

    def __call__(self, request):
        response = self.get_response(request)
        if not request.path.startswith(self.prefixes):
            return response

        patch_cache_control(
            response,
            private=True,
            no_cache=True,
            no_store=True,
            must_revalidate=True,
            max_age=0,
        )
        response["Pragma"] = "no-cache"
        response["Expires"] = "0"
        return response
