import structlog
from django.http import JsonResponse

from accounts.models import User

logger = structlog.get_logger()

USER_HEADER = "X-User-NAME"


# Identification only: the surrounding system owns real authentication
class MockLoginUserMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if request.path.startswith("/api"):
            username = request.headers.get(USER_HEADER)
            if username:
                try:
                    request.user = User.objects.get(username=username, is_active=True)
                except User.DoesNotExist:
                    logger.info("mock_login_rejected", username=username)
                    return JsonResponse(
                        {"detail": "User not found or invalid credentials.", "code": "UNAUTHORIZED"},
                        status=401,
                    )
                logger.debug("mock_login", username=username)
        return self.get_response(request)
