from rest_framework.request import Request


def client_ip(request: Request) -> str:
    """First X-Forwarded-For hop, falling back to the socket address."""
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def user_agent(request: Request) -> str:
    return request.META.get("HTTP_USER_AGENT", "")[:500]
