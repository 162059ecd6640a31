from ..errors import DashboardError
from ..schemas import Credentials, Registration
from ..services.fetcher import ApiClient


def login(client: ApiClient, credentials: Credentials) -> str:
    data = client.post(
        "/api/auth/login",
        resource="login",
        json=credentials.model_dump(by_alias=True),
        authenticated=False,
    )
    token = data.get("token") if isinstance(data, dict) else None
    if not token:
        raise DashboardError("Login failed: no token in response")
    return token


def register(client: ApiClient, registration: Registration) -> None:
    client.post(
        "/api/auth/register",
        resource="registration",
        json=registration.model_dump(by_alias=True),
        authenticated=False,
    )
