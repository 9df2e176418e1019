"""getCurrentUser / saveUser over HTTP."""

from httpx import AsyncClient

ME = "/api/v1/users/me"


async def test_anonymous_current_user_is_null(client: AsyncClient) -> None:
    response = await client.get(ME)
    assert response.status_code == 200
    assert response.json() is None


async def test_invalid_token_is_treated_as_anonymous(client: AsyncClient) -> None:
    response = await client.get(ME, headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 200
    assert response.json() is None


async def test_save_user_requires_identity(client: AsyncClient) -> None:
    response = await client.post(ME)
    assert response.status_code == 401
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_save_user_is_idempotent(client: AsyncClient, auth_headers) -> None:
    headers = auth_headers("idp|frank", "Frank")
    assert (await client.get(ME, headers=headers)).json() is None

    first = await client.post(ME, headers=headers)
    second = await client.post(ME, headers=headers)
    assert first.status_code == second.status_code == 200
    assert first.json() == second.json()
    assert first.json()["token_identifier"] == "idp|frank"
    assert (await client.get(ME, headers=headers)).json()["id"] == first.json()["id"]


async def test_save_user_refreshes_profile(client: AsyncClient, auth_headers) -> None:
    first = await client.post(ME, headers=auth_headers("idp|gina", "Gina"))
    renamed = await client.post(ME, headers=auth_headers("idp|gina", "Gina R.", "https://img.example/g.png"))
    assert renamed.json()["id"] == first.json()["id"]
    assert renamed.json()["name"] == "Gina R."
    assert renamed.json()["picture_url"] == "https://img.example/g.png"
