"""
HTTP behaviour when the storage layer fails.
"""

import pytest
from fastapi.testclient import TestClient

from recipe_service.db_handlers import RecipeRepository, UserRepository
from recipe_service.exceptions import StorageError

FAILURE = "connection reset by peer"


class BrokenUserRepository(UserRepository):
    async def get_by_id(self, user_id):
        raise StorageError(FAILURE)

    async def update_field(self, user_id, new_name):
        raise StorageError(FAILURE)

    async def delete(self, user_id):
        raise StorageError(FAILURE)

    async def create(self, username, email, password):
        raise StorageError(FAILURE)

    async def get_all(self):
        raise StorageError(FAILURE)


class BrokenRecipeRepository(RecipeRepository):
    async def get_by_id(self, recipe_id):
        raise StorageError(FAILURE)

    async def update_field(self, recipe_id, new_title):
        raise StorageError(FAILURE)

    async def delete(self, recipe_id):
        raise StorageError(FAILURE)

    async def create(
        self, title, category, recipe_text, publisher_username, published_date=None
    ):
        raise StorageError(FAILURE)

    async def list_recipes(self, filter="", sort="", page=1, limit=12):
        raise StorageError(FAILURE)


@pytest.fixture
def make_broken_client(make_app):
    def _make(**overrides) -> TestClient:
        return TestClient(
            make_app(
                user_repository=BrokenUserRepository(),
                recipe_repository=BrokenRecipeRepository(),
                **overrides,
            )
        )

    return _make


@pytest.fixture
def broken_client(make_broken_client):
    return make_broken_client()


def test_register_failure_hides_storage_message(broken_client):
    response = broken_client.post(
        "/api/register",
        json={"username": "alice", "email": "alice@example.com", "password": "pw"},
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Error creating user"


def test_create_recipe_failure_hides_storage_message(broken_client):
    response = broken_client.post(
        "/api/recipes",
        json={
            "title": "Soup",
            "category": "dinner",
            "recipeText": "Boil.",
            "publisherUsername": "alice",
        },
    )

    assert response.status_code == 500
    assert response.json()["detail"] == "Error creating recipe"


@pytest.mark.parametrize(
    "method, path, body",
    [
        ("GET", "/api/users/1", None),
        ("PUT", "/api/users/1", {"newName": "alicia"}),
        ("DELETE", "/api/users/1", None),
        ("GET", "/api/users", None),
        ("GET", "/api/recipes/1", None),
        ("PUT", "/api/recipes/1", {"newTitle": "Stew"}),
        ("DELETE", "/api/recipes/1", None),
        ("GET", "/api/recipes", None),
    ],
)
def test_storage_failure_is_500_with_message(broken_client, method, path, body):
    response = broken_client.request(method, path, json=body)

    assert response.status_code == 500
    assert response.json()["detail"] == FAILURE


def test_login_storage_failure_counts_as_no_match(broken_client):
    response = broken_client.post(
        "/api/login", json={"username": "alice", "password": "pw"}
    )

    assert response.status_code == 200
    assert response.json() == {"status": "success", "message": ""}


def test_login_storage_failure_is_500_when_mismatch_rejected(make_broken_client):
    client = make_broken_client(login_reject_mismatch=True)

    response = client.post("/api/login", json={"username": "alice", "password": "pw"})

    assert response.status_code == 500
    assert response.json()["detail"] == FAILURE
