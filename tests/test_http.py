from http import HTTPStatus

from sample_app import db, Author, Book


def test_store_creates_an_instance(client) -> None:
    response = client.post("/api/authors", json={"name": "A"})
    assert response.status_code == HTTPStatus.CREATED
    assert response.get_json() == {"created": True, "data": {"id": 1, "name": "A"}}
    assert [author.name for author in Author.all()] == ["A"]


def test_store_with_empty_body_is_a_validation_error(client) -> None:
    response = client.post("/api/authors", json={})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    errors = response.get_json()["errors"]
    assert errors == [
        {
            "title": "Validation Error: The given data was invalid.",
            "detail": "The name field is required.",
            "code": "422",
            "source": {"parameter": "name"},
        }
    ]
    assert Author.all() == []


def test_store_without_body_is_a_validation_error(client) -> None:
    response = client.post("/api/authors")
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert db.session.query(Author).count() == 0


def test_store_with_invalid_json_payload(client) -> None:
    response = client.post("/api/authors", data="[1, 2]", content_type="application/json")
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert db.session.query(Author).count() == 0


def test_store_accepts_form_data(client) -> None:
    response = client.post("/api/authors", data={"name": "Form"})
    assert response.status_code == HTTPStatus.CREATED
    assert response.get_json()["data"]["name"] == "Form"


def test_store_ignores_guarded_attributes_and_runs_the_hooks(client, books) -> None:
    payload = {"title": "  Children of Dune ", "author_id": books[0].author_id, "isbn": "123", "id": 99}
    response = client.post("/api/books", json=payload, headers={"X-User": "writer"})
    assert response.status_code == HTTPStatus.CREATED
    data = response.get_json()["data"]
    assert data == {"id": 4, "title": "Children of Dune", "published": False}
    book = db.session.get(Book, 4)
    assert book.isbn == "unknown"
    assert db.session.get(Book, 99) is None


def test_store_is_authorized_before_validation(client, books) -> None:
    response = client.post("/api/books", json={})
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert db.session.query(Book).count() == 3


def test_index_returns_the_collection(client, books) -> None:
    response = client.get("/api/authors")
    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "data": [
            {"id": 1, "name": "Frank Herbert"},
            {"id": 2, "name": "Ursula K. Le Guin"},
        ]
    }


def test_index_includes_requested_relationships(client, books) -> None:
    response = client.get("/api/authors?include=books")
    data = response.get_json()["data"]
    assert data[0]["books"] == {
        "data": [
            {"id": 1, "title": "Dune", "published": True},
            {"id": 2, "title": "Dune Messiah", "published": False},
        ]
    }
    assert data[1]["books"]["data"][0]["title"] == "The Dispossessed"


def test_index_includes_nested_relationships(client, books) -> None:
    response = client.get("/api/books?include=author.books")
    first = response.get_json()["data"][0]
    author = first["author"]["data"]
    assert author["name"] == "Frank Herbert"
    assert [book["title"] for book in author["books"]["data"]] == ["Dune", "Dune Messiah"]
    assert "author" not in author["books"]["data"][0]


def test_index_pagination(client, books) -> None:
    response = client.get("/api/books?page[offset]=1&page[limit]=1")
    result = response.get_json()
    assert [book["title"] for book in result["data"]] == ["Dune Messiah"]
    assert result["meta"]["pagination"] == {"total": 3, "count": 1, "per_page": 1, "current_page": 2, "total_pages": 3}


def test_index_page_number_and_size(client, books) -> None:
    response = client.get("/api/books?page[number]=2&page[size]=2")
    result = response.get_json()
    assert [book["title"] for book in result["data"]] == ["The Dispossessed"]
    assert result["meta"]["pagination"]["current_page"] == 2
    assert result["meta"]["pagination"]["total_pages"] == 2


def test_index_without_page_arguments_has_no_meta(client, books) -> None:
    assert "meta" not in client.get("/api/books").get_json()


def test_show_uses_the_show_includes(client, books) -> None:
    response = client.get("/api/books/1")
    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {
        "data": {"id": 1, "title": "Dune", "published": True, "author": {"data": {"id": 1, "name": "Frank Herbert"}}}
    }


def test_show_missing_instance(client, books) -> None:
    response = client.get("/api/authors/999")
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["errors"][0]["code"] == "404"


def test_show_invalid_id_is_not_found(client, books) -> None:
    assert client.get("/api/authors/abc").status_code == HTTPStatus.NOT_FOUND


def test_update_changes_the_instance(client, books) -> None:
    response = client.put("/api/authors/1", json={"name": "F. Herbert"})
    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {"data": {"id": 1, "name": "F. Herbert"}}
    assert db.session.get(Author, 1).name == "F. Herbert"


def test_patch_updates_the_instance(client, books) -> None:
    response = client.patch("/api/authors/2", json={"name": "U. K. Le Guin"})
    assert response.status_code == HTTPStatus.OK
    assert db.session.get(Author, 2).name == "U. K. Le Guin"


def test_update_missing_instance_is_not_found(client, books) -> None:
    response = client.put("/api/authors/999", json={"name": "B"})
    assert response.status_code == HTTPStatus.NOT_FOUND
    assert db.session.query(Author).filter_by(name="B").count() == 0


def test_update_validation_error(client, books) -> None:
    response = client.put("/api/authors/1", json={"name": "x" * 51})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.get_json()["errors"][0]["source"] == {"parameter": "name"}
    assert db.session.get(Author, 1).name == "Frank Herbert"


def test_update_with_null_value_is_a_validation_error(client, books) -> None:
    response = client.put("/api/authors/1", json={"name": None})
    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.get_json()["errors"][0]["source"] == {"parameter": "name"}
    assert db.session.get(Author, 1).name == "Frank Herbert"


def test_update_is_authorized_by_the_policy(client, books) -> None:
    response = client.put("/api/books/1", json={"title": "Dune!"}, headers={"X-User": "writer"})
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert db.session.get(Book, 1).title == "Dune"

    response = client.put("/api/books/1", json={"title": "Dune!"}, headers={"X-User": "editor"})
    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["data"]["title"] == "Dune!"


def test_destroy_deletes_the_instance(client, books) -> None:
    response = client.delete("/api/authors/2")
    assert response.status_code == HTTPStatus.OK
    assert response.get_json() == {"deleted": True}
    assert db.session.get(Author, 2) is None


def test_destroy_is_authorized_by_the_policy(client, books) -> None:
    response = client.delete("/api/books/1", headers={"X-User": "editor"})
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert db.session.get(Book, 1) is not None

    response = client.delete("/api/books/1", headers={"X-User": "admin"})
    assert response.status_code == HTTPStatus.OK
    assert db.session.get(Book, 1) is None


def test_destroy_missing_instance_is_not_found(client, books) -> None:
    response = client.delete("/api/books/999", headers={"X-User": "editor"})
    assert response.status_code == HTTPStatus.NOT_FOUND


def test_actions_outside_the_allowed_methods_are_forbidden(client, books) -> None:
    assert client.get("/api/library/books").status_code == HTTPStatus.OK
    assert client.get("/api/library/books/1").status_code == HTTPStatus.OK

    response = client.delete("/api/library/books/1")
    assert response.status_code == HTTPStatus.FORBIDDEN
    assert db.session.get(Book, 1) is not None
    assert client.post("/api/library/books", json={"title": "x"}).status_code == HTTPStatus.FORBIDDEN


def test_post_to_an_instance_is_not_allowed(client, books) -> None:
    assert client.post("/api/authors/1", json={"name": "x"}).status_code == HTTPStatus.METHOD_NOT_ALLOWED
