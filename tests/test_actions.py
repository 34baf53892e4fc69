from conftest import multipart_parts


def _form(**overrides):
    data = {
        "title": "Salzkartoffeln",
        "description": "Einfach",
        "duration": " 25 ",
        "instructions": "Kochen.",
        "ingredients[0][name]": "Salt",
        "ingredients[0][quantity]": "1 tsp",
        "ingredients[1][name]": "Kartoffeln",
        "ingredients[1][quantity]": "1 kg",
    }
    data.update(overrides)
    return data


def test_action_forwards_and_returns_result(client, recipe_api):
    response = client.post("/actions/recipes", data=_form())
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"id": 42, "title": "Salzkartoffeln"}, "error": None}

    parts = multipart_parts(recipe_api.posts[0])
    assert [(name, value) for name, _, value in parts if name.startswith("ingredients")] == [
        ("ingredients[0][name]", b"Salt"),
        ("ingredients[0][quantity]", b"1 tsp"),
        ("ingredients[1][name]", b"Kartoffeln"),
        ("ingredients[1][quantity]", b"1 kg"),
    ]
    assert ("duration", None, b"25") in parts


def test_action_reports_api_failure(client, recipe_api):
    recipe_api.create_status = 502
    response = client.post("/actions/recipes", data=_form())
    assert response.status_code == 200
    assert response.json() == {"success": False, "data": None, "error": "Fehler beim Speichern"}


def test_action_rejects_oversized_image(client, recipe_api, monkeypatch):
    from essenza_web.app.core import config

    monkeypatch.setattr(config.get_settings(), "recipe_image_max_bytes", 4)
    files = {"image": ("teller.png", b"12345", "image/png")}
    response = client.post("/actions/recipes", data=_form(), files=files)
    assert response.json()["error"] == "Bild darf maximal 5MB groß sein"
    assert recipe_api.posts == []


def test_action_requires_fields(client, recipe_api):
    data = _form()
    del data["title"]
    response = client.post("/actions/recipes", data=data)
    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "validation_error"
    assert any(detail["field"] == "body.title" for detail in body["details"])
    assert recipe_api.posts == []


def test_action_requires_an_ingredient(client, recipe_api):
    data = {key: value for key, value in _form().items() if not key.startswith("ingredients")}
    response = client.post("/actions/recipes", data=data)
    assert response.status_code == 422
    assert recipe_api.posts == []


def test_action_rejects_blank_title(client, recipe_api):
    response = client.post("/actions/recipes", data=_form(title="   "))
    assert response.status_code == 422
    assert any(detail["field"] == "title" for detail in response.json()["details"])
    assert recipe_api.posts == []


def test_action_rejects_blank_ingredient_quantity(client, recipe_api):
    response = client.post("/actions/recipes", data=_form(**{"ingredients[1][quantity]": " "}))
    assert response.status_code == 422
    assert recipe_api.posts == []
