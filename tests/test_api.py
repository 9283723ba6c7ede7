"""Tests for the public API endpoints."""

from fastapi.testclient import TestClient

from nutrition_pipeline.api.app import create_app
from nutrition_pipeline.domain.nutrition import ResolutionSource
from tests.conftest import make_match


def test_health(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_resolve_endpoint(container, usda) -> None:
    usda.matches["oatmeal"] = make_match(ResolutionSource.USDA, 0.9, calories=150, fiber=4)
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition/resolve",
        json={"name": "oatmeal", "estimated_grams": 200, "food_type": "whole_food"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "usda"
    assert data["serving_grams"] == 200
    assert data["nutrition"]["calories"] == 300


def test_resolve_endpoint_validates_payload(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/nutrition/resolve", json={"name": "oatmeal", "estimated_grams": 0})

    assert response.status_code == 422


def test_barcode_endpoint(container, off) -> None:
    off.barcodes["0123"] = make_match(
        ResolutionSource.OPENFOODFACTS, 0.95, serving_grams=30, calories=135
    )
    client = TestClient(create_app(container))

    found = client.get("/nutrition/barcode/0123")
    missing = client.get("/nutrition/barcode/9999")

    assert found.status_code == 200
    assert found.json()["nutrition"]["calories"] == 135
    assert missing.status_code == 404


def test_analyze_endpoint(container, usda) -> None:
    usda.matches["chicken breast"] = make_match(
        ResolutionSource.USDA, 0.9, calories=300, protein=20
    )
    usda.matches["broccoli"] = make_match(ResolutionSource.USDA, 0.9, calories=200, protein=10)
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition/analyze",
        json={
            "items": [
                {"name": "chicken breast", "estimated_grams": 100, "food_type": "whole_food"},
                {"name": "broccoli", "estimated_grams": 100, "food_type": "whole_food"},
            ],
            "focus": "muscle_building",
            "meal_type": "dinner",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["totals"]["calories"] == 500
    assert data["totals"]["protein"] == 30
    assert data["focus"] == "muscle_building"
    assert data["meal_type"] == "dinner"
    assert data["items"][0]["insight"]["summary"] == "About chicken breast"
    assert "muscle_building" in data["items"][0]["grading"]["focus_grades"]


def test_compare_endpoint_requires_two_items(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition/compare",
        json={"items": [{"name": "apple", "estimated_grams": 100}]},
    )

    assert response.status_code == 422


def test_compare_endpoint(container, usda) -> None:
    usda.matches["apple"] = make_match(ResolutionSource.USDA, 0.9, calories=95, fiber=4, carbs=25)
    usda.matches["cookie"] = make_match(
        ResolutionSource.USDA, 0.9, calories=250, sugar=20, carbs=35, saturated_fat=6
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition/compare",
        json={
            "items": [
                {"name": "apple", "estimated_grams": 100, "food_type": "whole_food"},
                {"name": "cookie", "estimated_grams": 100, "food_type": "whole_food"},
            ],
            "focus": "balanced",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["winner"]["food_name"] == "apple"
    assert data["nutrient_comparison"]["sugar"]["leader"] == data["foods"][0]["id"]
    assert len(data["focus_winners"]) == 10


def test_grade_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition/grade",
        json={
            "nutrition": {"calories": 150, "carbs": 27, "fiber": 4, "protein": 5},
            "serving_grams": 250,
            "food_name": "oatmeal",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["gi"]["gi"] == 55
    assert data["gi"]["matched_food"] == "oatmeal"
    assert set(data["grading"]["focus_grades"]) >= {"balanced", "blood_sugar_balance"}


def test_grade_endpoint_without_name_skips_gi(container) -> None:
    client = TestClient(create_app(container))

    response = client.post("/nutrition/grade", json={"nutrition": {"protein": 31}})

    assert response.status_code == 200
    assert response.json()["gi"] is None


def test_gi_lookup_endpoint(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/gi/lookup", params={"name": "white rice", "carbs": 45})

    assert response.status_code == 200
    data = response.json()
    assert data["gi"] == 73
    assert data["gl"] == 33
    assert data["gi_band"] == "high"
    assert data["gl_band"] == "high"
    assert data["relevant"] is True
    assert data["explanation"].startswith("High GI foods")
