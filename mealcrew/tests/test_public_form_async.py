from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from mealcrew.api.api_run import app
from mealcrew.api.routes.plans import get_meal_generator
from mealcrew.tests.support import offline_generator, reset_app_state


@pytest.mark.asyncio
async def test_manager_to_respondent_round_trip(tmp_path, monkeypatch):
    """Manager prepares a plan, a participant and the co-manager respond, the manager finalizes."""

    # Keep all JSON files in a temporary directory
    monkeypatch.setenv("MEALCREW_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reset_app_state()
    app.dependency_overrides[get_meal_generator] = offline_generator

    try:
        # === 1. Manager sets up the plan ===
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as manager:
            resp = await manager.post("/auth/login", json={"email": "host@example.com"})
            assert resp.status_code == 200, resp.text

            resp = await manager.post("/api/groups", json={
                "name": "Garcia", "adults": 2, "teens": 1, "kids": 0, "toddlers": 0,
                "dietary_restrictions": ["gluten-free"],
            })
            group = resp.json()["data"]["group"]
            assert group["adult_equivalent"] == 3.2

            resp = await manager.post("/api/plans", json={
                "name": "Reunion",
                "week_start": (date.today() + timedelta(days=10)).isoformat(),
                "group_ids": [group["id"]],
            })
            plan = resp.json()["data"]["plan"]

            resp = await manager.post(f"/api/plans/{plan['id']}/generate-meals")
            assert resp.status_code == 201, resp.text

            resp = await manager.post("/api/forms", json={"plan_id": plan["id"]})
            links = {l["role"]: l for l in resp.json()["data"]["links"]}

        # === 2. Respondents use their public links ===
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as public:
            resp = await public.get(f"/api/forms/{links['other']['short_code']}/meals")
            assert resp.status_code == 200
            meals = resp.json()["data"]["meals"]
            assert all("gluten-free" in m["dietary_info"] for m in meals)

            resp = await public.post("/api/form-responses", json={
                "token": links["other"]["short_code"],
                "selections": {"saturday": [meals[0]["id"]], "sunday": [meals[1]["id"]]},
            })
            assert resp.status_code == 201, resp.text

            resp = await public.post("/api/form-responses", json={
                "token": links["co_manager"]["token"],
                "selections": {"sunday": [meals[2]["id"]]},
            })
            assert resp.status_code == 201, resp.text

        # === 3. Manager finalizes ===
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as manager:
            await manager.post("/auth/login", json={"email": "host@example.com"})
            resp = await manager.post(f"/api/plans/{plan['id']}/finalize")
            assert resp.status_code == 200, resp.text
            data = resp.json()["data"]
            assert [(r["day"], r["meal_id"]) for r in data["plan_meals"]] == [
                ("saturday", meals[0]["id"]),
                ("sunday", meals[2]["id"]),
            ]

            resp = await manager.get(f"/api/shopping-lists/{plan['id']}")
            assert resp.json()["data"]["shopping_list"]["adult_equivalent"] == 3.2
    finally:
        app.dependency_overrides.clear()
