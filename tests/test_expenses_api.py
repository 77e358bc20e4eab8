from datetime import datetime, timedelta

from app.utils.periods import utcnow

API = "/api/v1/expenses"


async def create(client, **fields):
    body = {"title": "Coffee", "amount": 4.5, "category": "Food & Dining", **fields}
    response = await client.post(API, json=body)
    assert response.status_code == 201, response.text
    return response.json()["expense"]


async def test_create_without_date_uses_creation_time(client) -> None:
    before = utcnow() - timedelta(seconds=1)
    expense = await create(client)

    assert expense["title"] == "Coffee"
    assert expense["amount"] == 4.5
    assert expense["paymentMethod"] == "Cash"
    assert expense["tags"] == []
    assert expense["recurring"]["isRecurring"] is False
    stored = datetime.fromisoformat(expense["date"])
    assert before <= stored <= utcnow() + timedelta(seconds=1)


async def test_create_reports_every_invalid_field(client) -> None:
    response = await client.post(API, json={"amount": -5, "category": "Pets"})

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed"
    assert {error["field"] for error in body["errors"]} == {"title", "amount", "category"}


async def test_recurring_needs_frequency(client) -> None:
    response = await client.post(API, json={
        "title": "Gym",
        "amount": 30,
        "category": "Healthcare",
        "recurring": {"isRecurring": True},
    })
    assert response.status_code == 400


async def test_tags_are_trimmed_and_deduplicated(client) -> None:
    expense = await create(client, tags=[" work ", "Work", "travel", ""])
    assert expense["tags"] == ["work", "travel"]


async def test_list_paginates_and_summarizes_all_matches(client) -> None:
    for day, amount in ((1, 10.0), (2, 20.0), (3, 30.0)):
        await create(client, title=f"Lunch {day}", amount=amount, date=f"2026-03-0{day}T12:00:00Z")

    first = (await client.get(API, params={"limit": 2})).json()
    assert [e["title"] for e in first["expenses"]] == ["Lunch 3", "Lunch 2"]
    assert first["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalItems": 3,
        "itemsPerPage": 2,
        "hasNext": True,
        "hasPrev": False,
    }
    assert first["summary"] == {"totalAmount": 60.0, "count": 3, "averageAmount": 20.0}

    second = (await client.get(API, params={"limit": 2, "page": 2})).json()
    assert [e["title"] for e in second["expenses"]] == ["Lunch 1"]
    assert second["pagination"]["hasNext"] is False
    assert second["pagination"]["hasPrev"] is True


async def test_list_filters(client) -> None:
    await create(client, title="Morning Coffee", amount=4.5, date="2026-03-01T08:00:00")
    await create(client, title="Taxi", amount=25, category="Transportation",
                 description="Coffee shop to office", date="2026-03-05T09:00:00")
    await create(client, title="Rent", amount=900, category="Housing", date="2026-04-01T00:00:00")

    search = (await client.get(API, params={"search": "COFFEE"})).json()
    assert {e["title"] for e in search["expenses"]} == {"Morning Coffee", "Taxi"}

    by_category = (await client.get(API, params={"category": "Housing"})).json()
    assert [e["title"] for e in by_category["expenses"]] == ["Rent"]

    # Date and amount bounds are inclusive
    window = (await client.get(API, params={
        "startDate": "2026-03-01T08:00:00",
        "endDate": "2026-03-05T09:00:00",
        "minAmount": 4.5,
        "maxAmount": 25,
    })).json()
    assert window["pagination"]["totalItems"] == 2


async def test_list_rejects_bad_paging(client) -> None:
    response = await client.get(API, params={"page": 0, "limit": 101})
    assert response.status_code == 400
    assert {error["field"] for error in response.json()["errors"]} == {"page", "limit"}


async def test_update_merges_and_revalidates(client) -> None:
    expense = await create(client, description="Flat white")

    response = await client.put(f"{API}/{expense['id']}", json={"amount": 5.25})
    assert response.status_code == 200
    updated = response.json()["expense"]
    assert updated["amount"] == 5.25
    assert updated["title"] == "Coffee"
    assert updated["description"] == "Flat white"

    response = await client.put(f"{API}/{expense['id']}", json={"amount": 0})
    assert response.status_code == 400
    stored = (await client.get(f"{API}/{expense['id']}")).json()
    assert stored["amount"] == 5.25


async def test_delete(client) -> None:
    expense = await create(client)

    response = await client.delete(f"{API}/{expense['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Expense deleted successfully"}
    assert (await client.get(f"{API}/{expense['id']}")).status_code == 404


async def test_other_users_expense_is_not_found(client, other_user, headers_for) -> None:
    expense = await create(client)
    headers = await headers_for(other_user)

    for method in ("get", "delete"):
        response = await getattr(client, method)(f"{API}/{expense['id']}", headers=headers)
        assert response.status_code == 404
        assert response.json() == {"detail": "Expense not found"}

    response = await client.put(f"{API}/{expense['id']}", json={"amount": 1}, headers=headers)
    assert response.status_code == 404

    listing = (await client.get(API, headers=headers)).json()
    assert listing["expenses"] == []


async def test_category_summary_largest_first(client) -> None:
    await create(client, amount=4.5)
    await create(client, amount=5.5)
    await create(client, title="Bus", amount=30, category="Transportation")

    summary = (await client.get(f"{API}/categories/summary")).json()
    assert summary == [
        {"category": "Transportation", "totalAmount": 30.0, "count": 1, "averageAmount": 30.0},
        {"category": "Food & Dining", "totalAmount": 10.0, "count": 2, "averageAmount": 5.0},
    ]
