# tests/test_lending_api.py

from digital_library.utils.timeutil import utc_today


def _lend(client, headers, book_id, borrower="alice"):
    return client.post("/api/lending/lend", json={"book_id": book_id, "borrower": borrower}, headers=headers)


def test_lend_returns_201_with_record(client, auth_headers, make_book, quantity_of):
    book_id = make_book(quantity=2)

    resp = _lend(client, auth_headers, book_id, "bob")

    assert resp.status_code == 201
    body = resp.get_json()
    assert set(body) == {"id", "book_id", "borrower", "borrow_date", "return_date", "created_at", "updated_at"}
    assert body["book_id"] == book_id
    assert body["borrower"] == "bob"
    assert body["return_date"] is None
    assert body["borrow_date"] == utc_today().isoformat()
    assert quantity_of(book_id) == 1


def test_lend_out_of_stock_is_409(client, auth_headers, make_book, quantity_of):
    book_id = make_book(quantity=0)

    resp = _lend(client, auth_headers, book_id)

    assert resp.status_code == 409
    assert resp.get_json() == {"success": False, "message": "Book is currently out of stock"}
    assert quantity_of(book_id) == 0


def test_lend_unknown_book_is_404(client, auth_headers):
    resp = _lend(client, auth_headers, 7)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Book not found"


def test_lend_bad_payloads_are_400(client, auth_headers, make_book):
    book_id = make_book(quantity=1)

    for payload in ({"book_id": 0, "borrower": "x"},
                    {"book_id": book_id, "borrower": ""},
                    {"borrower": "x"},
                    {"book_id": book_id},
                    {"book_id": "abc", "borrower": "x"}):
        resp = client.post("/api/lending/lend", json=payload, headers=auth_headers)
        assert resp.status_code == 400, payload
        assert resp.get_json()["success"] is False

    resp = client.post("/api/lending/lend", data="not json", headers=auth_headers,
                       content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Cannot parse JSON"


def test_return_flow_and_double_return(client, auth_headers, make_book, quantity_of):
    book_id = make_book(quantity=2)
    record_id = _lend(client, auth_headers, book_id).get_json()["id"]

    first = client.post(f"/api/lending/return/{record_id}", headers=auth_headers)
    assert first.status_code == 200
    assert first.get_json() == {"success": True, "message": "Book returned successfully"}
    assert quantity_of(book_id) == 2

    second = client.put(f"/api/lending/return/{record_id}", headers=auth_headers)
    assert second.status_code == 409
    assert second.get_json()["message"] == "Book already returned"
    assert quantity_of(book_id) == 2


def test_return_unknown_record_is_404(client, auth_headers):
    resp = client.post("/api/lending/return/4242", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Lending record not found"


def test_delete_record_compensation(client, auth_headers, make_book, quantity_of):
    # Q=5 -> lend (4) -> return (5) -> delete (stays 5)
    book_id = make_book(quantity=5)
    closed_id = _lend(client, auth_headers, book_id).get_json()["id"]
    assert quantity_of(book_id) == 4
    client.post(f"/api/lending/return/{closed_id}", headers=auth_headers)
    assert quantity_of(book_id) == 5

    resp = client.delete(f"/api/lending/{closed_id}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Lending record deleted successfully"}
    assert quantity_of(book_id) == 5

    # open loan deleted -> copy comes back
    open_id = _lend(client, auth_headers, book_id).get_json()["id"]
    assert quantity_of(book_id) == 4
    assert client.delete(f"/api/lending/{open_id}", headers=auth_headers).status_code == 200
    assert quantity_of(book_id) == 5

    missing = client.delete(f"/api/lending/{open_id}", headers=auth_headers)
    assert missing.status_code == 404


def test_list_records(client, auth_headers, make_book):
    book_id = make_book(quantity=3, title="Dune", author="Frank Herbert")
    first = _lend(client, auth_headers, book_id, "Alice").get_json()["id"]
    _lend(client, auth_headers, book_id, "Bob")
    client.post(f"/api/lending/return/{first}", headers=auth_headers)

    resp = client.get("/api/lending/", headers=auth_headers)
    assert resp.status_code == 200
    rows = resp.get_json()
    assert len(rows) == 2
    assert all(r["book_title"] == "Dune" and r["book_author"] == "Frank Herbert" for r in rows)

    active = client.get("/api/lending/?status=active", headers=auth_headers).get_json()
    assert [r["borrower"] for r in active] == ["Bob"]

    by_title = client.get("/api/lending/?bookTitle=DUNE&borrower=alice", headers=auth_headers).get_json()
    assert [r["id"] for r in by_title] == [first]


def test_lending_routes_require_jwt(client, make_book):
    book_id = make_book(quantity=1)

    missing = client.post("/api/lending/lend", json={"book_id": book_id, "borrower": "x"})
    assert missing.status_code == 400
    assert missing.get_json()["message"] == "Missing or malformed JWT"

    bad = client.delete("/api/lending/1", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401
    assert bad.get_json()["message"] == "Invalid or expired JWT"
