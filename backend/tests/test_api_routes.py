"""
test_api_routes.py — HTTP surface over a fresh app per test.

Tests cover:
  - Create / read flows returning cascaded totals
  - Error mapping (404 unknown ids, 400 bad reorder, 409 double conversion, 422 schema)
  - Customer records and the documents filed under them
  - Null fields in PUT bodies and deleting converted quotations
  - Summary formatting and validation report
  - Request tracing headers, /health and /metrics
"""


def _quotation(client, **body):
    body.setdefault("title", "Flat 12A")
    body.setdefault("gst_percentage", 18)
    resp = client.post("/api/quotations", json=body)
    assert resp.status_code == 201
    return resp.json()


def _customer(client, name="Asha Rao"):
    resp = client.post("/api/customers", json={"name": name, "email": "asha@example.com"})
    assert resp.status_code == 201
    return resp.json()


def _room(client, quotation_id, name="Kitchen", **body):
    resp = client.post(f"/api/quotations/{quotation_id}/rooms", json={"name": name, **body})
    assert resp.status_code == 201
    return resp.json()


class TestQuotationFlow:

    def test_product_cascades_to_quotation(self, client):
        q = _quotation(client, global_discount=5)
        room = _room(client, q["id"])
        resp = client.post(
            f"/api/rooms/{room['id']}/products",
            json={"name": "Base unit", "selling_price": 1000, "discount": 10},
        )
        assert resp.status_code == 201
        assert abs(resp.json()["discounted_price"] - 900) < 1e-6

        q = client.get(f"/api/quotations/{q['id']}").json()
        assert abs(q["final_price"] - 1008.9) < 1e-6
        assert abs(q["gst_amount"] - 153.9) < 1e-6

    def test_details_nest_rooms_and_children(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        client.post(f"/api/rooms/{room['id']}/accessories", json={"name": "Handles", "selling_price": 50})
        client.post(
            f"/api/rooms/{room['id']}/installation-charges",
            json={"cabinet_type": "Base", "width_mm": 600, "height_mm": 900},
        )
        details = client.get(f"/api/quotations/{q['id']}/details").json()
        assert [r["name"] for r in details["rooms"]] == ["Kitchen"]
        assert details["rooms"][0]["accessories"][0]["name"] == "Handles"
        assert details["rooms"][0]["installation_charges"][0]["quotation_id"] == q["id"]

    def test_policy_update(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        client.post(f"/api/rooms/{room['id']}/products", json={"name": "Carcass", "selling_price": 1000})
        resp = client.put(f"/api/quotations/{q['id']}/policy", json={"gst_percentage": 0, "installation_handling": 200})
        assert resp.status_code == 200
        assert resp.json()["final_price"] == 1200

    def test_update_and_delete_product(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        product = client.post(
            f"/api/rooms/{room['id']}/products", json={"name": "Carcass", "selling_price": 1000},
        ).json()

        resp = client.put(f"/api/products/{product['id']}", json={"quantity": 2})
        assert resp.json()["quantity"] == 2
        assert client.get(f"/api/rooms/{room['id']}").json()["selling_price"] == 2000

        assert client.delete(f"/api/products/{product['id']}").status_code == 204
        assert client.get(f"/api/quotations/{q['id']}").json()["final_price"] == 0

    def test_room_reorder(self, client):
        q = _quotation(client)
        a = _room(client, q["id"], "A")
        b = _room(client, q["id"], "B")
        resp = client.post(f"/api/quotations/{q['id']}/rooms/reorder", json={"room_ids": [b["id"], a["id"]]})
        assert resp.status_code == 200
        assert [r["name"] for r in client.get(f"/api/quotations/{q['id']}/rooms").json()] == ["B", "A"]

    def test_duplicate_without_body(self, client):
        customer = _customer(client)
        q = _quotation(client, customer_id=customer["id"])
        resp = client.post(f"/api/quotations/{q['id']}/duplicate")
        assert resp.status_code == 201
        assert resp.json()["customer_id"] == customer["id"]
        assert resp.json()["title"].endswith("(Copy)")

    def test_summary_formatting(self, client):
        q = _quotation(client, gst_percentage=0)
        room = _room(client, q["id"])
        client.post(f"/api/rooms/{room['id']}/products", json={"name": "Wardrobe", "selling_price": 100900})
        summary = client.get(f"/api/quotations/{q['id']}/summary").json()
        assert summary["formatted"]["final_price"] == "₹1,00,900"
        assert summary["final_price_in_words"] == "One Lakh Nine Hundred Rupees Only"

    def test_validation_report(self, client):
        q = _quotation(client)
        report = client.get(f"/api/quotations/{q['id']}/validation").json()
        assert report["is_valid"] is False
        assert report["errors"][0]["type"] == "room_zero_value"


class TestSalesFlow:

    def test_convert_and_pay(self, client):
        q = _quotation(client, gst_percentage=0)
        room = _room(client, q["id"])
        client.post(f"/api/rooms/{room['id']}/products", json={"name": "Carcass", "selling_price": 1000})

        order = client.post(f"/api/quotations/{q['id']}/sales-order").json()
        assert order["total_amount"] == 1000
        assert client.get(f"/api/quotations/{q['id']}").json()["status"] == "converted"

        resp = client.post(
            f"/api/sales-orders/{order['id']}/payments",
            json={"amount": 400, "payment_method": "upi"},
        )
        assert resp.status_code == 201
        order = client.get(f"/api/sales-orders/{order['id']}").json()
        assert order["payment_status"] == "partially_paid"
        assert order["amount_due"] == 600
        assert len(order["payments"]) == 1

    def test_double_conversion_conflicts(self, client):
        q = _quotation(client)
        client.post(f"/api/quotations/{q['id']}/sales-order")
        assert client.post(f"/api/quotations/{q['id']}/sales-order").status_code == 409


class TestErrors:

    def test_unknown_quotation(self, client):
        resp = client.get("/api/quotations/999")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Quotation 999 not found"

    def test_product_id_on_accessory_route(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        product = client.post(
            f"/api/rooms/{room['id']}/products", json={"name": "Carcass", "selling_price": 10},
        ).json()
        assert client.get(f"/api/accessories/{product['id']}").status_code == 404

    def test_bad_reorder(self, client):
        q = _quotation(client)
        _room(client, q["id"])
        resp = client.post(f"/api/quotations/{q['id']}/rooms/reorder", json={"room_ids": [42]})
        assert resp.status_code == 400

    def test_schema_violation(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        resp = client.post(f"/api/rooms/{room['id']}/products", json={"name": "Carcass", "selling_price": -1})
        assert resp.status_code == 422


class TestServiceEndpoints:

    def test_request_id_round_trip(self, client):
        resp = client.get("/api/quotations", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"
        assert "X-Process-Time" in resp.headers

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "active"

    def test_metrics_count_recomputes(self, client):
        _quotation(client)
        body = client.get("/metrics").json()
        assert body["recalc_counts"]["quotation"] >= 1
        assert "uptime_seconds" in body


class TestCustomers:

    def test_crud(self, client):
        customer = _customer(client)
        assert [c["name"] for c in client.get("/api/customers").json()] == ["Asha Rao"]

        resp = client.put(f"/api/customers/{customer['id']}", json={"phone": "98450 00000", "name": None})
        assert resp.status_code == 200
        assert resp.json()["phone"] == "98450 00000"
        assert resp.json()["name"] == "Asha Rao"

        assert client.delete(f"/api/customers/{customer['id']}").status_code == 204
        assert client.get(f"/api/customers/{customer['id']}").status_code == 404

    def test_documents_filed_under_customer(self, client):
        customer = _customer(client)
        q = _quotation(client, customer_id=customer["id"])
        _quotation(client, title="Walk-in")
        client.post(f"/api/quotations/{q['id']}/sales-order")

        quotations = client.get(f"/api/customers/{customer['id']}/quotations").json()
        orders = client.get(f"/api/customers/{customer['id']}/sales-orders").json()
        assert [x["id"] for x in quotations] == [q["id"]]
        assert [o["quotation_id"] for o in orders] == [q["id"]]

    def test_delete_with_quotations_conflicts(self, client):
        customer = _customer(client)
        _quotation(client, customer_id=customer["id"])
        assert client.delete(f"/api/customers/{customer['id']}").status_code == 409

    def test_quotation_for_unknown_customer(self, client):
        resp = client.post("/api/quotations", json={"title": "Flat 3B", "customer_id": 404})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Customer 404 not found"
        assert client.get("/api/quotations").json() == []

    def test_blank_name_rejected(self, client):
        assert client.post("/api/customers", json={"name": ""}).status_code == 422


class TestPartialUpdates:

    def test_null_title_leaves_title(self, client):
        q = _quotation(client)
        resp = client.put(f"/api/quotations/{q['id']}", json={"title": None, "description": "Second floor"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Flat 12A"
        assert resp.json()["description"] == "Second floor"

    def test_null_room_name_leaves_name(self, client):
        q = _quotation(client)
        room = _room(client, q["id"])
        resp = client.put(f"/api/rooms/{room['id']}", json={"name": None, "description": "L-shaped"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Kitchen"

    def test_converted_quotation_cannot_be_deleted(self, client):
        q = _quotation(client)
        order = client.post(f"/api/quotations/{q['id']}/sales-order").json()
        assert client.delete(f"/api/quotations/{q['id']}").status_code == 409
        assert client.get(f"/api/sales-orders/{order['id']}").status_code == 200

    def test_unconverted_quotation_deleted(self, client):
        q = _quotation(client)
        assert client.delete(f"/api/quotations/{q['id']}").status_code == 204
        assert client.get(f"/api/quotations/{q['id']}").status_code == 404
