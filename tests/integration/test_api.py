"""Integration tests for API endpoints"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

VALID_CPF = "529.982.247-25"


@pytest.fixture
def seeded(client: TestClient, today):
    """Client, order and one check registered through the API"""
    response = client.post(
        "/v1/clients",
        json={
            "code": 1001,
            "name": "Maria da Silva",
            "person_type": "FISICA",
            "document": VALID_CPF,
            "credit_lines": {"ENDOSANTE": {"ceiling": 100000, "utilized": 0}},
            "bank_account": {"number": "12345-6", "bank": "001"},
        },
    )
    assert response.status_code == 201, response.text

    response = client.post(
        "/v1/orders",
        json={"number": 5001, "client": {"code": 1001}, "rate": 3.5, "expenses": {"total": 150}},
    )
    assert response.status_code == 201, response.text

    response = client.post(
        "/v1/checks",
        json={
            "number": "000123",
            "bank_code": "001",
            "amount": 2500,
            "order_number": 5001,
            "client_code": 1001,
            "drawer": {"name": "João Pereira", "document": VALID_CPF, "person_type": "FISICA"},
            "due_date": (today + timedelta(days=30)).isoformat(),
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "X-Request-ID" in response.headers


def test_metrics_endpoint(client: TestClient, seeded):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "discount_transition_total" in response.text


def test_order_created_with_client_snapshot(client: TestClient, seeded):
    body = client.get("/v1/orders/5001").json()
    assert body["status"] == "PENDENTE"
    assert body["client"] == {"code": 1001, "name": "Maria da Silva"}
    assert body["origin"] == "FORMULARIO"


def test_unknown_entities_return_404(client: TestClient):
    response = client.get("/v1/orders/999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Ordem 999 não encontrada"
    assert client.get("/v1/checks/nope").status_code == 404
    assert client.get("/v1/clients/1").status_code == 404


def test_duplicate_client_returns_409(client: TestClient, seeded):
    response = client.post(
        "/v1/clients",
        json={"code": 1001, "name": "Outra", "person_type": "FISICA", "document": VALID_CPF},
    )
    assert response.status_code == 409


def test_patch_rejects_protected_fields(client: TestClient, seeded):
    response = client.put("/v1/orders/5001", json={"status": "INTEGRADA"})
    assert response.status_code == 422
    assert client.get("/v1/orders/5001").json()["status"] == "PENDENTE"


def test_invalid_rate_reports_reasons(client: TestClient, seeded):
    assert client.put("/v1/orders/5001", json={"rate": 0}).status_code == 200

    response = client.post("/v1/orders/5001/integrate")
    assert response.status_code == 422
    assert response.json()["reasons"] == ["Taxa inválida"]


def test_order_integration_flow(client: TestClient, seeded, queue, worker):
    response = client.post("/v1/orders/5001/integrate", json={"actor": "gerente"})
    assert response.status_code == 202
    assert response.json()["order"]["status"] == "EM_PROCESSAMENTO"
    assert response.json()["validation"] == {"valid": True, "reasons": []}

    queue.drain(worker.handle)

    order = client.get("/v1/orders/5001").json()
    assert order["status"] == "INTEGRADA"
    operation = client.get(f"/v1/operations/by-number/{order['operation']['number']}").json()
    assert operation["type"] == "DESCONTO_CHEQUE"
    assert operation["capital"]["total"] == 2650.0

    checks = client.get("/v1/orders/5001/checks").json()
    assert [c["status"] for c in checks] == ["INTEGRADO"]

    response = client.delete("/v1/orders/5001")
    assert response.status_code == 409


def test_expired_check_cannot_be_approved(client: TestClient, seeded, clock):
    clock.advance(days=31)
    response = client.post(f"/v1/checks/{seeded['id']}/approve")
    assert response.status_code == 422
    assert "Data de vencimento expirada" in response.json()["reasons"]


def test_check_reject_requires_reason(client: TestClient, seeded):
    response = client.post(f"/v1/checks/{seeded['id']}/reject", json={"reason": ""})
    assert response.status_code == 422

    response = client.post(f"/v1/checks/{seeded['id']}/reject", json={"reason": "Rasurado"})
    assert response.status_code == 200
    assert response.json()["messages"] == ["Rejeitado: Rasurado"]


def test_operation_endpoints(client: TestClient, seeded, queue, worker):
    response = client.post(
        "/v1/operations",
        json={
            "order_number": 5001,
            "client_code": 1001,
            "principal": 15000,
            "nominal_rate": 36,
            "days": 365,
        },
    )
    assert response.status_code == 201, response.text
    operation_id = response.json()["id"]

    rate = client.post(f"/v1/operations/{operation_id}/effective-rate").json()
    assert rate["effective"] == pytest.approx(36.0)

    limits = client.post(f"/v1/operations/{operation_id}/limits", json={"max_limit": 10000}).json()
    assert limits["within_limit"] is False
    assert limits["operation"]["validations"]["limit_exceeded"] is True

    response = client.post(f"/v1/operations/{operation_id}/approve")
    assert response.status_code == 422

    response = client.post(f"/v1/operations/{operation_id}/approve", json={"max_limit": 20000})
    assert response.status_code == 200
    assert response.json()["status"] == "APROVADA"

    response = client.post(f"/v1/operations/{operation_id}/integrate")
    assert response.status_code == 202
    queue.drain(worker.handle)
    assert client.get(f"/v1/operations/{operation_id}").json()["status"] == "INTEGRADA"

    response = client.post(f"/v1/operations/{operation_id}/reject", json={"reason": "tarde"})
    assert response.status_code == 409


def test_client_validation_endpoint(client: TestClient, seeded):
    body = client.get("/v1/clients/1001/validation", params={"role": "ENDOSANTE", "amount": 200000}).json()
    assert body["valid"] is False
    assert body["capacity"]["ENDOSANTE"]["available"] == 100000.0
    assert body["reasons"] == ["Linha de crédito ENDOSANTE insuficiente: disponível 100000.00"]
