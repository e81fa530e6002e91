# tests/helpers.py
TEST_SECRET = "test-secret"
API = "/api/v1"


def register_and_login(client, email, password="secret1", name="Test User"):
    response = client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    response = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
