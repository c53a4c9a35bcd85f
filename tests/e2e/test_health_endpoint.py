"""End-to-end tests for the health endpoint."""


class TestHealthEndpoint:
    def test_health_check(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_health_does_not_need_the_model(self, test_client, respx_mock):
        test_client.get("/health")

        assert not respx_mock.calls
