"""
Relay endpoint behaviour: validation, method guards, envelopes and success bodies.
"""

import logging

import pytest

from server.errors import EmptyAnalysis, ProviderFailure

RELAY_PATHS = ["/api/analyze-vision", "/api/generate-tts", "/api/analyze-silicon"]


class TestMethodGuard:
    """Only POST reaches a relay handler"""

    @pytest.mark.parametrize("path", RELAY_PATHS)
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE", "PATCH"])
    def test_non_post_returns_405(self, client, vision_stub, speech_stub, path, method):
        response = client.request(method, path, content=b"not json at all")

        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method not allowed"}
        assert response.headers["allow"] == "POST"
        assert vision_stub.calls == []
        assert speech_stub.calls == []


class TestAnalyzeVision:
    def test_missing_image_data_is_bad_request(self, client, vision_stub):
        response = client.post("/api/analyze-vision", json={"prompt": "describe"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Image data is required"}
        assert vision_stub.calls == []

    def test_empty_image_data_is_bad_request(self, client, vision_stub):
        response = client.post("/api/analyze-vision", json={"imageData": ""})

        assert response.status_code == 400
        assert vision_stub.calls == []

    def test_missing_body_is_bad_request(self, client, vision_stub):
        response = client.post("/api/analyze-vision")

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert vision_stub.calls == []

    def test_success_wraps_analysis_in_markdown(self, client, vision_stub):
        response = client.post("/api/analyze-vision", json={"imageData": "AAAA", "useProvider": "openai"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["provider"] == "openai"
        assert body["analysis"] == "A login form with two inputs."
        assert body["markdown"].startswith("# Screen Analysis\n")
        assert "**Provider:** Stub Vision" in body["markdown"]
        assert "## Analysis\n\nA login form with two inputs.\n" in body["markdown"]
        assert body["markdown"].count("---") == 2
        assert "timestamp" in body
        assert vision_stub.calls == [("AAAA", None)]

    def test_logs_provider_latency_at_debug(self, client, vision_stub, caplog):
        with caplog.at_level(logging.DEBUG, logger="server.routes.analyze"):
            client.post("/api/analyze-vision", json={"imageData": "AAAA"})

        assert "Vision analysis took 1 ms" in caplog.text

    def test_prompt_override_is_forwarded(self, client, vision_stub):
        client.post("/api/analyze-vision", json={"imageData": "AAAA", "prompt": "Only read the title"})

        assert vision_stub.calls == [("AAAA", "Only read the title")]

    def test_unknown_provider_is_rejected(self, client, vision_stub):
        response = client.post("/api/analyze-vision", json={"imageData": "AAAA", "useProvider": "other"})

        assert response.status_code == 400
        assert vision_stub.calls == []

    def test_provider_failure_is_500_envelope(self, client, vision_stub):
        vision_stub.error = ProviderFailure("Invalid API key")

        response = client.post("/api/analyze-vision", json={"imageData": "AAAA"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Invalid API key"}

    def test_empty_analysis_is_500_envelope(self, client, vision_stub):
        vision_stub.error = EmptyAnalysis()

        response = client.post("/api/analyze-vision", json={"imageData": "AAAA"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "No analysis returned from API"}

    def test_unexpected_error_is_still_an_envelope(self, client, vision_stub):
        vision_stub.error = RuntimeError("socket closed")

        response = client.post("/api/analyze-vision", json={"imageData": "AAAA"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "socket closed"}


class TestAnalyzeSilicon:
    def test_missing_image_data_is_bad_request(self, client, vision_stub):
        response = client.post("/api/analyze-silicon", json={})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Image data is required"}
        assert vision_stub.calls == []

    def test_returns_placeholder_without_calling_a_provider(self, client, vision_stub):
        response = client.post("/api/analyze-silicon", json={"imageData": "AAAA"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["provider"] == "siliconflow"
        assert "coming soon" in body["analysis"].lower()
        assert body["markdown"].startswith("# SiliconFlow Analysis")
        assert vision_stub.calls == []


class TestGenerateTTS:
    def test_scenario_hello_returns_mp3_data_url(self, client, speech_stub):
        response = client.post("/api/generate-tts", json={"text": "hello", "voice": "nova", "speed": 1.0})

        assert response.status_code == 200
        assert response.json() == {"success": True, "audioUrl": "data:audio/mp3;base64,AAE="}
        assert speech_stub.calls == [("hello", "nova", 1.0)]

    def test_defaults_voice_and_speed(self, client, speech_stub):
        client.post("/api/generate-tts", json={"text": "hello"})

        assert speech_stub.calls == [("hello", "nova", 1.0)]

    def test_missing_text_is_bad_request(self, client, speech_stub):
        response = client.post("/api/generate-tts", json={"voice": "alloy"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Text is required"}
        assert speech_stub.calls == []

    @pytest.mark.parametrize("speed", [0.1, 4.5])
    def test_speed_out_of_range_is_bad_request(self, client, speech_stub, speed):
        response = client.post("/api/generate-tts", json={"text": "hello", "speed": speed})

        assert response.status_code == 400
        assert speech_stub.calls == []

    def test_unknown_voice_is_bad_request(self, client, speech_stub):
        response = client.post("/api/generate-tts", json={"text": "hello", "voice": "baritone"})

        assert response.status_code == 400
        assert speech_stub.calls == []

    def test_provider_failure_is_500_envelope(self, client, speech_stub):
        speech_stub.error = ProviderFailure("Rate limit reached")

        response = client.post("/api/generate-tts", json={"text": "hello"})

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Rate limit reached"}


def test_health_reports_models(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["vision_model"]
    assert body["tts_model"]
