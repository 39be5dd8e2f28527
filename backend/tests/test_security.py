"""
Tests for security configuration.
"""
from app.security import SecurityConfig, validate_environment


class TestSecurityConfig:

    def test_development_defaults(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.delenv("CORS_ORIGINS", raising=False)

        config = SecurityConfig()

        assert "http://localhost:3000" in config.cors_origins
        assert config.allowed_hosts == []
        assert b"strict-transport-security" not in dict(config.response_headers())

    def test_production_reads_env(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("CORS_ORIGINS", "https://app.companyhub.io, https://admin.companyhub.io")
        monkeypatch.setenv("ALLOWED_HOSTS", "api.companyhub.io")

        config = SecurityConfig()

        assert config.cors_origins == ["https://app.companyhub.io", "https://admin.companyhub.io"]
        assert config.allowed_hosts == ["api.companyhub.io"]
        assert b"strict-transport-security" in dict(config.response_headers())

    def test_validate_environment_reports_problems(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "qa")
        monkeypatch.setenv("JWT_SECRET", "short")
        monkeypatch.delenv("CLOUDINARY_API_KEY", raising=False)

        problems = validate_environment()

        assert "CLOUDINARY_API_KEY is not set" in problems
        assert any("JWT_SECRET" in p for p in problems)
        assert any("ENVIRONMENT" in p for p in problems)
