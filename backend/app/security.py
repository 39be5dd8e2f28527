"""
Security Configuration Module

HTTP hardening for the CompanyHub API (allowed hosts, CORS, compression and
response headers) and a startup check of the environment. Logging for the
whole application is configured here since this module is imported first.
"""

import os
import logging
from typing import List
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

KNOWN_ENVIRONMENTS = ("development", "test", "staging", "production")

# Frontend dev servers (CRA and Vite)
DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

# JSON API: nothing is rendered, images are served by Cloudinary
API_CSP = "default-src 'none'; img-src https://res.cloudinary.com data:; frame-ancestors 'none'"


def _csv_env(name: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, "").split(",") if item.strip()]


def current_environment() -> str:
    return os.getenv("ENVIRONMENT", "development").lower()


def is_development() -> bool:
    return current_environment() == "development"


class SecurityConfig:
    """Per-environment HTTP hardening"""

    def __init__(self):
        self.environment = current_environment()
        self.production = self.environment == "production"
        self.allowed_hosts = _csv_env("ALLOWED_HOSTS") if self.production else []
        self.cors_origins = _csv_env("CORS_ORIGINS") or ([] if self.production else DEV_ORIGINS)

    def response_headers(self) -> List[tuple]:
        headers = [
            (b"x-content-type-options", b"nosniff"),
            (b"x-frame-options", b"DENY"),
            (b"referrer-policy", b"no-referrer"),
            (b"content-security-policy", API_CSP.encode()),
            # Responses carry tokens and personal data
            (b"cache-control", b"no-store"),
        ]
        if self.production:
            headers.append((b"strict-transport-security", b"max-age=31536000; includeSubDomains"))
        return headers

    def apply_security_middleware(self, app: FastAPI) -> None:
        if self.allowed_hosts:
            app.add_middleware(TrustedHostMiddleware, allowed_hosts=self.allowed_hosts)

        app.add_middleware(GZipMiddleware, minimum_size=1000)
        app.add_middleware(SecurityHeadersMiddleware, headers=self.response_headers())

        # Outermost, so error responses carry CORS headers too
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.cors_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
            max_age=86400,
        )

        logger.info(
            "Security middleware applied (environment=%s, cors_origins=%d, host_check=%s)",
            self.environment, len(self.cors_origins), bool(self.allowed_hosts),
        )


class SecurityHeadersMiddleware:
    """Pure ASGI middleware appending fixed headers to every HTTP response"""

    def __init__(self, app, headers: List[tuple]):
        self.app = app
        self.headers = headers

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        async def send_with_headers(message):
            if message.get("type") == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + self.headers
            await send(message)

        return await self.app(scope, receive, send_with_headers)


def validate_environment() -> List[str]:
    """Log and return configuration problems; never aborts startup."""
    problems = []
    for var in (
        "JWT_SECRET",
        "DATABASE_URL",
        "FIREBASE_CREDENTIALS",
        "CLOUDINARY_CLOUD_NAME",
        "CLOUDINARY_API_KEY",
        "CLOUDINARY_API_SECRET",
    ):
        if not os.getenv(var):
            problems.append(f"{var} is not set")

    if len(os.getenv("JWT_SECRET", "")) < 32:
        problems.append("JWT_SECRET should be at least 32 characters long")

    if current_environment() not in KNOWN_ENVIRONMENTS:
        problems.append(f"Unknown ENVIRONMENT value: {current_environment()}")

    if current_environment() == "production" and not _csv_env("CORS_ORIGINS"):
        problems.append("CORS_ORIGINS is empty in production; browsers will be refused")

    for problem in problems:
        logger.warning("Configuration: %s", problem)
    return problems


security_config = SecurityConfig()
