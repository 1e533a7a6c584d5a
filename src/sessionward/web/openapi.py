from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from sessionward.config import Config


def set_custom_openapi(app: FastAPI, config: Config) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="SessionWard API",
            version="0.1.0",
            summary="Authenticated sessions and purpose-scoped authorization tokens",
            routes=app.routes,
        )

        # Only the configured transmission channel is advertised
        if config.transmission_mode == "header":
            scheme_name = "BearerAuth"
            scheme: dict[str, Any] = {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token in the Authorization header",
            }
        else:
            scheme_name = "SessionCookie"
            scheme = {
                "type": "apiKey",
                "in": "cookie",
                "name": config.cookie_name,
                "description": "Session token stored in an HttpOnly cookie",
            }
        openapi_schema.setdefault("components", {})["securitySchemes"] = {scheme_name: scheme}
        openapi_schema["security"] = [{scheme_name: []}]

        # Remove security from public endpoints
        public_endpoints = {
            ("POST", "/api/v1/auth/login"),
            ("POST", "/api/v1/auth/logout"),
            ("POST", "/api/v1/accounts"),
            ("POST", "/api/v1/accounts/password-reset"),
            ("POST", "/api/v1/accounts/password-reset/confirm"),
            ("POST", "/api/v1/accounts/email-verification/confirm"),
        }

        for path, path_item in openapi_schema["paths"].items():
            for method, operation in path_item.items():
                if (method.upper(), path) in public_endpoints:
                    operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Not authenticated", "type": "authentication_error"},
                {"message": "Access denied", "type": "access_denied"},
                {"message": "Service temporarily unavailable", "type": "service_unavailable"},
            ]
        }
    }
