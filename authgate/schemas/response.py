"""
Generic response schemas untuk AuthGate API.
Menangani response format yang konsisten.
"""

from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class MessageResponse(BaseModel):
    """
    Simple message response schema.
    """
    message: str = Field(..., description="Response message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"message": "Operation completed successfully"}
        }
    )


class ErrorResponse(BaseModel):
    """
    Error response schema dengan struktur konsisten.
    """
    error: Dict[str, Any] = Field(..., description="Error details")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "message": "Invalid email or password",
                    "type": "InvalidCredentialsException",
                    "timestamp": "2024-01-01T00:00:00Z",
                    "request_id": "550e8400-e29b-41d4-a716-446655440000",
                    "details": {}
                }
            }
        }
    )


class HealthResponse(BaseModel):
    status: str = Field(..., description="healthy atau degraded")
    version: str = Field(..., description="Versi aplikasi")
    database: bool = Field(..., description="Database reachable")
    redis: bool = Field(..., description="Redis reachable")
