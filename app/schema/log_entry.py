"""
Structured log line emitted by the loguru sink.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class LogEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    asctime: datetime = Field(..., description="Timestamp of the log entry")
    levelname: str = Field(..., description="Log level name")
    correlation_id: str = Field(default="", description="Request correlation ID, empty outside requests")
    name: str = Field(default="", description="Module that emitted the record")
    message: str = Field(..., description="Log message content")

    @field_serializer("asctime")
    def serialize_asctime(self, asctime: datetime) -> str:
        return asctime.strftime(r"%Y-%m-%d %H:%M:%S,%f")[:-3]
