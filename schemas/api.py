"""
Pydantic schemas for the operational API
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.base import RunStatus


class RunSummary(BaseModel):
    """One sync_runs row"""
    id: str
    job: str
    source: str
    status: RunStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    latency_ms: Optional[int] = None
    counts: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)
    stale: bool = False
    
    class Config:
        from_attributes = True
        use_enum_values = True


class RunListResponse(BaseModel):
    runs: List[RunSummary]
    total: int


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    last_run: Optional[RunSummary] = None
    last_completed_at: Optional[datetime] = None
    stale_runs: int = 0
    
    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "last_completed_at": "2024-01-15T03:04:12Z",
                "stale_runs": 0,
            }
        }

