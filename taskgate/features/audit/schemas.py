from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    """Schema for audit log entries, with the originating user's email for display."""
    id: str
    organization_id: Optional[str]
    user_id: Optional[str]
    user_email: Optional[str] = None
    action: str
    resource: str
    resource_id: str
    details: Optional[Dict[str, Any]]
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
