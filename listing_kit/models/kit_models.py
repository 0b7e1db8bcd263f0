"""
Kit-related data models.

A kit is one generation request: the listing facts that were submitted and
the marketing copy produced for them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field


class KitStatus(str, Enum):
    """Lifecycle states of a kit."""
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"


class KitPayload(BaseModel):
    """Listing facts submitted for generation."""
    model_config = ConfigDict(extra="allow")

    address: str = Field(description="Property street address")
    beds: Optional[float] = Field(default=None, description="Bedroom count")
    baths: Optional[float] = Field(default=None, description="Bathroom count")
    sqft: Optional[int] = Field(default=None, description="Interior square footage")
    features: List[str] = Field(default_factory=list, description="Notable property features")
    template: Optional[str] = Field(default=None, description="Property template, e.g. 'Luxury'")
    tone: Optional[str] = Field(default=None, description="Copy tone, e.g. 'Concise MLS'")
    channels: List[str] = Field(default_factory=list, description="Requested output channels")


class KitOutputs(BaseModel):
    """Generated marketing copy."""
    mlsDesc: str = Field(default="", description="MLS listing description")
    igSlides: List[str] = Field(default_factory=list, description="Instagram carousel slides")
    reelScript: List[str] = Field(default_factory=list, description="Short video script lines")
    emailSubject: str = Field(default="", description="Email subject line")
    emailBody: str = Field(default="", description="Email body")


class Kit(BaseModel):
    """Complete kit record matching the saved JSON format."""
    id: str = Field(default_factory=lambda: str(uuid4()), description="Kit ID")
    user_id: str = Field(description="Owning user ID")
    created_at: str = Field(
        default_factory=lambda: datetime.now().astimezone().isoformat(),
        description="Creation time (ISO format)"
    )
    payload: KitPayload = Field(description="Submitted listing facts")
    status: KitStatus = Field(default=KitStatus.PROCESSING, description="Lifecycle state")
    outputs: Optional[KitOutputs] = Field(default=None, description="Generated copy, once READY")
    flags: List[str] = Field(default_factory=list, description="Compliance flags raised during generation")
    latency_ms: Optional[int] = Field(default=None, description="Generation latency")

    def to_summary_dict(self) -> Dict[str, Any]:
        """Row shape used by the kit listing endpoint."""
        return {
            "id": self.id,
            "created_at": self.created_at,
            "address": self.payload.address,
            "status": self.status.value,
        }
