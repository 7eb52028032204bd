# -*- coding: utf-8 -*-
"""Security center — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class SecurityEvent(BaseModel):
    id: str
    type: str
    severity: Severity
    user_id: Optional[str] = None
    email: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[str] = None
    status: str
    created_at: str


class SecurityEventCreateRequest(BaseModel):
    type: str = Field("suspicious_activity", min_length=1, max_length=64)
    severity: Severity = Severity.medium
    user_id: Optional[str] = None
    ip_address: Optional[str] = Field(None, max_length=64)
    details: Optional[str] = Field(None, max_length=2000)


class SecurityMetrics(BaseModel):
    total_events: int
    critical_events: int
    blocked_ips: int
    failed_logins: int
    suspicious_activities: int
    active_threats: int


class BlockedIp(BaseModel):
    id: str
    ip_address: str
    reason: str
    blocked_at: str
    blocked_by: str
    is_active: bool
    unblocked_at: Optional[str] = None


class BlockIpRequest(BaseModel):
    ip_address: str = Field(..., min_length=2, max_length=64)
    reason: str = Field(..., min_length=1, max_length=500)


class BlockIpResponse(BaseModel):
    success: bool = True
    message: str
    blocked_ip: BlockedIp


class ReportSummary(BaseModel):
    total_events: int
    events_by_severity: Dict[str, int]
    events_by_type: Dict[str, int]
    total_ip_blocks: int
    active_blocks: int


class SecurityReport(BaseModel):
    report_generated: str
    time_range: str
    summary: ReportSummary
    events: List[SecurityEvent]
    blocked_ips: List[BlockedIp]
