# -*- coding: utf-8 -*-
"""Security center — admin endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import Response

from ..activity import record_activity
from ..auth.security import get_client_ip, require_admin
from .models import (
    BlockedIp,
    BlockIpRequest,
    BlockIpResponse,
    SecurityEvent,
    SecurityEventCreateRequest,
    SecurityMetrics,
    SecurityReport,
)
from .storage import (
    block_ip,
    build_report,
    compute_metrics,
    cutoff_for,
    list_blocked_ips,
    list_events,
    record_event,
    report_to_csv,
    resolve_event,
    unblock_ip,
)

router = APIRouter(prefix="/api/admin/security", tags=["Admin Security"], dependencies=[Depends(require_admin)])


@router.get("/metrics", response_model=SecurityMetrics, summary="Security counters")
def metrics():
    return SecurityMetrics(**compute_metrics())


@router.get("/events", response_model=List[SecurityEvent], summary="List security events")
def events(
    severity: str | None = Query(default=None, description="low | medium | high | critical | all"),
    time_range: str | None = Query(default=None, pattern="^(1h|24h|7d|30d)$"),
):
    since = cutoff_for(time_range) if time_range else None
    return [SecurityEvent.model_validate(e) for e in list_events(severity=severity, since=since)]


@router.post("/events", response_model=SecurityEvent, status_code=201, summary="Record a security event")
def create_event(body: SecurityEventCreateRequest, request: Request):
    event = record_event(
        event_type=body.type,
        severity=body.severity.value,
        user_id=body.user_id,
        ip_address=body.ip_address or get_client_ip(request),
        user_agent=request.headers.get("user-agent"),
        details=body.details,
    )
    return SecurityEvent.model_validate(event)


@router.post("/events/{event_id}/resolve", summary="Resolve a security event")
def resolve(event_id: str, admin: dict = Depends(require_admin)):
    if not resolve_event(event_id):
        raise HTTPException(status_code=404, detail="Security event not found")
    record_activity(admin["id"], "security_event_resolved", {"event_id": event_id})
    return {"success": True, "message": "Security event resolved successfully"}


@router.get("/blocked-ips", response_model=List[BlockedIp], summary="List IP blocks (newest first)")
def blocked_ips():
    return [BlockedIp.model_validate(b) for b in list_blocked_ips()]


@router.post("/block-ip", response_model=BlockIpResponse, status_code=201, summary="Block an IP address")
def block(body: BlockIpRequest, request: Request, admin: dict = Depends(require_admin)):
    ip_address = body.ip_address.strip()
    if ip_address == get_client_ip(request):
        raise HTTPException(status_code=400, detail="Cannot block the address of the current request")
    blocked = block_ip(ip_address=ip_address, reason=body.reason, blocked_by=admin["email"])
    if blocked is None:
        raise HTTPException(status_code=400, detail="IP address is already blocked")
    record_activity(admin["id"], "ip_blocked", {"ip_address": blocked["ip_address"], "reason": body.reason})
    return BlockIpResponse(message="IP address blocked successfully", blocked_ip=BlockedIp.model_validate(blocked))


@router.delete("/unblock-ip/{block_id}", summary="Deactivate an IP block")
def unblock(block_id: str, admin: dict = Depends(require_admin)):
    updated = unblock_ip(block_id)
    if updated is None:
        raise HTTPException(status_code=404, detail="Blocked IP not found")
    record_activity(admin["id"], "ip_unblocked", {"ip_address": updated["ip_address"]})
    return {"success": True, "message": "IP address unblocked successfully"}


@router.get("/report", summary="Security report (json or csv)")
def report(
    time_range: str = Query(default="30d", pattern="^(7d|30d|90d)$"),
    format: str = Query(default="json", pattern="^(json|csv)$"),
):
    data = build_report(time_range)
    if format == "csv":
        return Response(
            content=report_to_csv(data),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=security-report-{time_range}.csv"},
        )
    return SecurityReport.model_validate(data)
