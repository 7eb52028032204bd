# -*- coding: utf-8 -*-
"""Notifications — admin endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..activity import record_activity
from ..auth.security import require_admin
from .models import (
    DeleteResponse,
    Notification,
    NotificationCreateRequest,
    NotificationStats,
    NotificationUpdateRequest,
    Template,
    TemplateCreateRequest,
    TemplateUpdateRequest,
)
from .storage import (
    create_notification,
    create_template,
    delete_notification,
    delete_template,
    get_notification,
    list_notifications,
    list_templates,
    mark_sent,
    notification_stats,
    update_notification,
    update_template,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/notifications",
    tags=["Admin Notifications"],
    dependencies=[Depends(require_admin)],
)


@router.get("/stats", response_model=NotificationStats, summary="Notification counters")
def stats():
    return NotificationStats(**notification_stats())


@router.get("/templates", response_model=List[Template], summary="List templates")
def templates():
    return list_templates()


@router.post("/templates", response_model=Template, status_code=201, summary="Create a template")
def add_template(request: TemplateCreateRequest, admin: dict = Depends(require_admin)):
    template = create_template(request.model_dump(mode="json"))
    record_activity(admin["id"], "template_created", {"template_id": template["id"]})
    return template


@router.put("/templates/{template_id}", response_model=Template, summary="Update a template")
def edit_template(template_id: str, request: TemplateUpdateRequest):
    template = update_template(template_id, request.model_dump(mode="json"))
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return template


@router.delete("/templates/{template_id}", response_model=DeleteResponse, summary="Delete a template")
def remove_template(template_id: str):
    if not delete_template(template_id):
        raise HTTPException(status_code=404, detail="Template not found")
    return DeleteResponse(message="Template deleted")


@router.get("", response_model=List[Notification], summary="List notifications (newest first)")
def notifications(
    type: Optional[str] = Query(default=None, description="Notification type or 'all'"),
    status: Optional[str] = Query(default=None, description="Notification status or 'all'"),
):
    return list_notifications(type_=type, status=status)


@router.post("", response_model=Notification, status_code=201, summary="Create a notification")
def add_notification(request: NotificationCreateRequest, admin: dict = Depends(require_admin)):
    notification = create_notification(request.model_dump(mode="json"), created_by=admin["email"])
    record_activity(admin["id"], "notification_created", {"notification_id": notification["id"]})
    return notification


@router.put("/{notification_id}", response_model=Notification, summary="Update a notification")
def edit_notification(notification_id: str, request: NotificationUpdateRequest):
    notification = update_notification(notification_id, request.model_dump(mode="json"))
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


@router.delete("/{notification_id}", response_model=DeleteResponse, summary="Delete a notification")
def remove_notification(notification_id: str):
    if not delete_notification(notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return DeleteResponse(message="Notification deleted")


@router.post("/{notification_id}/send", response_model=Notification, summary="Send a draft or scheduled notification")
def send(notification_id: str, admin: dict = Depends(require_admin)):
    notification = get_notification(notification_id)
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    if not mark_sent(notification_id):
        raise HTTPException(status_code=400, detail="Notification cannot be sent")
    logger.info(
        "Sending notification %s to %d recipient(s)", notification_id, notification["recipient_count"]
    )
    record_activity(admin["id"], "notification_sent", {"notification_id": notification_id})
    return get_notification(notification_id)
