# -*- coding: utf-8 -*-
"""Notifications — Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    info = "info"
    warning = "warning"
    success = "success"
    error = "error"
    promotion = "promotion"


class NotificationStatus(str, Enum):
    draft = "draft"
    scheduled = "scheduled"
    sent = "sent"
    failed = "failed"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class Channel(str, Enum):
    email = "email"
    push = "push"
    sms = "sms"
    in_app = "in_app"


class RecipientType(str, Enum):
    all = "all"
    premium = "premium"
    free = "free"
    custom = "custom"


class Recipients(BaseModel):
    type: RecipientType = RecipientType.all
    custom_list: List[str] = Field(default_factory=list)


class NotificationCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)
    type: NotificationType = NotificationType.info
    priority: Priority = Priority.medium
    channels: List[Channel] = Field(default_factory=lambda: [Channel.email])
    recipients: Recipients = Field(default_factory=Recipients)
    scheduled_at: Optional[str] = None


class NotificationUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    message: Optional[str] = Field(None, min_length=1, max_length=5000)
    type: Optional[NotificationType] = None
    priority: Optional[Priority] = None
    channels: Optional[List[Channel]] = None
    scheduled_at: Optional[str] = None


class Notification(BaseModel):
    id: str
    title: str
    message: str
    type: NotificationType
    priority: Priority
    status: NotificationStatus
    channels: List[Channel]
    recipient_type: RecipientType
    recipient_count: int
    scheduled_at: Optional[str] = None
    sent_at: Optional[str] = None
    created_at: str
    created_by: str


class NotificationStats(BaseModel):
    total_sent: int = 0
    total_scheduled: int = 0
    total_drafts: int = 0
    total_recipients_reached: int = 0
    active_subscribers: int = 0


class TemplateCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    subject: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1, max_length=20000)
    type: Channel = Channel.email
    is_active: bool = True


class TemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    subject: Optional[str] = Field(None, min_length=1, max_length=500)
    content: Optional[str] = Field(None, min_length=1, max_length=20000)
    type: Optional[Channel] = None
    is_active: Optional[bool] = None


class Template(BaseModel):
    id: str
    name: str
    subject: str
    content: str
    type: Channel
    variables: List[str]
    is_active: bool
    created_at: str


class DeleteResponse(BaseModel):
    success: bool = True
    message: str
