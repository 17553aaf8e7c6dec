# daycare/schemas/message.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from .common import ORMModel, PageParams
from .enums import MessageBox, MessageType, Priority


class Attachment(BaseModel):
    filename: str
    url: str


class MessageCreate(BaseModel):
    recipient_id: int
    child_id: Optional[int] = None
    subject: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=2000)
    message_type: MessageType = MessageType.GENERAL
    priority: Priority = Priority.MEDIUM
    attachments: List[Attachment] = []
    parent_message_id: Optional[int] = None


class ReplyCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)
    priority: Optional[Priority] = None
    attachments: List[Attachment] = []


class MessageFilters(PageParams):
    box: Optional[MessageBox] = Field(None, description="inbox or sent; both when omitted")
    search: Optional[str] = Field(None, description="Matches subject or content")
    is_read: Optional[bool] = None
    message_type: Optional[MessageType] = None
    priority: Optional[Priority] = None
    child_id: Optional[int] = None


class MessageResponse(ORMModel):
    id: int
    sender_id: int
    recipient_id: int
    child_id: Optional[int] = None
    subject: str
    content: str
    message_type: MessageType
    priority: Priority
    is_read: bool
    read_at: Optional[datetime] = None
    attachments: List[Attachment] = []
    parent_message_id: Optional[int] = None
    created_at: datetime


class MessageThread(BaseModel):
    message: MessageResponse
    replies: List["MessageThread"] = []


class UnreadCount(BaseModel):
    unread: int


class MessageUpdate(BaseModel):
    is_read: Optional[bool] = None
