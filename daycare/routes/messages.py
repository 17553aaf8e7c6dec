# daycare/routes/messages.py
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from daycare.core.dependencies import get_current_actor, get_message_service
from daycare.core.identity import Actor
from daycare.routes.responses import page_of, respond
from daycare.schemas.common import ApiResponse, PageResponse
from daycare.schemas.message import (
    MessageCreate,
    MessageFilters,
    MessageResponse,
    MessageThread,
    MessageUpdate,
    ReplyCreate,
    UnreadCount,
)
from daycare.services import MessageService

router = APIRouter()


@router.get("", response_model=ApiResponse[PageResponse[MessageResponse]])
async def list_messages(
    filters: Annotated[MessageFilters, Query()],
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    result = await service.list(actor, filters, filters.page, filters.page_size)
    return respond(page_of(MessageResponse, result))


@router.get("/unread-count", response_model=ApiResponse[UnreadCount])
async def unread_count(
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    return respond(UnreadCount(unread=await service.unread_count(actor)))


@router.get("/conversation/{child_id}", response_model=ApiResponse[PageResponse[MessageResponse]])
async def conversation(
    child_id: int,
    page: int = 1,
    page_size: Optional[int] = None,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    result = await service.conversation(actor, child_id, page, page_size)
    return respond(page_of(MessageResponse, result))


@router.get("/{message_id}", response_model=ApiResponse[MessageResponse])
async def get_message(
    message_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    return respond(MessageResponse.model_validate(await service.get(actor, message_id)))


@router.get("/{message_id}/thread", response_model=ApiResponse[MessageThread])
async def get_thread(
    message_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    return respond(await service.thread(actor, message_id))


@router.post("", response_model=ApiResponse[MessageResponse], status_code=201)
async def send_message(
    data: MessageCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    message = await service.send(actor, data)
    return respond(MessageResponse.model_validate(message), "Message sent successfully")


@router.post("/{message_id}/reply", response_model=ApiResponse[MessageResponse], status_code=201)
async def reply_to_message(
    message_id: int,
    data: ReplyCreate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    message = await service.reply(actor, message_id, data)
    return respond(MessageResponse.model_validate(message), "Reply sent successfully")


@router.patch("/{message_id}/read", response_model=ApiResponse[MessageResponse])
async def mark_read(
    message_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    message = await service.mark_read(actor, message_id)
    return respond(MessageResponse.model_validate(message), "Message marked as read")


@router.put("/{message_id}", response_model=ApiResponse[MessageResponse])
async def update_message(
    message_id: int,
    data: MessageUpdate,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    message = await service.update(actor, message_id, data)
    return respond(MessageResponse.model_validate(message))


@router.delete("/{message_id}", response_model=ApiResponse[None])
async def delete_message(
    message_id: int,
    actor: Optional[Actor] = Depends(get_current_actor),
    service: MessageService = Depends(get_message_service),
):
    await service.delete(actor, message_id)
    return respond(message="Message deleted successfully")
