"""
FastAPI Application Module

HTTP surface of the keyword chat bot. It plays the part of the chat screen
and the about screen: clients create a conversation, submit text, read the
entries back and fetch the suggestion prompts.

Key Features:
- Async request handling with FastAPI
- Delayed "typing" replies run as asyncio tasks
- Structured logging and Prometheus metrics
- CORS and OpenTelemetry support
"""

from contextlib import asynccontextmanager
from typing import List
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
from structlog import get_logger

from ..config import get_settings
from ..domain.exceptions import ConversationNotFoundError
from ..domain.models import ChatEntry, Conversation
from ..logging_config import configure_logging
from ..metrics import CUSTOM_REGISTRY, ERRORS, REQUESTS
from ..repositories.memory import InMemoryRepository
from ..services.chat import ChatService
from ..services.responder import ResponderService

APP_NAME = "Keyword Chat"
APP_VERSION = "0.1.0"
APP_DESCRIPTION = (
    "A small chat bot that answers with canned replies chosen by keyword, "
    "after a short simulated typing delay."
)

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)
logger = get_logger()


class MessageCreate(BaseModel):
    """Defines the structure for message creation requests"""
    content: str


class About(BaseModel):
    name: str
    version: str
    description: str


# Core service instances
repository = InMemoryRepository()
responder = ResponderService()
chat_service = ChatService(repository, responder, reply_delay=settings.reply_delay)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles app startup/shutdown and resource management"""
    logger.info("application_startup_complete", reply_delay=settings.reply_delay)

    yield

    service_factory = app.dependency_overrides.get(get_chat_service, get_chat_service)
    await service_factory().drain()
    logger.info("application_shutdown_complete")


def get_repository() -> InMemoryRepository:
    """Returns the conversation storage instance"""
    return repository


def get_chat_service() -> ChatService:
    """Returns the message store"""
    return chat_service


def get_responder() -> ResponderService:
    return responder


app = FastAPI(
    title=f"{APP_NAME} API",
    description=APP_DESCRIPTION,
    version=APP_VERSION,
    lifespan=lifespan
)

# Enable cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Set up request tracing
FastAPIInstrumentor.instrument_app(app)


def route_label(request: Request) -> str:
    """Route template such as '/conversations/{conversation_id}', never the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", "unmatched")


@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Logs and counts every request"""
    path = request.url.path
    logger.info("request_started", method=request.method, path=path)
    try:
        response = await call_next(request)
    except Exception as e:
        REQUESTS.labels(path=route_label(request)).inc()
        ERRORS.labels(source="http").inc()
        logger.error("request_failed", path=path, error=str(e))
        raise
    REQUESTS.labels(path=route_label(request)).inc()
    logger.info("request_finished", path=path, status_code=response.status_code)
    return response


@app.get("/conversations", response_model=List[Conversation])
async def list_conversations(
    limit: int = Query(100, ge=1),
    offset: int = Query(0, ge=0),
    repository: InMemoryRepository = Depends(get_repository)
) -> List[Conversation]:
    """Gets paginated conversation list with specified limit and offset"""
    try:
        return await repository.list_conversations(limit=limit, offset=offset)
    except Exception as e:
        logger.error("list_conversations_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to list conversations")


@app.post("/conversations", response_model=Conversation, status_code=201)
async def create_conversation(
    repository: InMemoryRepository = Depends(get_repository)
) -> Conversation:
    """Starts a new conversation"""
    try:
        return await repository.create_conversation()
    except Exception as e:
        logger.error("create_conversation_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create conversation")


@app.get("/conversations/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: UUID,
    repository: InMemoryRepository = Depends(get_repository)
) -> Conversation:
    """Retrieves a conversation with its entries and reply state"""
    conversation = await repository.get_conversation(conversation_id)
    if not conversation:
        logger.warning("conversation_not_found", conversation_id=str(conversation_id))
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@app.get("/conversations/{conversation_id}/messages", response_model=List[ChatEntry])
async def get_messages(
    conversation_id: UUID,
    limit: int = Query(100, ge=1),
    offset: int = Query(0, ge=0),
    repository: InMemoryRepository = Depends(get_repository)
) -> List[ChatEntry]:
    """Gets paginated entries of a conversation, oldest first"""
    try:
        return await repository.get_entries(conversation_id, limit=limit, offset=offset)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception as e:
        logger.error("get_messages_error", conversation_id=str(conversation_id), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get messages")


@app.post(
    "/conversations/{conversation_id}/messages",
    response_model=ChatEntry,
    status_code=202,
    responses={204: {"description": "Blank text, nothing was stored"}}
)
async def create_message(
    conversation_id: UUID,
    message: MessageCreate,
    wait: bool = False,
    chat_service: ChatService = Depends(get_chat_service)
):
    """
    Stores the user entry and schedules the bot reply.
    With ``wait=true`` the response is held until the reply is stored.
    """
    try:
        entry = await chat_service.submit(conversation_id, message.content)
    except ConversationNotFoundError:
        raise HTTPException(status_code=404, detail="Conversation not found")
    except Exception as e:
        logger.error("create_message_error", conversation_id=str(conversation_id), error=str(e))
        raise HTTPException(status_code=500, detail="Failed to process message")

    if entry is None:
        return Response(status_code=204)

    if wait:
        await chat_service.wait_for_reply(conversation_id)
    return entry


@app.get("/suggestions", response_model=List[str])
async def get_suggestions(
    responder: ResponderService = Depends(get_responder)
) -> List[str]:
    """The fixed prompts offered as shortcuts"""
    return list(responder.suggestions())


@app.get("/about", response_model=About)
async def about() -> About:
    return About(name=APP_NAME, version=APP_VERSION, description=APP_DESCRIPTION)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    """Provides Prometheus metrics for system monitoring"""
    return Response(generate_latest(CUSTOM_REGISTRY), media_type=CONTENT_TYPE_LATEST)
