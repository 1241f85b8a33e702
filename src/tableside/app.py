"""
Tableside ordering agent - FastAPI application
"""
import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from tableside.api_models import (
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
    CreateOrderRequest,
    CreateOrderResponse,
    HealthResponse,
    MenuResponse,
    OrdersResponse,
    SignedUrlRequest,
    SignedUrlResponse,
    UpdateOrderStatusRequest,
    UpdateOrderStatusResponse,
    VoiceWebhookRequest,
)
from tableside.config.settings import (
    ELEVENLABS_WEBHOOK_SECRET,
    HOST,
    LOG_LEVEL,
    PORT,
    STORE_BACKEND,
    SUPABASE_HEADERS,
    SUPABASE_URL,
    validate_settings,
)
from tableside.services.chat_service import ChatService
from tableside.services.checkout_service import CheckoutError, CheckoutService
from tableside.services.gemini_service import GeminiClient
from tableside.services.menu_cache import MenuCache
from tableside.services.menu_service import MenuService
from tableside.services.notification_service import StaffNotifier
from tableside.services.order_service import EmptyOrderError, OrderService
from tableside.services.session_service import OrderConflictError, SessionService
from tableside.services.store import DocumentNotFoundError, DocumentStore, create_store
from tableside.services.voice_service import ElevenLabsError, VoiceService, verify_signature
from tableside.tools.assistance_tools import AssistanceTools
from tableside.tools.dispatcher import ToolDispatcher
from tableside.tools.menu_tools import MenuTools
from tableside.tools.order_tools import OrderTools

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: DocumentStore
    session_service: SessionService
    menu_service: MenuService
    chat_service: ChatService
    voice_service: VoiceService
    checkout_service: CheckoutService


def build_services(store: Optional[DocumentStore] = None, gemini: Optional[GeminiClient] = None,
                   notifier: Optional[StaffNotifier] = None, menu_cache: Optional[MenuCache] = None,
                   voice_service_options: Optional[Dict[str, Any]] = None) -> Services:
    """Wire up every service; tests pass fakes for the external pieces"""
    store = store or create_store(STORE_BACKEND, SUPABASE_URL, SUPABASE_HEADERS)
    session_service = SessionService(store)
    menu_service = MenuService(store, menu_cache or MenuCache())
    order_service = OrderService()

    dispatcher = ToolDispatcher(
        OrderTools(order_service, menu_service, session_service),
        MenuTools(menu_service),
        AssistanceTools(notifier or StaffNotifier()),
    )

    return Services(
        store=store,
        session_service=session_service,
        menu_service=menu_service,
        chat_service=ChatService(session_service, menu_service, dispatcher, gemini or GeminiClient()),
        voice_service=VoiceService(session_service, dispatcher, **(voice_service_options or {})),
        checkout_service=CheckoutService(store, session_service),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def _error_response(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, **extra})


async def _read_json(request: Request, allow_empty: bool = False) -> Dict[str, Any]:
    body = await request.body()
    if not body and allow_empty:
        return {}
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload


def _check_signature(request: Request, body: bytes, secret: str):
    if not secret:
        return
    signature = request.headers.get("x-elevenlabs-signature", "")
    timestamp = request.headers.get("x-elevenlabs-timestamp", "")
    if not verify_signature(signature, timestamp, body, secret):
        raise HTTPException(status_code=401, detail="Invalid signature")


def create_app(services: Optional[Services] = None, webhook_secret: str = ELEVENLABS_WEBHOOK_SECRET) -> FastAPI:

    # Application lifespan
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Tableside ordering agent...")
        validate_settings()
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services()
        yield
        # Shutdown
        logger.info("Shutting down Tableside ordering agent...")

    app = FastAPI(
        title="Tableside Ordering Agent API",
        description="Conversational restaurant ordering over chat and voice with AI tool calling",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.services = services

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in error.get("loc", ())[1:]) for error in exc.errors()]
        return _error_response(400, "Missing required fields", fields=[f for f in fields if f])

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}

    # Chat endpoints
    @app.post("/api/ai/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest, services: Services = Depends(get_services)):
        """Send one message to the AI waiter"""
        try:
            turn = await services.chat_service.handle_message(
                request.session_id,
                request.restaurant_id,
                request.table_id,
                request.message,
                request.language,
                request.customer_id,
            )
            return {"message": turn.message, "toolCalls": turn.tool_calls}
        except Exception as e:
            logger.exception(f"Chat error for session {request.session_id}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to process message")

    @app.get("/api/ai/chat", response_model=ChatHistoryResponse)
    async def chat_history(session_id: str = Query(..., alias="sessionId", min_length=1),
                           services: Services = Depends(get_services)):
        """Get the transcript and current order of a session"""
        try:
            return await services.chat_service.get_history(session_id)
        except Exception as e:
            logger.error(f"Error fetching chat history: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch chat history")

    # Voice agent endpoints
    @app.post("/api/elevenlabs/webhook")
    async def voice_webhook(request: Request, services: Services = Depends(get_services)):
        """Server tool call from the ElevenLabs agent, tool named in the body"""
        body = await request.body()
        _check_signature(request, body, webhook_secret)
        payload = await _read_json(request)
        try:
            call = VoiceWebhookRequest.model_validate(payload)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Missing required fields")

        try:
            return await services.voice_service.handle_tool(call.tool_name, call.parameters, call.conversation_id)
        except Exception as e:
            logger.exception(f"Voice webhook error for tool {call.tool_name}")
            raise HTTPException(status_code=500, detail=str(e) or "Webhook processing failed")

    @app.post("/api/elevenlabs/webhook/{tool}")
    async def voice_tool_webhook(tool: str, request: Request, services: Services = Depends(get_services)):
        """Server tool call from the ElevenLabs agent, one URL per tool"""
        body = await request.body()
        _check_signature(request, body, webhook_secret)
        parameters = await _read_json(request, allow_empty=True)
        logger.info(f"Voice webhook tool {tool} with params {parameters}")

        try:
            return await services.voice_service.handle_tool(tool, parameters, parameters.get("conversation_id"))
        except Exception as e:
            logger.exception(f"Voice webhook error for tool {tool}")
            raise HTTPException(status_code=500, detail=str(e) or "Webhook processing failed")

    @app.post("/api/elevenlabs/signed-url", response_model=SignedUrlResponse)
    async def voice_signed_url(request: SignedUrlRequest, services: Services = Depends(get_services)):
        """Signed URL for the browser to start a voice conversation"""
        if not services.voice_service.is_configured:
            return _error_response(
                503,
                "Voice service not configured",
                details="ElevenLabs API key or Agent ID is missing. "
                        "Configure ELEVENLABS_API_KEY and ELEVENLABS_AGENT_ID.",
                configured=False,
            )
        try:
            return await services.voice_service.signed_url()
        except ElevenLabsError as e:
            logger.error(f"Signed URL error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Order endpoints
    @app.post("/api/orders", response_model=CreateOrderResponse)
    async def create_order(request: CreateOrderRequest, services: Services = Depends(get_services)):
        """Check out the session's current order"""
        try:
            order = await services.checkout_service.submit(
                request.session_id,
                request.restaurant_id,
                request.table_id,
                tip=request.tip,
                payment_method=request.payment_method,
                customer_id=request.customer_id,
                special_instructions=request.special_instructions,
            )
            return {"success": True, "order": order.to_document()}
        except (EmptyOrderError, CheckoutError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except OrderConflictError as e:
            logger.warning(f"Checkout conflict for session {request.session_id}: {e}")
            raise HTTPException(status_code=409, detail="Order changed during checkout, please retry")
        except Exception as e:
            logger.exception(f"Error creating order for session {request.session_id}")
            raise HTTPException(status_code=500, detail="Failed to create order")

    @app.get("/api/orders", response_model=OrdersResponse)
    async def list_orders(session_id: Optional[str] = Query(None, alias="sessionId"),
                          customer_id: Optional[str] = Query(None, alias="customerId"),
                          restaurant_id: Optional[str] = Query(None, alias="restaurantId"),
                          status: Optional[str] = Query(None, description="Comma-separated statuses"),
                          limit: int = Query(20, ge=1, le=100),
                          services: Services = Depends(get_services)):
        """Orders of a customer, session or restaurant, newest first"""
        statuses = [s.strip() for s in status.split(",") if s.strip()] if status else None
        try:
            orders = await services.checkout_service.list_orders(
                session_id=session_id,
                customer_id=customer_id,
                restaurant_id=restaurant_id,
                statuses=statuses,
                limit=limit,
            )
            return {"orders": orders}
        except CheckoutError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Error fetching orders: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch orders")

    @app.patch("/api/orders", response_model=UpdateOrderStatusResponse)
    async def update_order_status(request: UpdateOrderStatusRequest, services: Services = Depends(get_services)):
        """Move an order through its lifecycle"""
        try:
            order = await services.checkout_service.update_status(
                request.order_id, request.status, request.payment_status
            )
            return {"success": True, "message": f"Order status updated to {request.status}", "order": order}
        except CheckoutError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except DocumentNotFoundError:
            raise HTTPException(status_code=404, detail="Order not found")
        except OrderConflictError as e:
            logger.warning(f"Status update conflict: {e}")
            raise HTTPException(status_code=409, detail="Order changed concurrently, please retry")
        except Exception as e:
            logger.exception(f"Error updating order {request.order_id}")
            raise HTTPException(status_code=500, detail="Failed to update order")

    # Menu endpoints
    @app.get("/api/menu", response_model=MenuResponse)
    async def get_menu(restaurant_id: str = Query(..., alias="restaurantId", min_length=1),
                       category_id: Optional[str] = Query(None, alias="categoryId"),
                       services: Services = Depends(get_services)):
        """Menu items for a restaurant, optionally filtered by category"""
        try:
            menu = await services.menu_service.get_menu_for_restaurant(restaurant_id)
            if category_id:
                menu = [item for item in menu if item.category_id == category_id]
            return {"items": [item.to_document() for item in menu]}
        except Exception as e:
            logger.error(f"Error fetching menu: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch menu")

    return app


app = create_app()


def main():
    """Run the API with uvicorn"""
    uvicorn.run("tableside.app:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
