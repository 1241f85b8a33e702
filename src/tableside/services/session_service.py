"""
Session service for conversation sessions and their draft orders.

Writes are read-modify-write cycles guarded by the document version: the
write only lands if nobody changed the session since it was read, otherwise
the session is re-read and the change is applied again.
"""
import copy
import logging
from typing import Callable, List, Optional, Tuple, TypeVar

from tableside.config.settings import ORDER_WRITE_RETRIES
from tableside.models.order_models import ChatMessage, ChatSession, OrderDraft, utc_now
from tableside.services.order_service import EmptyOrderError
from tableside.services.store import DocumentNotFoundError, DocumentStore

logger = logging.getLogger(__name__)

SESSION_COLLECTION = "chatSessions"

T = TypeVar("T")

# Receives a private copy of the draft, returns the new draft (or None) and an outcome
OrderMutation = Callable[[Optional[OrderDraft]], Tuple[Optional[OrderDraft], T]]


class OrderConflictError(Exception):
    """Raised when concurrent writers keep changing the same session"""


class SessionService:
    def __init__(self, store: DocumentStore, max_retries: int = ORDER_WRITE_RETRIES):
        self.store = store
        self.max_retries = max(1, max_retries)

    async def get_session(self, session_id: str) -> Optional[ChatSession]:
        doc = await self.store.get(SESSION_COLLECTION, session_id)
        return ChatSession.from_document(doc) if doc else None

    async def get_or_create_session(self, session_id: str, restaurant_id: str, table_id: str,
                                    language: str = "en", customer_id: Optional[str] = None) -> ChatSession:
        """Return the stored session, creating it on first use"""
        session = await self.get_session(session_id)
        if session:
            return session

        session = ChatSession(
            id=session_id,
            restaurantId=restaurant_id,
            tableId=table_id,
            language=language or "en",
            customerId=customer_id,
        )
        created = await self.store.create(SESSION_COLLECTION, session_id, session.to_document())
        if created:
            logger.info(f"Created session {session_id} for table {table_id} at {restaurant_id}")

        # Another request may have created it first; the stored copy wins
        return await self.get_session(session_id)

    async def _refresh(self, session: ChatSession):
        fresh = await self.get_session(session.id)
        if fresh is None:
            raise DocumentNotFoundError(SESSION_COLLECTION, session.id)
        session.currentOrder = fresh.currentOrder
        session.messages = fresh.messages
        session.version = fresh.version

    async def mutate_order(self, session: ChatSession, mutation: OrderMutation) -> T:
        """Apply a mutation to the session's draft and persist it.

        Exceptions raised by ``mutation`` propagate without writing anything.
        ``session`` is updated only after the write succeeded.
        """
        for attempt in range(1, self.max_retries + 1):
            draft = copy.deepcopy(session.currentOrder)
            new_draft, outcome = mutation(draft)
            if new_draft is not None and not new_draft.items:
                new_draft = None

            version = await self.store.update(
                SESSION_COLLECTION,
                session.id,
                {
                    "currentOrder": new_draft.to_dict() if new_draft else None,
                    "updatedAt": utc_now(),
                },
                expected_version=session.version,
            )
            if version is not None:
                session.currentOrder = new_draft
                session.version = version
                return outcome

            logger.warning(f"Order write conflict on session {session.id} (attempt {attempt}), retrying")
            await self._refresh(session)

        raise OrderConflictError(f"Could not update order for session {session.id} after {self.max_retries} attempts")

    async def append_messages(self, session: ChatSession, messages: List[ChatMessage]):
        """Append messages to the session transcript"""
        for attempt in range(1, self.max_retries + 1):
            combined = session.messages + messages
            version = await self.store.update(
                SESSION_COLLECTION,
                session.id,
                {
                    "messages": [m.to_dict() for m in combined],
                    "updatedAt": utc_now(),
                },
                expected_version=session.version,
            )
            if version is not None:
                session.messages = combined
                session.version = version
                return

            logger.warning(f"Transcript write conflict on session {session.id} (attempt {attempt}), retrying")
            await self._refresh(session)

        raise OrderConflictError(f"Could not append messages to session {session.id}")

    async def take_order(self, session: ChatSession) -> OrderDraft:
        """Detach the draft for checkout and clear it in one versioned write.

        The returned draft is the one that was cleared: if another writer
        changed the order first, the clear is retried against the fresh draft.
        """
        def take(draft):
            if not draft or not draft.items:
                raise EmptyOrderError("No items in order")
            return None, draft

        return await self.mutate_order(session, take)

    async def restore_order(self, session: ChatSession, draft: OrderDraft):
        """Put a taken draft back unless the customer already started a new one"""
        await self.mutate_order(session, lambda current: (current if current else draft, None))
