"""Customer feedback: one submission per table session."""
from __future__ import annotations

from typing import Any

from app.core.async_db import AsyncDBProxy
from app.core.exceptions import DuplicateSubmissionException, ValidationException
from app.core.idempotency import FEEDBACK_NAMESPACE
from app.core.session_store import SessionStore
from app.core.utils import new_id, utc_now_iso
from app.domain.entities import OrderFeedback
from logging_config import logger


class FeedbackService:
    def __init__(self, db: Any, sessions: SessionStore, dispatcher: Any = None):
        self.db = AsyncDBProxy.wrap(db)
        self.sessions = sessions
        self.dispatcher = dispatcher

    async def submit_feedback(self, session_id: str, feedback: dict[str, Any]) -> dict[str, Any]:
        """Store and forward feedback; a session may only do this once."""
        if not session_id:
            raise ValidationException("Session is required", required=["sessionId"])
        if self.sessions.has_feedback_been_submitted(session_id):
            raise DuplicateSubmissionException("Feedback already submitted for this session")

        try:
            entry = OrderFeedback.model_validate(
                {**feedback, "session_id": session_id, "timestamp": utc_now_iso()}
            )
        except ValueError as e:
            raise ValidationException(f"Invalid feedback: {e}") from e

        feedback_id = new_id()
        # The store-side claim covers sessions that outlived the local cache
        if await self.db.claim_key(FEEDBACK_NAMESPACE, session_id, feedback_id):
            self.sessions.mark_feedback_submitted(session_id)
            raise DuplicateSubmissionException("Feedback already submitted for this session")

        await self.db.add_feedback(entry.to_document(), feedback_id=feedback_id)
        self.sessions.mark_feedback_submitted(session_id)
        stored = {**entry.to_document(), "id": feedback_id}
        logger.info(f"📝 Feedback {feedback_id} ({entry.rating}/5) for table {entry.table_number}")

        if self.dispatcher is not None:
            await self.dispatcher.send_feedback(entry.user_id, stored)
        return stored
