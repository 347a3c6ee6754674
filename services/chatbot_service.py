# services/chatbot_service.py
"""
Chatbot Service - answers analytical questions about the tasks table.

Pipeline (one question, all reads sequential):
1. EntityExtractor   -> month / year / engineer / service / status
2. build_task_query  -> filtered task rows for those entities
3. IntentClassifier  -> which answer branch applies
4. ResponseGenerator -> answer text (may run its own aggregate query)

The storage handle is passed in; nothing here reaches for a global.
"""

import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

from config.settings import settings
from nlp_engine.entity_extractor import EntityExtractor, NameMatcher
from nlp_engine.intent_classifier import IntentClassifier
from nlp_engine.query_builder import build_task_query
from services.errors import ValidationError
from services.response_generator import ChatContext, ResponseGenerator

logger = logging.getLogger(__name__)


class ChatbotService:
    """Rule-based question answering over tasks."""

    def __init__(
        self,
        db,
        matcher: Optional[NameMatcher] = None,
        max_tasks: Optional[int] = None,
        top_n_default: Optional[int] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        self.db = db
        self.extractor = EntityExtractor(db, matcher)
        self.classifier = IntentClassifier()
        self.generator = ResponseGenerator(
            self.classifier,
            top_n_default=top_n_default or settings.TOP_N_DEFAULT,
        )
        self.max_tasks = max_tasks or settings.CHATBOT_MAX_TASKS
        self.today = today or date.today

    def answer(self, query: Any) -> Dict[str, Any]:
        """
        Answer one question.

        Returns:
            {"response", "tasks" (truncated), "count" (full), "filters"}

        Raises:
            ValidationError: query missing, blank or not a string
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Query is required")

        lower = query.lower().strip()
        entities = self.extractor.extract(query, self.today())
        filter_query = build_task_query(entities)
        tasks = self.db.query(filter_query.sql, filter_query.params)

        intent = self.classifier.classify(lower)
        logger.debug("Chatbot intent=%s filters=%s", intent, entities.to_filters())

        ctx = ChatContext(query=lower, entities=entities, tasks=tasks, db=self.db)
        response = self.generator.generate(intent, ctx)

        return {
            "response": response,
            "tasks": tasks[:self.max_tasks],
            "count": len(tasks),
            "filters": entities.to_filters(),
        }
