# nlp_engine/__init__.py
"""
Rule-based language layer for the task chatbot: entity extraction,
filter-query building and intent classification.
"""

from nlp_engine.entity_extractor import ChatEntities, ContainmentMatcher, EntityExtractor, NameMatcher
from nlp_engine.intent_classifier import IntentClassifier
from nlp_engine.query_builder import FilterQuery, build_task_query, period_scope

__all__ = [
    'ChatEntities',
    'ContainmentMatcher',
    'EntityExtractor',
    'FilterQuery',
    'IntentClassifier',
    'NameMatcher',
    'build_task_query',
    'period_scope',
]
