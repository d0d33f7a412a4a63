import logging
from typing import Iterable, List, Optional, Sequence

from auth_classifier.classification.base import ClassificationRule
from auth_classifier.classification.context import ClassificationContext
from auth_classifier.classification.event_rules import default_event_rules
from auth_classifier.classification.token_rules import default_token_rules
from auth_classifier.domain.enums import EventType, TokenKind
from auth_classifier.domain.models import EventClassification, TokenType, TransactionRecord

logger = logging.getLogger(__name__)


def _link(rules: Sequence[ClassificationRule]) -> Optional[ClassificationRule]:
    """Link rules in list order and return the head of the chain"""
    if not rules:
        return None

    for i in range(len(rules) - 1):
        rules[i].set_next(rules[i + 1])

    return rules[0]


def _describe(chain: Optional[ClassificationRule]) -> List[str]:
    lines = []
    current = chain
    priority = 1

    while current:
        lines.append(f"{priority}. {current}")
        current = current.next_rule
        priority += 1

    return lines


class TransactionClassifier:
    """
    Main engine for classifying captured transactions.

    Runs two independent chains over the same normalized record:
    1. Event-type chain (Login, Logout, TokenRefresh, ExpiryCheck, Access)
    2. Token-type chain (JWT, opaque, API key, cookies, acquisitions...)

    Rules hold no per-call state, so one engine can be shared freely.

    Usage:
        # Production - built-in rule chains
        classifier = TransactionClassifier()

        # Testing - inject custom chains
        classifier = TransactionClassifier(event_rules=[...], token_rules=[...])

        result = classifier.classify(record)
        results = classifier.classify_many(records)
    """

    def __init__(
        self,
        event_rules: Optional[Sequence[ClassificationRule[EventType]]] = None,
        token_rules: Optional[Sequence[ClassificationRule[TokenType]]] = None,
    ):
        """
        Initialize the classifier.

        Args:
            event_rules: Optional event-type rules in priority order
            token_rules: Optional token-type rules in priority order
        """
        self._event_chain = _link(list(event_rules) if event_rules is not None else default_event_rules())
        self._token_chain = _link(list(token_rules) if token_rules is not None else default_token_rules())

    def classify(self, record: TransactionRecord) -> EventClassification:
        """
        Classify a single transaction.

        Never raises for missing or malformed fields: those fall through to
        Unclassified / Unknown.

        Args:
            record: Transaction to classify

        Returns:
            EventClassification with the display fields echoed from the record

        Example:
            ```
            >>> classifier = TransactionClassifier()
            >>> result = classifier.classify(record)
            >>> result.event_type
            <EventType.ACCESS: 'Access'>
            ```
        """
        context = ClassificationContext(record)

        event_type = None
        if self._event_chain:
            event_type = self._event_chain.classify(context)

        token_type = None
        if self._token_chain:
            token_type = self._token_chain.classify(context)

        result = EventClassification(
            event_type=event_type or EventType.UNCLASSIFIED,
            token_type=token_type or TokenType(TokenKind.UNKNOWN),
            url=record.url,
            method=record.method,
            status=record.status,
            headers=dict(record.request_headers or {}),
            timestamp=record.timestamp,
        )

        logger.debug("Classified %r as %r", record, result)
        return result

    def classify_many(self, records: Iterable[TransactionRecord]) -> List[EventClassification]:
        """Classify records, keeping their order"""
        return [self.classify(record) for record in records]

    def get_rule_chain_info(self) -> str:
        """
        Get information about both rule chains.

        Useful for debugging and understanding rule priority.
        """
        lines = ["Event type rules:"]
        lines.extend(_describe(self._event_chain) or ["No rules loaded"])
        lines.append("Token type rules:")
        lines.extend(_describe(self._token_chain) or ["No rules loaded"])
        return "\n".join(lines)

    def __repr__(self) -> str:
        num_event = len(_describe(self._event_chain))
        num_token = len(_describe(self._token_chain))
        return f"TransactionClassifier({num_event} event rules, {num_token} token rules)"


_default_classifier: Optional[TransactionClassifier] = None


def classify(record: TransactionRecord) -> EventClassification:
    """Classify a record with the built-in rule chains"""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = TransactionClassifier()
    return _default_classifier.classify(record)
