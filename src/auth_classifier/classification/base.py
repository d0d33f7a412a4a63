from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from auth_classifier.classification.context import ClassificationContext

T = TypeVar("T")


class ClassificationRule(ABC, Generic[T]):
    """
    Abstract base class for all classification rules.

    Implements Chain of Responsibility:
    - Each rule tries to classify a transaction
    - If it can't it passes to the next rule
    - Rules are tried in priority order, the first match wins

    Usage:
        Create chain: specific -> general -> default
        ```
        login_rule = LoginRule()
        logout_rule = LogoutRule()
        default_rule = CredentialFallbackRule()

        login_rule.set_next(logout_rule).set_next(default_rule)

        event_type = login_rule.classify(context)
        ```
    """

    def __init__(self):
        self._next_rule: Optional["ClassificationRule[T]"] = None

    def set_next(self, rule: "ClassificationRule[T]") -> "ClassificationRule[T]":
        """
        Set the next rule in the chain.

        Args:
            rule: The next rule to try if this one doesn't match

        Returns:
            The rule that was set (for chaining)

        Example:
            `rule1.set_next(rule2).set_next(rule3)`
        """
        self._next_rule = rule
        return rule

    @property
    def next_rule(self) -> Optional["ClassificationRule[T]"]:
        return self._next_rule

    @abstractmethod
    def _matches(self, context: ClassificationContext) -> bool:
        """
        Check if this rule matches the transaction.

        Subclasses implement their specific matching logic here.

        Args:
            context: Normalized transaction to check

        Returns:
            True if this rule can classify this transaction
        """
        pass

    @abstractmethod
    def _get_result(self, context: ClassificationContext) -> T:
        """
        Get the classification for the transaction.

        Called only if _matches() returns True.
        """
        pass

    def classify(self, context: ClassificationContext) -> Optional[T]:
        """
        Attempt to classify a transaction.

        1. Checks if this rule matches
        2. If yes, returns its result
        3. If no, tries the next rule in the chain

        Returns:
            The result of the first matching rule, or None if no rule matched
        """
        if self._matches(context):
            return self._get_result(context)

        if self._next_rule:
            return self._next_rule.classify(context)

        return None

    def __repr__(self):
        return f"{self.__class__.__name__}()"
