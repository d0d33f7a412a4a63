"""
Authentication event and token type classification.

Classifies a captured network transaction with two ordered rule chains
(chain of responsibility, first match wins): one for the authentication
event, one for the credential kind.

Quick Start:
    >>> from auth_classifier.classification import classify
    >>>
    >>> result = classify(record)
    >>> print(result.event_type, result.token_type)
"""
from auth_classifier.classification.classifier import TransactionClassifier, classify
from auth_classifier.classification.base import ClassificationRule
from auth_classifier.classification.context import ClassificationContext
from auth_classifier.classification.headers import HeaderView
from auth_classifier.classification.jwt import NOT_JWT, DecodedJwt, decode_jwt

__all__ = [
    "TransactionClassifier",
    "classify",
    "ClassificationRule",
    "ClassificationContext",
    "HeaderView",
    "DecodedJwt",
    "NOT_JWT",
    "decode_jwt",
]
