"""Service layer for business logic."""

from .classifier import FallbackClassifier, KeywordClassifier, LLMClassifier, build_classifier
from .completion import CompletionService, OpenAICompletionClient
from .context import ContextAssembler
from .mode_history import ModeHistory
from .quota import QuotaLedger
from .renewal import RenewalGate
from .sessions import SessionController
from .titles import TitleGenerator

__all__ = [
    "CompletionService",
    "OpenAICompletionClient",
    "KeywordClassifier",
    "LLMClassifier",
    "FallbackClassifier",
    "build_classifier",
    "ContextAssembler",
    "ModeHistory",
    "QuotaLedger",
    "RenewalGate",
    "SessionController",
    "TitleGenerator",
]
