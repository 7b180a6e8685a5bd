"""ContractGuard -- hybrid rule-based and AI contract clause risk analysis."""

__version__ = "1.0.0"

from .adapter import Failure, ModelAnalysis, ModelAnalysisAdapter
from .config import Settings
from .detector import PatternDetector
from .engine import ContractRiskEngine
from .llm import CompletionClient, CompletionError, FailureReason, LLMClient
from .merger import merge
from .models import (
    AnalysisResult,
    Category,
    ContractType,
    Recommendation,
    RiskLevel,
    RiskyClause,
    Severity,
)
from .parsers import DocumentError, ExtractedDocument, extract_text
from .records import ContractRecord, ProcessingStatus, process_contract
from .report import render_markdown
from .scoring import recommend, risk_level, score

__all__ = [
    # Core
    "ContractRiskEngine",
    "AnalysisResult",
    "RiskyClause",
    "Severity",
    "Category",
    "ContractType",
    "Recommendation",
    "RiskLevel",
    # Pipeline stages
    "PatternDetector",
    "ModelAnalysisAdapter",
    "ModelAnalysis",
    "Failure",
    "merge",
    "score",
    "recommend",
    "risk_level",
    # Model client
    "CompletionClient",
    "CompletionError",
    "FailureReason",
    "LLMClient",
    "Settings",
    # Documents and records
    "DocumentError",
    "ExtractedDocument",
    "extract_text",
    "ContractRecord",
    "ProcessingStatus",
    "process_contract",
    "render_markdown",
]
