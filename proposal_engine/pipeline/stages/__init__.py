"""Generation stages, one schema-validated model call each."""

from .base import StageExecutor
from .data_extraction import DataExtractionInput, DataExtractionStage, classification_alignment
from .document_writing import DocumentWritingInput, DocumentWritingStage
from .insight_analysis import InsightAnalysisInput, InsightAnalysisStage
from .strategy_synthesis import StrategySynthesisInput, StrategySynthesisStage

__all__ = [
    "StageExecutor",
    "DataExtractionInput",
    "DataExtractionStage",
    "classification_alignment",
    "InsightAnalysisInput",
    "InsightAnalysisStage",
    "StrategySynthesisInput",
    "StrategySynthesisStage",
    "DocumentWritingInput",
    "DocumentWritingStage",
]
