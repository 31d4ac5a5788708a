"""Document analysis"""

from lexia_core_lib.core.documents.analysis import DocumentAnalysisBridge, build_analysis_request

__all__ = [
    "DocumentAnalysisBridge",
    "build_analysis_request",
]
