# Checkwright check layer
# Declarative checks against a browser page, its elements and HTTP responses

from .aggregator import ErrorAggregator
from .drivers import BrowserDriver, ElementDriver, PageDriver, ServiceResponse
from .element import ElementChecks
from .engine import CheckEngine, Gate
from .page import PageChecks
from .policies import Comparison, compare, compile_pattern, json_equal
from .recorder import ResultRecorder
from .response import ResponseChecks, resolve_path
from .results import CheckResult, CheckStatus
from .session import CheckSession
from .sinks import AllureReportSink, JsonLinesReportSink, MemoryReportSink, ReportSink
from .targets import ElementTarget, Locator, ResponseFacet, TableCell, validate_json_path

__all__ = [
    # Session
    "CheckSession",
    "CheckEngine",
    "Gate",

    # Check families
    "ElementChecks",
    "PageChecks",
    "ResponseChecks",

    # Targets and resolvers
    "ElementTarget",
    "Locator",
    "ResponseFacet",
    "TableCell",
    "validate_json_path",
    "resolve_path",
    "BrowserDriver",
    "ElementDriver",
    "PageDriver",
    "ServiceResponse",

    # Comparison
    "Comparison",
    "compare",
    "compile_pattern",
    "json_equal",

    # Results and reporting
    "CheckResult",
    "CheckStatus",
    "ResultRecorder",
    "ErrorAggregator",
    "ReportSink",
    "MemoryReportSink",
    "AllureReportSink",
    "JsonLinesReportSink",
]
