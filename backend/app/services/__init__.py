"""
Services module.

Provides business logic for daily route planning:
- Route optimizer (external service with nearest-neighbour fallback)
- Route and stop management
- Question templates and stop responses
- Day report aggregation and exports
- Throttled geocoding
- CSV import of stops and questions
"""
from app.services.csv_import import CSVImportError, ImportResult
from app.services.geocoding import GeocodingClient, geocoding_client
from app.services.pdf_export import PDFExporter, pdf_exporter
from app.services.question_service import DEFAULT_QUESTIONS, QuestionService
from app.services.report_service import ReportService
from app.services.route_service import RouteService
from app.services.routing import RouteOptimizer, route_optimizer

__all__ = [
    "CSVImportError",
    "ImportResult",
    "GeocodingClient",
    "geocoding_client",
    "PDFExporter",
    "pdf_exporter",
    "DEFAULT_QUESTIONS",
    "QuestionService",
    "ReportService",
    "RouteService",
    "RouteOptimizer",
    "route_optimizer",
]
