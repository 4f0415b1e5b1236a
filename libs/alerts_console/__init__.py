"""Client-side service layer between the monitoring console and the alerting API."""

from .actions import EmailActionResolver
from .client import AlertingApiClient, AlertingApiError, Page
from .errors import ErrorReporter
from .gateway import AlertsGateway
from .manager import AlertsManager
from .normalizer import ResponseNormalizer
from .triggers import TriggerAggregator, partition_conditions

__all__ = [
    "AlertingApiClient",
    "AlertingApiError",
    "AlertsGateway",
    "AlertsManager",
    "EmailActionResolver",
    "ErrorReporter",
    "Page",
    "ResponseNormalizer",
    "TriggerAggregator",
    "partition_conditions",
]
