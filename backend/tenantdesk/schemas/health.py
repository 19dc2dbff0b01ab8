from typing import Any, Dict
from .base import ApiModel


class ServiceCheck(ApiModel):
    status: str
    details: Dict[str, Any] = {}


class HealthReport(ApiModel):
    status: str
    details: Dict[str, ServiceCheck]
