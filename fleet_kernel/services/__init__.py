"""Kernel services: flush-only writers around the pure engines."""

from fleet_kernel.services.quote_admin_service import QuoteAdminService
from fleet_kernel.services.quote_pricing_service import QuotePricingService
from fleet_kernel.services.quote_status_service import QuoteStatusService

__all__ = [
    "QuoteAdminService",
    "QuotePricingService",
    "QuoteStatusService",
]
