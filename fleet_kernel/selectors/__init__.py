"""Read-only selectors returning domain DTOs."""

from fleet_kernel.selectors.quote_selector import QuoteSelector
from fleet_kernel.selectors.reference_selector import ReferenceSelector

__all__ = ["QuoteSelector", "ReferenceSelector"]
