"""
Services - business logic kept out of the CLI.
"""

from skm.services.status_service import collect_status
from skm.services.status_display import display_status

__all__ = ["collect_status", "display_status"]
