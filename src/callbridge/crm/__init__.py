"""CRM integration (GoHighLevel)."""
from .ghl_client import CrmContact, GoHighLevelClient, get_crm_client, reset_crm_client

__all__ = ["CrmContact", "GoHighLevelClient", "get_crm_client", "reset_crm_client"]
