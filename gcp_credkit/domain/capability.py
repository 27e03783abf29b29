"""
Capability Model - Optional operations a credentials source may provide.
"""

from enum import Enum


class Capability(Enum):
    """
    Closed set of optional operations.

    Query with CredentialsPort.supports_capability() before calling the
    matching method; sources raise UnsupportedOperationError otherwise.
    """
    CAN_FETCH_PROJECT_ID = "can_fetch_project_id"
    CAN_FETCH_SERVICE_ACCOUNT_EMAIL = "can_fetch_service_account_email"
    CAN_GENERATE_SIGNATURE = "can_generate_signature"
