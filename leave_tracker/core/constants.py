"""
Service-wide constants
"""

SERVICE_NAME = "leave-tracker"

# Route segments for the manager status views
STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
