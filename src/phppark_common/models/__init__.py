"""Shared Pydantic models."""

from phppark_common.models.audit_event import AuditEvent
from phppark_common.models.settings import GlobalSettings
from phppark_common.models.site import CertificatePair, Site, SiteKind, SiteRegistry

__all__ = [
    "AuditEvent",
    "CertificatePair",
    "GlobalSettings",
    "Site",
    "SiteKind",
    "SiteRegistry",
]
