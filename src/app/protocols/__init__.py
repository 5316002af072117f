"""Protocolos e contratos consumidos pelo core de agendamentos."""

from .appointment_store import AppointmentStoreProtocol, ProviderLockProtocol
from .job_scheduler import JobSchedulerProtocol
from .notification_service import (
    AdministratorDirectoryProtocol,
    NotificationServiceProtocol,
)
from .payment_store import PaymentStoreProtocol
from .provider_directory import (
    LocationDirectoryProtocol,
    ProviderDirectoryProtocol,
    ServiceOptionCatalogProtocol,
)
from .travel import CoverageResolverProtocol, TravelEstimatorProtocol

__all__ = [
    "AdministratorDirectoryProtocol",
    "AppointmentStoreProtocol",
    "CoverageResolverProtocol",
    "JobSchedulerProtocol",
    "LocationDirectoryProtocol",
    "NotificationServiceProtocol",
    "PaymentStoreProtocol",
    "ProviderDirectoryProtocol",
    "ProviderLockProtocol",
    "ServiceOptionCatalogProtocol",
    "TravelEstimatorProtocol",
]
