"""In-memory store for the support portal."""

from .activity import ActivityRecorder
from .billing import BillingAggregator, InvoiceStateMachine
from .conversions import ApprovalStateMachine, ConversionWorkflow
from .directory import Directory, avatar_label
from .portal import PortalStore, create_store
from .seed import seed_tables
from .tables import EntityTables
from .tickets import TicketLifecycleEngine

__all__ = [
    "ActivityRecorder",
    "ApprovalStateMachine",
    "BillingAggregator",
    "ConversionWorkflow",
    "Directory",
    "EntityTables",
    "InvoiceStateMachine",
    "PortalStore",
    "TicketLifecycleEngine",
    "avatar_label",
    "create_store",
    "seed_tables",
]
