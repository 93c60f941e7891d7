"""Live distribution engine for the Living Art dashboard.

Public API:
    ViewMode            - The fixed set of dashboard views
    Snapshot            - Immutable full dashboard state for one cycle
    SourceCache         - Per-source TTL cache with stale fallback
    SnapshotAggregator  - Builds and filters snapshots from the source caches
    filter_snapshot     - Reshapes a snapshot for a view
    ConnectionManager   - Live client set, heartbeat and broadcast
    RefreshScheduler    - Periodic and on-demand refresh cycles
    DashboardHub        - Control operations used by the HTTP layer
    create_hub          - Factory that wires everything from Settings
    create_dashboard_router - FastAPI router factory for the control endpoints
"""

from .aggregator import SnapshotAggregator
from .cache import CacheResult, CacheStatus, SourceCache
from .config import Settings
from .connections import ConnectionManager, ConnectionState
from .errors import InvalidView, SourceError
from .factory import create_aggregator, create_hub, create_sources
from .hub import DashboardHub
from .models import Snapshot, ViewMode, parse_view
from .routes import create_dashboard_router
from .scheduler import RefreshScheduler
from .views import UnknownViewWarning, filter_snapshot, unknown_view_message
from .ws_server import WebSocketServer

__all__ = [
    "CacheResult",
    "CacheStatus",
    "ConnectionManager",
    "ConnectionState",
    "DashboardHub",
    "InvalidView",
    "RefreshScheduler",
    "Settings",
    "Snapshot",
    "SnapshotAggregator",
    "SourceCache",
    "SourceError",
    "UnknownViewWarning",
    "ViewMode",
    "WebSocketServer",
    "create_aggregator",
    "create_dashboard_router",
    "create_hub",
    "create_sources",
    "filter_snapshot",
    "parse_view",
    "unknown_view_message",
]
