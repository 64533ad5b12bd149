from .order import order, cmp_int, cmp_double, cmp_float
from .sessions import Session, compress_sessions, compress_movement, sessions_to_frame
from .flows import aggregate_flows, aggregate_session_flows, flows_to_frame, flow_stat, format_edge
from .gyration import EARTH_RADIUS_KM, radius_of_gyration, gyration_from_frame
from .spec_errors import (
    SpecError,
    ShapeMismatch,
    MissingColumns,
    EmptyInput,
    InvalidThreshold,
    InvalidWeight,
    DegenerateCentroid,
)
from .config import AnalysisParams, IOParams
from .engine import EngineConfig, MobilityEngine, run_analysis
