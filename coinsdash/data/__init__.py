"""Record loading, normalization, report lineage and the in-memory session."""
from .errors import IngestionError, LineageError, ReportLockedError, UnknownReportError
from .loader import load_batch, load_paths, load_upload
from .schemas import ActionFilter, Report, ReportKind, TransactionRecord, frame_from_records
from .lineage import LineageState
from .store import SessionStore
