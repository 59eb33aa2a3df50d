# Classifieds notifier - shared components for all marketplaces
# Contains: models, storage, novelty, report, chunker, notifier, session, orchestrator

from .models import Listing, KSL, FACEBOOK_MARKETPLACE, CRAIGSLIST, ALL_SOURCES
from .errors import (
    ClassifiedsError,
    ExtractionError,
    PersistenceError,
    TransportError,
    SessionError,
)
from .novelty import filter_novel, collapse_duplicate_urls, select_novel
from .report import Report, ReportSection, append_query_results, render_report
from .chunker import MAX_FRAGMENT_LEN, chunk_message, utf16_length
from .storage import ListingStorage
from .base_extractor import ListingExtractor
from .session import BrowserSession
from .notifier import Notifier, TwilioSmsNotifier, TelegramNotifier, create_notifier
from .config import SearchConfig, TransportSettings, load_search_config, load_transport_settings
from .orchestrator import RunOrchestrator, RunResult, RunState, StageFailure

__all__ = [
    'Listing',
    'KSL',
    'FACEBOOK_MARKETPLACE',
    'CRAIGSLIST',
    'ALL_SOURCES',
    'ClassifiedsError',
    'ExtractionError',
    'PersistenceError',
    'TransportError',
    'SessionError',
    'filter_novel',
    'collapse_duplicate_urls',
    'select_novel',
    'Report',
    'ReportSection',
    'append_query_results',
    'render_report',
    'MAX_FRAGMENT_LEN',
    'chunk_message',
    'utf16_length',
    'ListingStorage',
    'ListingExtractor',
    'BrowserSession',
    'Notifier',
    'TwilioSmsNotifier',
    'TelegramNotifier',
    'create_notifier',
    'SearchConfig',
    'TransportSettings',
    'load_search_config',
    'load_transport_settings',
    'RunOrchestrator',
    'RunResult',
    'RunState',
    'StageFailure',
]
