"""Pipeline stages and the use cases built from them."""

from .attachments import FetchAttachment
from .classify import ClassifyText
from .ingest_message import IngestMessage, IngestReport, PipelineOutcome
from .notify import NotifyChat
from .persist import PersistNote
from .search import SearchNotes

__all__ = [
    "FetchAttachment",
    "ClassifyText",
    "IngestMessage",
    "IngestReport",
    "PipelineOutcome",
    "NotifyChat",
    "PersistNote",
    "SearchNotes",
]
