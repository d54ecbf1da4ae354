from .activity import log_activity
from .numbering import next_document_number, next_sequence_code

__all__ = [
    "log_activity",
    "next_document_number",
    "next_sequence_code",
]
