"""
xmi2conll: convert coreference and named entity annotations from UIMA XMI
files to the CoNLL-2012 format, aligned with an externally supplied tokenization.
"""

__version__ = "1.0.0"

from xmi2conll.aligner import Aligner
from xmi2conll.config import ConversionConfig
from xmi2conll.conll2012 import CoNLL2012Writer, parse_coref_column, read_conll2012
from xmi2conll.consumer import MentionConsumer, RecordingConsumer
from xmi2conll.mention import Entity, Mention
from xmi2conll.pipeline import convert_document, convert_tokens
from xmi2conll.tracker import MentionTracker

__all__ = [
    'Aligner',
    'CoNLL2012Writer',
    'ConversionConfig',
    'Entity',
    'Mention',
    'MentionConsumer',
    'MentionTracker',
    'RecordingConsumer',
    'convert_document',
    'convert_tokens',
    'parse_coref_column',
    'read_conll2012',
    '__version__',
]
