"""
Read path: decode launchpad program logs into typed events.
"""
from .decoder import EventDecoder, extract_program_data, POOL_CREATED, TRADE, PHASE_CHANGE
from .encoder import encode_pool_created, encode_trade, encode_phase_change, encode_payload
from .stream import EventStream, LogBatch, LogSubscription

__all__ = [
    'EventDecoder', 'extract_program_data',
    'POOL_CREATED', 'TRADE', 'PHASE_CHANGE',
    'encode_pool_created', 'encode_trade', 'encode_phase_change', 'encode_payload',
    'EventStream', 'LogBatch', 'LogSubscription',
]
