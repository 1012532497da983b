"""
Infrastructure Layer

Adapters for the wire protocol, resource acquisition, extraction,
permissions and logging.
"""
