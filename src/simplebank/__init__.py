"""simplebank: transactional money transfers between ledger accounts."""

__version__ = "0.1.0"
