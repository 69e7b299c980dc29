"""
Exception taxonomy

Parsing outcomes (not financial, no amount, already processed) are values,
not exceptions; see models.OutcomeStatus. Only store failures propagate out
of the pipeline.
"""


class TxnExtractorError(Exception):
    """Base class for all package errors"""


class ConfigurationError(TxnExtractorError):
    """A setting could not be parsed"""


class StoreUnavailable(TxnExtractorError):
    """The persistence collaborator could not be reached; retry next cycle"""


class DuplicateMessage(TxnExtractorError):
    """The ledger already holds an entry for this message id"""

    def __init__(self, message_id: str):
        super().__init__(f"Message already processed: {message_id}")
        self.message_id = message_id


class RuleCompilationError(TxnExtractorError):
    """A stored extraction rule has an invalid pattern"""

    def __init__(self, rule_id: str, pattern: str, reason: str):
        super().__init__(f"Invalid pattern in rule {rule_id}: {pattern!r} ({reason})")
        self.rule_id = rule_id
        self.pattern = pattern
        self.reason = reason
