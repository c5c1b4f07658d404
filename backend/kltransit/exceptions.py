"""
Error taxonomy for fare-model training and LLM relays.

Per-record join failures during sample building are not errors; they are
reported as skips by ``training_data.build_training_set``.
"""


class FareModelError(Exception):
    """Base exception for a failed fare-model training run."""
    pass


class DataLoadError(FareModelError):
    """Raised when fares.json or station.json is missing or unparseable."""
    pass


class EmptyTrainingSetError(FareModelError):
    """Raised when no fare entry could be joined to station coordinates."""
    pass


class ModelFormatError(FareModelError):
    """Raised when the collaborator reply is not parseable as a JSON object."""
    pass


class EmptyModelError(FareModelError):
    """Raised when a parsed fare model has no usable lines."""
    pass


class CollaboratorCallError(FareModelError):
    """Raised when the LLM call itself fails (credentials, network, quota)."""
    pass
