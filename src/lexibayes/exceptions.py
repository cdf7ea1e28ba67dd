"""Custom exceptions for LexiBayes."""

from __future__ import annotations


class LexiBayesError(Exception):
    """Base exception for all LexiBayes errors."""
    pass


class ClassifierNotFoundError(LexiBayesError, LookupError):
    """Raised when a classifier name is absent from the cache and the backend."""
    pass


class InvalidSourceError(LexiBayesError, ValueError):
    """Raised when a source/destination is not one of the known backends."""
    pass


class InvalidOptionsError(LexiBayesError, ValueError):
    """Raised for malformed classify or lifecycle arguments."""
    pass


class InvalidResponseTypeError(LexiBayesError, ValueError):
    """Raised when classify is asked for an unsupported response mode."""
    pass


class BackendIOError(LexiBayesError, OSError):
    """Raised when a persistence backend fails to read or write."""
    pass


class CorruptClassifierError(BackendIOError):
    """Raised when a stored classifier payload cannot be deserialized."""
    pass


class ClassifierNotTrainedError(LexiBayesError):
    """Raised when classifying with a classifier that has no documents."""
    pass


class TaggingDisabledError(LexiBayesError):
    """Raised when POS tagging is used without being enabled at construction."""
    pass
