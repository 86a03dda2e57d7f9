"""Exceptions raised while preparing boot media."""

from __future__ import annotations


class TfbootError(Exception):
    """Base class for all tfboot errors."""


class UserAbort(TfbootError):
    """The user typed the exit token at a prompt."""


class ConfigError(TfbootError):
    """The configuration file could not be loaded."""


class ProvisionError(TfbootError):
    """A destructive step failed and the run cannot continue."""


class FormatError(ProvisionError):
    pass


class MountError(ProvisionError):
    pass


class DownloadError(ProvisionError):
    pass


class EjectError(ProvisionError):
    pass
