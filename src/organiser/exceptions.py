"""Custom exceptions for the screenshot organiser package."""


class OrganiserError(Exception):
    """Base exception for all organiser errors."""
    pass


class ConfigError(OrganiserError):
    """Config file is missing, unreadable or malformed."""
    pass


class WatchSetupError(OrganiserError):
    """The screenshots directory cannot be resolved or watched."""
    pass


class OrganiserAlreadyRunningError(OrganiserError):
    """Organiser process is already running."""
    pass


class JobError(OrganiserError):
    """Error raised by a pipeline job for a single file."""
    pass


class DecodeError(JobError):
    """Image could not be read or its format is unsupported."""
    pass


class EncodeError(JobError):
    """Image could not be written in the target format."""
    pass


class MissingExtensionError(JobError):
    """A move job was given a path without a file extension."""
    pass


class FilesystemError(JobError):
    """Copy, rename, delete or mkdir failed."""
    pass
