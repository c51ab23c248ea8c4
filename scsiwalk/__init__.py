"""Capture SCSI diagnostic exchanges as replayable records."""

__version__ = "0.1.0"
