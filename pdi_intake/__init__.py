"""PD&I proposal intake: attachments, budget tables and webhook notifications."""

__version__ = "0.1.0"
