"""RequestFlow: approval workflow engine for travel, transport, visa,
accommodation and expense claim requests."""

__version__ = "0.3.0"
