"""SupportDesk: multi-tenant support ticket portal."""

__version__ = "0.1.0"
