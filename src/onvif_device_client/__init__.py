"""Client-side decoding of ONVIF device-management responses."""

__all__ = ["capabilities", "config", "device", "logging", "navigator", "soap"]
__version__ = "0.1.0"
