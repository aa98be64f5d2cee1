"""Entrypoint for ``python -m onvif_device_client``."""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
