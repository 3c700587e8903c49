#!/usr/bin/env python3
"""ErdyTV - an IPTV player built with Python Flet."""
import logging
import os

import flet as ft
from erdytv.app import main


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("ERDYTV_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    ft.app(target=main)
