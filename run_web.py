#!/usr/bin/env python3
"""
Main entry point for the Pelada session manager web application.

This script configures logging and launches the Flask-based JSON API.
"""
import logging

from pelada.ui.web_app import run_web_app
from pelada.utils import config

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host, port = config.get_server_address()
    run_web_app(host=host, port=port)
