"""Module entry point for the lvmcollector CLI."""

from .main import main

main()
