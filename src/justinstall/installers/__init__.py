"""Executors that extract, mount and install downloaded artifacts."""
