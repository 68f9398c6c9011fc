"""CLI entrypoints for bulkops."""

from bulkops.cli.batch import app as batch_app

__all__ = ["batch_app"]
