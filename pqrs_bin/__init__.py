"""pqrs-bin — formula and installer for the prebuilt pqrs Parquet CLI."""

__version__ = "0.1.0"
