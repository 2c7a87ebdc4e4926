"""Record sources (external collaborators supplying raw records)."""

from .csv_layer import CSVLayer, RecordSource

__all__ = ["CSVLayer", "RecordSource"]
