"""Pipelines Demux - разделение перемешанного лога на цепочки пайплайнов."""

__version__ = "0.1.0"
