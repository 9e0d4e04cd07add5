"""Конфигурация проекта Pipelines Demux."""
