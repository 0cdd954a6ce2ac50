"""Backend services: run storage and pipeline execution."""
