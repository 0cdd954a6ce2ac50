"""RFQ proposal engine - staged LLM generation of government contract responses."""

__version__ = "0.1.0"
