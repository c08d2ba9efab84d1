"""GP practice comparison data: NHS Digital extracts to peer-group percentiles."""

__version__ = "0.1.0"
