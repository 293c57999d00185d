"""filedrop - S3 intake processor with filename-based recursion guard."""

__version__ = "1.0.0"
