"""csvtranslator: batch-translate key/value text files through Google's web endpoint."""

__version__ = "0.1.0"
