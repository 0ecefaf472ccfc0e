"""TopMarks: paste GPS marks, organize them into folders, show them on a map."""

__version__ = "0.1.0"
