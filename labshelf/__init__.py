"""LabShelf: project folders, file uploads and size-capped storage for a research portal."""

__version__ = "1.0.0"
