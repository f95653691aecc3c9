"""Business logic services.

Import services from their modules (``services.folder_service`` etc.); the
schemas depend on ``size_utils`` so this package stays import-light.
"""
