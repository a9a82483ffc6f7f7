"""Shared error base for generative asset collaborators."""


class AssetServiceError(Exception):
    """Base error for any collaborator failure while producing an asset."""
