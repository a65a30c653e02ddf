# creavely/utils/exceptions.py — Recipe service error classes


class RecipeServiceError(Exception):
    """Base class for errors raised by the recipe service."""


class InvalidIDError(RecipeServiceError):
    def __init__(self, identifier: str):
        super().__init__(f"invalid recipe ID '{identifier}'")
        self.identifier = identifier


class NotFoundError(RecipeServiceError):
    def __init__(self, identifier: str):
        super().__init__(f"recipe with ID '{identifier}' not found")
        self.identifier = identifier


class StoreError(RecipeServiceError):
    """Raised when the document store fails a query or write."""
