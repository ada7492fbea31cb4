from explorer.pagination.controller import NOISE_TYPES, PaginationController, PaginationState

__all__ = ["NOISE_TYPES", "PaginationController", "PaginationState"]
