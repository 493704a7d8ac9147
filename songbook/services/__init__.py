from songbook.services import (
    custom_list_service,
    matcher,
    ranking_service,
)


__all__ = [
    "custom_list_service",
    "matcher",
    "ranking_service",
]
