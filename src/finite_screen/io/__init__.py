"""Result files, standalone script export, and plotting."""

__all__ = [
    "results",
    "export",
    "plot",
]
