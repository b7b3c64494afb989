"""
The config module holds package-wide configurables and provides
a uniform API for working with them.
"""

from __future__ import annotations

from dataclasses import dataclass

# 64-bit arithmetic
MASK64 = (1 << 64) - 1
WORD_BITS = 64

# SplitMix64 constants
GOLDEN_GAMMA = 0x9E3779B97F4A7C15
SPLITMIX_M1 = 0xBF58476D1CE4E5B9
SPLITMIX_M2 = 0x94D049BB133111EB

# Per-block seed derivation for orthonormal block construction
BLOCK_SEED_MULTIPLIER = 0x9E3779B9
# Salt for the second Box-Muller uniform draw
BOX_MULLER_SALT = 0xBF58476D

# Floor applied to column norms during Gram-Schmidt
NORM_FLOOR = 1e-12

# Number of items hashed and voted together per numpy step
DEFAULT_BATCH_SIZE = 1024

DEFAULT_SEED = 0xDEADBEEF


class ConfigurationError(ValueError):
    """Raised when an engine is constructed with invalid parameters."""


@dataclass(frozen=True)
class SuperBitConfig:
    """
    Validated parameters of a Super-Bit engine.

    The signature of ``length`` bits is split into ``length // block_size``
    blocks, each backed by its own ``block_size`` x ``block_size`` orthonormal
    projection.

    Attributes:
        length: Number of signature bits (L).
        block_size: Super-Bit depth (r). Must be positive and divide ``length``.
        seed: 64-bit seed from which every block and sign vector is derived.

    Raises:
        ConfigurationError: If any of the constraints above is violated.

    Example:
        >>> cfg = SuperBitConfig(length=1024, block_size=32, seed=7)
        >>> cfg.num_blocks
        32
    """

    length: int
    block_size: int
    seed: int = DEFAULT_SEED

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ConfigurationError("length must be greater than zero")
        if self.block_size <= 0:
            raise ConfigurationError("block_size must be greater than zero")
        if self.length % self.block_size != 0:
            raise ConfigurationError(
                "block_size must divide length "
                f"(received length={self.length}, block_size={self.block_size})"
            )
        if not 0 <= self.seed <= MASK64:
            raise ConfigurationError(
                f"seed must be an unsigned 64-bit integer (received {self.seed})"
            )

    @property
    def num_blocks(self) -> int:
        return self.length // self.block_size
