import colorsys
import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class MeshRNG(random.Random):
    """
    Random number generator shared by every component of one network.
    Adds the few helpers the engine needs on top of ``random.Random``.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the generator.

        Args:
            seed (Optional[int]): Seed value, or None to seed from the OS.
        """
        super().__init__(seed)

    def chance(self, probability: float) -> bool:
        """
        Return True with the given probability.

        Args:
            probability (float): Probability in the range [0, 1].

        Returns:
            bool: Whether the event happened.
        """
        return self.random() < probability

    def signed(self, amplitude: float = 1.0) -> float:
        """
        Generate a float in [-amplitude / 2, amplitude / 2).
        """
        return (self.random() - 0.5) * amplitude

    def pick(self, items: Sequence[T]) -> Optional[T]:
        """
        Select a random item, or None for an empty sequence.

        Args:
            items (Sequence): The items to choose from.

        Returns:
            Any: A randomly selected item or None.
        """
        if not items:
            return None
        return items[int(self.random() * len(items))]

    def color(self, saturation: float = 0.8, lightness: float = 0.6) -> str:
        """
        Generate a random fully saturated hue as a hex colour string.
        """
        r, g, b = colorsys.hls_to_rgb(self.random(), lightness, saturation)
        return "#{:02x}{:02x}{:02x}".format(
            round(r * 255), round(g * 255), round(b * 255)
        )
