"""Park-Miller minimal standard pseudo-random generator."""

from dataclasses import dataclass

_ULONG = (1 << 64) - 1


def do_rand(ctx):
    """Return the next value after state ``ctx``; it is also the new state.

    Computes (16807 * x) mod (2**31 - 1) without overflow, with the input
    mapped into [1, 0x7ffffffe] and the result into [0, 0x7ffffffd].
    """
    x = (ctx & _ULONG) % 0x7FFFFFFE + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x - 1


@dataclass
class ParkMiller:
    """A generator holding its state."""

    state: int = 1

    def next(self):
        """Advance the state and return it."""
        self.state = do_rand(self.state)
        return self.state

    def reseed(self, mask):
        """Mix ``mask`` into the state by exclusive or."""
        self.state = (self.state ^ mask) & _ULONG