"""
Seeded pseudo-random number generator.

Python port of the ARC4-based generator from the JavaScript `seedrandom`
library, so a seed string yields the same stream here as it does with
`seedrandom` in a browser. Arithmetic is done on Python ints and converted
with a single correctly rounded division, which matches the library's
double arithmetic bit for bit.
"""

import math

WIDTH = 256
MASK = WIDTH - 1
CHUNKS = 6
DIGITS = 52

START_DENOM = WIDTH ** CHUNKS
SIGNIFICANCE = 2 ** DIGITS
OVERFLOW = SIGNIFICANCE * 2


def _char_codes(text):
    """UTF-16 code units of text, the way JavaScript's charCodeAt sees them."""
    raw = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def mix_key(seed):
    """
    Derive the ARC4 key bytes from a seed string.

    Each character is smeared into one of 256 key slots; keys longer than
    256 characters wrap around.
    """
    key = {}
    smear = 0
    for j, code in enumerate(_char_codes(str(seed))):
        slot = MASK & j
        smear ^= key.get(slot, 0) * 19
        key[slot] = MASK & (smear + code)
    return [key[i] for i in range(len(key))]


class ARC4:
    """RC4 keystream with the first 256 bytes discarded."""

    def __init__(self, key):
        if not key:
            key = [0]
        keylen = len(key)

        s = list(range(WIDTH))
        j = 0
        for i in range(WIDTH):
            t = s[i]
            j = MASK & (j + key[i % keylen] + t)
            s[i] = s[j]
            s[j] = t

        self.S = s
        self.i = 0
        self.j = 0
        self.next_int(WIDTH)

    def next_int(self, count):
        """Return the next count keystream bytes as one big-endian integer."""
        s = self.S
        i = self.i
        j = self.j
        r = 0
        for _ in range(count):
            i = MASK & (i + 1)
            t = s[i]
            j = MASK & (j + t)
            s[i] = s[j]
            s[j] = t
            r = r * WIDTH + s[MASK & (s[i] + s[j])]
        self.i = i
        self.j = j
        return r


class SeededRandom:
    """Deterministic uniform stream keyed by a seed string."""

    def __init__(self, seed):
        self.seed = str(seed)
        self._arc4 = ARC4(mix_key(self.seed))

    def next(self):
        """Generate a random float in [0, 1) with 52 bits of significance."""
        n = self._arc4.next_int(CHUNKS)
        d = START_DENOM
        x = 0
        while n < SIGNIFICANCE:
            n = (n + x) * WIDTH
            d *= WIDTH
            x = self._arc4.next_int(1)
        while n >= OVERFLOW:
            n //= 2
            d //= 2
            x >>= 1
        return (n + x) / d

    def range(self, lo, hi):
        """Generate a random float in [lo, hi)."""
        return lo + self.next() * (hi - lo)

    def int(self, lo, hi):
        """Generate a random integer in [lo, hi]."""
        return math.floor(self.range(lo, hi + 1))
