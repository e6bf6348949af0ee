# oracle/RNG128.py
# 128-bit xorshift RNG (x, y, z, w) used by oracle/app.py and attacker/recover.py
# State: four 32-bit words, also viewable as two 64-bit halves:
#   s0 = x | (y << 32), s1 = z | (w << 32)
# Update: t = x ^ (x << 11); (x, y, z) = (y, z, w); w = w ^ (w >> 19) ^ t ^ (t >> 8)
# All arithmetic is fixed-width and wraps silently.

MASK32 = (1 << 32) - 1
MASK64 = (1 << 64) - 1
MASK128 = (1 << 128) - 1

INT32_MIN = -(1 << 31)
INT32_MAX = (1 << 31) - 1

# multiplier of the game's seed-spreading LCG
ARNG_MULT = 0x6C078965


def pack32to64(lo, hi):
    return (lo & MASK32) | ((hi & MASK32) << 32)


def unpack64to32(v):
    v &= MASK64
    return v & MASK32, v >> 32


def to_int32(v):
    v &= MASK32
    return v - (1 << 32) if v & 0x80000000 else v


def arng_next(v):
    return (ARNG_MULT * v + 1) & MASK32


def _unshift_right(v, k):
    # inverse of v ^ (v >> k) on 32-bit words
    r = v
    s = k
    while s < 32:
        r ^= v >> s
        s += k
    return r & MASK32


def _unshift_left(v, k):
    # inverse of v ^ (v << k) on 32-bit words
    r = v
    s = k
    while s < 32:
        r ^= (v << s) & MASK32
        s += k
    return r & MASK32


class XorShift128:
    """
    Self-modifying xorshift128 engine.

    Only next() (and prev()) move the sequence; every other query is a pure
    read. Instances are plain values: copy() one per independent sequence
    rather than sharing it between threads.
    """

    __slots__ = ('x', 'y', 'z', 'w')

    def __init__(self, x=0, y=0, z=0, w=0):
        self.x = x & MASK32
        self.y = y & MASK32
        self.z = z & MASK32
        self.w = w & MASK32

    @classmethod
    def from_seed(cls, seed):
        """Expand a 32-bit seed with the ARNG chain (x = seed, y = f(x), z = f(y), w = f(z))."""
        x = seed & MASK32
        y = arng_next(x)
        z = arng_next(y)
        w = arng_next(z)
        return cls(x, y, z, w)

    @classmethod
    def from_state64(cls, s0, s1):
        x, y = unpack64to32(s0)
        z, w = unpack64to32(s1)
        return cls(x, y, z, w)

    @classmethod
    def from_state32(cls, x, y, z, w):
        return cls(x, y, z, w)

    @classmethod
    def from_state128(cls, state):
        state &= MASK128
        return cls.from_state64(state & MASK64, state >> 64)

    # --- read-only views ---

    def get_state32(self):
        return self.x, self.y, self.z, self.w

    def get_state64(self):
        return pack32to64(self.x, self.y), pack32to64(self.z, self.w)

    @property
    def state128(self):
        s0, s1 = self.get_state64()
        return s0 | (s1 << 64)

    @property
    def full_state(self):
        s0, s1 = self.get_state64()
        return f"{s1:016X}{s0:016X}"

    def is_seeded_state(self):
        y = arng_next(self.x)
        z = arng_next(y)
        return self.y == y and self.z == z and self.w == arng_next(z)

    # --- advancing ---

    def next(self):
        x = self.x
        t = (x ^ (x << 11)) & MASK32
        w = self.w
        self.x = self.y
        self.y = self.z
        self.z = w
        self.w = w ^ (w >> 19) ^ t ^ (t >> 8)
        return self.w

    def next_uint32(self):
        # round trip through a signed 32-bit value; the bit pattern is unchanged
        return to_int32(self.next()) & MASK32

    def next_uint32_bounded(self, max):
        # plain modulo, no rejection sampling; max == 0 raises ZeroDivisionError
        return self.next_uint32() % max

    def next_int32_ranged(self, start=INT32_MIN, end=INT32_MAX):
        nxt = self.next()
        delta = (end - start) & MASK32
        # start == end leaves delta at 0 and faults here, after the advance
        return to_int32(start + to_int32(nxt % delta))

    def advance(self, n):
        val = None
        for _ in range(n):
            val = self.next()
        return val

    def peek_next(self):
        return self.copy().next()

    def prev(self):
        # undo next(): recover t from w' ^ w ^ (w >> 19), then x from t
        w = self.z
        u = self.w ^ w ^ (w >> 19)
        t = _unshift_right(u, 8)
        x = _unshift_left(t, 11)
        self.w = w
        self.z = self.y
        self.y = self.x
        self.x = x
        return self.w

    # --- value semantics ---

    def copy(self):
        return XorShift128(self.x, self.y, self.z, self.w)

    __copy__ = copy

    def __eq__(self, other):
        if not isinstance(other, XorShift128):
            return NotImplemented
        return self.get_state32() == other.get_state32()

    def __repr__(self):
        return f"XorShift128({self.full_state})"
