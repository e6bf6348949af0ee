# attacker/recover.py
# Query oracle for outputs, build linear system over GF(2), solve for the 128-bit initial
# xorshift state, walk back to the 32-bit seed that produced it, then predict the next
# output and validate via /validate

import argparse
import time

import requests

from ..oracle.RNG128 import XorShift128, MASK128

ORACLE = 'http://127.0.0.1:5000'
BITS = 128
WORD = 32


# Build symbolic mapping for the xorshift step.
# Each state word is a list of 32 integer masks (128-bit); mask j of word w tells which
# initial bits contribute to bit j of that word. Initial layout: x | y<<32 | z<<64 | w<<96.
def build_maps(steps):
    x = [1 << i for i in range(WORD)]
    y = [1 << (WORD + i) for i in range(WORD)]
    z = [1 << (2 * WORD + i) for i in range(WORD)]
    w = [1 << (3 * WORD + i) for i in range(WORD)]
    maps = []
    for _ in range(steps):
        # t = x ^ (x << 11): bit i of t takes x[i] and x[i-11]
        t = [x[i] ^ (x[i - 11] if i >= 11 else 0) for i in range(WORD)]
        # w' = w ^ (w >> 19) ^ t ^ (t >> 8): bit i takes w[i], w[i+19], t[i], t[i+8]
        new_w = []
        for i in range(WORD):
            coeff = w[i] ^ t[i]
            if i + 19 < WORD:
                coeff ^= w[i + 19]
            if i + 8 < WORD:
                coeff ^= t[i + 8]
            new_w.append(coeff)
        x, y, z, w = y, z, w, new_w
        # the output of this step is the new w word
        maps.append(w.copy())
    return maps


def output_bit_positions(output_bits, select='high'):
    # positions inside the 32-bit word of each revealed bit, LSB of the revealed value first
    if select == 'high':
        return [WORD - output_bits + b for b in range(output_bits)]
    return list(range(output_bits))


def construct_equations(observed, output_bits, select='high'):
    # observed: list of integers (each is truncated output if output_bits<32)
    maps = build_maps(len(observed))
    positions = output_bit_positions(output_bits, select)
    rows = []  # integer masks (length 128)
    rhs = []
    for t, out in enumerate(observed):
        for b, pos in enumerate(positions):
            mask = maps[t][pos]
            if mask == 0:
                continue
            rows.append(mask)
            rhs.append((out >> b) & 1)
    return rows, rhs


# Gaussian elimination over GF(2) with integer row masks of <=128 bits
def solve_gf2(rows, rhs):
    rows = rows[:]  # copy
    rhs = rhs[:]
    n_eq = len(rows)
    pivot = {}
    row = 0
    for col in reversed(range(BITS)):
        sel = None
        for r in range(row, n_eq):
            if (rows[r] >> col) & 1:
                sel = r
                break
        if sel is None:
            continue
        rows[row], rows[sel] = rows[sel], rows[row]
        rhs[row], rhs[sel] = rhs[sel], rhs[row]
        pivot[col] = row
        # eliminate other rows
        for r in range(n_eq):
            if r != row and ((rows[r] >> col) & 1):
                rows[r] ^= rows[row]
                rhs[r] ^= rhs[row]
        row += 1
        if row >= n_eq:
            break
    # free variables left -> many states explain the observations
    if len(pivot) < BITS:
        return None
    sol = 0
    for col, r in pivot.items():
        if rhs[r]:
            sol |= (1 << col)
    # verify
    for rmask, rval in zip(rows, rhs):
        lhs = bin(rmask & sol).count('1') & 1
        if lhs != rval:
            return None
    return sol


def recover_state(observed, output_bits=32, select='high'):
    """Engine positioned just before the first observed output, or None."""
    rows, rhs = construct_equations(observed, output_bits, select)
    sol = solve_gf2(rows, rhs)
    if sol is None:
        return None
    return XorShift128.from_state128(sol & MASK128)


def predict_next(rng, steps=0):
    sim = rng.copy()
    sim.advance(steps)
    return sim.next()


def find_origin_seed(rng, max_frames=1000):
    """
    Walk backwards from rng until a state produced by XorShift128.from_seed shows up.

    Returns (seed, frames) where frames is the number of next() calls between the
    seeded state and rng, or None when nothing is found within max_frames.
    """
    sim = rng.copy()
    for frames in range(max_frames + 1):
        if sim.is_seeded_state():
            return sim.x, frames
        sim.prev()
    return None


def query_oracle(n):
    outs = []
    for _ in range(n):
        r = requests.get(ORACLE + '/get_output', timeout=5)
        o = r.json()['output']
        outs.append(int(o, 16))
    return outs


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument('--samples', type=int, default=4, help='number of outputs to collect')
    parser.add_argument('--output_bits', type=int, default=32, help='bits returned by oracle (<=32)')
    parser.add_argument('--select', choices=['high', 'low'], default='high', help='which bits the oracle returns')
    parser.add_argument('--max_frames', type=int, default=1000, help='how far back to look for the seed')
    args = parser.parse_args()

    t0 = time.time()
    print(f"[attacker] Querying oracle for {args.samples} outputs (output_bits={args.output_bits})...")
    obs = query_oracle(args.samples)
    for i, o in enumerate(obs):
        print(f" obs[{i}]: {format(o, '0{}x'.format((args.output_bits + 3) // 4))}")
    rng = recover_state(obs, args.output_bits, args.select)
    if rng is None:
        print("[attacker] Failed to find unique solution. Try increasing samples or output_bits.")
    else:
        print("[attacker] Recovered initial 128-bit state (hex):")
        print(rng.full_state)
        origin = find_origin_seed(rng, args.max_frames)
        if origin is None:
            print(f"[attacker] No seeded state within {args.max_frames} frames.")
        else:
            seed, frames = origin
            print(f"[attacker] Origin seed {seed:08x} at frame {frames}")
        # simulate forward by len(obs) steps to get next output
        predicted = predict_next(rng, steps=len(obs))
        print(f"[attacker] Predicted next output: {predicted:08x}")
        if args.output_bits < 32:
            if args.select == 'high':
                truncated = (predicted >> (32 - args.output_bits)) & ((1 << args.output_bits) - 1)
            else:
                truncated = predicted & ((1 << args.output_bits) - 1)
            cand_hex = format(truncated, '0{}x'.format((args.output_bits + 3) // 4))
        else:
            cand_hex = format(predicted, '08x')
        resp = requests.post(ORACLE + '/validate', json={'candidate': cand_hex}, timeout=5)
        print("[attacker] Validate response:", resp.json())
    print(f"[attacker] Done in {time.time() - t0:.2f}s")


if __name__ == '__main__':
    main()
