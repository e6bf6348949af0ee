# oracle/app.py
# Flask oracle exposing one xorshift128 engine: /get_output, /state, /bounded, /ranged, /validate
# Supports SEED_MODE = 'fixed' | 'random' | 'time', or resuming a captured STATE64

import logging
import os
import threading
import time

from flask import Flask, jsonify, request

from . import config
from .RNG128 import XorShift128, MASK32, INT32_MIN, INT32_MAX

DEFAULT_SEED = 0x12345678

# Setup logging
logging.basicConfig(level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger('oracle')


def derive_seed():
    """
    Derive a 32-bit seed integer according to config.SEED_MODE.
    Priority:
      - If SEED_MODE == 'fixed' and config.SEED is int -> use it
      - If SEED_MODE == 'fixed' and config.SEED is None -> use deterministic default
      - If SEED_MODE == 'random' -> use os.urandom(4)
      - If SEED_MODE == 'time' -> use current time (seconds or ms) truncated to 32 bits
    """
    mode = (config.SEED_MODE or 'fixed').lower()
    if mode == 'fixed':
        if config.SEED is not None:
            seed = int(config.SEED) & MASK32
            logger.info(f"Using fixed SEED from config: {seed:08x}")
            return seed
        logger.info(f"Using default fixed SEED: {DEFAULT_SEED:08x}")
        return DEFAULT_SEED
    elif mode == 'random':
        seed = int.from_bytes(os.urandom(4), 'big')
        logger.info(f"Using random SEED (os.urandom): {seed:08x}")
        return seed
    elif mode == 'time':
        if config.TIME_GRANULARITY == 'ms':
            t = int(time.time() * 1000)
        else:
            t = int(time.time())
        seed = t & MASK32
        logger.info(f"Using time-derived SEED (granu={config.TIME_GRANULARITY}): {seed:08x}")
        return seed
    else:
        logger.warning(f"Unknown SEED_MODE '{config.SEED_MODE}', falling back to default SEED: {DEFAULT_SEED:08x}")
        return DEFAULT_SEED


def build_rng():
    if config.STATE64 is not None:
        s0, s1 = config.STATE64
        rng = XorShift128.from_state64(s0, s1)
        logger.info(f"Resuming captured state: {rng.full_state}")
        return rng
    return XorShift128.from_seed(derive_seed())


def mask_output(x, bits=None, select=None):
    bits = config.OUTPUT_BITS if bits is None else bits
    select = config.OUTPUT_SELECT if select is None else select
    if bits >= 32:
        return x & MASK32
    if select == 'high':
        return (x >> (32 - bits)) & ((1 << bits) - 1)
    return x & ((1 << bits) - 1)


def _hexdigits(bits):
    return (bits + 3) // 4


def create_app(rng=None):
    app = Flask(__name__)
    if rng is None:
        rng = build_rng()
    # one engine, one owner: requests must not interleave inside a step
    lock = threading.Lock()
    app.config['RNG'] = rng

    @app.route('/get_output', methods=['GET'])
    def get_output():
        with lock:
            val = rng.next()
        out = mask_output(val)
        return jsonify({'output': format(out, '0{}x'.format(_hexdigits(config.OUTPUT_BITS)))})

    @app.route('/state', methods=['GET'])
    def state():
        with lock:
            state32 = rng.get_state32()
            state64 = rng.get_state64()
            full = rng.full_state
        return jsonify({'full_state': full, 'state32': list(state32), 'state64': list(state64)})

    @app.route('/bounded', methods=['GET'])
    def bounded():
        maximum = request.args.get('max', type=int)
        if maximum is None:
            return jsonify({'ok': False, 'reason': 'need integer max'}), 400
        # max=0 is passed through; the engine fault is not ours to hide
        with lock:
            val = rng.next_uint32_bounded(maximum)
        return jsonify({'value': val})

    @app.route('/ranged', methods=['GET'])
    def ranged():
        try:
            start = int(request.args.get('start', INT32_MIN))
            end = int(request.args.get('end', INT32_MAX))
        except ValueError:
            return jsonify({'ok': False, 'reason': 'bad start/end'}), 400
        with lock:
            val = rng.next_int32_ranged(start, end)
        return jsonify({'value': val})

    @app.route('/validate', methods=['POST'])
    def validate():
        data = request.get_json(silent=True)
        if not data or 'candidate' not in data:
            return jsonify({'ok': False, 'reason': 'need candidate'}), 400
        try:
            candidate = int(data['candidate'], 16)
        except (TypeError, ValueError):
            return jsonify({'ok': False, 'reason': 'bad hex'}), 400
        with lock:
            true = rng.next()
        expected = mask_output(true)
        ok = (candidate & ((1 << config.OUTPUT_BITS) - 1)) == expected
        logger.debug(f"validate candidate={candidate:x} expected={expected:x} ok={ok}")
        return jsonify({'ok': ok, 'expected': format(expected, '0{}x'.format(_hexdigits(config.OUTPUT_BITS)))})

    return app


app = create_app()

if __name__ == '__main__':
    logger.info(f"Starting oracle at http://{config.HOST}:{config.PORT} with SEED_MODE={config.SEED_MODE}")
    app.run(host=config.HOST, port=config.PORT, debug=False)
