"""
Property-based tests for jsonsum.

Uses Hypothesis to generate JSON trees and render each of them in many
textual forms (key order, number spelling, string escaping, whitespace).
Every rendering of the same tree must digest identically.

Run: python -m pytest tests/fuzz/test_fuzz_jsonsum.py -v
"""

from __future__ import annotations
import json
import random
from decimal import Decimal

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from jsonsum import Crc32Hasher, DuplicateKeyError, jsonsum


# ─────────────────────────────────────────────────────────────────────────────
# Strategy: JSON trees with exact numbers
# ─────────────────────────────────────────────────────────────────────────────

numbers = st.one_of(
    st.integers(min_value=-10**30, max_value=10**30),
    st.decimals(
        allow_nan=False, allow_infinity=False,
        min_value=Decimal("-1e12"), max_value=Decimal("1e12"),
    ),
)

scalars = st.one_of(st.none(), st.booleans(), numbers, st.text(max_size=30))

json_trees = st.recursive(
    scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=5),
        st.dictionaries(st.text(max_size=10), children, max_size=5),
    ),
    max_leaves=25,
)


# ─────────────────────────────────────────────────────────────────────────────
# Renderer: one tree, many spellings
# ─────────────────────────────────────────────────────────────────────────────

_ZERO_SPELLINGS = ["0", "-0", "0.0", "0e5", "-0.0E-3", "0.000"]


def _spell_number(value, rnd: random.Random) -> str:
    dec = value if isinstance(value, Decimal) else Decimal(value)
    if dec.is_zero():
        return rnd.choice(_ZERO_SPELLINGS)
    sign, digits, exponent = dec.as_tuple()
    pad = rnd.randint(0, 3)
    coeff = "".join(str(d) for d in digits) + "0" * pad
    marker = rnd.choice(["e", "E"])
    return f"{'-' if sign else ''}{coeff}{marker}{exponent - pad}"


def render(obj, rnd: random.Random) -> str:
    ws = rnd.choice(["", " ", "\n  "])
    if obj is None:
        return "null"
    if obj is True:
        return "true"
    if obj is False:
        return "false"
    if isinstance(obj, (int, Decimal)):
        return _spell_number(obj, rnd)
    if isinstance(obj, str):
        return json.dumps(obj, ensure_ascii=rnd.random() < 0.5)
    if isinstance(obj, list):
        return "[" + ws + ("," + ws).join(render(v, rnd) for v in obj) + ws + "]"
    items = list(obj.items())
    rnd.shuffle(items)
    body = ("," + ws).join(
        json.dumps(k, ensure_ascii=rnd.random() < 0.5) + ws + ":" + ws + render(v, rnd)
        for k, v in items
    )
    return "{" + ws + body + ws + "}"


# ─────────────────────────────────────────────────────────────────────────────
# Property 1: Spelling invariance
# ─────────────────────────────────────────────────────────────────────────────

class TestSpellingInvariance:

    @given(json_trees, st.randoms(use_true_random=False), st.randoms(use_true_random=False))
    @settings(max_examples=300, deadline=None)
    def test_renderings_digest_identically(self, tree, rnd_a, rnd_b):
        assert jsonsum(render(tree, rnd_a)) == jsonsum(render(tree, rnd_b))

    @given(json_trees, st.randoms(use_true_random=False), st.randoms(use_true_random=False))
    @settings(max_examples=200, deadline=None)
    def test_renderings_digest_identically_crc32(self, tree, rnd_a, rnd_b):
        a = jsonsum(render(tree, rnd_a), Crc32Hasher)
        b = jsonsum(render(tree, rnd_b), Crc32Hasher)
        assert a.as_uint32() == b.as_uint32()

    @given(st.dictionaries(st.text(max_size=10), st.integers(), min_size=2, max_size=8))
    @settings(max_examples=200, deadline=None)
    def test_sorted_and_unsorted_dumps_agree(self, obj):
        assert jsonsum(json.dumps(obj)) == jsonsum(json.dumps(obj, sort_keys=True))

    @given(st.integers(min_value=-10**20, max_value=10**20))
    @settings(max_examples=200, deadline=None)
    def test_integer_spellings(self, n):
        forms = [str(n), f"{n}.0", f"{n}e0", f"{n}.000E+0"]
        if n:
            forms.append(f"{n}0e-1")
        assert len({jsonsum(f) for f in forms}) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Property 2: Determinism and sensitivity
# ─────────────────────────────────────────────────────────────────────────────

class TestDeterminism:

    @given(json_trees)
    @settings(max_examples=200, deadline=None)
    def test_same_text_same_digest(self, tree):
        text = render(tree, random.Random(0))
        assert jsonsum(text) == jsonsum(text)

    @given(st.lists(json_trees, max_size=5), json_trees)
    @settings(max_examples=200, deadline=None)
    def test_appending_to_array_changes_digest(self, items, extra):
        rnd = random.Random(1)
        assert jsonsum(render(items, rnd)) != jsonsum(render(items + [extra], rnd))

    @given(json_trees)
    @settings(max_examples=200, deadline=None)
    def test_wrapping_changes_digest(self, tree):
        rnd = random.Random(2)
        assert jsonsum(render(tree, rnd)) != jsonsum(render([tree], rnd))


# ─────────────────────────────────────────────────────────────────────────────
# Property 3: Duplicate keys are always rejected
# ─────────────────────────────────────────────────────────────────────────────

class TestDuplicateKeys:

    @given(
        st.dictionaries(st.text(max_size=10), json_trees, min_size=1, max_size=5),
        st.data(),
    )
    @settings(max_examples=200, deadline=None)
    def test_repeated_key_rejected(self, obj, data):
        key = data.draw(st.sampled_from(sorted(obj)))
        rnd = random.Random(3)
        body = ",".join(json.dumps(k) + ":" + render(v, rnd) for k, v in obj.items())
        text = "{" + body + "," + json.dumps(key) + ":null}"
        with pytest.raises(DuplicateKeyError) as e:
            jsonsum(text)
        assert e.value.key == key

    @given(st.text(max_size=10), json_trees)
    @settings(max_examples=100, deadline=None)
    def test_same_key_in_sibling_objects_allowed(self, key, value):
        rnd = random.Random(4)
        member = "{" + json.dumps(key) + ":" + render(value, rnd) + "}"
        jsonsum("[" + member + "," + member + "]")
