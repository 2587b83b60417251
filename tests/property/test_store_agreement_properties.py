"""
Property-based tests for SUT/oracle agreement.

Tests properties related to:
- Identical observable results for any operation sequence
- Traversal order matching collation order
- Monotonic record numbers from append
- Generator determinism and key ordering
"""

from hypothesis import given, settings, strategies as st

from kvcheck.config import Collation, SchemaVariant
from kvcheck.generate import KeyValueGenerator
from kvcheck.stores import CursorKind, MemoryStore, SqliteStore

keys = st.binary(min_size=1, max_size=8).filter(lambda k: b"\x00" not in k)
values = st.binary(min_size=1, max_size=16)

row_ops = st.lists(
    st.one_of(
        st.tuples(st.just("put"), keys, values),
        st.tuples(st.just("delete"), keys, st.none()),
        st.tuples(st.just("get"), keys, st.none()),
        st.tuples(st.sampled_from(["next", "prev"]), st.none(), st.none()),
    ),
    max_size=60,
)


def apply(store, op, key, value):
    if op == "put":
        return store.put(key, value)
    if op == "delete":
        return store.delete(key)
    if op == "get":
        return store.get(key)
    if op == "next":
        return store.cursor_next()
    return store.cursor_prev()


def walk(store, forward=True):
    store.reset_cursor(CursorKind.OVERWRITE)
    step = store.cursor_next if forward else store.cursor_prev
    items = []
    while (item := step()) is not None:
        items.append(item)
    return items


# Property: both stores answer every operation identically
@settings(max_examples=60, deadline=None)
@given(ops=row_ops, reverse=st.booleans())
def test_row_stores_agree(ops, reverse):
    collation = Collation.REVERSE if reverse else Collation.DEFAULT
    with SqliteStore(SchemaVariant.ROW, collation) as sut, MemoryStore(SchemaVariant.ROW, collation) as oracle:
        for op, key, value in ops:
            assert apply(sut, op, key, value) == apply(oracle, op, key, value)
        assert walk(sut) == walk(oracle)


# Property: a forward walk visits keys in collation order, a backward walk reverses it
@settings(max_examples=40, deadline=None)
@given(entries=st.dictionaries(keys, values, max_size=30), reverse=st.booleans())
def test_traversal_order(entries, reverse):
    collation = Collation.REVERSE if reverse else Collation.DEFAULT
    with SqliteStore(SchemaVariant.ROW, collation) as store:
        for key, value in entries.items():
            store.put(key, value)
        forward = [key for key, _ in walk(store)]
        backward = [key for key, _ in walk(store, forward=False)]

    assert forward == sorted(entries, reverse=reverse)
    assert backward == forward[::-1]


# Property: appended record numbers strictly increase, even across deletes
@settings(max_examples=40, deadline=None)
@given(actions=st.lists(st.sampled_from(["append", "delete_last"]), min_size=1, max_size=30))
def test_append_monotonic(actions):
    with SqliteStore(SchemaVariant.VAR) as sut, MemoryStore(SchemaVariant.VAR) as oracle:
        last = 0
        for action in actions:
            if action == "append":
                row = sut.append(b"v")
                assert row > last
                assert oracle.append(b"v") == row
                last = row
            elif last:
                assert sut.delete(last) == oracle.delete(last)


# Property: deleting twice reports found then not found
@settings(max_examples=40, deadline=None)
@given(key=keys, value=values)
def test_delete_idempotent(key, value):
    with MemoryStore(SchemaVariant.ROW) as store:
        store.put(key, value)
        assert store.delete(key) is True
        assert store.delete(key) is False
        assert store.get(key) is None


# Property: generated keys sort in row order and regenerate identically
@given(
    a=st.integers(min_value=1, max_value=10 ** 9),
    b=st.integers(min_value=1, max_value=10 ** 9),
    key_max=st.integers(min_value=10, max_value=64),
)
def test_generated_key_order(a, b, key_max):
    gen = KeyValueGenerator(SchemaVariant.ROW, key_min=10, key_max=key_max)
    assert (gen.generate_key(a) < gen.generate_key(b)) == (a < b)
    assert gen.generate_key(a) == KeyValueGenerator(SchemaVariant.ROW, key_max=key_max).generate_key(a)


# Property: fixed-length values always fit the configured bit width
@given(row=st.integers(min_value=1, max_value=10 ** 9), bitcnt=st.integers(min_value=1, max_value=8))
def test_fixed_value_fits_width(row, bitcnt):
    value = KeyValueGenerator(SchemaVariant.FIX, bitcnt=bitcnt).generate_value(row)
    assert len(value) == 1
    assert value[0] < (1 << bitcnt)
